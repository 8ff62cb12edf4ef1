"""Shared CLI options for panel-chat commands."""

from __future__ import annotations

import typer

from panel_chat import constants

# --- Inference Options ---
API_KEY = typer.Option(
    None,
    "--api-key",
    envvar="OPENAI_API_KEY",
    help="API key sent as the bearer credential.",
    rich_help_panel="Inference Configuration",
    show_default=False,
)
MODEL = typer.Option(
    constants.DEFAULT_MODEL,
    "--model",
    "-m",
    envvar="PANEL_CHAT_MODEL",
    help="Name of the model to use.",
    rich_help_panel="Inference Configuration",
)
MAX_TOKENS = typer.Option(
    constants.DEFAULT_MAX_TOKENS,
    "--max-tokens",
    envvar="PANEL_CHAT_MAX_TOKENS",
    help="Maximum number of tokens in each response.",
    rich_help_panel="Inference Configuration",
)
ENDPOINT = typer.Option(
    constants.DEFAULT_OPENAI_ENDPOINT,
    "--endpoint",
    envvar="PANEL_CHAT_ENDPOINT",
    help="URL of the OpenAI-compatible chat completions endpoint.",
    rich_help_panel="Inference Configuration",
)
TIMEOUT = typer.Option(
    constants.DEFAULT_TIMEOUT,
    "--timeout",
    help="Request timeout in seconds.",
    rich_help_panel="Inference Configuration",
)

# --- Server Options ---
HOST = typer.Option(
    constants.DEFAULT_HOST,
    "--host",
    help="Host to bind the server to.",
    rich_help_panel="Server Configuration",
)
PORT = typer.Option(
    constants.DEFAULT_PORT,
    "--port",
    help="Port to bind the server to.",
    rich_help_panel="Server Configuration",
)

# --- General Options ---
LOG_LEVEL = typer.Option(
    "WARNING",
    "--log-level",
    help="Set the log level (e.g., DEBUG, INFO, WARNING).",
    rich_help_panel="General Options",
)
LOG_FILE = typer.Option(
    None,
    "--log-file",
    help="Path to a file to write logs to.",
    rich_help_panel="General Options",
)
PRINT_ARGS = typer.Option(
    False,  # noqa: FBT003
    "--print-args",
    help="Print the command line arguments, including variables taken from the configuration file.",
    rich_help_panel="General Options",
)
