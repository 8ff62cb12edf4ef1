"""Shared CLI functionality for the panel-chat tools."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .common import setup_rich_logging
from .config import command_defaults, load_config
from .utils import console

app = typer.Typer(
    name="panel-chat",
    help="Chat with an OpenAI-compatible model from an editor panel or the terminal.",
    add_completion=True,
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_file: Annotated[
        str | None,
        typer.Option("--config", "-c", help="Path to config file"),
    ] = None,
) -> None:
    """Chat with an OpenAI-compatible model."""
    if ctx.invoked_subcommand is None:
        console.print("[bold red]No command specified.[/bold red]")
        console.print("[bold yellow]Running --help for your convenience.[/bold yellow]")
        console.print(ctx.get_help())
        raise typer.Exit
    import dotenv  # noqa: PLC0415

    dotenv.load_dotenv()
    set_config_defaults(ctx, config_file)


def set_config_defaults(ctx: typer.Context, config_file: str | None) -> None:
    """Set the default values for the subcommand based on the config file."""
    config = load_config(config_file)
    subcommand = ctx.invoked_subcommand

    if not subcommand:
        ctx.default_map = command_defaults(config, None)
        return

    # Click looks up a subcommand's defaults under its name in the parent map.
    ctx.default_map = {subcommand: command_defaults(config, subcommand)}


def setup_logging(log_level: str, log_file: str | None) -> None:
    """Route log records to the console, and to `log_file` if given."""
    setup_rich_logging(
        log_level,
        log_file=Path(log_file).expanduser() if log_file else None,
    )


# Import commands from other modules to register them
from .commands import chat, serve  # noqa: E402, F401
