"""A terminal chat that talks to the model through a session orchestrator."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path  # noqa: TC003

import typer

from panel_chat import opts
from panel_chat.cli import app, setup_logging
from panel_chat.commands.serve import build_inference_config
from panel_chat.models import ImagePayload, UIEvent
from panel_chat.orchestrator import SessionOrchestrator
from panel_chat.utils import (
    console,
    print_command_line_args,
    print_error_message,
    print_input_panel,
    print_output_panel,
)

LOGGER = logging.getLogger(__name__)

EXIT_WORDS = frozenset({"exit", "quit", "bye"})


class ConsoleBridge:
    """Shows outbound events as panels in the terminal."""

    async def post_message(self, event: UIEvent) -> None:
        """Print a response or an error."""
        if event.type == "response":
            print_output_panel(event.content)
        else:
            print_error_message(event.content)


async def run_chat(
    orchestrator: SessionOrchestrator,
    image: ImagePayload | None = None,
) -> None:
    """Read questions until EOF or an exit word; the image goes with the first one."""
    while True:
        try:
            text = await asyncio.to_thread(console.input, "[bold blue]You:[/bold blue] ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        if text.strip().lower() in EXIT_WORDS:
            break
        if not text.strip() and image is None:
            continue

        subtitle = f"[dim]📎 {image.name}[/dim]" if image is not None else ""
        print_input_panel(text, subtitle=subtitle)
        with console.status("🤖 Waiting for the model...", spinner="dots"):
            await orchestrator.handle_user_question(text, image)
        image = None

    LOGGER.info("Chat ended after %d turns", len(orchestrator.log))


@app.command("chat")
def chat(
    api_key: str | None = opts.API_KEY,
    model: str = opts.MODEL,
    max_tokens: int = opts.MAX_TOKENS,
    endpoint: str = opts.ENDPOINT,
    timeout: float = opts.TIMEOUT,
    image: Path | None = typer.Option(  # noqa: B008
        None,
        "--image",
        help="Image file to attach to the first question.",
        exists=True,
        dir_okay=False,
        rich_help_panel="Chat Options",
    ),
    log_level: str = opts.LOG_LEVEL,
    log_file: str | None = opts.LOG_FILE,
    print_args: bool = opts.PRINT_ARGS,
) -> None:
    """Chat with the model in the terminal.

    The whole conversation is sent with every question. Type `exit` or press
    Ctrl+D to leave.
    """
    if print_args:
        print_command_line_args(locals())
    setup_logging(log_level, log_file)

    config = build_inference_config(
        api_key=api_key,
        model=model,
        max_tokens=max_tokens,
        endpoint=endpoint,
        timeout=timeout,
    )
    attachment = ImagePayload.from_file(image) if image is not None else None

    orchestrator = SessionOrchestrator(config, ConsoleBridge(), session_id="terminal")
    console.print(f"[bold green]Chatting with {config.model}[/bold green] (type 'exit' to quit)")
    asyncio.run(run_chat(orchestrator, attachment))
