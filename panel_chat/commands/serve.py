"""Serve the web UI bridge for editor panels."""

from __future__ import annotations

import typer
from pydantic import ValidationError

from panel_chat import opts
from panel_chat.cli import app, setup_logging
from panel_chat.config import InferenceConfig
from panel_chat.utils import console, print_command_line_args, print_error_message


def build_inference_config(
    *,
    api_key: str | None,
    model: str,
    max_tokens: int,
    endpoint: str,
    timeout: float,
) -> InferenceConfig:
    """Validate the inference options, exiting with a message when invalid."""
    try:
        return InferenceConfig(
            api_key=api_key,
            model=model,
            max_tokens=max_tokens,
            endpoint=endpoint,
            timeout=timeout,
        )
    except ValidationError as e:
        print_error_message(f"Invalid inference configuration: {e}")
        raise typer.Exit(1) from e


@app.command("serve")
def serve(
    api_key: str | None = opts.API_KEY,
    model: str = opts.MODEL,
    max_tokens: int = opts.MAX_TOKENS,
    endpoint: str = opts.ENDPOINT,
    timeout: float = opts.TIMEOUT,
    host: str = opts.HOST,
    port: int = opts.PORT,
    log_level: str = opts.LOG_LEVEL,
    log_file: str | None = opts.LOG_FILE,
    print_args: bool = opts.PRINT_ARGS,
) -> None:
    """Run the HTTP/WebSocket bridge that editor panels talk to.

    Every panel opens its own session with `POST /session/new` and then sends
    `askQuestion` events to `/session/{id}/message` or over the
    `/session/{id}/bridge` WebSocket.
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

    import uvicorn  # noqa: PLC0415

    from panel_chat.api import create_app  # noqa: PLC0415

    console.print(f"[bold green]Starting panel-chat bridge on {host}:{port}[/bold green]")
    console.print(f"  🤖 Model: [blue]{config.model}[/blue]")
    console.print(f"  🌐 Endpoint: [blue]{config.endpoint}[/blue]")
    if not config.has_api_key:
        console.print(
            "[yellow]No API key configured, questions will be answered with an error.[/yellow]",
        )

    uvicorn.run(create_app(config), host=host, port=port, log_config=None)
