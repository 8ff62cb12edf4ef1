"""Console helpers for the terminal UI."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

console = Console()


def print_input_panel(text: str, title: str = "You", subtitle: str = "") -> None:
    """Show the user's question."""
    console.print(Panel(Text(text), title=title, subtitle=subtitle, border_style="bold blue"))


def print_output_panel(text: str, title: str = "Assistant", subtitle: str = "") -> None:
    """Show an assistant response."""
    console.print(Panel(Text(text), title=title, subtitle=subtitle, border_style="bold green"))


def print_error_message(message: str, suggestion: str | None = None) -> None:
    """Show an error, with an optional hint on how to fix it."""
    error_text = Text(message)
    if suggestion:
        error_text.append("\n\n")
        error_text.append(suggestion, style="yellow")
    console.print(Panel(error_text, title="Error", border_style="bold red"))


def print_command_line_args(args: dict[str, Any]) -> None:
    """Print the command line arguments, hiding the API key."""
    shown = {k: ("***" if k == "api_key" and v else v) for k, v in args.items()}
    console.print(Panel(Text("\n".join(f"{k}: {v}" for k, v in shown.items())), title="Arguments"))
