"""Commands of the panel-chat CLI."""

from . import chat, serve

__all__ = ["chat", "serve"]
