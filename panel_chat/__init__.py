"""Conversational chat sessions bridging an editor panel and an LLM API."""

from __future__ import annotations

__version__ = "0.1.0"
