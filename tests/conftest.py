"""Shared test fixtures and configuration."""

from __future__ import annotations

import contextlib
import json
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from panel_chat.config import InferenceConfig

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from panel_chat.models import UIEvent

MOCK_ENDPOINT = "http://mock-llm/v1/chat/completions"


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Set default timeout for all tests."""
    for item in items:
        with contextlib.suppress(AttributeError):
            item.add_marker(pytest.mark.timeout(5))


def completion_body(content: str) -> dict[str, Any]:
    """A chat completion body with a single assistant choice."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


class CollectingBridge:
    """A bridge that keeps every event it is given, in order."""

    def __init__(self) -> None:
        self.events: list[UIEvent] = []

    async def post_message(self, event: UIEvent) -> None:
        self.events.append(event)


class MockProvider:
    """Records every request and answers with a configurable handler."""

    def __init__(
        self,
        handler: Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]] | None = None,
    ) -> None:
        self.requests: list[httpx.Request] = []
        self.handler = handler or (lambda _request: httpx.Response(200, json=completion_body("42")))

    def __call__(self, request: httpx.Request) -> httpx.Response | Awaitable[httpx.Response]:
        self.requests.append(request)
        return self.handler(request)

    @property
    def bodies(self) -> list[dict[str, Any]]:
        """JSON bodies of the recorded requests."""
        return [json.loads(request.content) for request in self.requests]

    def client(self) -> httpx.AsyncClient:
        """An AsyncClient routed to this provider."""
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def provider() -> MockProvider:
    """A provider that answers every question with "42"."""
    return MockProvider()


@pytest.fixture
def inference_config() -> InferenceConfig:
    """Inference settings pointing at the mock endpoint."""
    return InferenceConfig(
        api_key="test-key",
        model="test-model",
        max_tokens=64,
        endpoint=MOCK_ENDPOINT,
    )
