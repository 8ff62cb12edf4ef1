"""Tests for the conversation data models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from panel_chat.models import (
    ChatMessage,
    ImagePayload,
    InboundEvent,
    MessageLog,
    RequestEnvelope,
    Turn,
    UIEvent,
)

if TYPE_CHECKING:
    from pathlib import Path

PNG_URI = "data:image/png;base64,iVBORw0KGgo="


def _image() -> ImagePayload:
    return ImagePayload(data=PNG_URI, type="image/png", name="shot.png")


def test_user_turn_is_timestamped() -> None:
    turn = Turn.user("hello")
    assert turn.role == "user"
    assert turn.content == "hello"
    assert turn.timestamp is not None
    assert turn.timestamp.tzinfo is not None


def test_assistant_turn_has_no_timestamp() -> None:
    turn = Turn.assistant("hi")
    assert turn.role == "assistant"
    assert turn.timestamp is None
    assert turn.image is None


def test_assistant_turn_rejects_image() -> None:
    with pytest.raises(ValidationError, match="cannot carry an image"):
        Turn(role="assistant", content="x", image=_image())


def test_image_requires_data() -> None:
    with pytest.raises(ValidationError, match="non-empty"):
        ImagePayload(data="  ", type="image/png")


def test_image_from_file(tmp_path: Path) -> None:
    path = tmp_path / "diagram.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")
    image = ImagePayload.from_file(path)
    assert image.type == "image/png"
    assert image.name == "diagram.png"
    assert image.data.startswith("data:image/png;base64,")


def test_message_log_keeps_insertion_order() -> None:
    log = MessageLog()
    log.append(Turn.user("a"))
    log.append(Turn.assistant("b"))
    log.append(Turn.user("c"))

    assert len(log) == 3
    assert [t.content for t in log] == ["a", "b", "c"]
    assert log[1].role == "assistant"
    assert log.last is not None
    assert log.last.content == "c"


def test_message_log_snapshot_is_not_live() -> None:
    log = MessageLog()
    log.append(Turn.user("a"))
    snapshot = log.turns
    log.append(Turn.assistant("b"))
    assert len(snapshot) == 1
    assert len(log) == 2


def test_empty_log_has_no_last_turn() -> None:
    assert MessageLog().last is None


def test_projection_drops_images() -> None:
    log = MessageLog()
    log.append(Turn.user("look", _image()))
    log.append(Turn.assistant("a cat"))

    assert log.project() == [
        ChatMessage(role="user", content="look"),
        ChatMessage(role="assistant", content="a cat"),
    ]


def test_envelope_from_log_is_idempotent() -> None:
    log = MessageLog()
    for i in range(5):
        log.append(Turn.user(f"q{i}"))
        log.append(Turn.assistant(f"a{i}"))

    first = RequestEnvelope.from_log(log, model="m", max_tokens=10)
    second = RequestEnvelope.from_log(log, model="m", max_tokens=10)

    assert first == second
    assert len(first.messages) == 10


def test_envelope_payload_shape() -> None:
    log = MessageLog()
    log.append(Turn.user("What is 6*7?", _image()))
    payload = RequestEnvelope.from_log(log, model="gpt-test", max_tokens=100).to_payload()

    assert payload == {
        "model": "gpt-test",
        "messages": [{"role": "user", "content": "What is 6*7?"}],
        "max_tokens": 100,
    }


def test_inbound_event_defaults() -> None:
    event = InboundEvent.model_validate({"command": "askQuestion"})
    assert event.text == ""
    assert event.image is None


def test_inbound_event_with_image() -> None:
    event = InboundEvent.model_validate(
        {
            "command": "askQuestion",
            "text": "what is this?",
            "image": {"data": PNG_URI, "type": "image/png"},
        },
    )
    assert event.image is not None
    assert event.image.name is None


def test_ui_event_constructors() -> None:
    assert UIEvent.response("ok").model_dump() == {"type": "response", "content": "ok"}
    assert UIEvent.error("bad").model_dump() == {"type": "error", "content": "bad"}
