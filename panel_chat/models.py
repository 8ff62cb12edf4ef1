"""Conversation data models: turns, the message log and UI bridge events."""

from __future__ import annotations

import base64
import mimetypes
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

Role = Literal["user", "assistant", "system"]


class ImagePayload(BaseModel):
    """An image attached to a user turn, carried as a data URI."""

    data: str
    type: str
    name: str | None = None

    @field_validator("data")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            msg = "image data must be non-empty"
            raise ValueError(msg)
        return v

    @classmethod
    def from_file(cls, path: Path) -> ImagePayload:
        """Read an image file into a base64 data URI."""
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        encoded = base64.b64encode(path.read_bytes()).decode("ascii")
        return cls(data=f"data:{mime_type};base64,{encoded}", type=mime_type, name=path.name)


class Turn(BaseModel):
    """A single entry in the conversation."""

    role: Role
    content: str = ""
    timestamp: datetime | None = None
    """Creation time, only set on user turns."""
    image: ImagePayload | None = None

    @model_validator(mode="after")
    def _check_role_fields(self) -> Turn:
        if self.role != "user" and self.image is not None:
            msg = f"{self.role} turns cannot carry an image"
            raise ValueError(msg)
        if self.role == "assistant" and self.timestamp is not None:
            msg = "assistant turns are not timestamped"
            raise ValueError(msg)
        return self

    @classmethod
    def user(cls, text: str, image: ImagePayload | None = None) -> Turn:
        """Create a timestamped user turn."""
        return cls(role="user", content=text, timestamp=datetime.now(UTC), image=image)

    @classmethod
    def assistant(cls, text: str) -> Turn:
        """Create an assistant turn."""
        return cls(role="assistant", content=text)


class ChatMessage(BaseModel):
    """A `{role, content}` pair as sent to the inference provider."""

    role: Role
    content: str


@dataclass
class MessageLog:
    """Append-only, ordered record of the turns in one session."""

    _turns: list[Turn] = field(default_factory=list)

    def append(self, turn: Turn) -> None:
        """Add a turn at the end of the log."""
        self._turns.append(turn)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def __getitem__(self, index: int) -> Turn:
        return self._turns[index]

    @property
    def turns(self) -> tuple[Turn, ...]:
        """Snapshot of the turns in conversation order."""
        return tuple(self._turns)

    @property
    def last(self) -> Turn | None:
        """The most recent turn, if any."""
        return self._turns[-1] if self._turns else None

    def project(self) -> list[ChatMessage]:
        """Project every turn to `{role, content}`, dropping images."""
        return [ChatMessage(role=turn.role, content=turn.content) for turn in self._turns]


class RequestEnvelope(BaseModel):
    """The chat completion request built from a message log."""

    model: str
    messages: list[ChatMessage]
    max_tokens: int

    @classmethod
    def from_log(cls, log: MessageLog, *, model: str, max_tokens: int) -> RequestEnvelope:
        """Build an envelope carrying the full conversation history."""
        return cls(model=model, messages=log.project(), max_tokens=max_tokens)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the provider's JSON body."""
        return self.model_dump()


# --- UI Bridge Events ---


class InboundEvent(BaseModel):
    """An event sent by the UI surface, e.g. `{command: "askQuestion", text}`."""

    model_config = ConfigDict(extra="allow")

    command: str
    text: str = ""
    image: ImagePayload | None = None


class UIEvent(BaseModel):
    """An event sent to the UI surface."""

    type: Literal["response", "error"]
    content: str

    @classmethod
    def response(cls, content: str) -> UIEvent:
        """Create a response event."""
        return cls(type="response", content=content)

    @classmethod
    def error(cls, content: str) -> UIEvent:
        """Create an error event."""
        return cls(type="error", content=content)
