"""Session orchestrator: owns the message log and drives the inference client.

Flow for one question:
- Check that an API key is configured (nothing is appended otherwise).
- Append the user turn.
- Send the full log to the inference client.
- On success append the assistant turn and emit a `response` event,
  on failure emit an `error` event and leave the user turn unanswered.

One question is processed at a time per session. A question arriving while
another is in flight is rejected with a busy error and does not touch the log.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import ValidationError

from panel_chat import constants
from panel_chat.inference import ConfigurationError, Failure, InferenceClient
from panel_chat.models import ImagePayload, InboundEvent, MessageLog, RequestEnvelope, Turn, UIEvent

if TYPE_CHECKING:
    import httpx

    from panel_chat.config import InferenceConfig

LOGGER = logging.getLogger(__name__)

ASK_QUESTION = "askQuestion"


@runtime_checkable
class UIBridge(Protocol):
    """Transport that delivers outbound events to the UI surface."""

    async def post_message(self, event: UIEvent) -> None:
        """Deliver one event."""


class NullBridge:
    """A bridge for callers that read the returned event instead, e.g. HTTP."""

    async def post_message(self, event: UIEvent) -> None:  # noqa: ARG002
        """Drop the event."""


class SessionOrchestrator:
    """Single authority over one conversation's message log."""

    def __init__(
        self,
        config: InferenceConfig,
        bridge: UIBridge | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        session_id: str = "default",
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Inference settings; the API key is checked on every question.
            bridge: Where outbound events are posted. Defaults to a
                `NullBridge`.
            http_client: Optional shared HTTP client for the inference client.
            session_id: Identifier used in log lines.

        """
        self.config = config
        self.bridge: UIBridge = bridge if bridge is not None else NullBridge()
        self.session_id = session_id
        self.log = MessageLog()
        self._http_client = http_client
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        """Whether a question is currently being processed."""
        return self._lock.locked()

    def _inference_client(self) -> InferenceClient:
        if not self.config.has_api_key:
            raise ConfigurationError(constants.MISSING_API_KEY_MESSAGE)
        return InferenceClient.from_config(self.config, http_client=self._http_client)

    async def handle_event(self, event: dict[str, Any] | InboundEvent) -> UIEvent | None:
        """Dispatch an inbound UI event; unknown commands are ignored."""
        if not isinstance(event, InboundEvent):
            try:
                event = InboundEvent.model_validate(event)
            except ValidationError as e:
                LOGGER.warning("[%s] Invalid inbound event: %s", self.session_id, e)
                return await self._emit(UIEvent.error(f"Invalid event: {e.error_count()} error(s)"))

        if event.command == ASK_QUESTION:
            return await self.handle_user_question(event.text, event.image)

        LOGGER.info("[%s] Ignoring unknown command: %s", self.session_id, event.command)
        return None

    async def handle_user_question(
        self,
        text: str,
        image: ImagePayload | None = None,
    ) -> UIEvent:
        """Process one question and emit exactly one outbound event.

        Never raises: every failure becomes an `error` event.
        """
        if self._lock.locked():
            LOGGER.warning("[%s] Rejecting question, a request is in flight", self.session_id)
            return await self._emit(UIEvent.error(constants.BUSY_MESSAGE))

        async with self._lock:
            try:
                event = await self._process_question(text, image)
            except ConfigurationError as e:
                LOGGER.error("[%s] %s", self.session_id, e)  # noqa: TRY400
                event = UIEvent.error(str(e))
            except Exception as e:
                LOGGER.exception("[%s] Error handling question", self.session_id)
                event = UIEvent.error(str(e))
            return await self._emit(event)

    async def _process_question(self, text: str, image: ImagePayload | None) -> UIEvent:
        LOGGER.info("[%s] Received question: %s", self.session_id, text)
        client = self._inference_client()

        if not text.strip() and image is None:
            LOGGER.info("[%s] Empty question, nothing to send", self.session_id)
            return UIEvent.error(constants.EMPTY_QUESTION_MESSAGE)

        self.log.append(Turn.user(text, image))
        envelope = RequestEnvelope.from_log(
            self.log,
            model=self.config.model,
            max_tokens=self.config.max_tokens,
        )

        result = await client.complete(envelope)
        if isinstance(result, Failure):
            LOGGER.error(
                "[%s] Error handling question: %s",
                self.session_id,
                result.message,
            )
            return UIEvent.error(result.message)

        self.log.append(Turn.assistant(result.text))
        LOGGER.info("[%s] Conversation now has %d turns", self.session_id, len(self.log))
        return UIEvent.response(result.text)

    async def _emit(self, event: UIEvent) -> UIEvent:
        try:
            await self.bridge.post_message(event)
        except Exception:
            LOGGER.exception("[%s] Failed to deliver %s event", self.session_id, event.type)
        return event
