"""Client for OpenAI-compatible chat completion endpoints.

The client turns a `RequestEnvelope` into exactly one HTTP POST and maps the
outcome to a `Success` or `Failure`. Transport and HTTP failures are never
raised to the caller; there are no retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from panel_chat import constants

if TYPE_CHECKING:
    from panel_chat.config import InferenceConfig
    from panel_chat.models import RequestEnvelope

LOGGER = logging.getLogger(__name__)


# --- Error Taxonomy ---


class PanelChatError(Exception):
    """Base class for errors surfaced to the user as an error event."""


class ConfigurationError(PanelChatError):
    """Raised when the API key cannot be resolved."""


class ApiError(PanelChatError):
    """A non-success HTTP response or a transport failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(PanelChatError):
    """A well-formed response without any choices or without assistant content."""


@dataclass(frozen=True)
class Success:
    """The assistant text of a completed request."""

    text: str


@dataclass(frozen=True)
class Failure:
    """A classified failure with the message shown to the user."""

    error: PanelChatError
    message: str


InferenceResult = Success | Failure


# --- Provider Wire Format ---


class ProviderMessage(BaseModel):
    """The message inside a completion choice."""

    model_config = ConfigDict(extra="allow")

    role: str = "assistant"
    content: str | None = None


class ProviderChoice(BaseModel):
    """One completion choice."""

    model_config = ConfigDict(extra="allow")

    message: ProviderMessage


class ChatCompletion(BaseModel):
    """Successful chat completion body."""

    model_config = ConfigDict(extra="allow")

    choices: list[ProviderChoice] = Field(default_factory=list)


class ProviderError(BaseModel):
    """Structured error reported by the provider."""

    model_config = ConfigDict(extra="allow")

    message: str | None = None
    type: str | None = None
    code: str | int | None = None


class ProviderErrorBody(BaseModel):
    """Error response body, `{error: {message, type, code}}`."""

    model_config = ConfigDict(extra="allow")

    error: ProviderError | None = None


def _parse_completion(response: httpx.Response) -> ChatCompletion:
    """Parse a 2xx body; anything that is not a completion counts as no choices."""
    try:
        return ChatCompletion.model_validate(response.json())
    except ValueError:
        LOGGER.warning("Unexpected response body: %s", response.text[:500])
        return ChatCompletion()


def _provider_error_message(response: httpx.Response | None) -> str | None:
    if response is None:
        return None
    try:
        body = ProviderErrorBody.model_validate(response.json())
    except ValueError:
        return None
    if body.error is not None and body.error.message:
        return body.error.message
    return None


class InferenceClient:
    """Sends chat completion requests to a single configured endpoint."""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        *,
        timeout: float = constants.DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: Full URL of the chat completions endpoint.
            api_key: Bearer credential sent with every request.
            timeout: Transport timeout in seconds for the single attempt.
            http_client: Optional shared client; a short-lived one is
                created per request otherwise.

        """
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_config(
        cls,
        config: InferenceConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> InferenceClient:
        """Create a client from an inference configuration with a resolved key."""
        if not config.api_key:
            raise ConfigurationError(constants.MISSING_API_KEY_MESSAGE)
        return cls(
            config.endpoint,
            config.api_key,
            timeout=config.timeout,
            http_client=http_client,
        )

    @property
    def headers(self) -> dict[str, str]:
        """Request headers carrying the bearer credential."""
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(
                self.endpoint,
                json=payload,
                headers=self.headers,
                timeout=self.timeout,
            )
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.endpoint, json=payload, headers=self.headers)

    async def complete(self, envelope: RequestEnvelope) -> InferenceResult:
        """Send the envelope and normalize the outcome."""
        LOGGER.info("Sending request to %s", self.endpoint)
        LOGGER.info("Model: %s", envelope.model)
        LOGGER.info("Messages count: %d", len(envelope.messages))

        try:
            response = await self._post(envelope.to_payload())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            return self._api_failure(exc, exc.response)
        except httpx.HTTPError as exc:
            return self._api_failure(exc, None)

        LOGGER.info("Received response from API")
        completion = _parse_completion(response)
        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            LOGGER.warning("API returned no assistant content")
            return Failure(
                EmptyResponseError(constants.NO_RESPONSE_MESSAGE),
                constants.NO_RESPONSE_MESSAGE,
            )
        return Success(content)

    def _api_failure(self, exc: httpx.HTTPError, response: httpx.Response | None) -> Failure:
        status_code = response.status_code if response is not None else None
        message = _provider_error_message(response) or str(exc) or type(exc).__name__
        LOGGER.error("API error (%s): %s", status_code, message)
        if response is not None:
            LOGGER.error("Response data: %s", response.text)
        return Failure(ApiError(message, status_code), f"API error: {message}")
