"""Registry of live chat sessions, one orchestrator per panel."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from panel_chat.orchestrator import SessionOrchestrator, UIBridge

if TYPE_CHECKING:
    import httpx

    from panel_chat.config import InferenceConfig

LOGGER = logging.getLogger(__name__)


class SessionRegistry:
    """Creates, looks up and disposes session orchestrators."""

    def __init__(
        self,
        config: InferenceConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            config: Inference settings handed to every new session.
            http_client: Optional connection pool shared by all sessions.
                The registry closes it in `aclose`.

        """
        self.config = config
        self.http_client = http_client
        self.sessions: dict[str, SessionOrchestrator] = {}

    def __len__(self) -> int:
        return len(self.sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self.sessions

    def create(self, bridge: UIBridge | None = None) -> tuple[str, SessionOrchestrator]:
        """Create a new session with an empty message log."""
        session_id = str(uuid.uuid4())
        orchestrator = SessionOrchestrator(
            self.config,
            bridge,
            http_client=self.http_client,
            session_id=session_id,
        )
        self.sessions[session_id] = orchestrator
        LOGGER.info("Created session %s with model=%s", session_id, self.config.model)
        return session_id, orchestrator

    def get(self, session_id: str) -> SessionOrchestrator | None:
        """Get a session by ID."""
        return self.sessions.get(session_id)

    def dispose(self, session_id: str) -> bool:
        """Drop a session and its message log. Returns False if unknown."""
        orchestrator = self.sessions.pop(session_id, None)
        if orchestrator is None:
            return False
        LOGGER.info(
            "Disposed session %s after %d turns",
            session_id,
            len(orchestrator.log),
        )
        return True

    def list_ids(self) -> list[str]:
        """IDs of all live sessions, oldest first."""
        return list(self.sessions)

    async def aclose(self) -> None:
        """Dispose every session and close the shared HTTP client."""
        for session_id in self.list_ids():
            self.dispose(session_id)
        if self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None
