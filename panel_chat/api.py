"""FastAPI application factory for the web UI bridge.

Each panel opens a session, then sends `askQuestion` events either as HTTP
requests or over a WebSocket, and receives `response`/`error` events back.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Literal

import httpx
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from panel_chat import __version__
from panel_chat.common import log_requests_middleware
from panel_chat.models import InboundEvent, UIEvent
from panel_chat.sessions import SessionRegistry

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import Request

    from panel_chat.config import InferenceConfig
    from panel_chat.orchestrator import SessionOrchestrator, UIBridge

LOGGER = logging.getLogger(__name__)


class NewSessionResponse(BaseModel):
    """Response model for session creation."""

    session_id: str
    status: str = "created"


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    version: str
    sessions: int
    model: str


class OutboundEvent(BaseModel):
    """Event returned to an HTTP caller."""

    type: Literal["response", "error", "ignored"]
    content: str


class WebSocketBridge:
    """Posts outbound events to a connected WebSocket as JSON."""

    def __init__(self, websocket: WebSocket) -> None:
        """Wrap an accepted WebSocket."""
        self.websocket = websocket

    async def post_message(self, event: UIEvent) -> None:
        """Send the event to the panel."""
        await self.websocket.send_json(event.model_dump())


def create_app(
    config: InferenceConfig,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create the FastAPI app serving chat sessions.

    Args:
        config: Inference settings used by every session.
        http_client: Optional shared HTTP client; one is created on startup
            otherwise. It is closed on shutdown.

    """
    registry = SessionRegistry(config, http_client)
    # Per session: the bridge in place before any socket, then open sockets, oldest first.
    connected_bridges: dict[str, list[UIBridge]] = {}

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        """Open the shared HTTP client and drop all sessions on shutdown."""
        if registry.http_client is None:
            registry.http_client = httpx.AsyncClient(timeout=config.timeout)
        LOGGER.info("Chat bridge ready, model=%s endpoint=%s", config.model, config.endpoint)
        yield
        await registry.aclose()

    app = FastAPI(
        title="Panel Chat Bridge",
        description="Conversation sessions between an editor panel and a chat completion API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Any) -> Any:
        """Log basic request information."""
        return await log_requests_middleware(request, call_next)

    def _get_session(session_id: str) -> SessionOrchestrator:
        orchestrator = registry.get(session_id)
        if orchestrator is None:
            raise HTTPException(status_code=404, detail="Session not found")
        return orchestrator

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            version=__version__,
            sessions=len(registry),
            model=config.model,
        )

    @app.post("/session/new", response_model=NewSessionResponse)
    async def create_session() -> NewSessionResponse:
        """Open a new conversation with an empty message log."""
        session_id, _ = registry.create()
        return NewSessionResponse(session_id=session_id)

    @app.delete("/session/{session_id}")
    async def dispose_session(session_id: str) -> dict[str, str]:
        """Dispose a session and its message log."""
        if registry.dispose(session_id):
            return {"status": "disposed"}
        raise HTTPException(status_code=404, detail="Session not found")

    @app.post("/session/{session_id}/message", response_model=OutboundEvent)
    async def send_message(session_id: str, event: InboundEvent) -> OutboundEvent:
        """Handle one inbound UI event and return the resulting outbound event."""
        orchestrator = _get_session(session_id)
        result = await orchestrator.handle_event(event)
        if result is None:
            return OutboundEvent(type="ignored", content="")
        return OutboundEvent(type=result.type, content=result.content)

    @app.get("/session/{session_id}/messages")
    async def list_messages(session_id: str) -> list[dict[str, Any]]:
        """Return the session's message log in conversation order."""
        orchestrator = _get_session(session_id)
        return [turn.model_dump(mode="json") for turn in orchestrator.log]

    @app.websocket("/session/{session_id}/bridge")
    async def bridge_session(websocket: WebSocket, session_id: str) -> None:
        """Bidirectional UI bridge: inbound events in, outbound events out.

        When several sockets are open on one session, outbound events go to
        the most recently connected one.
        """
        await websocket.accept()

        orchestrator = registry.get(session_id)
        if orchestrator is None:
            await websocket.send_json(UIEvent.error("Session not found").model_dump())
            await websocket.close(code=4004)
            return

        bridges = connected_bridges.setdefault(session_id, [orchestrator.bridge])
        bridge = WebSocketBridge(websocket)
        bridges.append(bridge)
        orchestrator.bridge = bridge
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError:
                    LOGGER.warning("[%s] Received non-JSON message", session_id)
                    await bridge.post_message(UIEvent.error("Invalid JSON message"))
                    continue
                await orchestrator.handle_event(data)
        except WebSocketDisconnect:
            LOGGER.info("WebSocket disconnected for session %s", session_id)
        finally:
            # The newest socket still open receives the events.
            bridges.remove(bridge)
            orchestrator.bridge = bridges[-1]
            if len(bridges) == 1:
                connected_bridges.pop(session_id, None)

    return app
