"""
FastAPI Application - REST + WebSocket API for duels and autobattler combat.

Endpoints:
    POST   /api/v1/sessions             Create a duel session
    GET    /api/v1/sessions             List sessions
    GET    /api/v1/sessions/{id}        Get session status
    WS     /api/v1/sessions/{id}/ws     Participant connection
    GET    /api/v1/cards                Card catalog
    GET    /api/v1/decks                Preset decks
    POST   /api/v1/combat               Resolve one autobattler combat
    POST   /api/v1/combat/opponent      Generate an opponent roster

Duel Flow:
    1. POST /sessions allocates a waiting session
    2. Each participant opens the WebSocket and sends `join`
    3. The second join starts the duel; both get `session-started`
    4. `play_card` / `attack` / `end_turn` produce `state-updated` for both
       participants (redacted per side) or `action-rejected` for the sender
    5. A fallen hero or a closed socket produces `session-ended`

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Union
import json
import logging
import os
import uuid

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..errors import ErrorKind, SessionError
from ..session import CONNECTED, DEFAULT_GRACE_PERIOD_SECONDS, OutboundEvent
from ..session.events import rejected
from .service import APIService
from .schemas import (
    CardListResponse,
    CombatRequest,
    CombatResponse,
    DeckListResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    OpponentRequest,
    OpponentResponse,
    SessionListResponse,
    SessionResponse,
)

logger = logging.getLogger(__name__)

# Environment configuration
SKIRMISH_ENV = os.getenv("SKIRMISH_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
SESSION_GRACE_SECONDS = float(
    os.getenv("SKIRMISH_SESSION_GRACE_SECONDS", str(DEFAULT_GRACE_PERIOD_SECONDS))
)
LOG_LEVEL = os.getenv("SKIRMISH_LOG_LEVEL", "INFO").upper()


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    logging.getLogger("skirmish").setLevel(LOG_LEVEL)

    app = FastAPI(
        title="Skirmish Engine API",
        description="""
Two-player card duels and autobattler combat.

## Duel Flow

1. `POST /api/v1/sessions` to allocate a session
2. Both participants connect to `/api/v1/sessions/{id}/ws` and send `join`
3. Play with `play_card`, `attack` and `end_turn` messages

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `SESSION_FULL` | Session already has two participants |
| `UNKNOWN_CARD` | Deck references an unknown card id |
| `ILLEGAL_ACTION` | Not your turn, or the duel is not active |
| `INVALID_INDEX` / `INVALID_TARGET` / `INVALID_ATTACKER` | Stale or out-of-range reference |
| `INSUFFICIENT_MANA` | Card costs more than available mana |
| `ALREADY_ACTED` | Attacker already attacked this turn |
| `CAPACITY_EXCEEDED` | Board is full |
| `VALIDATION_ERROR` | Malformed request or message |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    api_service = service or APIService(grace_period_seconds=SESSION_GRACE_SECONDS)

    # WebSocket connections: session id -> participant id -> socket
    ws_connections: dict[str, dict[str, WebSocket]] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def session_error_response(error: SessionError) -> JSONResponse:
        status_code = 404 if error.kind == ErrorKind.SESSION_NOT_FOUND else 400
        return make_error_response(error.kind, error.message, status_code=status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            status_code=422,
            details={"errors": json.loads(json.dumps(exc.errors(), default=str))},
        )

    async def deliver(session_id: str, events: list[OutboundEvent]):
        """Send outbound events to their recipients in a session."""
        connections = ws_connections.get(session_id, {})
        dead_connections = []
        for event in events:
            if event.recipient is None:
                targets = list(connections.items())
            elif event.recipient in connections:
                targets = [(event.recipient, connections[event.recipient])]
            else:
                continue
            for participant_id, ws in targets:
                try:
                    await ws.send_json(event.to_message())
                except Exception:
                    logger.debug("Dropping dead connection %s", participant_id)
                    dead_connections.append(participant_id)
        for participant_id in dead_connections:
            connections.pop(participant_id, None)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new duel session",
    )
    async def create_session() -> SessionResponse:
        """
        Create a new duel session in the waiting state.

        Participants then join over the session WebSocket.
        """
        return api_service.create_session()

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List every session not yet purged."""
        return api_service.list_sessions()

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current status of a duel session."""
        try:
            return api_service.get_session(session_id)
        except SessionError as e:
            return session_error_response(e)

    # =========================================================================
    # Catalog Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/cards",
        response_model=CardListResponse,
        tags=["Catalog"],
        summary="List every card definition",
    )
    async def list_cards() -> CardListResponse:
        return api_service.list_cards()

    @app.get(
        "/api/v1/decks",
        response_model=DeckListResponse,
        tags=["Catalog"],
        summary="List preset decks",
    )
    async def list_decks() -> DeckListResponse:
        return api_service.list_decks()

    # =========================================================================
    # Autobattler Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/combat",
        response_model=CombatResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Autobattler"],
        summary="Resolve one autobattler combat",
    )
    async def resolve_combat(body: CombatRequest) -> CombatResponse:
        """
        Simulate combat between two rosters.

        Omit `opponent` to fight a roster generated for `round_number`.

        **Request Body:**
        ```json
        {
            "player": [{"name": "Micro Bot", "attack": 1, "health": 2, "tier": 1}],
            "round_number": 3
        }
        ```
        """
        return api_service.resolve_combat(body)

    @app.post(
        "/api/v1/combat/opponent",
        response_model=OpponentResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Autobattler"],
        summary="Generate an opponent roster for a round",
    )
    async def generate_opponent(body: OpponentRequest) -> OpponentResponse:
        return api_service.generate_opponent(body)

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        One participant connection.

        Messages from server:
        - connected: Participant id and spectator view of the duel
        - session-joined: Assigned side
        - session-started: First side and the redacted state
        - state-updated: Redacted state after an accepted action
        - session-ended: Winner, reason and final state
        - action-rejected: Error code and message (sender only)

        Messages from client:
        - join, play_card, attack, end_turn
        - ping: Keep-alive

        Closing the socket is a disconnect.
        """
        await websocket.accept()

        if api_service.session_manager.get_session(session_id) is None:
            await websocket.send_json(
                rejected("", ErrorKind.SESSION_NOT_FOUND.value, f"Session {session_id} not found").to_message()
            )
            await websocket.close(code=4404)
            return

        participant_id = str(uuid.uuid4())
        connections = ws_connections.setdefault(session_id, {})
        connections[participant_id] = websocket

        try:
            await websocket.send_json({
                "type": CONNECTED,
                "payload": {
                    "participant_id": participant_id,
                    "state": api_service.session_manager.snapshot_for(session_id),
                },
            })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    events = [rejected(participant_id, ErrorKind.VALIDATION_ERROR.value, "Invalid JSON")]
                else:
                    events = api_service.handle_message(session_id, participant_id, message)
                await deliver(session_id, events)

        except WebSocketDisconnect:
            pass
        finally:
            connections.pop(participant_id, None)
            events = api_service.disconnect(participant_id)
            await deliver(session_id, events)
            if not connections:
                ws_connections.pop(session_id, None)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="skirmish-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Skirmish Engine API",
            "version": __version__,
            "environment": SKIRMISH_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn skirmish.api.app:app
app = create_app()
