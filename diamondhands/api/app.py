"""
FastAPI Application - REST API for hosts and watchers.

Endpoints:
    POST   /api/v1/sessions                     Open a participant session
    GET    /api/v1/sessions                     List sessions currently in a room
    GET    /api/v1/sessions/{id}                Get role, game view, replication status
    DELETE /api/v1/sessions/{id}                End session (leaves its room)
    POST   /api/v1/sessions/{id}/room           Create a room and host it
    POST   /api/v1/sessions/{id}/watch          Join a room as watcher
    DELETE /api/v1/sessions/{id}/room           Leave the current room
    POST   /api/v1/sessions/{id}/hold           Host: draw a card
    POST   /api/v1/sessions/{id}/secure         Host: bank the round score
    POST   /api/v1/sessions/{id}/new-game       Host: start over

Replication Flow:
    1. Host actions return immediately with the new state
    2. Publishing to the ledger happens in the background (debounced)
    3. Watchers poll the ledger; GET /sessions/{id} shows the latest view

All responses are JSON with explicit Pydantic schemas.
"""

from contextlib import asynccontextmanager
from typing import Optional, Union

from .. import __version__
from ..config import get_settings


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Body
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        CreateRoomRequest,
        JoinRoomRequest,
        NewGameRequest,
        # Response models
        SessionResponse,
        ActionResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    api_service = service or APIService()

    @asynccontextmanager
    async def lifespan(app):
        yield
        # Shutdown: stop polling and drop pending publishes
        api_service.session_manager.close_all()

    app = FastAPI(
        title="Diamond Hands API",
        description="""
Two-player push-your-luck card game. The host's game is mirrored to watchers
through a ledger that holds one record per room.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_ROOM_CODE` | Room code is not DIAMOND-#### |
| `INVALID_HOST_IDENTITY` | Identity is not 0x + 40 hex characters |
| `NOT_HOST` | Only the host can play |
| `NOT_IN_ROOM` | Session has no room |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(get_settings().allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_for_code = {
        ErrorCode.SESSION_NOT_FOUND: 404,
        ErrorCode.NOT_HOST: 403,
        ErrorCode.NOT_IN_ROOM: 409,
    }

    def error_response(error: ErrorResponse) -> JSONResponse:
        """Serialize an ErrorResponse with the status its code maps to."""
        return JSONResponse(
            status_code=status_for_code.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    def respond(result):
        if isinstance(result, ErrorResponse):
            return error_response(result)
        return result

    error_responses = {
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    }

    # =========================================================================
    # Health
    # =========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="healthy", service="diamondhands", version=__version__)

    # =========================================================================
    # Sessions
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses=error_responses,
        tags=["Sessions"],
        summary="Open a participant session",
    )
    async def create_session(
        body: Optional[CreateSessionRequest] = Body(None),
    ) -> Union[SessionResponse, JSONResponse]:
        """Open a session. Pass an identity to be able to host."""
        return respond(api_service.create_session(body or CreateSessionRequest()))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions currently in a room",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses=error_responses,
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Role, current game view and replication status."""
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Rooms
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/room",
        response_model=SessionResponse,
        responses=error_responses,
        tags=["Rooms"],
        summary="Create a room and host it",
    )
    async def create_room(
        session_id: str,
        body: Optional[CreateRoomRequest] = Body(None),
    ) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.create_room(session_id, body or CreateRoomRequest()))

    @app.post(
        "/api/v1/sessions/{session_id}/watch",
        response_model=SessionResponse,
        responses=error_responses,
        tags=["Rooms"],
        summary="Join a room as watcher",
    )
    async def join_room(session_id: str, body: JoinRoomRequest) -> Union[SessionResponse, JSONResponse]:
        """Start polling the host's record for the room."""
        return respond(api_service.join_room(session_id, body))

    @app.delete(
        "/api/v1/sessions/{session_id}/room",
        response_model=SessionResponse,
        responses=error_responses,
        tags=["Rooms"],
        summary="Leave the current room",
    )
    async def leave_room(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.leave_room(session_id))

    # =========================================================================
    # Game
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/hold",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Draw a card",
    )
    async def hold(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.hold(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/secure",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Bank the round score",
    )
    async def secure(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.secure(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/new-game",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Start a new game in the same room",
    )
    async def new_game(
        session_id: str,
        body: Optional[NewGameRequest] = Body(None),
    ) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.new_game(session_id, body))

    return app
