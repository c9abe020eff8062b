"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to coordinator calls
2. Manages participant sessions
3. Maps room/role errors to structured error responses
4. Formats game views for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
The hold/secure/room calls are synchronous but must run inside an event
loop for replication to happen; FastAPI's async handlers provide one.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .schemas import (
    # Requests
    CreateSessionRequest,
    CreateRoomRequest,
    JoinRoomRequest,
    NewGameRequest,
    # Responses
    SessionResponse,
    ActionResponse,
    ErrorResponse,
    # Shared
    GameView,
    PlayerInfo,
    CardInfo,
    ReplicationInfo,
    # Enums
    ErrorCode,
    GameStatus,
    ParticipantRole,
    PublishStatus,
)
from ..engine_core.state import GameState, PlayerState
from ..exceptions import InvalidHostIdentity, InvalidRoomCode, NotHost, NotInRoom, RoomError
from ..replication.records import is_valid_host_identity
from ..session import SessionManager, Session, HostRole, WatcherRole, TurnResult

logger = logging.getLogger(__name__)


def _error(error_code: ErrorCode, message: str, **details) -> ErrorResponse:
    return ErrorResponse(error=message, error_code=error_code, details=details or None)


def _room_error(e: RoomError) -> ErrorResponse:
    if isinstance(e, InvalidRoomCode):
        return _error(ErrorCode.INVALID_ROOM_CODE, str(e), room_code=e.code)
    if isinstance(e, InvalidHostIdentity):
        return _error(ErrorCode.INVALID_HOST_IDENTITY, str(e))
    if isinstance(e, NotHost):
        return _error(ErrorCode.NOT_HOST, str(e))
    if isinstance(e, NotInRoom):
        return _error(ErrorCode.NOT_IN_ROOM, str(e))
    return _error(ErrorCode.VALIDATION_ERROR, str(e))


def player_info(player: PlayerState) -> PlayerInfo:
    return PlayerInfo(
        player_id=player.player_id,
        name=player.name,
        round_score=player.round_score,
        total_score=player.total_score,
        is_active=player.is_active,
        has_secured=player.has_secured,
    )


def game_view(state: GameState) -> GameView:
    """Convert a GameState (authoritative or projected) to its API view."""
    active = state.active_player
    return GameView(
        game_status=GameStatus(state.game_status.value),
        current_round=state.current_round,
        total_rounds=state.total_rounds,
        players=[player_info(p) for p in state.players],
        active_player_id=active.player_id if active else None,
        revealed_cards=[
            CardInfo(card_id=c.card_id, card_type=c.card_type.value, value=c.value)
            for c in state.revealed_cards
        ],
        cards_left=state.deck.count,
        winner=player_info(state.winner) if state.winner else None,
        last_action=state.last_action.value if state.last_action else None,
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        host = service.create_session(CreateSessionRequest(identity="0x..."))
        service.create_room(host.session_id, CreateRoomRequest())
        service.hold(host.session_id)

        watcher = service.create_session(CreateSessionRequest())
        service.join_room(watcher.session_id, JoinRoomRequest(...))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    def create_session(self, request: CreateSessionRequest) -> SessionResponse | ErrorResponse:
        if request.identity is not None and not is_valid_host_identity(request.identity):
            return _room_error(InvalidHostIdentity(request.identity))
        session = self.session_manager.create_session(identity=request.identity)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str) -> bool:
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def create_room(self, session_id: str, request: CreateRoomRequest) -> SessionResponse | ErrorResponse:
        """Host a new room under the session's identity."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        if request.total_rounds:
            session.coordinator.total_rounds = request.total_rounds
        try:
            session.coordinator.create_room(session.identity)
        except RoomError as e:
            return _room_error(e)
        return self._session_to_response(session)

    def join_room(self, session_id: str, request: JoinRoomRequest) -> SessionResponse | ErrorResponse:
        """Watch a room. Validation errors leave the session as it was."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        try:
            session.coordinator.join_room(request.room_code, request.host_identity)
        except RoomError as e:
            logger.warning("Join rejected for session %s: %s", session_id, e)
            return _room_error(e)
        return self._session_to_response(session)

    def leave_room(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        session.coordinator.leave_room()
        return self._session_to_response(session)

    def hold(self, session_id: str) -> ActionResponse | ErrorResponse:
        return self._play(session_id, lambda c: c.hold())

    def secure(self, session_id: str) -> ActionResponse | ErrorResponse:
        return self._play(session_id, lambda c: c.secure())

    def new_game(self, session_id: str, request: NewGameRequest | None = None) -> ActionResponse | ErrorResponse:
        total_rounds = request.total_rounds if request else None
        return self._play(session_id, lambda c: c.new_game(total_rounds))

    def _play(self, session_id: str, step) -> ActionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        try:
            result: TurnResult = step(session.coordinator)
        except RoomError as e:
            return _room_error(e)
        return ActionResponse(
            session_id=session_id,
            success=result.success,
            changes=result.changes,
            error=result.error,
            round_ended=result.round_ended,
            game_over=result.game_over,
            publish_scheduled=result.publish_scheduled,
            game=game_view(result.state),
        )

    def _not_found(self, session_id: str) -> ErrorResponse:
        return _error(ErrorCode.SESSION_NOT_FOUND, f"Session {session_id} not found")

    def _session_to_response(self, session: Session) -> SessionResponse:
        coordinator = session.coordinator
        role = coordinator.role
        replication = ReplicationInfo()

        if isinstance(role, HostRole):
            participant_role = ParticipantRole.HOST
            replicator = role.game.replicator
            if replicator:
                replication = ReplicationInfo(
                    publish_status=PublishStatus(replicator.status.value),
                    last_error=replicator.last_error,
                )
        elif isinstance(role, WatcherRole):
            participant_role = ParticipantRole.WATCHER
            watcher = role.watcher
            replication = ReplicationInfo(
                last_error=watcher.last_error,
                last_published_at=watcher.room_state.timestamp if watcher.room_state else None,
                is_watching=watcher.is_watching,
            )
        else:
            participant_role = ParticipantRole.NONE

        view = coordinator.view
        return SessionResponse(
            session_id=session.session_id,
            role=participant_role,
            identity=session.identity,
            room_code=coordinator.room_code,
            host_identity=coordinator.host_identity,
            game=game_view(view) if view is not None else None,
            replication=replication,
            created_at=session.created_at,
        )
