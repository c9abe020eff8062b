"""
Tests for API layer.

Tests:
- API service methods
- Role errors mapped to error codes
- HTTP endpoints via FastAPI's TestClient
"""

import pytest

from ..api.schemas import (
    CreateSessionRequest,
    CreateRoomRequest,
    JoinRoomRequest,
    NewGameRequest,
    ErrorResponse,
    ErrorCode,
    GameStatus,
    ParticipantRole,
)
from ..api.service import APIService, game_view
from ..config import Settings
from ..engine_core.reducer import initial_state
from ..session import SessionManager
from .conftest import HOST_ID, make_state


@pytest.fixture
def service():
    """Create a fresh API service with fast replication timings."""
    settings = Settings(publish_debounce=0.01, poll_interval=0.01)
    return APIService(session_manager=SessionManager(settings=settings))


class TestGameView:

    def test_playing_view(self):
        view = game_view(make_state(p1={"round_score": 10}, active=2))
        assert view.game_status == GameStatus.PLAYING
        assert view.active_player_id == 2
        assert view.players[0].round_score == 10
        assert view.cards_left == 3
        assert view.winner is None

    def test_waiting_view(self):
        view = game_view(initial_state())
        assert view.game_status == GameStatus.WAITING
        assert view.cards_left == 0


class TestAPIService:

    def test_create_session(self, service):
        response = service.create_session(CreateSessionRequest(identity=HOST_ID))
        assert response.session_id
        assert response.role == ParticipantRole.NONE
        assert response.identity == HOST_ID
        assert response.game is None

    def test_create_session_bad_identity(self, service):
        response = service.create_session(CreateSessionRequest(identity="0xnope"))
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.INVALID_HOST_IDENTITY

    def test_unknown_session(self, service):
        response = service.get_session("missing")
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_host_flow(self, service):
        session = service.create_session(CreateSessionRequest(identity=HOST_ID))

        room = service.create_room(session.session_id, CreateRoomRequest(total_rounds=2))
        assert room.role == ParticipantRole.HOST
        assert room.room_code.startswith("DIAMOND-")
        assert room.host_identity == HOST_ID
        assert room.game.total_rounds == 2
        assert room.game.game_status == GameStatus.PLAYING

        result = service.secure(session.session_id)
        assert result.success
        assert result.game.active_player_id == 2

    def test_create_room_needs_identity(self, service):
        session = service.create_session(CreateSessionRequest())
        response = service.create_room(session.session_id, CreateRoomRequest())
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.INVALID_HOST_IDENTITY

    def test_join_validation(self, service):
        session = service.create_session(CreateSessionRequest())

        bad_code = service.join_room(
            session.session_id, JoinRoomRequest(room_code="DIAMOND-1", host_identity=HOST_ID)
        )
        bad_host = service.join_room(
            session.session_id, JoinRoomRequest(room_code="DIAMOND-1234", host_identity="0x1")
        )

        assert bad_code.error_code == ErrorCode.INVALID_ROOM_CODE
        assert bad_host.error_code == ErrorCode.INVALID_HOST_IDENTITY
        assert service.get_session(session.session_id).role == ParticipantRole.NONE

    def test_watcher_cannot_play(self, service):
        session = service.create_session(CreateSessionRequest())
        joined = service.join_room(
            session.session_id, JoinRoomRequest(room_code="diamond-1234", host_identity=HOST_ID)
        )
        assert joined.role == ParticipantRole.WATCHER
        assert joined.room_code == "DIAMOND-1234"
        assert joined.game.game_status == GameStatus.WAITING

        response = service.hold(session.session_id)
        assert response.error_code == ErrorCode.NOT_HOST

    def test_play_without_room(self, service):
        session = service.create_session(CreateSessionRequest(identity=HOST_ID))
        assert service.hold(session.session_id).error_code == ErrorCode.NOT_IN_ROOM

    def test_refused_action(self, service):
        session = service.create_session(CreateSessionRequest(identity=HOST_ID))
        service.create_room(session.session_id, CreateRoomRequest(total_rounds=1))
        service.secure(session.session_id)
        over = service.secure(session.session_id)
        assert over.game_over
        assert over.game.winner is not None

        refused = service.hold(session.session_id)
        assert not refused.success
        assert refused.error

        restarted = service.new_game(session.session_id, NewGameRequest(total_rounds=3))
        assert restarted.success
        assert restarted.game.total_rounds == 3

    def test_leave_and_end(self, service):
        session = service.create_session(CreateSessionRequest(identity=HOST_ID))
        service.create_room(session.session_id, CreateRoomRequest())
        assert session.session_id in service.list_sessions()

        left = service.leave_room(session.session_id)
        assert left.role == ParticipantRole.NONE
        assert session.session_id not in service.list_sessions()

        assert service.end_session(session.session_id)
        assert not service.end_session(session.session_id)


class TestHTTP:

    @pytest.fixture
    def client(self, service):
        pytest.importorskip("fastapi")
        pytest.importorskip("httpx")
        from fastapi.testclient import TestClient
        from ..api.app import create_app

        with TestClient(create_app(service)) as client:
            yield client

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_host_and_watch(self, client):
        host = client.post("/api/v1/sessions", json={"identity": HOST_ID}).json()
        room = client.post(f"/api/v1/sessions/{host['session_id']}/room", json={"total_rounds": 3})
        assert room.status_code == 200
        room_code = room.json()["room_code"]

        played = client.post(f"/api/v1/sessions/{host['session_id']}/secure")
        assert played.status_code == 200
        assert played.json()["game"]["active_player_id"] == 2

        watcher = client.post("/api/v1/sessions").json()
        joined = client.post(
            f"/api/v1/sessions/{watcher['session_id']}/watch",
            json={"room_code": room_code, "host_identity": HOST_ID},
        )
        assert joined.status_code == 200
        assert joined.json()["role"] == "watcher"

        listed = client.get("/api/v1/sessions").json()
        assert listed["count"] == 2

    def test_error_status_codes(self, client):
        assert client.get("/api/v1/sessions/missing").status_code == 404

        watcher = client.post("/api/v1/sessions").json()
        bad = client.post(
            f"/api/v1/sessions/{watcher['session_id']}/watch",
            json={"room_code": "EMERALD-1234", "host_identity": HOST_ID},
        )
        assert bad.status_code == 400
        assert bad.json()["error_code"] == "INVALID_ROOM_CODE"

        no_room = client.post(f"/api/v1/sessions/{watcher['session_id']}/hold")
        assert no_room.status_code == 409

        client.post(
            f"/api/v1/sessions/{watcher['session_id']}/watch",
            json={"room_code": "DIAMOND-1234", "host_identity": HOST_ID},
        )
        not_host = client.post(f"/api/v1/sessions/{watcher['session_id']}/hold")
        assert not_host.status_code == 403
        assert not_host.json()["error_code"] == "NOT_HOST"

    def test_leave_and_end(self, client):
        session = client.post("/api/v1/sessions", json={"identity": HOST_ID}).json()
        sid = session["session_id"]
        client.post(f"/api/v1/sessions/{sid}/room")

        left = client.delete(f"/api/v1/sessions/{sid}/room")
        assert left.json()["role"] == "none"

        ended = client.delete(f"/api/v1/sessions/{sid}")
        assert ended.json() == {"success": True, "session_id": sid}
        assert client.get(f"/api/v1/sessions/{sid}").status_code == 404
