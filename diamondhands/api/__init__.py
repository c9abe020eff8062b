"""
API Module - HTTP interface.

Exposes hosting and watching over REST:
1. Clients open a participant session
2. Hosts create a room and play
3. Watchers join a room by code and host identity
4. Everyone reads their view from GET /sessions/{id}

All state is session-scoped. No persistent user accounts required.
"""

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
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "CreateRoomRequest",
    "JoinRoomRequest",
    "NewGameRequest",
    # Responses
    "SessionResponse",
    "ActionResponse",
    "ErrorResponse",
    # Shared
    "GameView",
    "PlayerInfo",
    "CardInfo",
    "ReplicationInfo",
    # Service
    "APIService",
    "create_app",
]
