"""
Session Module - Participants, roles and the host game loop.

A participant is either:
- the host of a room: drives the authoritative game and publishes it
- a watcher of a room: polls the host's published record

Sessions are EPHEMERAL:
- No persistence beyond the single ledger record per room
- Ending a session tears down its role
"""

from .host import HostGame, TurnResult
from .coordinator import RoomCoordinator, HostRole, WatcherRole, Role
from .manager import SessionManager, Session

__all__ = [
    "HostGame",
    "TurnResult",
    "RoomCoordinator",
    "HostRole",
    "WatcherRole",
    "Role",
    "SessionManager",
    "Session",
]
