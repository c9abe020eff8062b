"""
Replication - Mirrors the host's game to watchers through a ledger.

Host side:    GameState -> Replicator -> Ledger.publish
Watcher side: Ledger.fetch -> RoomWatcher -> projected read-only GameState

The ledger holds exactly one record per (host identity, room code) and is
eventually consistent: watchers converge to the host's last successful
write, not to every intermediate state.
"""

from .records import (
    RoomState,
    generate_room_code,
    normalize_room_code,
    is_valid_room_code,
    is_valid_host_identity,
)
from .fingerprint import fingerprint
from .ledger import Ledger, InMemoryLedger
from .replicator import Replicator, PublishStatus
from .watcher import RoomWatcher, project_room_state, waiting_view

__all__ = [
    "RoomState",
    "generate_room_code",
    "normalize_room_code",
    "is_valid_room_code",
    "is_valid_host_identity",
    "fingerprint",
    "Ledger",
    "InMemoryLedger",
    "Replicator",
    "PublishStatus",
    "RoomWatcher",
    "project_room_state",
    "waiting_view",
]
