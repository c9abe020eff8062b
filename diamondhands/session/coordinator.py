"""
Room Coordinator - Decides who hosts and who watches, and wires the flow.

Roles:
- HostRole:    HostGame -> Replicator -> Ledger (sole writer for the room)
- WatcherRole: Ledger -> RoomWatcher -> read-only projected GameState

The role is decided once, in create_room/join_room. Every other call
dispatches on it instead of re-deriving host vs watcher.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union
import logging
import random

from ..engine_core.state import GameState, DEFAULT_TOTAL_ROUNDS
from ..exceptions import InvalidHostIdentity, InvalidRoomCode, NotHost, NotInRoom, RoomError
from ..replication.ledger import Ledger
from ..replication.records import (
    generate_room_code,
    is_valid_host_identity,
    is_valid_room_code,
    normalize_room_code,
)
from ..replication.replicator import DEFAULT_DEBOUNCE_SECONDS, PublishStatus, Replicator
from ..replication.watcher import DEFAULT_POLL_INTERVAL, RoomWatcher
from .host import HostGame, TurnResult

logger = logging.getLogger(__name__)


@dataclass
class HostRole:
    room_code: str
    identity: str
    game: HostGame


@dataclass
class WatcherRole:
    room_code: str
    host_identity: str
    watcher: RoomWatcher


Role = Union[HostRole, WatcherRole]


class RoomCoordinator:
    """
    One participant's room membership.

    ledger is this participant's own ledger client: if it holds a write
    credential, hosting publishes; otherwise hosting is local-only.
    """

    def __init__(
        self,
        ledger: Ledger | None = None,
        total_rounds: int = DEFAULT_TOTAL_ROUNDS,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        rng: random.Random | None = None,
    ):
        self.ledger = ledger
        self.total_rounds = total_rounds
        self.debounce = debounce
        self.poll_interval = poll_interval
        self.rng = rng
        self.role: Role | None = None

    @property
    def room_code(self) -> str | None:
        return self.role.room_code if self.role else None

    @property
    def is_host(self) -> bool:
        return isinstance(self.role, HostRole)

    @property
    def is_watcher(self) -> bool:
        return isinstance(self.role, WatcherRole)

    @property
    def host_identity(self) -> str | None:
        if isinstance(self.role, HostRole):
            return self.role.identity
        if isinstance(self.role, WatcherRole):
            return self.role.host_identity
        return None

    @property
    def view(self) -> GameState | None:
        """What this participant should display."""
        if isinstance(self.role, HostRole):
            return self.role.game.state
        if isinstance(self.role, WatcherRole):
            return self.role.watcher.view
        return None

    @property
    def publish_status(self) -> PublishStatus | None:
        if isinstance(self.role, HostRole) and self.role.game.replicator:
            return self.role.game.replicator.status
        return None

    def create_room(self, identity: str) -> str:
        """Mint a room code and become its host."""
        if not is_valid_host_identity(identity):
            raise InvalidHostIdentity(identity)

        self.leave_room()
        code = generate_room_code(self.rng)
        replicator = Replicator(self.ledger, code, debounce=self.debounce)
        game = HostGame(replicator=replicator, total_rounds=self.total_rounds, rng=self.rng)
        self.role = HostRole(room_code=code, identity=identity, game=game)
        logger.info("Created room %s hosted by %s", code, identity)
        return code

    def join_room(self, code: str, host_identity: str) -> str:
        """
        Watch a room hosted by host_identity.

        Validation happens before anything else: on failure the current
        role is kept and the ledger is not touched.
        """
        if not isinstance(code, str) or not is_valid_room_code(code):
            raise InvalidRoomCode(code)
        if not is_valid_host_identity(host_identity):
            raise InvalidHostIdentity(host_identity)
        if self.ledger is None:
            raise RoomError("No ledger configured, cannot watch rooms")

        room_code = normalize_room_code(code)
        self.leave_room()
        watcher = RoomWatcher(
            self.ledger,
            room_code,
            host_identity,
            poll_interval=self.poll_interval,
        )
        self.role = WatcherRole(room_code=room_code, host_identity=host_identity, watcher=watcher)
        try:
            watcher.start()
        except RuntimeError:
            logger.warning("No running event loop, room %s will not be polled", room_code)
        logger.info("Joined room %s as watcher of %s", room_code, host_identity)
        return room_code

    def leave_room(self):
        """Drop the current role. Safe to call when not in a room."""
        role, self.role = self.role, None
        if isinstance(role, HostRole):
            role.game.close()
            logger.info("Host left room %s", role.room_code)
        elif isinstance(role, WatcherRole):
            role.watcher.stop()
            logger.info("Watcher left room %s", role.room_code)

    def hold(self) -> TurnResult:
        return self._host_game().hold()

    def secure(self) -> TurnResult:
        return self._host_game().secure()

    def new_game(self, total_rounds: int | None = None) -> TurnResult:
        return self._host_game().new_game(total_rounds)

    def _host_game(self) -> HostGame:
        if self.role is None:
            raise NotInRoom("Not in a room")
        if not isinstance(self.role, HostRole):
            raise NotHost(f"Only the host of {self.role.room_code} can play")
        return self.role.game
