"""
Room Watcher - Read-only mirror of a hosted room.

A watcher polls the ledger for the host's latest RoomState on a fixed
interval and projects it into a display-only GameState. It never builds a
state machine and never writes.

Staleness rules:
- Each tick starts an independent read; a slow read does not delay the next
  tick and reads are never queued behind each other
- A read that completes after stop() is discarded
- A record older (by timestamp) than the one already held is discarded
- A missing, unreadable or undecodable record means "no data yet": the last
  good record is kept, or the neutral waiting view is shown
"""

from __future__ import annotations
from typing import Callable
import asyncio
import logging

from ..engine_core.state import GameState, GameStatus, PlayerState
from ..exceptions import ReplicationError
from .ledger import Ledger
from .records import RoomState

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0


def project_room_state(room_state: RoomState) -> GameState:
    """
    Rebuild a read-only GameState from a replicated record.

    has_secured, revealed cards and winner are not on the wire and stay at
    their defaults.
    """
    players = (
        PlayerState(
            player_id=1,
            name="Player 1",
            round_score=room_state.player1_round_score,
            total_score=room_state.player1_total_score,
            is_active=room_state.active_player_id == 1,
        ),
        PlayerState(
            player_id=2,
            name="Player 2",
            round_score=room_state.player2_round_score,
            total_score=room_state.player2_total_score,
            is_active=room_state.active_player_id == 2,
        ),
    )
    return GameState(
        players=players,
        current_round=room_state.current_round,
        total_rounds=room_state.total_rounds,
        game_status=room_state.game_status,
    )


def waiting_view(total_rounds: int = 5) -> GameState:
    """Neutral view shown before any record has been read."""
    return GameState(total_rounds=total_rounds, game_status=GameStatus.WAITING)


class RoomWatcher:
    """
    Polls one (room code, host identity) key.

    Usage:
        watcher = RoomWatcher(ledger, "DIAMOND-1234", "0xabc...")
        watcher.start()
        ...
        watcher.view        # projected GameState
        watcher.stop()
    """

    def __init__(
        self,
        ledger: Ledger,
        room_code: str,
        host_identity: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        on_update: Callable[[RoomState], None] | None = None,
    ):
        self.ledger = ledger
        self.room_code = room_code
        self.host_identity = host_identity
        self.poll_interval = poll_interval
        self.on_update = on_update

        self.room_state: RoomState | None = None
        self.last_error: str | None = None
        self.reads_started = 0
        self.reads_discarded = 0

        self._generation = 0
        self._stopped = False
        self._loop_task: asyncio.Task | None = None
        self._reads: set[asyncio.Task] = set()

    @property
    def is_watching(self) -> bool:
        return (
            bool(self.room_code)
            and bool(self.host_identity)
            and self._loop_task is not None
            and not self._loop_task.done()
        )

    @property
    def view(self) -> GameState:
        if self.room_state is None:
            return waiting_view()
        return project_room_state(self.room_state)

    def start(self):
        """Begin polling on the running event loop. No-op if already polling."""
        if self.is_watching or not (self.room_code and self.host_identity):
            return
        self._generation += 1
        self._loop_task = asyncio.get_running_loop().create_task(
            self._poll_loop(self._generation)
        )
        self._stopped = False
        logger.info("Watching room %s published by %s", self.room_code, self.host_identity)

    def stop(self):
        """Stop polling. Reads still in flight will be ignored when they land."""
        self._stopped = True
        self._generation += 1
        if self._loop_task is not None and not self._loop_task.done():
            self._loop_task.cancel()
        self._loop_task = None

    async def poll_once(self) -> RoomState | None:
        """
        Run a single read now and apply it if still relevant.

        Works before start() for one-off reads; after stop() it is a no-op
        until the watcher is started again.
        """
        if self._stopped:
            return None
        return await self._read(self._generation)

    async def wait_idle(self):
        """Wait for every read started so far to land."""
        if self._reads:
            await asyncio.gather(*list(self._reads), return_exceptions=True)

    async def _poll_loop(self, generation: int):
        loop = asyncio.get_running_loop()
        while generation == self._generation:
            task = loop.create_task(self._read(generation))
            self._reads.add(task)
            task.add_done_callback(self._reads.discard)
            await asyncio.sleep(self.poll_interval)

    async def _read(self, generation: int) -> RoomState | None:
        self.reads_started += 1
        try:
            record = await self.ledger.fetch(self.room_code, self.host_identity)
        except ReplicationError as e:
            if generation == self._generation:
                self.last_error = str(e)
            logger.warning("Read for room %s failed: %s", self.room_code, e)
            return None

        if generation != self._generation:
            self.reads_discarded += 1
            logger.debug("Discarding late read for room %s", self.room_code)
            return None
        if record is None:
            logger.debug("No data for room %s yet", self.room_code)
            return None
        if self.room_state is not None and record.timestamp < self.room_state.timestamp:
            self.reads_discarded += 1
            logger.debug("Discarding out-of-order read for room %s", self.room_code)
            return None

        self.room_state = record
        self.last_error = None
        if self.on_update:
            self.on_update(record)
        return record
