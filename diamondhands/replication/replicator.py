"""
Replicator - Decides which host snapshots reach the ledger.

The host's state machine produces a stream of GameState snapshots. The
replicator publishes a subset of them:

1. Snapshots before play starts (waiting) are never published
2. A snapshot whose fingerprint equals the last published one is dropped
3. Everything else is debounced: a burst of changes becomes one publish
   after a quiet window, written from the latest snapshot at fire time
4. Round end / game over also publish immediately, through the same
   dedup check, so watchers see them even under heavy churn

CONCURRENCY:
- At most one publish in flight; a publish triggered meanwhile is skipped
- The debounce timer is single-shot and re-armed on every qualifying change
- A fired timer never cancels an in-flight write, and writes are never
  rolled back: the ledger converges to the last successful write
- Gameplay never awaits any of this; on_state_change only schedules tasks

FAILURES:
- A failed publish leaves the fingerprint untouched; the next state change
  (or the next debounce) is the retry. There is no retry loop.
- A snapshot skipped while the failed write was in flight is still
  scheduled, so a terminal state is never lost behind a failure
"""

from __future__ import annotations
from enum import Enum
from typing import Callable
import asyncio
import logging

from ..engine_core.state import GameState, GameStatus
from .fingerprint import fingerprint
from .ledger import Ledger
from .records import RoomState

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.5


class PublishStatus(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class Replicator:
    """
    Per-room publisher. Created with the room, closed with the room.

    Usage:
        replicator = Replicator(ledger, "DIAMOND-1234")
        replicator.on_state_change(state)                  # debounced
        replicator.on_state_change(state, immediate=True)  # round end
        await replicator.flush()
    """

    def __init__(
        self,
        ledger: Ledger | None,
        room_code: str | None,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        on_publish: Callable[[RoomState, str], None] | None = None,
    ):
        self.ledger = ledger
        self.room_code = room_code
        self.debounce = debounce
        self.on_publish = on_publish

        self.status = PublishStatus.IDLE
        self.last_error: str | None = None
        self.last_write_handle: str | None = None
        self.publish_attempts = 0

        self._last_fingerprint: str | None = None
        self._latest: GameState | None = None
        self._pending: asyncio.Task | None = None
        self._in_flight = False
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def last_published_fingerprint(self) -> str | None:
        return self._last_fingerprint

    @property
    def can_publish(self) -> bool:
        """Whether there is a publish target at all."""
        return (
            not self._closed
            and bool(self.room_code)
            and self.ledger is not None
            and self.ledger.can_write
        )

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def has_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def on_state_change(self, state: GameState, immediate: bool = False) -> bool:
        """
        Feed a new host snapshot.

        Returns True if a publish was scheduled.
        """
        if state.game_status == GameStatus.WAITING or not self.can_publish:
            return False

        self._latest = state
        fp = fingerprint(state)
        if fp == self._last_fingerprint:
            self._cancel_pending()
            logger.debug("[%s] State unchanged, skipping publish", self.room_code)
            return False

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("[%s] No running event loop, replication skipped", self.room_code)
            return False

        self._arm_debounce(loop)
        if immediate:
            self._spawn(loop, self._publish(state))
        return True

    async def flush(self) -> bool:
        """
        Publish the latest snapshot now instead of waiting out the debounce.

        Waits for outstanding publishes first. Returns True if this call
        wrote a record.
        """
        self._cancel_pending()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        if self._latest is None or not self.can_publish:
            return False
        return await self._publish(self._latest)

    def reset(self):
        """Forget what was published (new game on the same room)."""
        self._cancel_pending()
        self._last_fingerprint = None
        self._latest = None
        self.status = PublishStatus.IDLE
        self.last_error = None

    def close(self):
        """Tear down with the room. In-flight writes finish but nothing new starts."""
        self._closed = True
        self._cancel_pending()
        self._latest = None

    def _arm_debounce(self, loop: asyncio.AbstractEventLoop):
        self._cancel_pending()
        self._pending = self._spawn(loop, self._debounced())

    def _cancel_pending(self):
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _spawn(self, loop: asyncio.AbstractEventLoop, coro) -> asyncio.Task:
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _debounced(self):
        await asyncio.sleep(self.debounce)
        # Past this point the timer can no longer be cancelled by a re-arm.
        if self._pending is asyncio.current_task():
            self._pending = None
        if self._latest is not None:
            await self._publish(self._latest)

    async def _publish(self, state: GameState) -> bool:
        fp = fingerprint(state)
        if fp == self._last_fingerprint:
            logger.debug("[%s] State changed back during debounce, skipping", self.room_code)
            return False
        if self._in_flight:
            logger.debug("[%s] Already publishing, skipping", self.room_code)
            return False
        if not self.can_publish:
            return False

        self._in_flight = True
        self.status = PublishStatus.PENDING
        self.publish_attempts += 1
        try:
            record = RoomState.from_game_state(state, self.room_code)
            handle = await self.ledger.publish(self.room_code, record)
        except Exception as e:
            self.status = PublishStatus.ERROR
            self.last_error = str(e) or type(e).__name__
            logger.error("[%s] Failed to publish state update: %s", self.room_code, e, exc_info=True)
            self._follow_up(fp)
            return False
        finally:
            self._in_flight = False

        self._last_fingerprint = fp
        self.status = PublishStatus.SUCCESS
        self.last_error = None
        self.last_write_handle = handle
        logger.info(
            "[%s] Published round %s (%s), handle=%s",
            self.room_code, record.current_round, record.game_status.value, handle,
        )
        self._follow_up(fp)
        if self.on_publish:
            try:
                self.on_publish(record, handle)
            except Exception:
                logger.exception("[%s] on_publish callback failed", self.room_code)
        return True

    def _follow_up(self, attempted: str):
        """
        Re-arm the timer if a newer snapshot was skipped while we were writing.

        attempted is the fingerprint just written (or just failed). Only a
        snapshot different from it is scheduled, so a failure never loops.
        """
        if self._latest is None or self.has_pending or not self.can_publish:
            return
        latest = fingerprint(self._latest)
        if latest != attempted and latest != self._last_fingerprint:
            self._arm_debounce(asyncio.get_running_loop())
