"""
Host Game - The authoritative game loop on the hosting participant.

The loop:
1. Player presses hold or secure
2. Reducer produces the next state (or refuses, leaving state as is)
3. The new state is handed to the replicator
4. Round end / game over additionally request an immediate publish

Gameplay never waits on the ledger: steps 3 and 4 only schedule work.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from ..engine_core.state import GameState, DEFAULT_TOTAL_ROUNDS
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer, initial_state, start_game
from ..replication.replicator import Replicator

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    """
    Result of one player action on the host.

    Contains the state after the action, what changed, and whether a
    publish was scheduled for it.
    """
    success: bool
    state: GameState
    changes: list[str] = field(default_factory=list)
    error: str | None = None
    error_code: str | None = None
    round_ended: bool = False
    game_over: bool = False
    publish_scheduled: bool = False


class HostGame:
    """
    Owns the single authoritative GameState for a room.

    Usage:
        game = HostGame(replicator=Replicator(ledger, code))
        result = game.hold()
        if not result.success:
            show(result.error)
    """

    def __init__(
        self,
        replicator: Replicator | None = None,
        total_rounds: int = DEFAULT_TOTAL_ROUNDS,
        rng: random.Random | None = None,
    ):
        self.replicator = replicator
        self.reducer = Reducer(rng=rng)
        # Created waiting, then straight into play.
        self.state = start_game(initial_state(total_rounds), rng)
        self._notify(self.state)

    def hold(self) -> TurnResult:
        return self._apply(Action.hold())

    def secure(self) -> TurnResult:
        return self._apply(Action.secure())

    def new_game(self, total_rounds: int | None = None) -> TurnResult:
        """Replace the whole game. The replicator forgets the old one."""
        if self.replicator:
            self.replicator.reset()
        return self._apply(Action.new_game(total_rounds))

    def close(self):
        if self.replicator:
            self.replicator.close()

    def _apply(self, action: Action) -> TurnResult:
        result: ActionResult = self.reducer.apply(self.state, action)
        if not result.success:
            logger.debug("Refused %s: %s", action.action_type.value, result.error)
            return TurnResult(
                success=False,
                state=self.state,
                error=result.error,
                error_code=result.error_code,
            )

        self.state = result.new_state
        for change in result.state_changes:
            logger.info(change)
        scheduled = self._notify(self.state, immediate=result.is_terminal_transition)
        return TurnResult(
            success=True,
            state=self.state,
            changes=result.state_changes,
            round_ended=result.round_ended,
            game_over=result.game_over,
            publish_scheduled=scheduled,
        )

    def _notify(self, state: GameState, immediate: bool = False) -> bool:
        if not self.replicator:
            return False
        return self.replicator.on_state_change(state, immediate=immediate)
