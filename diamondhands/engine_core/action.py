"""
Action System - Actions and results.

Actions represent:
1. Player actions (hold, secure)
2. System actions (new game)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of actions in the system."""
    # Player actions
    HOLD = "hold"
    SECURE = "secure"

    # System actions
    NEW_GAME = "new_game"


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    Actions carry no player id: they always apply to the active seat.
    """
    action_type: ActionType
    params: dict[str, Any] = field(default_factory=dict)
    timestamp: float | None = None

    @classmethod
    def hold(cls) -> Action:
        """Factory for hold (draw one card) action."""
        return cls(action_type=ActionType.HOLD)

    @classmethod
    def secure(cls) -> Action:
        """Factory for secure (bank the round score) action."""
        return cls(action_type=ActionType.SECURE)

    @classmethod
    def new_game(cls, total_rounds: int | None = None) -> Action:
        """Factory for new game action."""
        return cls(
            action_type=ActionType.NEW_GAME,
            params={"total_rounds": total_rounds},
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (the untouched input state when the action was refused)
    - Errors (if refused)
    - Round/game boundary flags, used to trigger an immediate publish
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    # For presentation
    state_changes: list[str] = field(default_factory=list)

    # Boundary flags
    round_ended: bool = False
    game_over: bool = False

    @property
    def is_terminal_transition(self) -> bool:
        return self.round_ended or self.game_over

    @classmethod
    def failure(
        cls,
        state: Any,
        error: str,
        error_code: str | None = None,
    ) -> ActionResult:
        """Create a refusal result; the state is passed through unchanged."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        round_ended: bool = False,
        game_over: bool = False,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            round_ended=round_ended,
            game_over=game_over,
        )
