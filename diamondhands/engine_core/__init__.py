"""
Engine Core - Deterministic game state management.

The engine is the host-side runtime that:
1. Builds and shuffles decks
2. Manages GameState
3. Applies hold/secure/new-game actions via the reducer
4. Closes rounds and decides the winner
"""

from .deck import Card, CardType, Deck, CARD_VALUES, DECK_COMPOSITION
from .state import GameState, GameStatus, LastAction, PlayerState, WINNING_SCORE, DEFAULT_TOTAL_ROUNDS
from .action import Action, ActionType, ActionResult
from .reducer import Reducer, apply_action, hold, secure, initial_state, start_game, start_new_game

__all__ = [
    "Card",
    "CardType",
    "Deck",
    "CARD_VALUES",
    "DECK_COMPOSITION",
    "GameState",
    "GameStatus",
    "LastAction",
    "PlayerState",
    "WINNING_SCORE",
    "DEFAULT_TOTAL_ROUNDS",
    "Action",
    "ActionType",
    "ActionResult",
    "Reducer",
    "apply_action",
    "hold",
    "secure",
    "initial_state",
    "start_game",
    "start_new_game",
]
