"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through Reducer.apply().

Design principles:
- Pure function: (state, action) -> new_state
- Validates before applying; a refused action returns the input state
- Round end is an internal step of hold/secure, never an action of its own
- Returns ActionResult with success/failure and round/game boundary flags
"""

from __future__ import annotations
from dataclasses import dataclass, replace
import random

from .deck import Deck
from .state import GameState, GameStatus, LastAction, WINNING_SCORE, DEFAULT_TOTAL_ROUNDS
from .action import Action, ActionType, ActionResult


def initial_state(total_rounds: int = DEFAULT_TOTAL_ROUNDS) -> GameState:
    """The pre-play state: both seats empty, player 1 to act, no deck yet."""
    return GameState(total_rounds=total_rounds, game_status=GameStatus.WAITING)


def start_game(state: GameState, rng: random.Random | None = None) -> GameState:
    """waiting -> playing with a fresh deck. Any other status is left alone."""
    if state.game_status != GameStatus.WAITING:
        return state
    return state._copy_with(deck=Deck.create(rng), game_status=GameStatus.PLAYING)


def start_new_game(
    total_rounds: int = DEFAULT_TOTAL_ROUNDS,
    rng: random.Random | None = None,
) -> GameState:
    """Full reset straight into playing, bypassing waiting."""
    return start_game(initial_state(total_rounds), rng)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    rng only feeds deck shuffles (new game and every new round).
    """
    rng: random.Random | None = None

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or the refusal reason.
        """
        validation_error = self._validate_action(state, action)
        if validation_error:
            return ActionResult.failure(state, validation_error, error_code="INVALID_ACTION")

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                state,
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )
        return handler(state, action)

    def _validate_action(self, state: GameState, action: Action) -> str | None:
        """
        Validate that an action is legal in the current state.

        Returns error message if invalid, None if valid.
        """
        if action.action_type == ActionType.NEW_GAME:
            return None

        if state.game_status == GameStatus.GAME_OVER:
            return "Game is over - start a new game"
        if state.game_status != GameStatus.PLAYING:
            return "Game not started"

        player = state.active_player
        if player is None:
            return "No active player"
        if player.has_secured:
            return f"{player.name} has already secured this round"

        if action.action_type == ActionType.HOLD and state.deck.is_empty:
            return "Deck is empty"

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.HOLD: self._handle_hold,
            ActionType.SECURE: self._handle_secure,
            ActionType.NEW_GAME: self._handle_new_game,
        }
        return handlers.get(action_type)

    def _handle_hold(self, state: GameState, action: Action) -> ActionResult:
        """Draw exactly one card for the active player."""
        card, remaining = state.deck.draw()
        player = state.active_player

        if card.is_bust:
            busted = replace(player, round_score=0, has_secured=True)
            new_state = state.with_player(busted)._copy_with(
                deck=remaining,
                revealed_cards=(),
                last_action=LastAction.HOLD,
            ).with_active_switched()
            changes = [f"{player.name} drew {card.card_id} and busted, losing {player.round_score} points"]
            return self._finish_turn(new_state, changes)

        new_state = state.with_player(
            player.with_scores(round_score=player.round_score + card.value)
        )._copy_with(
            deck=remaining,
            revealed_cards=state.revealed_cards + (card,),
            last_action=LastAction.HOLD,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{player.name} drew {card.card_id} (+{card.value})"],
        )

    def _handle_secure(self, state: GameState, action: Action) -> ActionResult:
        """Bank the full round score and pass the turn."""
        player = state.active_player
        secured = replace(
            player,
            total_score=player.total_score + player.round_score,
            has_secured=True,
        )
        new_state = state.with_player(secured)._copy_with(
            revealed_cards=(),
            last_action=LastAction.SECURE,
        ).with_active_switched()
        changes = [f"{player.name} secured {player.round_score} points"]
        return self._finish_turn(new_state, changes)

    def _handle_new_game(self, state: GameState, action: Action) -> ActionResult:
        total_rounds = action.params.get("total_rounds") or state.total_rounds
        return ActionResult.success_with_state(
            start_new_game(total_rounds, self.rng),
            changes=["New game started"],
        )

    def _finish_turn(self, state: GameState, changes: list[str]) -> ActionResult:
        """Run round end once both seats are done for the round."""
        if not state.all_secured:
            return ActionResult.success_with_state(state, changes=changes)

        new_state = self._handle_round_end(state)
        if new_state.is_over:
            changes.append(f"Game over - {new_state.winner.name} wins")
        else:
            changes.append(f"Round {new_state.current_round} begins")
        return ActionResult.success_with_state(
            new_state,
            changes=changes,
            round_ended=True,
            game_over=new_state.is_over,
        )

    def _handle_round_end(self, state: GameState) -> GameState:
        """
        Close out a round.

        The game ends when a seat reaches WINNING_SCORE or the last round is
        done. Without a threshold winner the higher total wins and equal
        totals go to player 1.
        """
        p1, p2 = state.players
        threshold_winner = next(
            (p for p in state.players if p.total_score >= WINNING_SCORE),
            None,
        )

        if threshold_winner is not None or state.current_round >= state.total_rounds:
            winner = threshold_winner or (p1 if p1.total_score >= p2.total_score else p2)
            return state._copy_with(game_status=GameStatus.GAME_OVER, winner=winner)

        players = tuple(
            replace(p, round_score=0, has_secured=False, is_active=p.player_id == 1)
            for p in state.players
        )
        return state._copy_with(
            players=players,
            current_round=state.current_round + 1,
            deck=Deck.create(self.rng),
            revealed_cards=(),
            game_status=GameStatus.PLAYING,
        )


def apply_action(
    state: GameState,
    action: Action,
    rng: random.Random | None = None,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(rng=rng)
    return reducer.apply(state, action)


def hold(state: GameState, rng: random.Random | None = None) -> GameState:
    """Draw for the active player; a refused hold returns state unchanged."""
    return apply_action(state, Action.hold(), rng).new_state


def secure(state: GameState, rng: random.Random | None = None) -> GameState:
    """Secure for the active player; a refused secure returns state unchanged."""
    return apply_action(state, Action.secure(), rng).new_state
