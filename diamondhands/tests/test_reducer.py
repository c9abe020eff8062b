"""
Tests for the reducer (state transitions).

Tests:
- Hold / secure / bust semantics
- Turn passing and round end
- Game over and winner selection
- Refused actions leave state untouched
"""

import pytest

from ..engine_core.deck import CardType
from ..engine_core.state import GameStatus, LastAction
from ..engine_core.action import Action
from ..engine_core.reducer import (
    Reducer,
    apply_action,
    hold,
    secure,
    initial_state,
    start_game,
    start_new_game,
)
from .conftest import deck_of, make_state


class TestStart:

    def test_initial_state_is_waiting(self):
        state = initial_state(3)
        assert state.game_status == GameStatus.WAITING
        assert state.total_rounds == 3
        assert state.current_round == 1
        assert state.active_player.player_id == 1
        assert state.deck.is_empty

    def test_start_game_deals_deck(self, rng):
        state = start_game(initial_state(), rng)
        assert state.is_playing
        assert state.deck.count == 22

    def test_start_game_only_from_waiting(self, playing_state, rng):
        assert start_game(playing_state, rng) is playing_state

    def test_actions_refused_while_waiting(self):
        state = initial_state()
        result = apply_action(state, Action.hold())
        assert not result.success
        assert result.new_state is state


class TestHold:

    def test_draw_adds_value(self):
        """Fresh game, player 1 draws a tier1."""
        state = make_state(deck=deck_of(CardType.TIER1, CardType.TIER2))

        result = apply_action(state, Action.hold())

        assert result.success
        new = result.new_state
        assert new.players[0].round_score == 5
        assert new.players[0].is_active
        assert not new.players[1].is_active
        assert len(new.revealed_cards) == 1
        assert new.revealed_cards[0].revealed
        assert new.deck.count == 1
        assert new.last_action == LastAction.HOLD

    def test_hold_draws_exactly_one(self):
        state = make_state(deck=deck_of(CardType.TIER3, CardType.TIER3, CardType.TIER3))
        new = hold(state)
        assert new.deck.count == 2
        assert new.players[0].round_score == 15

    def test_input_state_untouched(self):
        state = make_state(deck=deck_of(CardType.TIER2))
        hold(state)
        assert state.players[0].round_score == 0
        assert state.deck.count == 1
        assert state.revealed_cards == ()

    def test_bust_zeroes_and_passes_turn(self):
        """Player 1 at 20 draws a bust."""
        state = make_state(p1={"round_score": 20}, deck=deck_of(CardType.BUST, CardType.TIER1))

        result = apply_action(state, Action.hold())

        assert result.success
        new = result.new_state
        assert new.players[0].round_score == 0
        assert new.players[0].has_secured
        assert new.players[0].total_score == 0
        assert new.players[1].is_active
        assert not new.players[0].is_active
        assert new.revealed_cards == ()
        assert not result.round_ended

    def test_hold_on_empty_deck_refused(self):
        state = make_state(deck=deck_of())
        result = apply_action(state, Action.hold())
        assert not result.success
        assert result.error_code == "INVALID_ACTION"
        assert result.new_state is state


class TestSecure:

    def test_secure_banks_round_score(self):
        state = make_state(p1={"round_score": 25, "total_score": 10})

        result = apply_action(state, Action.secure())

        new = result.new_state
        assert new.players[0].total_score == 35
        assert new.players[0].has_secured
        assert new.players[1].is_active
        assert new.revealed_cards == ()
        assert new.last_action == LastAction.SECURE

    def test_secure_with_zero(self):
        new = secure(make_state())
        assert new.players[0].total_score == 0
        assert new.players[0].has_secured

    def test_second_action_by_secured_player_refused(self):
        state = make_state(p1={"has_secured": True}, active=1)
        result = apply_action(state, Action.secure())
        assert not result.success
        assert "already secured" in result.error


class TestTurnInvariant:

    def test_exactly_one_active_through_a_round(self):
        state = make_state(deck=deck_of(
            CardType.TIER1, CardType.TIER2, CardType.BUST, CardType.TIER3,
        ))
        steps = [hold, hold, secure, hold, hold]
        for step in steps:
            state = step(state)
            if state.is_over:
                break
            assert sum(p.is_active for p in state.players) == 1

    def test_active_player_never_secured_mid_round(self):
        state = secure(make_state())
        assert not state.active_player.has_secured


class TestRoundEnd:

    def test_both_secured_starts_next_round(self, rng):
        state = make_state(p1={"has_secured": True, "total_score": 30}, active=2,
                           p2={"round_score": 15, "total_score": 20})

        result = Reducer(rng=rng).apply(state, Action.secure())

        assert result.success
        assert result.round_ended
        assert not result.game_over
        new = result.new_state
        assert new.current_round == 2
        assert new.is_playing
        assert new.deck.count == 22
        assert new.revealed_cards == ()
        assert new.players[0].total_score == 30
        assert new.players[1].total_score == 35
        for p in new.players:
            assert p.round_score == 0
            assert not p.has_secured
        assert new.players[0].is_active
        assert not new.players[1].is_active

    def test_bust_can_end_round(self, rng):
        state = make_state(p1={"has_secured": True}, active=2,
                           p2={"round_score": 40}, deck=deck_of(CardType.BUST))

        result = Reducer(rng=rng).apply(state, Action.hold())

        assert result.round_ended
        assert result.new_state.current_round == 2
        assert result.new_state.players[1].total_score == 0

    def test_threshold_ends_game_early(self):
        """Totals 100 and 80 in round 3 of 5: player 1 wins."""
        state = make_state(
            p1={"has_secured": True, "total_score": 100},
            p2={"total_score": 80},
            active=2,
            current_round=3,
        )

        result = apply_action(state, Action.secure())

        assert result.game_over
        assert result.round_ended
        new = result.new_state
        assert new.game_status == GameStatus.GAME_OVER
        assert new.winner.player_id == 1
        assert new.current_round == 3

    def test_threshold_reached_on_final_secure(self):
        state = make_state(
            p1={"has_secured": True, "total_score": 60},
            p2={"round_score": 45, "total_score": 60},
            active=2,
        )
        new = secure(state)
        assert new.is_over
        assert new.winner.player_id == 2

    def test_last_round_higher_total_wins(self):
        """Totals 40 and 55 after round 5 of 5: player 2 wins."""
        state = make_state(
            p1={"has_secured": True, "total_score": 40},
            p2={"total_score": 55},
            active=2,
            current_round=5,
        )

        new = secure(state)

        assert new.game_status == GameStatus.GAME_OVER
        assert new.winner.player_id == 2

    def test_equal_totals_go_to_player_one(self):
        state = make_state(
            p1={"has_secured": True, "total_score": 50},
            p2={"total_score": 50},
            active=2,
            current_round=5,
        )
        assert secure(state).winner.player_id == 1

    def test_both_over_threshold_first_seat_wins(self):
        state = make_state(
            p1={"has_secured": True, "total_score": 100},
            p2={"round_score": 50, "total_score": 90},
            active=2,
        )
        assert secure(state).winner.player_id == 1


class TestGameOver:

    @pytest.fixture
    def finished(self):
        state = make_state(
            p1={"has_secured": True, "total_score": 40},
            p2={"total_score": 55},
            active=2,
            current_round=5,
        )
        return secure(state)

    def test_hold_after_game_over_is_noop(self, finished):
        result = apply_action(finished, Action.hold())
        assert not result.success
        assert result.new_state is finished
        assert hold(finished) is finished

    def test_secure_after_game_over_is_noop(self, finished):
        assert secure(finished) is finished

    def test_new_game_resets(self, finished, rng):
        result = Reducer(rng=rng).apply(finished, Action.new_game())

        assert result.success
        new = result.new_state
        assert new.is_playing
        assert new.current_round == 1
        assert new.total_rounds == 5
        assert new.winner is None
        assert new.deck.count == 22
        assert [p.total_score for p in new.players] == [0, 0]
        assert new.active_player.player_id == 1

    def test_new_game_with_rounds(self, finished, rng):
        new = Reducer(rng=rng).apply(finished, Action.new_game(total_rounds=3)).new_state
        assert new.total_rounds == 3

    def test_start_new_game(self, rng):
        state = start_new_game(7, rng)
        assert state.is_playing
        assert state.total_rounds == 7
