"""
Pytest fixtures for Diamond Hands tests.
"""

import random
from dataclasses import replace

import pytest

from ..engine_core.deck import Card, CardType, CARD_VALUES, Deck
from ..engine_core.state import GameState, GameStatus, PlayerState
from ..replication.ledger import InMemoryLedger

HOST_ID = "0x" + "ab" * 20
OTHER_HOST_ID = "0x" + "cd" * 20


def deck_of(*card_types: CardType) -> Deck:
    """A stacked deck, drawn in the order given."""
    return Deck(cards=tuple(
        Card(card_id=f"{t.value}-{i}", card_type=t, value=CARD_VALUES[t])
        for i, t in enumerate(card_types)
    ))


def make_state(
    p1: dict | None = None,
    p2: dict | None = None,
    active: int = 1,
    current_round: int = 1,
    total_rounds: int = 5,
    deck: Deck | None = None,
    status: GameStatus = GameStatus.PLAYING,
) -> GameState:
    """Build a playing state with chosen player fields."""
    players = (
        replace(PlayerState.initial(1), is_active=active == 1, **(p1 or {})),
        replace(PlayerState.initial(2), is_active=active == 2, **(p2 or {})),
    )
    return GameState(
        players=players,
        current_round=current_round,
        total_rounds=total_rounds,
        deck=deck if deck is not None else deck_of(CardType.TIER1, CardType.TIER2, CardType.TIER3),
        game_status=status,
    )


@pytest.fixture
def rng() -> random.Random:
    """Seeded RNG so shuffles are repeatable."""
    return random.Random(1234)


@pytest.fixture
def playing_state() -> GameState:
    """Round 1 of 5, player 1 to act, stacked non-bust deck."""
    return make_state()


@pytest.fixture
def store() -> InMemoryLedger:
    """Shared in-memory ledger store with no write credential."""
    return InMemoryLedger()


@pytest.fixture
def host_ledger(store) -> InMemoryLedger:
    """Client writing as HOST_ID over the shared store."""
    return store.for_identity(HOST_ID)
