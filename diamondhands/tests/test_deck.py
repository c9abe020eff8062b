"""
Tests for the deck.
"""

import random
from collections import Counter

from ..engine_core.deck import CardType, Deck, DECK_COMPOSITION, shuffle_cards
from .conftest import deck_of


class TestDeckCreation:

    def test_fixed_composition(self, rng):
        deck = Deck.create(rng)

        assert deck.count == 22
        assert deck.composition() == {
            CardType.TIER1: 8,
            CardType.TIER2: 6,
            CardType.TIER3: 4,
            CardType.BUST: 4,
        }
        assert deck.composition() == DECK_COMPOSITION

    def test_card_ids_unique(self, rng):
        deck = Deck.create(rng)
        ids = [c.card_id for c in deck.cards]
        assert len(set(ids)) == len(ids)

    def test_values_match_type(self, rng):
        values = {CardType.TIER1: 5, CardType.TIER2: 10, CardType.TIER3: 15, CardType.BUST: 0}
        for card in Deck.create(rng).cards:
            assert card.value == values[card.card_type]
            assert not card.revealed

    def test_same_seed_same_order(self):
        a = Deck.create(random.Random(7))
        b = Deck.create(random.Random(7))
        assert [c.card_id for c in a.cards] == [c.card_id for c in b.cards]

    def test_shuffle_keeps_multiset(self, rng):
        cards = list(Deck.create(rng).cards)
        shuffled = shuffle_cards(cards, rng)
        assert sorted(c.card_id for c in shuffled) == sorted(c.card_id for c in cards)


class TestDraw:

    def test_draw_takes_head(self):
        deck = deck_of(CardType.TIER3, CardType.BUST)

        card, rest = deck.draw()

        assert card.card_type == CardType.TIER3
        assert card.revealed
        assert rest.count == 1
        # Original deck untouched
        assert deck.count == 2
        assert not deck.cards[0].revealed

    def test_draw_empty(self):
        deck = Deck()
        card, rest = deck.draw()
        assert card is None
        assert rest is deck
        assert rest.is_empty

    def test_draw_whole_deck(self, rng):
        deck = Deck.create(rng)
        drawn = []
        while not deck.is_empty:
            card, deck = deck.draw()
            drawn.append(card.card_id)

        assert len(drawn) == 22
        assert len(set(drawn)) == 22

        card, rest = deck.draw()
        assert card is None
        assert rest.is_empty


class TestShuffle:

    def test_every_order_equally_likely(self):
        rng = random.Random(2024)
        runs = 60000
        counts = Counter(tuple(shuffle_cards([1, 2, 3], rng)) for _ in range(runs))

        assert len(counts) == 6
        expected = runs / 6
        for order, count in counts.items():
            assert abs(count - expected) < expected * 0.05, order

    def test_shuffle_does_not_touch_input(self, rng):
        cards = [1, 2, 3, 4]
        shuffle_cards(cards, rng)
        assert cards == [1, 2, 3, 4]
