"""
Deck - The shuffled, consumable card sequence used each round.

A deck is a value: drawing returns the drawn card together with the
remaining deck and never touches the deck it was called on.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, replace
from enum import Enum
import random


class CardType(Enum):
    """Card types, lowest value first. BUST ends the drawer's turn."""
    TIER1 = "tier1"
    TIER2 = "tier2"
    TIER3 = "tier3"
    BUST = "bust"


CARD_VALUES: dict[CardType, int] = {
    CardType.TIER1: 5,
    CardType.TIER2: 10,
    CardType.TIER3: 15,
    CardType.BUST: 0,
}

DECK_COMPOSITION: dict[CardType, int] = {
    CardType.TIER1: 8,
    CardType.TIER2: 6,
    CardType.TIER3: 4,
    CardType.BUST: 4,
}


@dataclass(frozen=True)
class Card:
    """
    A card instance.

    card_id is unique within a deck ("tier1-0", "bust-3", ...).
    """
    card_id: str
    card_type: CardType
    value: int
    revealed: bool = False

    @property
    def is_bust(self) -> bool:
        return self.card_type == CardType.BUST

    def reveal(self) -> Card:
        return replace(self, revealed=True)


def shuffle_cards(cards: list[Card], rng: random.Random | None = None) -> list[Card]:
    """Fisher-Yates shuffle into a new list."""
    rng = rng or random.SystemRandom()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


@dataclass(frozen=True)
class Deck:
    """An ordered run of face-down cards; the head is drawn first."""
    cards: tuple[Card, ...] = ()

    @classmethod
    def create(cls, rng: random.Random | None = None) -> Deck:
        """Build the fixed composition and shuffle it."""
        cards = [
            Card(
                card_id=f"{card_type.value}-{i}",
                card_type=card_type,
                value=CARD_VALUES[card_type],
            )
            for card_type, count in DECK_COMPOSITION.items()
            for i in range(count)
        ]
        return cls(cards=tuple(shuffle_cards(cards, rng)))

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def is_empty(self) -> bool:
        return len(self.cards) == 0

    def draw(self) -> tuple[Card | None, Deck]:
        """Return (revealed head card, remaining deck), or (None, self) when empty."""
        if not self.cards:
            return None, self
        return self.cards[0].reveal(), Deck(cards=self.cards[1:])

    def composition(self) -> dict[CardType, int]:
        """Count of cards per type."""
        counts = Counter(card.card_type for card in self.cards)
        return {card_type: counts.get(card_type, 0) for card_type in CardType}
