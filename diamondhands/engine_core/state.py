"""
Game State - Immutable state container for a two-player Diamond Hands game.

Design principles:
- Immutable-friendly: all mutations return new state
- Serializable: snapshots can be projected to a replicated RoomState
- Two seats only: players are a fixed (player 1, player 2) pair
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum

from .deck import Card, Deck


WINNING_SCORE = 100
DEFAULT_TOTAL_ROUNDS = 5


class GameStatus(Enum):
    """High-level game status. Values are the wire spelling."""
    WAITING = "waiting"
    PLAYING = "playing"
    GAME_OVER = "gameOver"


class LastAction(Enum):
    """Most recent player action."""
    HOLD = "hold"
    SECURE = "secure"


@dataclass(frozen=True)
class PlayerState:
    """
    State for one seat.

    has_secured means "no further action this round": it is set both by a
    voluntary secure and by a bust.
    """
    player_id: int
    name: str
    round_score: int = 0
    total_score: int = 0
    is_active: bool = False
    has_secured: bool = False

    @classmethod
    def initial(cls, player_id: int) -> PlayerState:
        return cls(
            player_id=player_id,
            name=f"Player {player_id}",
            is_active=player_id == 1,
        )

    def with_scores(
        self,
        round_score: int | None = None,
        total_score: int | None = None,
    ) -> PlayerState:
        """Return new player with updated scores."""
        return replace(
            self,
            round_score=self.round_score if round_score is None else round_score,
            total_score=self.total_score if total_score is None else total_score,
        )


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state the host operates on.
    All state changes go through the reducer.
    """
    players: tuple[PlayerState, PlayerState] = field(
        default_factory=lambda: (PlayerState.initial(1), PlayerState.initial(2))
    )
    current_round: int = 1
    total_rounds: int = DEFAULT_TOTAL_ROUNDS
    deck: Deck = field(default_factory=Deck)
    revealed_cards: tuple[Card, ...] = ()
    game_status: GameStatus = GameStatus.WAITING
    winner: PlayerState | None = None
    last_action: LastAction | None = None

    @property
    def active_index(self) -> int | None:
        """Seat index (0 or 1) of the active player, None if nobody is active."""
        for idx, player in enumerate(self.players):
            if player.is_active:
                return idx
        return None

    @property
    def active_player(self) -> PlayerState | None:
        idx = self.active_index
        return None if idx is None else self.players[idx]

    @property
    def inactive_player(self) -> PlayerState | None:
        idx = self.active_index
        return None if idx is None else self.players[1 - idx]

    @property
    def is_playing(self) -> bool:
        return self.game_status == GameStatus.PLAYING

    @property
    def is_over(self) -> bool:
        return self.game_status == GameStatus.GAME_OVER

    @property
    def all_secured(self) -> bool:
        return all(p.has_secured for p in self.players)

    def get_player(self, player_id: int) -> PlayerState | None:
        """Get player by seat ID (1 or 2)."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def with_player(self, player: PlayerState) -> GameState:
        """Return new state with updated player."""
        new_players = tuple(
            player if p.player_id == player.player_id else p
            for p in self.players
        )
        return self._copy_with(players=new_players)

    def with_active_switched(self) -> GameState:
        """Return new state with the turn passed to the other seat."""
        p1, p2 = self.players
        return self._copy_with(players=(
            replace(p1, is_active=not p1.is_active),
            replace(p2, is_active=not p2.is_active),
        ))

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return GameState(
            players=kwargs.get("players", self.players),
            current_round=kwargs.get("current_round", self.current_round),
            total_rounds=kwargs.get("total_rounds", self.total_rounds),
            deck=kwargs.get("deck", self.deck),
            revealed_cards=kwargs.get("revealed_cards", self.revealed_cards),
            game_status=kwargs.get("game_status", self.game_status),
            winner=kwargs.get("winner", self.winner),
            last_action=kwargs.get("last_action", self.last_action),
        )
