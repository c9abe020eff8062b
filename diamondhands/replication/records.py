"""
Ledger Records - The wire contract between host and watchers.

A RoomState is the reduced, lossy view of a GameState that the host
publishes. It deliberately leaves out has_secured, revealed cards and the
winner; watchers only ever see scores, turn and status.

Wire fields (camelCase, must round-trip):
    roomCode            string
    currentRound        uint8
    totalRounds         uint8
    player1RoundScore   uint16
    player1TotalScore   uint16
    player2RoundScore   uint16
    player2TotalScore   uint16
    activePlayerId      1 | 2
    gameStatus          "waiting" | "playing" | "gameOver"
    timestamp           uint64 epoch millis
"""

from __future__ import annotations
from typing import Any, Literal
import random
import re
import time

from pydantic import BaseModel, Field, ValidationError

from ..engine_core.state import GameState, GameStatus
from ..exceptions import RecordDecodeError


ROOM_CODE_PREFIX = "DIAMOND"
ROOM_CODE_PATTERN = re.compile(rf"^{ROOM_CODE_PREFIX}-[0-9]{{4}}$")
HOST_IDENTITY_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
HOST_IDENTITY_LENGTH = 42

UINT8_MAX = 2**8 - 1
UINT16_MAX = 2**16 - 1
UINT64_MAX = 2**64 - 1


def generate_room_code(rng: random.Random | None = None) -> str:
    """Mint a human-typable room code, e.g. DIAMOND-4821."""
    rng = rng or random.SystemRandom()
    return f"{ROOM_CODE_PREFIX}-{rng.randint(1000, 9999)}"


def normalize_room_code(code: str) -> str:
    return code.strip().upper()


def is_valid_room_code(code: str) -> bool:
    return bool(ROOM_CODE_PATTERN.match(normalize_room_code(code)))


def is_valid_host_identity(identity: str | None) -> bool:
    """0x followed by 40 hex characters."""
    if not isinstance(identity, str):
        return False
    return len(identity) == HOST_IDENTITY_LENGTH and bool(HOST_IDENTITY_PATTERN.match(identity))


def now_millis() -> int:
    return int(time.time() * 1000)


class RoomState(BaseModel):
    """One replicated snapshot of a room."""
    room_code: str = Field(alias="roomCode", min_length=1)
    current_round: int = Field(alias="currentRound", ge=0, le=UINT8_MAX)
    total_rounds: int = Field(alias="totalRounds", ge=0, le=UINT8_MAX)
    player1_round_score: int = Field(alias="player1RoundScore", ge=0, le=UINT16_MAX)
    player1_total_score: int = Field(alias="player1TotalScore", ge=0, le=UINT16_MAX)
    player2_round_score: int = Field(alias="player2RoundScore", ge=0, le=UINT16_MAX)
    player2_total_score: int = Field(alias="player2TotalScore", ge=0, le=UINT16_MAX)
    active_player_id: Literal[1, 2] = Field(alias="activePlayerId")
    game_status: GameStatus = Field(alias="gameStatus")
    timestamp: int = Field(ge=0, le=UINT64_MAX)

    model_config = {"populate_by_name": True, "frozen": True, "extra": "ignore"}

    @classmethod
    def from_game_state(
        cls,
        state: GameState,
        room_code: str,
        timestamp: int | None = None,
    ) -> RoomState:
        """Project a host GameState down to the replicated subset."""
        p1, p2 = state.players
        active = state.active_player
        return cls(
            room_code=room_code,
            current_round=state.current_round,
            total_rounds=state.total_rounds,
            player1_round_score=p1.round_score,
            player1_total_score=p1.total_score,
            player2_round_score=p2.round_score,
            player2_total_score=p2.total_score,
            active_player_id=active.player_id if active else 1,
            game_status=state.game_status,
            timestamp=now_millis() if timestamp is None else timestamp,
        )

    def encode(self) -> dict[str, Any]:
        """Wire form: camelCase keys, status as its string value."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def decode(cls, raw: Any) -> RoomState:
        """
        Parse a wire record.

        Raises RecordDecodeError on any missing field, wrong type or value
        out of range. There is no partial decode.
        """
        if not isinstance(raw, dict):
            raise RecordDecodeError(
                f"Expected a mapping, got {type(raw).__name__}", raw=raw,
            )
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise RecordDecodeError(
                f"Invalid room record: {e.error_count()} error(s)", raw=raw,
            ) from e
