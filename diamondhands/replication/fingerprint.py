"""
State Fingerprint - Replication-equivalence key for GameState snapshots.

Two snapshots with the same fingerprint carry the same replicated content,
so only one of them needs to reach the ledger. Revealed cards and per-card
history are not part of it: replication carries score, turn and status only.
"""

from __future__ import annotations
import hashlib

from ..engine_core.state import GameState


def fingerprint_fields(state: GameState) -> tuple:
    """The replication-relevant subset of a GameState, in a fixed order."""
    p1, p2 = state.players
    active = state.active_player
    return (
        state.current_round,
        state.game_status.value,
        p1.round_score,
        p1.total_score,
        p2.round_score,
        p2.total_score,
        active.player_id if active else None,
        state.winner.player_id if state.winner else None,
    )


def fingerprint(state: GameState) -> str:
    """
    Deterministic digest of fingerprint_fields().

    Uses SHA-256 truncated to 16 chars.
    """
    canonical = "-".join("none" if v is None else str(v) for v in fingerprint_fields(state))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]
