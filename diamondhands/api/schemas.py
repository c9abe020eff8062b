"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between clients and the server.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- INVALID_ROOM_CODE: Room code is not of the form DIAMOND-####
- INVALID_HOST_IDENTITY: Host identity is not 0x + 40 hex characters
- NOT_HOST: A watcher (or a participant with no room) tried to play
- INVALID_ACTION: The game refused the action (wrong status, already secured)
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ParticipantRole(str, Enum):
    """Role of a session in its room."""
    NONE = "none"
    HOST = "host"
    WATCHER = "watcher"


class GameStatus(str, Enum):
    """Game status values, wire spelling."""
    WAITING = "waiting"
    PLAYING = "playing"
    GAME_OVER = "gameOver"


class PublishStatus(str, Enum):
    """Status of the host's last publish."""
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_ROOM_CODE = "INVALID_ROOM_CODE"
    INVALID_HOST_IDENTITY = "INVALID_HOST_IDENTITY"
    NOT_HOST = "NOT_HOST"
    NOT_IN_ROOM = "NOT_IN_ROOM"
    INVALID_ACTION = "INVALID_ACTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """A face-up card on the table."""
    card_id: str
    card_type: str = Field(description="tier1, tier2, tier3, bust")
    value: int

    model_config = {"from_attributes": True}


class PlayerInfo(BaseModel):
    """Player information for display."""
    player_id: int = Field(ge=1, le=2)
    name: str
    round_score: int = 0
    total_score: int = 0
    is_active: bool = False
    has_secured: bool = False

    model_config = {"from_attributes": True}


class GameView(BaseModel):
    """
    Game state as this participant sees it.

    For watchers this is the projection of the replicated record:
    has_secured, revealed_cards and winner are always defaults.
    """
    game_status: GameStatus
    current_round: int
    total_rounds: int
    players: list[PlayerInfo] = Field(default_factory=list)
    active_player_id: Optional[int] = None
    revealed_cards: list[CardInfo] = Field(default_factory=list)
    cards_left: int = 0
    winner: Optional[PlayerInfo] = None
    last_action: Optional[str] = Field(None, description="hold, secure")


class ReplicationInfo(BaseModel):
    """Replication health for this participant."""
    publish_status: Optional[PublishStatus] = Field(None, description="Host only")
    last_error: Optional[str] = None
    last_published_at: Optional[int] = Field(None, description="Epoch millis of the record shown to watchers")
    is_watching: bool = False


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Open a participant session."""
    identity: Optional[str] = Field(
        None, description="Participant's ledger identity (0x + 40 hex); required to host"
    )


class CreateRoomRequest(BaseModel):
    """Host a new room."""
    total_rounds: Optional[int] = Field(None, ge=1, le=255)


class JoinRoomRequest(BaseModel):
    """Watch an existing room."""
    room_code: str = Field(..., description="DIAMOND-####, case-insensitive")
    host_identity: str = Field(..., description="Identity of the room's host")


class NewGameRequest(BaseModel):
    total_rounds: Optional[int] = Field(None, ge=1, le=255)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    role: ParticipantRole
    identity: Optional[str] = None
    room_code: Optional[str] = None
    host_identity: Optional[str] = None
    game: Optional[GameView] = None
    replication: ReplicationInfo = Field(default_factory=ReplicationInfo)
    created_at: float = 0.0
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Response after hold / secure / new game."""
    session_id: str
    success: bool
    changes: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    round_ended: bool = False
    game_over: bool = False
    publish_scheduled: bool = False
    game: GameView
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
