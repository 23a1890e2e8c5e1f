"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the engine.
A move request carries {from, to, path, cardLabel}; the answer is either
the updated game state or an ErrorResponse naming the rule that failed.

Error codes are the engine's (see engine_core.action.ErrorCode) plus:
- SESSION_NOT_FOUND: Game does not exist or has been ended
- VALIDATION_ERROR: Request could not be parsed
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field, ConfigDict


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    GAME_OVER = "game_over"


class ServiceErrorCode(str, Enum):
    """Error codes raised by the service rather than the engine."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class PositionInfo(BaseModel):
    """A board coordinate. Range is checked by the engine."""
    row: int
    col: int


class CellInfo(BaseModel):
    """One card on the board."""
    row: int
    col: int
    label: str = Field(description="A, 2, 3, 4, red-joker or black-joker")
    collapsed: bool = False
    occupant_id: Optional[str] = None


class PlayerInfo(BaseModel):
    """Player information for display."""
    player_id: str
    color: str
    starting_card: str
    position: Optional[PositionInfo] = None
    active: bool = True
    is_current_turn: bool = False


class MoveRecordInfo(BaseModel):
    """An executed move."""
    player_id: str
    from_position: PositionInfo
    to_position: PositionInfo
    path: list[PositionInfo]
    distance: int
    card_label: str
    timestamp: float


class JokerInfo(BaseModel):
    """An in-progress joker move."""
    player_id: str
    starting_position: PositionInfo
    current_position: PositionInfo
    path: list[PositionInfo]
    remaining_distance: int
    spaces_moved: int
    phase: str = Field(description="active, can_continue or must_complete")
    can_complete: bool = False
    valid_steps: list[PositionInfo] = Field(default_factory=list)


class PlayerStatisticsInfo(BaseModel):
    player_id: str
    turns: int
    total_distance: int
    joker_moves: int
    average_turn_seconds: Optional[float] = None


class GameStatisticsInfo(BaseModel):
    """Totals derived from the move history and the board."""
    total_moves: int
    collapsed_cards: int
    collapsed_by_label: dict[str, int] = Field(default_factory=dict)
    collapsed_by_player: dict[str, int] = Field(default_factory=dict)
    duration_seconds: Optional[float] = None
    winner: Optional[str] = None
    players: dict[str, PlayerStatisticsInfo] = Field(default_factory=dict)


# =============================================================================
# Requests
# =============================================================================

class CreateGameRequest(BaseModel):
    """Start a new game. deck and layout skip the shuffle."""
    seed: Optional[int] = Field(None, description="Seed for a reproducible shuffle")
    layout: Optional[str] = Field(None, description="Named fixed layout")
    deck: Optional[list[str]] = Field(None, description="16 labels, row-major")


class MoveRequest(BaseModel):
    """A complete move."""
    model_config = ConfigDict(populate_by_name=True)

    player_id: str
    from_position: PositionInfo = Field(..., alias="from")
    to: PositionInfo
    path: list[PositionInfo]
    card_label: str = Field(..., alias="cardLabel")


class PlayerActionRequest(BaseModel):
    """Joker start, complete and cancel only need the player."""
    player_id: str


class JokerStepRequest(BaseModel):
    player_id: str
    target: PositionInfo


# =============================================================================
# Responses
# =============================================================================

class GameStateResponse(BaseModel):
    """Full game state for clients."""
    game_id: str
    status: SessionStatus
    phase: str
    board: list[list[CellInfo]]
    players: list[PlayerInfo]
    current_player_id: Optional[str] = None
    move_history: list[MoveRecordInfo] = Field(default_factory=list)
    joker: Optional[JokerInfo] = None
    winner: Optional[str] = None
    legal_destinations: list[PositionInfo] = Field(
        default_factory=list, description="End cells reachable by the player to move"
    )
    statistics: Optional[GameStatisticsInfo] = None
    api_version: str = "v1"


class MoveResponse(BaseModel):
    """Response after a successful action."""
    success: bool = True
    game: GameStateResponse
    move: Optional[MoveRecordInfo] = None
    changes: list[str] = Field(default_factory=list)
    game_over: bool = False
    winner: Optional[str] = None


class LegalMovesResponse(BaseModel):
    """Every legal path for one player."""
    game_id: str
    player_id: str
    paths: list[list[PositionInfo]]
    destinations: list[PositionInfo]
    count: int


class SnapshotResponse(BaseModel):
    """Plain snapshot of a game, importable via POST /games/import."""
    game_id: str
    snapshot: dict[str, Any]
    statistics: Optional[GameStatisticsInfo] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: str
    details: Optional[dict[str, Any]] = None


class GameListResponse(BaseModel):
    """Response listing live games."""
    games: list[str]
    count: int


class EndGameResponse(BaseModel):
    """Response after ending a game."""
    success: bool
    game_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
