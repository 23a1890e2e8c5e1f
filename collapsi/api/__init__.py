"""
API Module - HTTP interface to the engine.

Exposes the engine via REST API. A client:
1. Starts a game (shuffled, seeded or from a fixed layout)
2. Submits moves, or plays a joker step by step
3. Reads the board, legal moves and game result
4. Exports and imports snapshots

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    MoveRequest,
    PlayerActionRequest,
    JokerStepRequest,
    # Responses
    GameStateResponse,
    MoveResponse,
    LegalMovesResponse,
    SnapshotResponse,
    ErrorResponse,
    # Shared
    PositionInfo,
    CellInfo,
    PlayerInfo,
    MoveRecordInfo,
    JokerInfo,
    GameStatisticsInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "MoveRequest",
    "PlayerActionRequest",
    "JokerStepRequest",
    # Responses
    "GameStateResponse",
    "MoveResponse",
    "LegalMovesResponse",
    "SnapshotResponse",
    "ErrorResponse",
    # Shared
    "PositionInfo",
    "CellInfo",
    "PlayerInfo",
    "MoveRecordInfo",
    "JokerInfo",
    "GameStatisticsInfo",
    # Service
    "APIService",
    "create_app",
]
