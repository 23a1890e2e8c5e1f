"""
Snapshots - Plain-structure form of a GameState for storage and transport.

A snapshot always carries the board and both players. Restoring treats
anything malformed or inconsistent as corrupted input and returns
CORRUPTED_SNAPSHOT instead of raising. The transient joker state is never
part of a snapshot.
"""

from __future__ import annotations
from typing import Any, Optional
import json
import uuid

from pydantic import BaseModel, Field, ValidationError

from .state import (
    BOARD_SIZE,
    CardLabel,
    Cell,
    GamePhase,
    GameState,
    MoveRecord,
    Player,
    PlayerColor,
    Position,
)
from .board import Board, build_board
from .action import ErrorCode, Result


class PositionModel(BaseModel):
    row: int = Field(..., ge=0, lt=BOARD_SIZE)
    col: int = Field(..., ge=0, lt=BOARD_SIZE)


class CellModel(BaseModel):
    label: CardLabel
    collapsed: bool = False
    occupant_id: Optional[str] = None


class PlayerModel(BaseModel):
    player_id: str
    color: PlayerColor
    starting_card: CardLabel
    position: Optional[PositionModel] = None
    active: bool = True


class MoveRecordModel(BaseModel):
    player_id: str
    from_position: PositionModel
    to_position: PositionModel
    path: list[PositionModel] = Field(..., min_length=2)
    distance: int = Field(..., ge=1, le=4)
    card_label: CardLabel
    timestamp: float


class GameSnapshot(BaseModel):
    """Serialized game. board and players are required."""
    game_id: str = ""
    board: list[list[CellModel]] = Field(..., min_length=BOARD_SIZE, max_length=BOARD_SIZE)
    players: list[PlayerModel] = Field(..., min_length=2, max_length=2)
    current_player_index: int = Field(0, ge=0, le=1)
    move_history: list[MoveRecordModel] = Field(default_factory=list)
    status: GamePhase = GamePhase.PLAYING
    winner: Optional[str] = None
    random_seed: Optional[int] = None
    started_at: Optional[float] = None


def _position(model: PositionModel | None) -> Position | None:
    if model is None:
        return None
    return Position(model.row, model.col)


def to_snapshot(state: GameState) -> dict[str, Any]:
    """Serialize a state to a JSON-compatible dict."""
    board = [
        [
            {
                "label": cell.label.value,
                "collapsed": cell.collapsed,
                "occupant_id": cell.occupant_id,
            }
            for cell in row
        ]
        for row in state.board.cells
    ]
    players = [
        {
            "player_id": p.player_id,
            "color": p.color.value,
            "starting_card": p.starting_card.value,
            "position": p.position.to_dict() if p.position else None,
            "active": p.active,
        }
        for p in state.players
    ]
    history = [
        {
            "player_id": r.player_id,
            "from_position": r.from_position.to_dict(),
            "to_position": r.to_position.to_dict(),
            "path": [pos.to_dict() for pos in r.path],
            "distance": r.distance,
            "card_label": r.card_label.value,
            "timestamp": r.timestamp,
        }
        for r in state.move_history
    ]
    return {
        "game_id": state.game_id,
        "board": board,
        "players": players,
        "current_player_index": state.current_player_idx,
        "move_history": history,
        "status": state.phase.value,
        "winner": state.winner,
        "random_seed": state.random_seed,
        "started_at": state.started_at,
    }


def from_snapshot(data: Any, game_id: str | None = None) -> Result[GameState]:
    """
    Rebuild a GameState, rejecting corrupted input.

    game_id overrides the id stored in the snapshot.
    """
    if not isinstance(data, dict) or "board" not in data or "players" not in data:
        return Result.failure(ErrorCode.CORRUPTED_SNAPSHOT, "Invalid snapshot data: board and players are required")

    try:
        snap = GameSnapshot.model_validate(data)
    except ValidationError as e:
        return Result.failure(ErrorCode.CORRUPTED_SNAPSHOT, f"Invalid snapshot data: {e.error_count()} errors")

    if any(len(row) != BOARD_SIZE for row in snap.board):
        return Result.failure(ErrorCode.CORRUPTED_SNAPSHOT, "Board rows must have 4 cells")

    # Reuse deck validation for the card distribution
    built = build_board([cell.label for row in snap.board for cell in row])
    if not built.success:
        return Result.failure(ErrorCode.CORRUPTED_SNAPSHOT, f"Board is not a legal layout: {built.error}")

    board = Board(cells=[
        [Cell(label=c.label, collapsed=c.collapsed, occupant_id=c.occupant_id) for c in row]
        for row in snap.board
    ])
    players = [
        Player(
            player_id=p.player_id,
            color=p.color,
            starting_card=p.starting_card,
            position=_position(p.position),
            active=p.active,
        )
        for p in snap.players
    ]

    problem = _consistency_problem(board, players, snap)
    if problem:
        return Result.failure(ErrorCode.CORRUPTED_SNAPSHOT, problem)

    history = [
        MoveRecord(
            player_id=r.player_id,
            from_position=_position(r.from_position),
            to_position=_position(r.to_position),
            path=tuple(_position(pos) for pos in r.path),
            distance=r.distance,
            card_label=r.card_label,
            timestamp=r.timestamp,
        )
        for r in snap.move_history
    ]

    return Result.ok(GameState(
        game_id=game_id or snap.game_id or str(uuid.uuid4()),
        board=board,
        players=players,
        phase=snap.status,
        current_player_idx=snap.current_player_index,
        move_history=history,
        winner=snap.winner,
        random_seed=snap.random_seed,
        started_at=snap.started_at,
    ))


def _consistency_problem(board: Board, players: list[Player], snap: GameSnapshot) -> str | None:
    ids = [p.player_id for p in players]
    if len(set(ids)) != len(ids):
        return "Duplicate player ids"

    for player in players:
        if player.position is None:
            if snap.status != GamePhase.SETUP:
                return f"Player {player.player_id} has no position in a {snap.status.value} game"
            continue
        if board.occupant_at(player.position) != player.player_id:
            return f"Player {player.player_id} is not marked on the board at {player.position}"

    for pos in board.positions():
        occupant = board.occupant_at(pos)
        if occupant is None:
            continue
        owner = next((p for p in players if p.player_id == occupant), None)
        if owner is None:
            return f"Board references unknown player {occupant} at {pos}"
        if owner.position != pos:
            return f"Player {occupant} marked at {pos} but positioned at {owner.position}"

    if snap.winner is not None and snap.winner not in ids:
        return f"Winner {snap.winner} is not a player"
    if snap.status == GamePhase.ENDED and snap.winner is None:
        return "Ended game has no winner"
    return None


def snapshot_to_json(state: GameState) -> str:
    return json.dumps(to_snapshot(state))


def snapshot_from_json(text: str) -> Result[GameState]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return Result.failure(ErrorCode.CORRUPTED_SNAPSHOT, f"Snapshot is not valid JSON: {e.msg}")
    return from_snapshot(data)
