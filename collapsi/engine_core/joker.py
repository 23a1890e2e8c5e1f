"""
Joker Movement - Step-based state machine for wild (1-4 space) moves.

Lifecycle:
    start_joker -> step_joker (1..4 times) -> complete_joker
                                           `-> cancel_joker

Phases while active:
    ACTIVE         no step taken yet; cannot complete
    CAN_CONTINUE   1-3 steps taken and another valid step exists
    MUST_COMPLETE  4 steps taken, or no valid step remains after at least one

The board is not touched while the move is in progress. The pawn only
moves when the completed path is executed by the reducer, so cancelling
needs no rollback.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Sequence
import time

from .state import MAX_MOVE_DISTANCE, MoveRecord, Player, Position
from .board import Board, neighbors
from .action import ErrorCode, Result
from . import rules


class JokerPhase(Enum):
    """Where a joker move stands."""
    INACTIVE = "inactive"
    ACTIVE = "active"
    CAN_CONTINUE = "can_continue"
    MUST_COMPLETE = "must_complete"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class JokerMovementState:
    """Transient state of a joker move being built one step at a time."""
    player_id: str
    starting_position: Position
    current_position: Position
    path: tuple[Position, ...]
    remaining_distance: int = MAX_MOVE_DISTANCE
    active: bool = True
    outcome: JokerPhase | None = field(default=None, compare=False)

    @property
    def spaces_moved(self) -> int:
        return len(self.path) - 1


def start_joker(board: Board, player: Player, position: Position | None) -> Result[JokerMovementState]:
    """Begin a joker move from the player's current cell."""
    if position is None:
        return Result.failure(ErrorCode.POSITION_MISMATCH, f"Player {player.player_id} is not on the board")
    if not position.in_bounds():
        return Result.failure(ErrorCode.POSITION_OUT_OF_RANGE, f"Position out of range: {position}")

    cell = board.cell(position)
    if not cell.label.is_joker or cell.collapsed:
        return Result.failure(
            ErrorCode.NOT_ON_JOKER,
            f"Player {player.player_id} is on {cell.label.value}, not a joker card",
        )

    return Result.ok(JokerMovementState(
        player_id=player.player_id,
        starting_position=position,
        current_position=position,
        path=(position,),
    ))


def step_joker(
    joker: JokerMovementState | None,
    target: Position,
    board: Board,
    players: Sequence[Player],
) -> Result[JokerMovementState]:
    """Advance one space. Returns a new state; the input is unchanged."""
    if joker is None or not joker.active:
        return Result.failure(ErrorCode.NO_ACTIVE_JOKER_STATE, "No active joker movement state")

    if joker.remaining_distance <= 0:
        return Result.failure(ErrorCode.JOKER_AT_MAX_DISTANCE, "No remaining movement distance")

    check = rules.validate_step(joker.path, target, board, players, joker.player_id)
    if not check:
        return Result.from_validation(check)

    return Result.ok(replace(
        joker,
        current_position=target,
        path=joker.path + (target,),
        remaining_distance=joker.remaining_distance - 1,
    ))


def valid_joker_steps(
    joker: JokerMovementState | None,
    board: Board,
    players: Sequence[Player],
) -> list[Position]:
    """Cells the joker could step to next."""
    if joker is None or not joker.active or joker.remaining_distance <= 0:
        return []
    return [
        pos for pos in neighbors(joker.current_position)
        if rules.validate_step(joker.path, pos, board, players, joker.player_id)
    ]


def joker_phase(
    joker: JokerMovementState | None,
    board: Board,
    players: Sequence[Player],
) -> JokerPhase:
    if joker is None:
        return JokerPhase.INACTIVE
    if not joker.active:
        return joker.outcome or JokerPhase.INACTIVE

    moved = joker.spaces_moved
    if moved == 0:
        return JokerPhase.ACTIVE
    if joker.remaining_distance <= 0:
        return JokerPhase.MUST_COMPLETE
    if not valid_joker_steps(joker, board, players):
        return JokerPhase.MUST_COMPLETE
    return JokerPhase.CAN_CONTINUE


def can_complete(joker: JokerMovementState | None) -> bool:
    return joker is not None and joker.active and 1 <= joker.spaces_moved <= MAX_MOVE_DISTANCE


def complete_joker(
    joker: JokerMovementState | None,
    board: Board,
    players: Sequence[Player],
) -> Result[MoveRecord]:
    """
    Finish the move and produce its record.

    The accumulated path is re-validated as a fixed move of the distance
    travelled. The caller executes the record and discards the joker state.
    """
    if joker is None or not joker.active:
        return Result.failure(ErrorCode.NO_ACTIVE_JOKER_STATE, "No active joker movement to complete")

    moved = joker.spaces_moved
    if not 1 <= moved <= MAX_MOVE_DISTANCE:
        return Result.failure(
            ErrorCode.DISTANCE_MISMATCH,
            "Must move at least 1 space before ending turn",
        )

    check = rules.validate_path_for_distance(joker.path, moved, board, players, joker.player_id)
    if not check:
        return Result.from_validation(check)

    return Result.ok(MoveRecord(
        player_id=joker.player_id,
        from_position=joker.starting_position,
        to_position=joker.current_position,
        path=joker.path,
        distance=moved,
        card_label=board.label_at(joker.starting_position),
        timestamp=time.time(),
    ))


def cancel_joker(joker: JokerMovementState | None) -> Result[JokerMovementState]:
    """Abandon an in-progress joker move. Nothing on the board changes."""
    if joker is None or not joker.active:
        return Result.failure(ErrorCode.NO_ACTIVE_JOKER_STATE, "No active joker movement to cancel")
    return Result.ok(replace(joker, active=False, outcome=JokerPhase.CANCELLED))
