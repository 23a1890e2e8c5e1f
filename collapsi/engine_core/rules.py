"""
Movement Rules - Pure validation of candidate paths.

No state, no mutation. Called directly for complete moves and step by step
by the joker state machine and the legal move enumerator.

validate_path checks, stopping at the first failure:
    0. every position is on the board
    1. path length matches the card's distance
    2. every consecutive pair is an orthogonal wraparound step
    3. no position repeats
    4. the move does not end where it started
    5. the final card is not collapsed
    6. the final card is not held by the other player
    7. no intermediate card is collapsed or held by the other player
"""

from __future__ import annotations
from typing import Any, Sequence

from .state import CardLabel, MovementSpec, Player, Position, MAX_MOVE_DISTANCE
from .board import Board, is_step
from .action import ErrorCode, Result, Validation


def movement_spec(label: CardLabel | str | Any) -> Result[MovementSpec]:
    """Look up how far a card moves."""
    card = CardLabel.parse(label)
    if card is None:
        return Result.failure(ErrorCode.UNKNOWN_CARD_LABEL, f"Unknown card type: {label!r}")
    return Result.ok(card.movement)


def validate_distance(label: CardLabel | str, planned_distance: int) -> Validation:
    """Check a planned distance against the card's movement."""
    spec = movement_spec(label)
    if not spec.success:
        return Validation.invalid(spec.error_code, spec.error)

    if spec.value.allows(planned_distance):
        return Validation.ok(f"Valid movement: {planned_distance} spaces")

    if spec.value.flexible:
        return Validation.invalid(
            ErrorCode.DISTANCE_MISMATCH,
            f"Invalid joker movement: {planned_distance}. Must be 1, 2, 3, or 4 spaces.",
        )
    return Validation.invalid(
        ErrorCode.DISTANCE_MISMATCH,
        f"Invalid movement: {planned_distance}. Card '{CardLabel.parse(label).value}' "
        f"requires exactly {spec.value.required_distance} spaces.",
    )


def validate_path(
    path: Sequence[Position],
    label: CardLabel | str,
    board: Board,
    players: Sequence[Player],
    moving_player_id: str,
) -> Validation:
    """Validate a complete move for the card under the mover."""
    in_range = _check_in_range(path)
    if not in_range:
        return in_range

    distance = validate_distance(label, len(path) - 1)
    if not distance:
        return distance

    return _validate_shape_and_landing(path, board, players, moving_player_id)


def validate_path_for_distance(
    path: Sequence[Position],
    distance: int,
    board: Board,
    players: Sequence[Player],
    moving_player_id: str,
) -> Validation:
    """
    Validate a path against a numeric distance instead of a card.

    Used to re-check a finished joker move as if it were the fixed card of
    the same distance.
    """
    in_range = _check_in_range(path)
    if not in_range:
        return in_range

    if not 1 <= distance <= MAX_MOVE_DISTANCE or len(path) - 1 != distance:
        return Validation.invalid(
            ErrorCode.DISTANCE_MISMATCH,
            f"Path length {len(path) - 1} doesn't match required distance {distance}",
        )

    return _validate_shape_and_landing(path, board, players, moving_player_id)


def validate_step(
    path_so_far: Sequence[Position],
    target: Position,
    board: Board,
    players: Sequence[Player],
    moving_player_id: str,
) -> Validation:
    """Check that target may be appended to an in-progress path."""
    if not target.in_bounds():
        return Validation.invalid(ErrorCode.POSITION_OUT_OF_RANGE, f"Position out of range: {target}")

    current = path_so_far[-1]
    if not is_step(current, target):
        return Validation.invalid(
            ErrorCode.NON_ORTHOGONAL_STEP,
            f"Target {target} is not adjacent to {current} (orthogonal movement only)",
        )

    if target in path_so_far:
        return Validation.invalid(
            ErrorCode.REVISITED_CELL,
            f"Position {target} already visited in this turn",
        )

    if board.is_collapsed(target):
        return Validation.invalid(ErrorCode.ENDS_ON_COLLAPSED_CELL, f"Card at {target} is collapsed")

    if _held_by_opponent(target, board, players, moving_player_id):
        return Validation.invalid(
            ErrorCode.ENDS_ON_OCCUPIED_CELL,
            f"Position {target} occupied by opponent: {board.occupant_at(target)}",
        )

    return Validation.ok("Valid move step")


def _check_in_range(path: Sequence[Position]) -> Validation:
    for idx, pos in enumerate(path):
        if not pos.in_bounds():
            return Validation.invalid(
                ErrorCode.POSITION_OUT_OF_RANGE,
                f"Position {pos} at step {idx} is off the board",
            )
    return Validation.ok()


def _validate_shape_and_landing(
    path: Sequence[Position],
    board: Board,
    players: Sequence[Player],
    moving_player_id: str,
) -> Validation:
    # Rule 2
    for idx in range(len(path) - 1):
        if not is_step(path[idx], path[idx + 1]):
            return Validation.invalid(
                ErrorCode.NON_ORTHOGONAL_STEP,
                f"Step {idx + 1} invalid: {path[idx]} -> {path[idx + 1]} is diagonal or multi-space",
            )

    # Rule 3
    seen: set[Position] = set()
    for idx, pos in enumerate(path):
        if pos in seen:
            return Validation.invalid(
                ErrorCode.REVISITED_CELL,
                f"Position {pos} revisited at step {idx}",
            )
        seen.add(pos)

    start, final = path[0], path[-1]

    # Rule 4
    if final == start:
        return Validation.invalid(ErrorCode.ENDS_ON_STARTING_CELL, "Cannot end move on starting card")

    # Rule 5
    if board.is_collapsed(final):
        return Validation.invalid(ErrorCode.ENDS_ON_COLLAPSED_CELL, f"Card at {final} is collapsed")

    # Rule 6
    if _held_by_opponent(final, board, players, moving_player_id):
        return Validation.invalid(
            ErrorCode.ENDS_ON_OCCUPIED_CELL,
            f"Position {final} occupied by opponent: {board.occupant_at(final)}",
        )

    # Rule 7
    for pos in path[1:-1]:
        if board.is_collapsed(pos):
            return Validation.invalid(
                ErrorCode.PASSES_COLLAPSED_CELL,
                f"Path crosses collapsed card at {pos}",
            )
        if _held_by_opponent(pos, board, players, moving_player_id):
            return Validation.invalid(
                ErrorCode.PASSES_OCCUPIED_CELL,
                f"Path crosses opponent at {pos}",
            )

    return Validation.ok(f"Path valid: {len(path) - 1} steps")


def _held_by_opponent(
    pos: Position,
    board: Board,
    players: Sequence[Player],
    moving_player_id: str,
) -> bool:
    occupant = board.occupant_at(pos)
    if occupant is not None and occupant != moving_player_id:
        return True
    # Also consult player positions, for boards built without markers
    return any(
        p.player_id != moving_player_id and p.position == pos
        for p in players
    )
