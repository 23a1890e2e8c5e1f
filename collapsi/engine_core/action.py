"""
Action System - Actions, payloads, error codes and results.

Actions represent:
1. Fixed moves submitted as a complete path
2. The joker lifecycle (start, step, complete, cancel)

All state changes flow through actions. Rule violations are reported as
values (Validation, Result, ActionResult), never raised.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar
import time

from .state import CardLabel, Position


T = TypeVar("T")


class ErrorCode(str, Enum):
    """Every way a core operation can be rejected."""
    # Board construction
    INVALID_DECK_SIZE = "INVALID_DECK_SIZE"
    INVALID_CARD_DISTRIBUTION = "INVALID_CARD_DISTRIBUTION"
    UNKNOWN_CARD_LABEL = "UNKNOWN_CARD_LABEL"
    UNKNOWN_LAYOUT = "UNKNOWN_LAYOUT"

    # Path rules, in checking order
    POSITION_OUT_OF_RANGE = "POSITION_OUT_OF_RANGE"
    DISTANCE_MISMATCH = "DISTANCE_MISMATCH"
    NON_ORTHOGONAL_STEP = "NON_ORTHOGONAL_STEP"
    REVISITED_CELL = "REVISITED_CELL"
    ENDS_ON_STARTING_CELL = "ENDS_ON_STARTING_CELL"
    ENDS_ON_COLLAPSED_CELL = "ENDS_ON_COLLAPSED_CELL"
    ENDS_ON_OCCUPIED_CELL = "ENDS_ON_OCCUPIED_CELL"
    PASSES_COLLAPSED_CELL = "PASSES_COLLAPSED_CELL"
    PASSES_OCCUPIED_CELL = "PASSES_OCCUPIED_CELL"

    # Joker lifecycle
    NOT_ON_JOKER = "NOT_ON_JOKER"
    NO_ACTIVE_JOKER_STATE = "NO_ACTIVE_JOKER_STATE"
    JOKER_AT_MAX_DISTANCE = "JOKER_AT_MAX_DISTANCE"
    JOKER_MOVE_IN_PROGRESS = "JOKER_MOVE_IN_PROGRESS"

    # Turn control
    GAME_OVER = "GAME_OVER"
    GAME_NOT_STARTED = "GAME_NOT_STARTED"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    POSITION_MISMATCH = "POSITION_MISMATCH"
    CARD_LABEL_MISMATCH = "CARD_LABEL_MISMATCH"

    # Snapshots
    CORRUPTED_SNAPSHOT = "CORRUPTED_SNAPSHOT"


@dataclass(frozen=True)
class Validation:
    """Outcome of a pure rule check."""
    valid: bool
    error_code: ErrorCode | None = None
    reason: str = ""

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def ok(cls, reason: str = "") -> Validation:
        return cls(valid=True, reason=reason)

    @classmethod
    def invalid(cls, error_code: ErrorCode, reason: str) -> Validation:
        return cls(valid=False, error_code=error_code, reason=reason)


@dataclass
class Result(Generic[T]):
    """Success value or error, for operations that produce something."""
    success: bool
    value: T | None = None
    error: str | None = None
    error_code: ErrorCode | None = None

    @classmethod
    def ok(cls, value: T) -> Result[T]:
        return cls(success=True, value=value)

    @classmethod
    def failure(cls, error_code: ErrorCode, error: str) -> Result[T]:
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def from_validation(cls, validation: Validation) -> Result[T]:
        return cls(success=False, error=validation.reason, error_code=validation.error_code)


class ActionType(Enum):
    """Types of actions in the system."""
    MOVE = "move"
    JOKER_START = "joker_start"
    JOKER_STEP = "joker_step"
    JOKER_COMPLETE = "joker_complete"
    JOKER_CANCEL = "joker_cancel"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    Validation happens in the reducer.
    """
    player_id: str | None = None

    # For MOVE
    from_position: Position | None = None
    to_position: Position | None = None
    path: tuple[Position, ...] | None = None
    card_label: CardLabel | str | None = None

    # For JOKER_STEP
    target: Position | None = None


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    Actions are:
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    payload: ActionPayload
    timestamp: float | None = None

    @classmethod
    def move(
        cls,
        player_id: str,
        path: list[Position] | tuple[Position, ...],
        card_label: CardLabel | str,
        from_position: Position | None = None,
        to_position: Position | None = None,
    ) -> Action:
        """Factory for a complete move. from/to default to the path ends."""
        path = tuple(path)
        return cls(
            action_type=ActionType.MOVE,
            payload=ActionPayload(
                player_id=player_id,
                from_position=from_position if from_position is not None else (path[0] if path else None),
                to_position=to_position if to_position is not None else (path[-1] if path else None),
                path=path,
                card_label=card_label,
            ),
            timestamp=time.time(),
        )

    @classmethod
    def joker_start(cls, player_id: str) -> Action:
        return cls(
            action_type=ActionType.JOKER_START,
            payload=ActionPayload(player_id=player_id),
            timestamp=time.time(),
        )

    @classmethod
    def joker_step(cls, player_id: str, target: Position) -> Action:
        return cls(
            action_type=ActionType.JOKER_STEP,
            payload=ActionPayload(player_id=player_id, target=target),
            timestamp=time.time(),
        )

    @classmethod
    def joker_complete(cls, player_id: str) -> Action:
        return cls(
            action_type=ActionType.JOKER_COMPLETE,
            payload=ActionPayload(player_id=player_id),
            timestamp=time.time(),
        )

    @classmethod
    def joker_cancel(cls, player_id: str) -> Action:
        return cls(
            action_type=ActionType.JOKER_CANCEL,
            payload=ActionPayload(player_id=player_id),
            timestamp=time.time(),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Errors (if failed)
    - The executed move, if the action finished one
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: ErrorCode | None = None

    # Human-readable changes, for clients and logs
    state_changes: list[str] = field(default_factory=list)

    move_record: Any | None = None  # MoveRecord
    game_over: bool = False
    winner: str | None = None

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def from_validation(cls, validation: Validation) -> ActionResult:
        return cls.failure(validation.reason, error_code=validation.error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        move_record: Any | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            move_record=move_record,
            game_over=state.is_over,
            winner=state.winner,
        )
