"""
Game State - Value types and the canonical state container.

Design principles:
- Positions, labels and move records are immutable values
- Cells only ever move from face-up to collapsed
- Serializable: see snapshot.py for the plain-dict form
- The reducer works on clones, so a failed move never leaves a half-applied state
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING
from copy import deepcopy
from enum import Enum

if TYPE_CHECKING:
    from .board import Board
    from .joker import JokerMovementState


BOARD_SIZE = 4
MAX_MOVE_DISTANCE = 4


class GamePhase(Enum):
    """High-level game phases."""
    SETUP = "setup"
    PLAYING = "playing"
    ENDED = "ended"


class PlayerColor(Enum):
    RED = "red"
    BLUE = "blue"


@dataclass(frozen=True)
class Position:
    """A cell coordinate on the 4x4 torus."""
    row: int
    col: int

    def in_bounds(self) -> bool:
        return 0 <= self.row < BOARD_SIZE and 0 <= self.col < BOARD_SIZE

    def to_dict(self) -> dict[str, int]:
        return {"row": self.row, "col": self.col}

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"


@dataclass(frozen=True)
class MovementSpec:
    """
    How far a card lets its holder move.

    Fixed cards allow exactly one distance; jokers allow any of 1-4.
    """
    flexible: bool
    distances: frozenset[int]

    @classmethod
    def fixed(cls, distance: int) -> MovementSpec:
        return cls(flexible=False, distances=frozenset({distance}))

    @classmethod
    def wild(cls) -> MovementSpec:
        return cls(flexible=True, distances=frozenset(range(1, MAX_MOVE_DISTANCE + 1)))

    @property
    def required_distance(self) -> int | None:
        """The exact distance for a fixed card, None for a joker."""
        if self.flexible:
            return None
        return next(iter(self.distances))

    def allows(self, distance: int) -> bool:
        return distance in self.distances


class CardLabel(str, Enum):
    """The six card faces. Values are the wire names used by clients."""
    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    RED_JOKER = "red-joker"
    BLACK_JOKER = "black-joker"

    @property
    def is_joker(self) -> bool:
        return self in (CardLabel.RED_JOKER, CardLabel.BLACK_JOKER)

    @property
    def movement(self) -> MovementSpec:
        return _MOVEMENT_TABLE[self]

    @classmethod
    def parse(cls, value: Any) -> CardLabel | None:
        """Return the label for a wire value, or None if unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


_MOVEMENT_TABLE: dict[CardLabel, MovementSpec] = {
    CardLabel.ACE: MovementSpec.fixed(1),
    CardLabel.TWO: MovementSpec.fixed(2),
    CardLabel.THREE: MovementSpec.fixed(3),
    CardLabel.FOUR: MovementSpec.fixed(4),
    CardLabel.RED_JOKER: MovementSpec.wild(),
    CardLabel.BLACK_JOKER: MovementSpec.wild(),
}


@dataclass
class Cell:
    """
    One card on the board.

    collapsed only ever goes from False to True.
    """
    label: CardLabel
    collapsed: bool = False
    occupant_id: str | None = None


@dataclass
class Player:
    """A pawn and its owner."""
    player_id: str
    color: PlayerColor
    starting_card: CardLabel  # The joker this player begins on
    position: Position | None = None
    active: bool = True


@dataclass(frozen=True)
class MoveRecord:
    """An executed move. Immutable once appended to history."""
    player_id: str
    from_position: Position
    to_position: Position
    path: tuple[Position, ...]
    distance: int
    card_label: CardLabel
    timestamp: float


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.
    """
    game_id: str
    board: Board
    players: list[Player] = field(default_factory=list)

    phase: GamePhase = GamePhase.SETUP
    current_player_idx: int = 0

    move_history: list[MoveRecord] = field(default_factory=list)

    # Transient; only set while a joker move is being built step by step
    joker_state: JokerMovementState | None = None

    winner: str | None = None

    random_seed: int | None = None
    # Wall-clock time play began; None for states built by hand
    started_at: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_idx]

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.ENDED

    def get_player(self, player_id: str) -> Player | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def player_index(self, player_id: str) -> int | None:
        for idx, p in enumerate(self.players):
            if p.player_id == player_id:
                return idx
        return None

    def opponent_of(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.player_id != player_id:
                return p
        return None

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)
