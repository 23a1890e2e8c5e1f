"""
Board - The 4x4 toroidal grid of cards.

Adjacency wraps on both axes: stepping up from row 0 lands on row 3,
stepping left from column 0 lands on column 3. Neighbors are computed
purely with modulo arithmetic, so a wrapping step and an ordinary step
are indistinguishable to the rule engine.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterator, Sequence

from .state import BOARD_SIZE, CardLabel, Cell, Position
from .action import ErrorCode, Result


DECK_SIZE = BOARD_SIZE * BOARD_SIZE

REQUIRED_DISTRIBUTION: dict[CardLabel, int] = {
    CardLabel.RED_JOKER: 1,
    CardLabel.BLACK_JOKER: 1,
    CardLabel.ACE: 4,
    CardLabel.TWO: 4,
    CardLabel.THREE: 4,
    CardLabel.FOUR: 2,
}

# (row delta, col delta) in the order up, down, left, right
DIRECTIONS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


def neighbors(pos: Position) -> list[Position]:
    """The four orthogonal wraparound neighbors of a position."""
    return [
        Position((pos.row + dr) % BOARD_SIZE, (pos.col + dc) % BOARD_SIZE)
        for dr, dc in DIRECTIONS
    ]


def is_step(a: Position, b: Position) -> bool:
    """True if b is one orthogonal (possibly wrapping) step from a."""
    return b in neighbors(a)


@dataclass
class Board:
    """
    Grid of cells indexed [row][col].

    Occupant markers are kept here so occupancy checks are a direct lookup.
    """
    cells: list[list[Cell]] = field(default_factory=list)

    def cell(self, pos: Position) -> Cell:
        if not pos.in_bounds():
            raise ValueError(f"Position out of range: {pos}")
        return self.cells[pos.row][pos.col]

    def label_at(self, pos: Position) -> CardLabel:
        return self.cell(pos).label

    def is_collapsed(self, pos: Position) -> bool:
        return self.cell(pos).collapsed

    def occupant_at(self, pos: Position) -> str | None:
        return self.cell(pos).occupant_id

    def collapse(self, pos: Position) -> bool:
        """
        Turn a card face-down.

        Returns False if it was already collapsed. Never un-collapses.
        """
        cell = self.cell(pos)
        if cell.collapsed:
            return False
        cell.collapsed = True
        return True

    def place(self, pos: Position, player_id: str) -> None:
        self.cell(pos).occupant_id = player_id

    def vacate(self, pos: Position) -> None:
        self.cell(pos).occupant_id = None

    def positions(self) -> Iterator[Position]:
        """All positions in row-major order."""
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                yield Position(row, col)

    def find(self, label: CardLabel) -> Position | None:
        """First position holding the given label."""
        for pos in self.positions():
            if self.label_at(pos) == label:
                return pos
        return None

    def find_occupant(self, player_id: str) -> Position | None:
        for pos in self.positions():
            if self.occupant_at(pos) == player_id:
                return pos
        return None

    def label_counts(self) -> dict[CardLabel, int]:
        return dict(Counter(self.label_at(pos) for pos in self.positions()))

    def collapsed_positions(self) -> list[Position]:
        return [pos for pos in self.positions() if self.is_collapsed(pos)]


def build_board(deck: Sequence[CardLabel | str]) -> Result[Board]:
    """
    Lay out a 16-card deck row by row.

    Fails with INVALID_DECK_SIZE, UNKNOWN_CARD_LABEL or
    INVALID_CARD_DISTRIBUTION. All cells start face-up and empty.
    """
    if len(deck) != DECK_SIZE:
        return Result.failure(
            ErrorCode.INVALID_DECK_SIZE,
            f"Invalid deck size: {len(deck)}. Expected: {DECK_SIZE}",
        )

    labels = []
    for raw in deck:
        label = CardLabel.parse(raw)
        if label is None:
            return Result.failure(ErrorCode.UNKNOWN_CARD_LABEL, f"Unknown card type: {raw!r}")
        labels.append(label)

    counts = Counter(labels)
    if dict(counts) != REQUIRED_DISTRIBUTION:
        wrong = {
            label.value: counts.get(label, 0)
            for label, expected in REQUIRED_DISTRIBUTION.items()
            if counts.get(label, 0) != expected
        }
        return Result.failure(
            ErrorCode.INVALID_CARD_DISTRIBUTION,
            f"Deck does not match the required card counts: {wrong}",
        )

    cells = [
        [Cell(label=labels[row * BOARD_SIZE + col]) for col in range(BOARD_SIZE)]
        for row in range(BOARD_SIZE)
    ]
    return Result.ok(Board(cells=cells))
