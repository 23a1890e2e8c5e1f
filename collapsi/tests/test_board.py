"""
Tests for the board model.

Tests:
- Deck validation
- Wraparound neighbors
- Collapse semantics
"""

import pytest

from ..engine_core.state import CardLabel, Position
from ..engine_core.action import ErrorCode
from ..engine_core.board import REQUIRED_DISTRIBUTION, build_board, is_step, neighbors
from ..engine_core.setup import LAYOUTS, STANDARD_DECK


class TestBuildBoard:
    """Tests for building a board from a deck."""

    @pytest.mark.parametrize("layout", sorted(LAYOUTS))
    def test_layouts_have_required_counts(self, layout):
        """Every named layout builds with the exact card distribution."""
        result = build_board(LAYOUTS[layout])

        assert result.success
        assert result.value.label_counts() == REQUIRED_DISTRIBUTION

    def test_cells_start_face_up_and_empty(self):
        board = build_board(STANDARD_DECK).value

        for pos in board.positions():
            assert not board.is_collapsed(pos)
            assert board.occupant_at(pos) is None

    def test_row_major_order(self):
        """Deck index i lands on (i // 4, i % 4)."""
        board = build_board(STANDARD_DECK).value

        assert board.label_at(Position(0, 0)) == CardLabel.RED_JOKER
        assert board.label_at(Position(0, 1)) == CardLabel.BLACK_JOKER
        assert board.label_at(Position(3, 3)) == CardLabel.FOUR

    def test_wrong_size_fails(self):
        result = build_board(STANDARD_DECK[:15])

        assert not result.success
        assert result.error_code == ErrorCode.INVALID_DECK_SIZE

    def test_wrong_distribution_fails(self):
        """Swapping a Four for an Ace keeps 16 cards but breaks the counts."""
        deck = list(STANDARD_DECK)
        deck[-1] = CardLabel.ACE
        result = build_board(deck)

        assert not result.success
        assert result.error_code == ErrorCode.INVALID_CARD_DISTRIBUTION

    def test_unknown_label_fails(self):
        deck = [label.value for label in STANDARD_DECK]
        deck[3] = "queen"
        result = build_board(deck)

        assert not result.success
        assert result.error_code == ErrorCode.UNKNOWN_CARD_LABEL

    def test_accepts_wire_names(self):
        result = build_board([label.value for label in STANDARD_DECK])

        assert result.success
        assert result.value.label_at(Position(0, 0)) == CardLabel.RED_JOKER


class TestNeighbors:
    """Tests for toroidal adjacency."""

    def test_corner_wraps_on_both_axes(self):
        result = neighbors(Position(0, 0))

        assert Position(3, 0) in result
        assert Position(0, 3) in result
        assert Position(1, 0) in result
        assert Position(0, 1) in result

    def test_interior_needs_no_wrap(self):
        result = neighbors(Position(2, 2))

        assert set(result) == {
            Position(1, 2), Position(3, 2), Position(2, 1), Position(2, 3),
        }

    def test_order_is_up_down_left_right(self):
        assert neighbors(Position(1, 1)) == [
            Position(0, 1), Position(2, 1), Position(1, 0), Position(1, 2),
        ]

    def test_every_cell_has_four_distinct_neighbors(self):
        board = build_board(STANDARD_DECK).value
        for pos in board.positions():
            result = neighbors(pos)
            assert len(set(result)) == 4
            assert pos not in result

    def test_is_step_is_symmetric(self):
        assert is_step(Position(3, 3), Position(0, 3))
        assert is_step(Position(0, 3), Position(3, 3))

    def test_is_step_rejects_diagonal_and_distance_two(self):
        assert not is_step(Position(0, 0), Position(1, 1))
        assert not is_step(Position(0, 0), Position(0, 2))
        assert not is_step(Position(0, 0), Position(0, 0))


class TestCollapse:
    """Tests for collapsing cards."""

    def test_collapse_is_idempotent(self):
        board = build_board(STANDARD_DECK).value
        pos = Position(1, 2)

        assert board.collapse(pos) is True
        assert board.collapse(pos) is False
        assert board.is_collapsed(pos)

    def test_collapse_keeps_label(self):
        board = build_board(STANDARD_DECK).value
        label = board.label_at(Position(2, 0))

        board.collapse(Position(2, 0))

        assert board.label_at(Position(2, 0)) == label
        assert board.collapsed_positions() == [Position(2, 0)]

    def test_out_of_range_lookup_raises(self):
        board = build_board(STANDARD_DECK).value

        with pytest.raises(ValueError):
            board.cell(Position(4, 0))

    def test_place_and_vacate(self):
        board = build_board(STANDARD_DECK).value

        board.place(Position(1, 1), "red")
        assert board.find_occupant("red") == Position(1, 1)

        board.vacate(Position(1, 1))
        assert board.find_occupant("red") is None
