"""
Tests for the movement rule engine.

Tests:
- Card movement table
- Distance checks
- Path rules and the order they are checked in
"""

import pytest

from ..engine_core.state import CardLabel, Position
from ..engine_core.action import ErrorCode
from ..engine_core.rules import (
    movement_spec,
    validate_distance,
    validate_path,
    validate_path_for_distance,
    validate_step,
)


def P(row, col):
    return Position(row, col)


class TestMovementSpec:
    """Tests for the card to distance mapping."""

    @pytest.mark.parametrize("label,distance", [
        (CardLabel.ACE, 1),
        (CardLabel.TWO, 2),
        (CardLabel.THREE, 3),
        (CardLabel.FOUR, 4),
    ])
    def test_fixed_cards(self, label, distance):
        spec = movement_spec(label).value

        assert not spec.flexible
        assert spec.required_distance == distance

    @pytest.mark.parametrize("label", [CardLabel.RED_JOKER, CardLabel.BLACK_JOKER])
    def test_jokers_are_wild(self, label):
        spec = movement_spec(label).value

        assert spec.flexible
        assert spec.distances == frozenset({1, 2, 3, 4})
        assert spec.required_distance is None

    def test_unknown_label(self):
        result = movement_spec("king")

        assert not result.success
        assert result.error_code == ErrorCode.UNKNOWN_CARD_LABEL


class TestValidateDistance:
    """Tests for distance checks."""

    def test_fixed_exact(self):
        assert validate_distance(CardLabel.THREE, 3)

    def test_fixed_mismatch(self):
        result = validate_distance(CardLabel.ACE, 2)

        assert not result
        assert result.error_code == ErrorCode.DISTANCE_MISMATCH
        assert "exactly 1" in result.reason

    @pytest.mark.parametrize("distance", [1, 2, 3, 4])
    def test_joker_range(self, distance):
        assert validate_distance(CardLabel.RED_JOKER, distance)

    @pytest.mark.parametrize("distance", [0, 5])
    def test_joker_out_of_range(self, distance):
        result = validate_distance(CardLabel.BLACK_JOKER, distance)

        assert not result
        assert result.error_code == ErrorCode.DISTANCE_MISMATCH

    def test_wire_name_accepted(self):
        assert validate_distance("2", 2)


class TestValidatePath:
    """Tests for complete path validation."""

    def test_single_step_ace(self, ace_state):
        """An Ace moves one space to a free card."""
        state = ace_state
        result = validate_path([P(0, 1), P(0, 2)], CardLabel.ACE, state.board, state.players, "red")

        assert result

    def test_wraparound_three(self, make_state):
        """Three upward steps from row 0 wrap through row 3."""
        state = make_state(placements={(0, 0): CardLabel.THREE}, red=(0, 0), blue=(2, 2))
        path = [P(0, 0), P(3, 0), P(2, 0), P(1, 0)]

        assert validate_path(path, CardLabel.THREE, state.board, state.players, "red")

    def test_distance_checked_first(self, ace_state):
        """A diagonal path of the wrong length reports the distance."""
        state = ace_state
        path = [P(0, 1), P(1, 2), P(2, 3)]
        result = validate_path(path, CardLabel.ACE, state.board, state.players, "red")

        assert result.error_code == ErrorCode.DISTANCE_MISMATCH

    def test_diagonal_step(self, ace_state):
        state = ace_state
        result = validate_path([P(0, 1), P(1, 2)], CardLabel.ACE, state.board, state.players, "red")

        assert not result
        assert result.error_code == ErrorCode.NON_ORTHOGONAL_STEP

    def test_jump_of_two(self, ace_state):
        state = ace_state
        result = validate_path([P(0, 1), P(0, 3)], CardLabel.ACE, state.board, state.players, "red")

        assert result.error_code == ErrorCode.NON_ORTHOGONAL_STEP

    def test_revisit(self, joker_state):
        state = joker_state
        path = [P(0, 0), P(0, 1), P(1, 1), P(0, 1)]
        result = validate_path(path, CardLabel.RED_JOKER, state.board, state.players, "red")

        assert result.error_code == ErrorCode.REVISITED_CELL

    def test_returning_to_start_rejected(self, joker_state):
        """A loop back to the first cell is never a legal move."""
        state = joker_state
        path = [P(0, 0), P(0, 1), P(1, 1), P(1, 0), P(0, 0)]
        result = validate_path(path, CardLabel.RED_JOKER, state.board, state.players, "red")

        assert not result
        assert result.error_code in (ErrorCode.REVISITED_CELL, ErrorCode.ENDS_ON_STARTING_CELL)

    def test_ends_on_collapsed(self, make_state):
        state = make_state(
            placements={(0, 1): CardLabel.ACE},
            red=(0, 1),
            blue=(2, 2),
            collapsed=[(0, 2)],
        )
        result = validate_path([P(0, 1), P(0, 2)], CardLabel.ACE, state.board, state.players, "red")

        assert result.error_code == ErrorCode.ENDS_ON_COLLAPSED_CELL

    def test_ends_on_opponent(self, make_state):
        state = make_state(placements={(0, 1): CardLabel.ACE}, red=(0, 1), blue=(0, 2))
        result = validate_path([P(0, 1), P(0, 2)], CardLabel.ACE, state.board, state.players, "red")

        assert result.error_code == ErrorCode.ENDS_ON_OCCUPIED_CELL

    def test_passes_collapsed(self, make_state):
        state = make_state(
            placements={(0, 0): CardLabel.TWO},
            red=(0, 0),
            blue=(2, 2),
            collapsed=[(0, 1)],
        )
        result = validate_path([P(0, 0), P(0, 1), P(0, 2)], CardLabel.TWO, state.board, state.players, "red")

        assert result.error_code == ErrorCode.PASSES_COLLAPSED_CELL

    def test_passes_opponent(self, make_state):
        state = make_state(placements={(0, 0): CardLabel.TWO}, red=(0, 0), blue=(0, 1))
        result = validate_path([P(0, 0), P(0, 1), P(0, 2)], CardLabel.TWO, state.board, state.players, "red")

        assert result.error_code == ErrorCode.PASSES_OCCUPIED_CELL

    def test_out_of_range(self, ace_state):
        state = ace_state
        result = validate_path([P(0, 1), P(0, 4)], CardLabel.ACE, state.board, state.players, "red")

        assert result.error_code == ErrorCode.POSITION_OUT_OF_RANGE

    def test_does_not_mutate_board(self, ace_state):
        state = ace_state
        before = state.clone()

        validate_path([P(0, 1), P(0, 2)], CardLabel.ACE, state.board, state.players, "red")

        assert state.board == before.board
        assert state.players == before.players


class TestValidatePathForDistance:
    """Tests for re-checking a path against a numeric distance."""

    def test_matching_distance(self, joker_state):
        state = joker_state
        path = [P(0, 0), P(0, 1), P(0, 2)]

        assert validate_path_for_distance(path, 2, state.board, state.players, "red")

    def test_length_disagrees(self, joker_state):
        state = joker_state
        path = [P(0, 0), P(0, 1), P(0, 2)]
        result = validate_path_for_distance(path, 3, state.board, state.players, "red")

        assert result.error_code == ErrorCode.DISTANCE_MISMATCH

    def test_distance_zero(self, joker_state):
        state = joker_state
        result = validate_path_for_distance([P(0, 0)], 0, state.board, state.players, "red")

        assert result.error_code == ErrorCode.DISTANCE_MISMATCH


class TestValidateStep:
    """Tests for single-step checks used by the joker and the enumerator."""

    def test_wraparound_step(self, joker_state):
        state = joker_state

        assert validate_step([P(0, 0)], P(3, 0), state.board, state.players, "red")

    def test_not_adjacent(self, joker_state):
        state = joker_state
        result = validate_step([P(0, 0)], P(1, 1), state.board, state.players, "red")

        assert result.error_code == ErrorCode.NON_ORTHOGONAL_STEP

    def test_back_into_path(self, joker_state):
        state = joker_state
        result = validate_step([P(0, 0), P(0, 1)], P(0, 0), state.board, state.players, "red")

        assert result.error_code == ErrorCode.REVISITED_CELL

    def test_onto_opponent(self, make_state):
        state = make_state(placements={(0, 0): CardLabel.RED_JOKER}, red=(0, 0), blue=(1, 0))
        result = validate_step([P(0, 0)], P(1, 0), state.board, state.players, "red")

        assert result.error_code == ErrorCode.ENDS_ON_OCCUPIED_CELL

    def test_onto_collapsed(self, make_state):
        state = make_state(
            placements={(0, 0): CardLabel.RED_JOKER},
            red=(0, 0),
            blue=(2, 2),
            collapsed=[(0, 3)],
        )
        result = validate_step([P(0, 0)], P(0, 3), state.board, state.players, "red")

        assert result.error_code == ErrorCode.ENDS_ON_COLLAPSED_CELL
