"""
Tests for snapshot export and validated restore.
"""

import json

import pytest

from ..engine_core.state import CardLabel, GamePhase, Position
from ..engine_core.action import Action, ErrorCode
from ..engine_core.reducer import apply_action
from ..engine_core.snapshot import (
    from_snapshot,
    snapshot_from_json,
    snapshot_to_json,
    to_snapshot,
)


def P(row, col):
    return Position(row, col)


@pytest.fixture
def played_state(ace_state):
    """ace_state after red's first move."""
    return apply_action(ace_state, Action.move("red", [P(0, 1), P(0, 2)], CardLabel.ACE)).new_state


class TestToSnapshot:
    """Tests for exporting a snapshot."""

    def test_required_fields(self, played_state):
        snap = to_snapshot(played_state)

        assert set(snap) >= {"board", "players", "current_player_index", "move_history", "status", "winner"}
        assert len(snap["board"]) == 4
        assert all(len(row) == 4 for row in snap["board"])
        assert len(snap["players"]) == 2

    def test_plain_values(self, played_state):
        snap = to_snapshot(played_state)

        assert snap["status"] == "playing"
        assert snap["board"][0][1] == {"label": "A", "collapsed": True, "occupant_id": None}
        assert snap["board"][0][2]["occupant_id"] == "red"
        assert snap["players"][0]["position"] == {"row": 0, "col": 2}
        assert snap["move_history"][0]["card_label"] == "A"

    def test_json_serializable(self, played_state):
        text = snapshot_to_json(played_state)

        assert json.loads(text) == to_snapshot(played_state)

    def test_joker_state_excluded(self, joker_state):
        started = apply_action(joker_state, Action.joker_start("red")).new_state

        assert "joker_state" not in to_snapshot(started)


class TestFromSnapshot:
    """Tests for restoring a snapshot."""

    def test_round_trip(self, played_state):
        restored = from_snapshot(to_snapshot(played_state))

        assert restored.success
        state = restored.value
        assert state.board == played_state.board
        assert state.players == played_state.players
        assert state.move_history == played_state.move_history
        assert state.current_player_idx == played_state.current_player_idx
        assert state.phase == GamePhase.PLAYING

    def test_restored_game_continues(self, played_state):
        state = from_snapshot(to_snapshot(played_state)).value
        blue = state.get_player("blue")

        result = apply_action(state, Action.move("blue", [P(2, 2), P(2, 3)], CardLabel.BLACK_JOKER))

        assert blue.position == P(2, 2)
        assert result.success

    def test_json_round_trip(self, played_state):
        restored = snapshot_from_json(snapshot_to_json(played_state))

        assert restored.success
        assert restored.value.board == played_state.board

    @pytest.mark.parametrize("missing", ["board", "players"])
    def test_missing_required_field(self, played_state, missing):
        snap = to_snapshot(played_state)
        del snap[missing]

        result = from_snapshot(snap)

        assert not result.success
        assert result.error_code == ErrorCode.CORRUPTED_SNAPSHOT

    @pytest.mark.parametrize("data", [None, [], "board", 7])
    def test_not_a_mapping(self, data):
        assert from_snapshot(data).error_code == ErrorCode.CORRUPTED_SNAPSHOT

    def test_unknown_label(self, played_state):
        snap = to_snapshot(played_state)
        snap["board"][3][3]["label"] = "king"

        assert from_snapshot(snap).error_code == ErrorCode.CORRUPTED_SNAPSHOT

    def test_short_row(self, played_state):
        snap = to_snapshot(played_state)
        snap["board"][2].pop()

        assert from_snapshot(snap).error_code == ErrorCode.CORRUPTED_SNAPSHOT

    def test_bad_distribution(self, played_state):
        snap = to_snapshot(played_state)
        snap["board"][3][3]["label"] = "A" if snap["board"][3][3]["label"] != "A" else "2"

        assert from_snapshot(snap).error_code == ErrorCode.CORRUPTED_SNAPSHOT

    def test_position_off_board(self, played_state):
        snap = to_snapshot(played_state)
        snap["players"][1]["position"] = {"row": 5, "col": 0}

        assert from_snapshot(snap).error_code == ErrorCode.CORRUPTED_SNAPSHOT

    def test_marker_disagrees_with_position(self, played_state):
        snap = to_snapshot(played_state)
        snap["players"][0]["position"] = {"row": 3, "col": 3}

        assert from_snapshot(snap).error_code == ErrorCode.CORRUPTED_SNAPSHOT

    def test_unknown_occupant(self, played_state):
        snap = to_snapshot(played_state)
        snap["board"][1][1]["occupant_id"] = "green"

        assert from_snapshot(snap).error_code == ErrorCode.CORRUPTED_SNAPSHOT

    def test_ended_without_winner(self, played_state):
        snap = to_snapshot(played_state)
        snap["status"] = "ended"

        assert from_snapshot(snap).error_code == ErrorCode.CORRUPTED_SNAPSHOT

    def test_missing_game_id_is_generated(self, played_state):
        snap = to_snapshot(played_state)
        del snap["game_id"]

        restored = from_snapshot(snap)

        assert restored.success
        assert restored.value.game_id

    def test_invalid_json(self):
        result = snapshot_from_json("{not json")

        assert result.error_code == ErrorCode.CORRUPTED_SNAPSHOT

    def test_missing_position_in_live_game(self, adjacent_jokers_state):
        snap = to_snapshot(adjacent_jokers_state)
        snap["players"][0]["position"] = None
        snap["board"][0][0]["occupant_id"] = None

        result = from_snapshot(snap)

        assert result.error_code == ErrorCode.CORRUPTED_SNAPSHOT
        assert "red" in result.error

    def test_missing_position_in_ended_game(self, adjacent_jokers_state):
        snap = to_snapshot(adjacent_jokers_state)
        snap["status"] = "ended"
        snap["winner"] = "red"
        snap["players"][1]["position"] = None
        snap["board"][0][1]["occupant_id"] = None

        assert from_snapshot(snap).error_code == ErrorCode.CORRUPTED_SNAPSHOT

    def test_unplaced_players_allowed_during_setup(self, adjacent_jokers_state):
        snap = to_snapshot(adjacent_jokers_state)
        snap["status"] = "setup"
        for player in snap["players"]:
            player["position"] = None
        snap["board"][0][0]["occupant_id"] = None
        snap["board"][0][1]["occupant_id"] = None

        restored = from_snapshot(snap)

        assert restored.success
        assert restored.value.phase == GamePhase.SETUP

    def test_game_id_override(self, played_state):
        restored = from_snapshot(to_snapshot(played_state), game_id="copy")

        assert restored.value.game_id == "copy"

    def test_start_time_round_trip(self, corner_jokers_state):
        restored = from_snapshot(to_snapshot(corner_jokers_state)).value

        assert corner_jokers_state.started_at is not None
        assert restored.started_at == corner_jokers_state.started_at
