"""
Tests for the in-memory session manager.
"""

import threading

import pytest

from ..engine_core.controller import TurnController
from ..engine_core.state import CardLabel, Position
from ..session import SessionExistsError, SessionManager, SessionState


@pytest.fixture
def manager():
    return SessionManager()


@pytest.fixture
def controller():
    return TurnController.new(layout="jokers-corners", game_id="g1").value


class TestSessionManager:
    """Tests for session lifecycle."""

    def test_session_id_is_game_id(self, manager, controller):
        session = manager.create_session(controller)

        assert session.session_id == "g1"
        assert session.is_active()
        assert manager.get_session("g1") is session

    def test_end_session(self, manager, controller):
        manager.create_session(controller)

        assert manager.end_session("g1", reason="user_ended")
        assert manager.get_session("g1") is None
        assert not manager.end_session("g1")

    def test_list_active_excludes_finished(self, manager, controller):
        manager.create_session(controller)
        other = manager.create_session(TurnController.new(game_id="g2").value)
        other.state = SessionState.GAME_OVER

        assert set(manager.list_sessions()) == {"g1", "g2"}
        assert manager.list_active_sessions() == ["g1"]

    def test_cleanup_keeps_active_games(self, manager, controller):
        session = manager.create_session(controller)
        session.created_at -= 100

        assert manager.cleanup_stale_sessions(max_age_seconds=10) == []
        assert manager.get_session("g1") is session

    def test_duplicate_id_rejected(self, manager, controller):
        """A second game with a live game's id does not replace it."""
        session = manager.create_session(controller)
        session.controller.move("red", [Position(0, 0), Position(1, 0)], CardLabel.RED_JOKER)
        duplicate = TurnController.new(layout="jokers-corners", game_id="g1").value

        with pytest.raises(SessionExistsError):
            manager.create_session(duplicate)

        assert manager.get_session("g1") is session
        assert len(session.controller.state.move_history) == 1

    def test_cleanup_drops_idle_games(self, manager, controller):
        session = manager.create_session(controller)
        session.last_activity -= 100

        assert manager.cleanup_stale_sessions(max_age_seconds=10, max_idle_seconds=50) == ["g1"]
        assert manager.get_session("g1") is None

    def test_touch_keeps_game_alive(self, manager, controller):
        session = manager.create_session(controller)
        session.last_activity -= 100
        session.touch()

        assert manager.cleanup_stale_sessions(max_age_seconds=10, max_idle_seconds=50) == []
        assert manager.get_session("g1") is session

    def test_refresh_state_after_win(self, manager, make_state):
        """A session whose game has ended reports GAME_OVER."""
        state = make_state(
            placements={(1, 1): CardLabel.ACE, (1, 3): CardLabel.ACE},
            red=(1, 3),
            blue=(1, 1),
            collapsed=[(0, 1), (2, 1), (1, 0)],
        )
        session = manager.create_session(TurnController(state))

        with session.lock:
            session.controller.move("red", [Position(1, 3), Position(1, 2)], CardLabel.ACE)
            session.refresh_state()

        assert session.state == SessionState.GAME_OVER
        assert manager.list_active_sessions() == []

    def test_lock_serializes_access(self, manager, controller):
        session = manager.create_session(controller)
        acquired = []

        with session.lock:
            worker = threading.Thread(target=lambda: acquired.append(session.lock.acquire(timeout=0.05)))
            worker.start()
            worker.join()

        assert acquired == [False]
