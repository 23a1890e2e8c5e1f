"""
Turn Controller - Owner of the authoritative GameState.

Every operation goes through the reducer; the held state is replaced only
when an action succeeds, so a rejected move leaves it untouched. The
controller does no locking: callers must not interleave operations on the
same game (see session/manager.py).
"""

from __future__ import annotations
from typing import Any, Sequence

from .state import CardLabel, GameState, Position
from .action import Action, ActionResult, Result
from .action_generator import ActionGenerator, MovePath
from .joker import JokerPhase, joker_phase, valid_joker_steps
from .reducer import Reducer
from .setup import new_game
from .snapshot import from_snapshot, to_snapshot
from .statistics import GameStatistics, game_statistics


class TurnController:
    """
    Drives one game.

    Usage:
        controller = TurnController.new(random_seed=7)
        result = controller.move("red", path, CardLabel.ACE)
        if not result.success:
            show(result.error_code, result.error)
    """

    def __init__(self, state: GameState, reducer: Reducer | None = None):
        self._state = state
        self._reducer = reducer or Reducer()
        self._generator = ActionGenerator()

    @classmethod
    def new(cls, **kwargs) -> Result[TurnController]:
        """Start a fresh game. Accepts the arguments of setup.new_game."""
        created = new_game(**kwargs)
        if not created.success:
            return Result.failure(created.error_code, created.error)
        return Result.ok(cls(created.value))

    @classmethod
    def restore(cls, snapshot: Any, game_id: str | None = None) -> Result[TurnController]:
        """Resume a game from a snapshot, optionally under a different id."""
        restored = from_snapshot(snapshot, game_id=game_id)
        if not restored.success:
            return Result.failure(restored.error_code, restored.error)
        return Result.ok(cls(restored.value))

    @property
    def state(self) -> GameState:
        """A copy of the current state; the original stays with the controller."""
        return self._state.clone()

    @property
    def game_id(self) -> str:
        return self._state.game_id

    def apply(self, action: Action) -> ActionResult:
        result = self._reducer.apply(self._state, action)
        if result.success:
            self._state = result.new_state
        return result

    def move(
        self,
        player_id: str,
        path: Sequence[Position],
        card_label: CardLabel | str,
        from_position: Position | None = None,
        to_position: Position | None = None,
    ) -> ActionResult:
        return self.apply(Action.move(player_id, path, card_label, from_position, to_position))

    def start_joker(self, player_id: str) -> ActionResult:
        return self.apply(Action.joker_start(player_id))

    def step_joker(self, player_id: str, target: Position) -> ActionResult:
        return self.apply(Action.joker_step(player_id, target))

    def complete_joker(self, player_id: str) -> ActionResult:
        return self.apply(Action.joker_complete(player_id))

    def cancel_joker(self, player_id: str) -> ActionResult:
        return self.apply(Action.joker_cancel(player_id))

    def joker_phase(self) -> JokerPhase:
        return joker_phase(self._state.joker_state, self._state.board, self._state.players)

    def joker_steps(self) -> list[Position]:
        return valid_joker_steps(self._state.joker_state, self._state.board, self._state.players)

    def legal_moves(self, player_id: str | None = None) -> list[MovePath]:
        """Legal paths for a player (default: the one to move)."""
        pid = player_id or self._state.current_player.player_id
        return self._generator.enumerate_paths(self._state, pid)

    def snapshot(self) -> dict[str, Any]:
        return to_snapshot(self._state)

    def statistics(self) -> GameStatistics:
        return game_statistics(self._state)
