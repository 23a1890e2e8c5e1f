"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- (state, action) -> ActionResult with a new state; the input is never modified
- Validates before applying
- Collapse of the departure card is the last board mutation of a move
- After every move the turn passes and the win condition is checked
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence
import logging
import time

from .state import CardLabel, GamePhase, GameState, MoveRecord, Position
from .action import Action, ActionType, ActionResult, ErrorCode
from .action_generator import ActionGenerator
from . import joker as joker_machine
from . import rules


logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """
    generator: ActionGenerator = field(default_factory=ActionGenerator)

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error.
        """
        validation_error = self._validate_action(state, action)
        if validation_error:
            logger.info(
                "Rejected %s from %s in game %s: %s",
                action.action_type.value, action.payload.player_id, state.game_id,
                validation_error.error,
            )
            return validation_error

        handler = self._get_handler(action.action_type)
        result = handler(state, action)
        if not result.success:
            logger.info(
                "Rejected %s from %s in game %s: %s",
                action.action_type.value, action.payload.player_id, state.game_id, result.error,
            )
        return result

    def _validate_action(self, state: GameState, action: Action) -> ActionResult | None:
        """
        Checks shared by every action.

        Returns a failure result if invalid, None if valid.
        """
        if state.phase == GamePhase.ENDED:
            return ActionResult.failure("Game is over - no actions allowed", ErrorCode.GAME_OVER)

        if state.phase == GamePhase.SETUP:
            return ActionResult.failure("Game not started", ErrorCode.GAME_NOT_STARTED)

        player_id = action.payload.player_id
        if state.get_player(player_id) is None:
            return ActionResult.failure(f"Player {player_id} not found", ErrorCode.UNKNOWN_PLAYER)

        if player_id != state.current_player.player_id:
            return ActionResult.failure(f"Not {player_id}'s turn", ErrorCode.NOT_YOUR_TURN)

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.MOVE: self._handle_move,
            ActionType.JOKER_START: self._handle_joker_start,
            ActionType.JOKER_STEP: self._handle_joker_step,
            ActionType.JOKER_COMPLETE: self._handle_joker_complete,
            ActionType.JOKER_CANCEL: self._handle_joker_cancel,
        }
        return handlers[action_type]

    def _handle_move(self, state: GameState, action: Action) -> ActionResult:
        if state.joker_state is not None and state.joker_state.active:
            return ActionResult.failure(
                "A joker move is in progress; complete or cancel it first",
                ErrorCode.JOKER_MOVE_IN_PROGRESS,
            )

        payload = action.payload
        return self.execute_move(
            state,
            payload.from_position,
            payload.to_position,
            payload.path or (),
            payload.card_label,
            payload.player_id,
        )

    def _handle_joker_start(self, state: GameState, action: Action) -> ActionResult:
        if state.joker_state is not None and state.joker_state.active:
            return ActionResult.failure(
                "A joker move is already in progress",
                ErrorCode.JOKER_MOVE_IN_PROGRESS,
            )

        player = state.get_player(action.payload.player_id)
        started = joker_machine.start_joker(state.board, player, player.position)
        if not started.success:
            return ActionResult.failure(started.error, started.error_code)

        new_state = state.clone()
        new_state.joker_state = started.value
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{player.player_id} started a joker move from {player.position}"],
        )

    def _handle_joker_step(self, state: GameState, action: Action) -> ActionResult:
        target = action.payload.target
        if target is None:
            return ActionResult.failure("Joker step needs a target", ErrorCode.POSITION_OUT_OF_RANGE)

        stepped = joker_machine.step_joker(state.joker_state, target, state.board, state.players)
        if not stepped.success:
            return ActionResult.failure(stepped.error, stepped.error_code)

        new_state = state.clone()
        new_state.joker_state = stepped.value
        phase = joker_machine.joker_phase(stepped.value, new_state.board, new_state.players)
        return ActionResult.success_with_state(
            new_state,
            changes=[
                f"{action.payload.player_id} stepped to {target} "
                f"({stepped.value.remaining_distance} remaining, {phase.value})"
            ],
        )

    def _handle_joker_complete(self, state: GameState, action: Action) -> ActionResult:
        completed = joker_machine.complete_joker(state.joker_state, state.board, state.players)
        if not completed.success:
            return ActionResult.failure(completed.error, completed.error_code)

        record = completed.value
        cleared = state.clone()
        cleared.joker_state = None
        return self.execute_move(
            cleared,
            record.from_position,
            record.to_position,
            record.path,
            record.card_label,
            record.player_id,
        )

    def _handle_joker_cancel(self, state: GameState, action: Action) -> ActionResult:
        cancelled = joker_machine.cancel_joker(state.joker_state)
        if not cancelled.success:
            return ActionResult.failure(cancelled.error, cancelled.error_code)

        new_state = state.clone()
        new_state.joker_state = None
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{action.payload.player_id} cancelled the joker move"],
        )

    def execute_move(
        self,
        state: GameState,
        from_position: Position | None,
        to_position: Position | None,
        path: Sequence[Position],
        card_label: CardLabel | str | None,
        player_id: str,
    ) -> ActionResult:
        """
        Validate and apply a complete move.

        Mutations happen on a clone in this order: vacate the start, occupy
        the destination, collapse the start, record the move, pass the turn.
        Every check runs before the first mutation, and none of the
        mutations can fail on a validated path.
        """
        if state.phase == GamePhase.ENDED:
            return ActionResult.failure("Game is over - no actions allowed", ErrorCode.GAME_OVER)

        player = state.get_player(player_id)
        if player is None:
            return ActionResult.failure(f"Player {player_id} not found", ErrorCode.UNKNOWN_PLAYER)

        path = tuple(path)
        if len(path) < 2:
            return ActionResult.failure(
                f"Path must contain at least 2 positions, got {len(path)}",
                ErrorCode.DISTANCE_MISMATCH,
            )
        if from_position is None or to_position is None:
            return ActionResult.failure("Move needs from and to positions", ErrorCode.POSITION_MISMATCH)
        for pos in (from_position, to_position, *path):
            if not pos.in_bounds():
                return ActionResult.failure(f"Position out of range: {pos}", ErrorCode.POSITION_OUT_OF_RANGE)
        if path[0] != from_position or path[-1] != to_position:
            return ActionResult.failure(
                f"Path runs {path[0]} -> {path[-1]}, move claims {from_position} -> {to_position}",
                ErrorCode.POSITION_MISMATCH,
            )
        if player.position != from_position:
            return ActionResult.failure(
                "Player position does not match starting position",
                ErrorCode.POSITION_MISMATCH,
            )

        label = CardLabel.parse(card_label)
        if label is None:
            return ActionResult.failure(f"Unknown card type: {card_label!r}", ErrorCode.UNKNOWN_CARD_LABEL)
        if label != state.board.label_at(from_position):
            return ActionResult.failure(
                f"Card at {from_position} is {state.board.label_at(from_position).value}, "
                f"not {label.value}",
                ErrorCode.CARD_LABEL_MISMATCH,
            )

        validation = rules.validate_path(path, label, state.board, state.players, player_id)
        if not validation:
            return ActionResult.from_validation(validation)

        new_state = state.clone()
        board = new_state.board
        board.vacate(from_position)
        board.place(to_position, player_id)
        new_state.get_player(player_id).position = to_position
        board.collapse(from_position)

        record = MoveRecord(
            player_id=player_id,
            from_position=from_position,
            to_position=to_position,
            path=path,
            distance=len(path) - 1,
            card_label=label,
            timestamp=time.time(),
        )
        new_state.move_history.append(record)

        mover_idx = new_state.player_index(player_id)
        new_state.current_player_idx = (mover_idx + 1) % len(new_state.players)

        logger.info(
            "Game %s: %s moved %s -> %s on %s (%d spaces)",
            new_state.game_id, player_id, from_position, to_position, label.value, record.distance,
        )

        new_state = self.check_win_condition(new_state).new_state

        changes = [f"{player_id} moved {record.distance} from {from_position} to {to_position}"]
        if new_state.is_over:
            changes.append(f"{new_state.winner} wins")
        return ActionResult.success_with_state(new_state, changes=changes, move_record=record)

    def check_win_condition(self, state: GameState) -> ActionResult:
        """
        End the game if the player to move has no legal move.

        The winner is the player who moved last. The state is returned
        unchanged when play continues.
        """
        if state.phase != GamePhase.PLAYING:
            return ActionResult.success_with_state(state)

        to_move = state.current_player
        if self.generator.enumerate_paths(state, to_move.player_id):
            return ActionResult.success_with_state(state)

        ended = state.clone()
        previous = ended.opponent_of(to_move.player_id)
        ended.phase = GamePhase.ENDED
        ended.winner = previous.player_id if previous else None
        ended.get_player(to_move.player_id).active = False
        ended.joker_state = None

        logger.info(
            "Game %s over: %s has no legal move, %s wins",
            ended.game_id, to_move.player_id, ended.winner,
        )
        return ActionResult.success_with_state(ended, changes=[f"{ended.winner} wins"])


def apply_action(state: GameState, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer()
    return reducer.apply(state, action)


def execute_move(
    state: GameState,
    from_position: Position,
    to_position: Position,
    path: Sequence[Position],
    card_label: CardLabel | str,
    player_id: str,
) -> ActionResult:
    """
    Apply a complete move without the turn-order check.

    Game-over, position, label and path rules still apply.
    """
    return Reducer().execute_move(state, from_position, to_position, path, card_label, player_id)


def check_win_condition(state: GameState) -> ActionResult:
    return Reducer().check_win_condition(state)
