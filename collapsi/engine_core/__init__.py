"""
Engine Core - Deterministic Collapsi rules and state management.

The engine is the runtime that:
1. Builds the toroidal board
2. Validates move paths
3. Runs joker moves step by step
4. Applies moves via the reducer and passes the turn
5. Detects the end of the game by enumerating legal moves
6. Derives game statistics from the move history
"""

from .state import (
    BOARD_SIZE,
    CardLabel,
    Cell,
    GamePhase,
    GameState,
    MoveRecord,
    MovementSpec,
    Player,
    PlayerColor,
    Position,
)
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode, Result, Validation
from .board import Board, build_board, neighbors, is_step
from .rules import movement_spec, validate_distance, validate_path
from .joker import (
    JokerMovementState,
    JokerPhase,
    start_joker,
    step_joker,
    complete_joker,
    cancel_joker,
    joker_phase,
)
from .action_generator import ActionGenerator, enumerate_legal_moves, legal_actions
from .reducer import Reducer, apply_action, execute_move, check_win_condition
from .setup import STANDARD_DECK, LAYOUTS, new_game
from .snapshot import GameSnapshot, to_snapshot, from_snapshot
from .statistics import GameStatistics, PlayerStatistics, game_statistics
from .controller import TurnController

__all__ = [
    "BOARD_SIZE",
    "CardLabel",
    "Cell",
    "GamePhase",
    "GameState",
    "MoveRecord",
    "MovementSpec",
    "Player",
    "PlayerColor",
    "Position",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "Result",
    "Validation",
    "Board",
    "build_board",
    "neighbors",
    "is_step",
    "movement_spec",
    "validate_distance",
    "validate_path",
    "JokerMovementState",
    "JokerPhase",
    "start_joker",
    "step_joker",
    "complete_joker",
    "cancel_joker",
    "joker_phase",
    "ActionGenerator",
    "enumerate_legal_moves",
    "legal_actions",
    "Reducer",
    "apply_action",
    "execute_move",
    "check_win_condition",
    "STANDARD_DECK",
    "LAYOUTS",
    "new_game",
    "GameSnapshot",
    "to_snapshot",
    "from_snapshot",
    "GameStatistics",
    "PlayerStatistics",
    "game_statistics",
    "TurnController",
]
