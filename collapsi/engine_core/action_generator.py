"""
Action Generator - Enumerates every legal move from a game state.

The action generator is used by:
1. Win detection (a player with no legal move has lost)
2. Clients previewing destinations
3. Validation (is this action in legal_actions?)

Enumeration is a depth-bounded search over the four directions. Each
branch is pruned as soon as it revisits a cell or crosses a collapsed or
opponent-held card, which matches what rules.validate_path accepts. After
the first step at most three directions stay open, so a 4-space search
explores at most 4 * 3**3 paths.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import GameState, GamePhase, Position
from .action import Action, ActionType
from .board import neighbors
from . import rules


MovePath = tuple[Position, ...]


@dataclass
class ActionGenerator:
    """
    Generates legal moves for a game state.

    Stateless; safe to call speculatively without touching the state.
    """

    def enumerate_paths(self, state: GameState, player_id: str) -> list[MovePath]:
        """
        All complete legal paths for a player, in search order.

        Ignores whose turn it is and whether the game has ended, so it can
        be asked about either player at any time.
        """
        player = state.get_player(player_id)
        if player is None or player.position is None:
            return []

        start = player.position
        cell = state.board.cell(start)
        if cell.collapsed:
            return []

        spec = cell.label.movement
        max_depth = max(spec.distances)
        found: list[MovePath] = []

        def extend(path: list[Position]) -> None:
            depth = len(path) - 1
            if depth > 0 and spec.allows(depth):
                candidate = tuple(path)
                if rules.validate_path(candidate, cell.label, state.board, state.players, player_id):
                    found.append(candidate)
            if depth == max_depth:
                return
            for nxt in neighbors(path[-1]):
                if rules.validate_step(path, nxt, state.board, state.players, player_id):
                    path.append(nxt)
                    extend(path)
                    path.pop()

        extend([start])
        return found

    def generate(self, state: GameState) -> list[Action]:
        """
        Legal complete moves for the current player, as MOVE actions.

        Joker moves are listed as complete paths too; they can be submitted
        directly or built up through the joker actions.
        """
        if state.phase != GamePhase.PLAYING:
            return []

        player = state.current_player
        if player.position is None:
            return []
        label = state.board.label_at(player.position)
        return [
            Action.move(player.player_id, path, label)
            for path in self.enumerate_paths(state, player.player_id)
        ]

    def destinations(self, state: GameState, player_id: str) -> list[Position]:
        """Distinct end cells reachable this turn, in search order."""
        seen: list[Position] = []
        for path in self.enumerate_paths(state, player_id):
            if path[-1] not in seen:
                seen.append(path[-1])
        return seen


def enumerate_legal_moves(state: GameState, player_id: str) -> list[MovePath]:
    """Convenience wrapper around ActionGenerator.enumerate_paths."""
    return ActionGenerator().enumerate_paths(state, player_id)


def has_legal_move(state: GameState, player_id: str) -> bool:
    return bool(enumerate_legal_moves(state, player_id))


def legal_actions(state: GameState) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    generator = ActionGenerator()
    return generator.generate(state)


def is_legal(state: GameState, action: Action) -> bool:
    """Check if a specific move action is legal."""
    if action.action_type != ActionType.MOVE:
        return False
    legal = legal_actions(state)
    for a in legal:
        if (
            a.payload.player_id == action.payload.player_id
            and a.payload.path == tuple(action.payload.path or ())
        ):
            return True
    return False
