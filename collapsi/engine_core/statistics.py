"""
Statistics - Summary figures derived from a GameState.

Nothing here is stored: every figure is recomputed from the move history,
the board and the timestamps, so a restored snapshot reports the same
statistics as the game it was taken from.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from .state import GameState


@dataclass(frozen=True)
class PlayerStatistics:
    """Per-player totals."""
    player_id: str
    turns: int = 0
    total_distance: int = 0
    joker_moves: int = 0
    # Seconds between the previous move (or game start) and this player's moves
    average_turn_seconds: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "turns": self.turns,
            "total_distance": self.total_distance,
            "joker_moves": self.joker_moves,
            "average_turn_seconds": self.average_turn_seconds,
        }


@dataclass(frozen=True)
class GameStatistics:
    """Whole-game totals."""
    total_moves: int
    collapsed_cards: int
    collapsed_by_label: dict[str, int] = field(default_factory=dict)
    collapsed_by_player: dict[str, int] = field(default_factory=dict)
    duration_seconds: float | None = None
    winner: str | None = None
    players: dict[str, PlayerStatistics] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_moves": self.total_moves,
            "collapsed_cards": self.collapsed_cards,
            "collapsed_by_label": dict(self.collapsed_by_label),
            "collapsed_by_player": dict(self.collapsed_by_player),
            "duration_seconds": self.duration_seconds,
            "winner": self.winner,
            "players": {pid: stats.to_dict() for pid, stats in self.players.items()},
        }


def game_statistics(state: GameState) -> GameStatistics:
    """
    Compute statistics for a game in any phase.

    Every move collapses the card it left, so collapses are credited to the
    mover. Turn times need a start time: the first move is timed from
    started_at and later moves from the move before. duration_seconds runs
    from started_at to the last move, and is None without a start time.
    """
    board = state.board
    collapsed = board.collapsed_positions()
    by_label = Counter(board.label_at(pos).value for pos in collapsed)

    turns: Counter[str] = Counter()
    distance: Counter[str] = Counter()
    jokers: Counter[str] = Counter()
    turn_times: dict[str, list[float]] = {p.player_id: [] for p in state.players}

    previous = state.started_at
    for record in state.move_history:
        pid = record.player_id
        turns[pid] += 1
        distance[pid] += record.distance
        if record.card_label.is_joker:
            jokers[pid] += 1
        if previous is not None:
            turn_times.setdefault(pid, []).append(record.timestamp - previous)
        previous = record.timestamp

    duration = None
    if state.started_at is not None:
        last = state.move_history[-1].timestamp if state.move_history else state.started_at
        duration = last - state.started_at

    players = {}
    for player in state.players:
        pid = player.player_id
        times = turn_times.get(pid)
        players[pid] = PlayerStatistics(
            player_id=pid,
            turns=turns[pid],
            total_distance=distance[pid],
            joker_moves=jokers[pid],
            average_turn_seconds=sum(times) / len(times) if times else None,
        )

    return GameStatistics(
        total_moves=len(state.move_history),
        collapsed_cards=len(collapsed),
        collapsed_by_label=dict(by_label),
        collapsed_by_player=dict(turns),
        duration_seconds=duration,
        winner=state.winner,
        players=players,
    )
