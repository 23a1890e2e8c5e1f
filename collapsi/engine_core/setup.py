"""
Game Setup - Creates initial game state.

This module handles:
- The standard 16-card deck
- Shuffling with a seed for determinism
- Named fixed layouts for development and tests
- Placing both pawns on their jokers

Red starts on the red joker and moves first; blue starts on the black joker.
"""

from __future__ import annotations
import random
import time
import uuid
from typing import Sequence

from .state import CardLabel, GamePhase, GameState, Player, PlayerColor
from .board import DECK_SIZE, build_board
from .action import ErrorCode, Result


A, TWO, THREE, FOUR = CardLabel.ACE, CardLabel.TWO, CardLabel.THREE, CardLabel.FOUR
RJ, BJ = CardLabel.RED_JOKER, CardLabel.BLACK_JOKER

STANDARD_DECK: tuple[CardLabel, ...] = (
    RJ, BJ,
    A, A, A, A,
    TWO, TWO, TWO, TWO,
    THREE, THREE, THREE, THREE,
    FOUR, FOUR,
)

LAYOUTS: dict[str, tuple[CardLabel, ...]] = {
    # Jokers next to each other
    "jokers-adjacent": (
        RJ, BJ, A, A,
        A, A, TWO, TWO,
        TWO, TWO, THREE, THREE,
        THREE, THREE, FOUR, FOUR,
    ),
    # Jokers in opposite corners of the top row
    "jokers-corners": (
        RJ, A, A, BJ,
        A, TWO, TWO, TWO,
        TWO, THREE, THREE, THREE,
        THREE, FOUR, FOUR, A,
    ),
    # Fours in the middle
    "high-cards-center": (
        RJ, A, A, BJ,
        A, FOUR, FOUR, A,
        TWO, THREE, THREE, TWO,
        TWO, TWO, THREE, THREE,
    ),
}


def shuffle_deck(deck: Sequence[CardLabel], rng: random.Random) -> Result[list[CardLabel]]:
    """Fisher-Yates shuffle into a new list."""
    if len(deck) != DECK_SIZE:
        return Result.failure(
            ErrorCode.INVALID_DECK_SIZE,
            f"Invalid deck size: {len(deck)}. Expected: {DECK_SIZE}",
        )
    shuffled = list(deck)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return Result.ok(shuffled)


def create_players() -> list[Player]:
    return [
        Player(player_id="red", color=PlayerColor.RED, starting_card=CardLabel.RED_JOKER),
        Player(player_id="blue", color=PlayerColor.BLUE, starting_card=CardLabel.BLACK_JOKER),
    ]


def new_game(
    random_seed: int | None = None,
    deck: Sequence[CardLabel | str] | None = None,
    layout: str | None = None,
    game_id: str | None = None,
) -> Result[GameState]:
    """
    Set up a new game ready for red's first move.

    Args:
        random_seed: Seed for deterministic shuffling
        deck: Exact 16-card layout, row-major (skips shuffling)
        layout: Name of a fixed layout from LAYOUTS (skips shuffling)
        game_id: Identifier; generated if not provided

    Returns:
        Result holding the initial GameState
    """
    if deck is None and layout is not None:
        if layout not in LAYOUTS:
            return Result.failure(
                ErrorCode.UNKNOWN_LAYOUT,
                f"Unknown layout: {layout}. Known: {', '.join(sorted(LAYOUTS))}",
            )
        deck = LAYOUTS[layout]

    if deck is None:
        shuffled = shuffle_deck(STANDARD_DECK, random.Random(random_seed))
        if not shuffled.success:
            return Result.failure(shuffled.error_code, shuffled.error)
        deck = shuffled.value

    built = build_board(deck)
    if not built.success:
        return Result.failure(built.error_code, built.error)
    board = built.value

    players = create_players()
    for player in players:
        pos = board.find(player.starting_card)
        player.position = pos
        board.place(pos, player.player_id)

    state = GameState(
        game_id=game_id or str(uuid.uuid4()),
        board=board,
        players=players,
        phase=GamePhase.PLAYING,
        current_player_idx=0,
        random_seed=random_seed,
        started_at=time.time(),
    )
    return Result.ok(state)
