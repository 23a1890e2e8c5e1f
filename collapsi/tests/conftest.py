"""
Pytest fixtures for Collapsi tests.
"""

import pytest
from collections import Counter

from ..engine_core.state import (
    BOARD_SIZE,
    CardLabel,
    GamePhase,
    GameState,
    Player,
    PlayerColor,
    Position,
)
from ..engine_core.board import REQUIRED_DISTRIBUTION, build_board
from ..engine_core.setup import new_game


def deck_with(placements: dict) -> list[CardLabel]:
    """
    A legal 16-card deck with the given labels at the given (row, col)s.

    Remaining cells are filled row-major from the unused cards.
    """
    remaining = Counter(REQUIRED_DISTRIBUTION)
    for label in placements.values():
        remaining[label] -= 1
    filler = [label for label, count in remaining.items() for _ in range(count)]

    deck = []
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            if (row, col) in placements:
                deck.append(placements[(row, col)])
            else:
                deck.append(filler.pop(0))
    return deck


@pytest.fixture
def make_state():
    """
    Factory for hand-built game states.

    make_state(
        placements={(0, 1): CardLabel.ACE},
        red=(0, 1), blue=(2, 2),
        collapsed=[(1, 1)],
        current="red",
    )
    """
    def _make(placements=None, red=(0, 0), blue=(2, 2), collapsed=(), current="red"):
        board = build_board(deck_with(placements or {})).value
        players = [
            Player(player_id="red", color=PlayerColor.RED, starting_card=CardLabel.RED_JOKER),
            Player(player_id="blue", color=PlayerColor.BLUE, starting_card=CardLabel.BLACK_JOKER),
        ]
        for player, at in zip(players, (red, blue)):
            pos = Position(*at)
            player.position = pos
            board.place(pos, player.player_id)
        for at in collapsed:
            board.collapse(Position(*at))

        return GameState(
            game_id="test_game",
            board=board,
            players=players,
            phase=GamePhase.PLAYING,
            current_player_idx=0 if current == "red" else 1,
        )
    return _make


@pytest.fixture
def adjacent_jokers_state() -> GameState:
    """New game on the jokers-adjacent layout: red on (0, 0), blue on (0, 1)."""
    return new_game(layout="jokers-adjacent", game_id="test_game").value


@pytest.fixture
def corner_jokers_state() -> GameState:
    """New game on the jokers-corners layout: red on (0, 0), blue on (0, 3)."""
    return new_game(layout="jokers-corners", game_id="test_game").value


@pytest.fixture
def ace_state(make_state) -> GameState:
    """Red on an Ace at (0, 1), blue on the black joker at (2, 2)."""
    return make_state(
        placements={(0, 1): CardLabel.ACE, (2, 2): CardLabel.BLACK_JOKER},
        red=(0, 1),
        blue=(2, 2),
    )


@pytest.fixture
def joker_state(make_state) -> GameState:
    """Red on the red joker at (0, 0), blue on the black joker at (2, 2)."""
    return make_state(
        placements={(0, 0): CardLabel.RED_JOKER, (2, 2): CardLabel.BLACK_JOKER},
        red=(0, 0),
        blue=(2, 2),
    )
