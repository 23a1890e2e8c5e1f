"""
Collapsi CLI - Command-line interface for the engine.

Usage:
    collapsi new [--seed N] [--layout NAME] [--json]    Deal a board
    collapsi moves [--seed N] [--layout NAME] [--player ID]
                                                         List legal paths
    collapsi serve [--host HOST] [--port PORT]           Run the HTTP API
"""

import argparse
import json
import sys

from .engine_core import LAYOUTS, GameState, TurnController


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Collapsi - two-player board game engine",
        prog="collapsi",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # New command
    new_parser = subparsers.add_parser("new", help="Deal a new board")
    _add_game_arguments(new_parser)
    new_parser.add_argument("--json", action="store_true", help="Print the snapshot as JSON")

    # Moves command
    moves_parser = subparsers.add_parser("moves", help="List legal paths for a player")
    _add_game_arguments(moves_parser)
    moves_parser.add_argument("--player", help="Player id (default: player to move)")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)

    if args.command == "new":
        cmd_new(args)
    elif args.command == "moves":
        cmd_moves(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _add_game_arguments(subparser):
    subparser.add_argument("--seed", type=int, help="Shuffle seed")
    subparser.add_argument("--layout", choices=sorted(LAYOUTS), help="Fixed layout")


def _start(args) -> TurnController:
    created = TurnController.new(random_seed=args.seed, layout=args.layout)
    if not created.success:
        print(f"Error: {created.error}")
        sys.exit(1)
    return created.value


def render_board(state: GameState) -> str:
    """Text grid of the board. Collapsed cards show as 'xx', players by initial."""
    rows = []
    for r, row in enumerate(state.board.cells):
        cells = []
        for cell in row:
            if cell.collapsed:
                text = "xx"
            else:
                text = {"red-joker": "RJ", "black-joker": "BJ"}.get(cell.label.value, cell.label.value)
            marker = cell.occupant_id[0].upper() if cell.occupant_id else " "
            cells.append(f"{text:>2}{marker}")
        rows.append(f"{r} | " + " ".join(cells))
    header = "    " + " ".join(f"{c:>2} " for c in range(len(state.board.cells[0])))
    return "\n".join([header] + rows)


def cmd_new(args):
    """Deal a board and print it."""
    controller = _start(args)

    if args.json:
        print(json.dumps(controller.snapshot(), indent=2))
        return

    state = controller.state
    print(f"Game: {state.game_id}")
    print(render_board(state))
    print(f"\nTo move: {state.current_player.player_id}")


def cmd_moves(args):
    """Print every legal path for a player."""
    controller = _start(args)
    state = controller.state
    player_id = args.player or state.current_player.player_id
    if state.get_player(player_id) is None:
        print(f"Error: Unknown player: {player_id}")
        sys.exit(1)

    paths = controller.legal_moves(player_id)
    print(render_board(state))
    print(f"\n{player_id}: {len(paths)} legal path(s)")
    for path in paths:
        print("  " + " -> ".join(str(p) for p in path))


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    from .api.app import configure_logging

    configure_logging()
    uvicorn.run("collapsi.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
