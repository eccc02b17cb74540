"""CLI argument parser and dispatch for kanbanwave."""

import argparse

from kanbanwave.cli.board import board_list, board_show
from kanbanwave.cli.replay import replay


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="Config file (default: $KANBANWAVE_CONFIG or ./kanbanwave.yaml)")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")

    parser = argparse.ArgumentParser(
        prog="kanbanwave",
        description="Ordered kanban boards with optimistic reordering",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- board ---
    board_p = nouns.add_parser("board", help="Board operations", parents=[common])
    board_verbs = board_p.add_subparsers(dest="verb")

    board_list_p = board_verbs.add_parser("list", help="List boards", parents=[common])
    board_list_p.add_argument("file", help="Board file (YAML)")
    board_list_p.set_defaults(func=board_list)

    board_show_p = board_verbs.add_parser("show", help="Show a board with its lists and cards", parents=[common])
    board_show_p.add_argument("file", help="Board file (YAML)")
    board_show_p.add_argument("board", nargs="?", help="Board ID (default: first board)")
    board_show_p.set_defaults(func=board_show)

    # --- replay ---
    replay_p = nouns.add_parser("replay", help="Replay drop events against a board", parents=[common])
    replay_p.add_argument("file", help="Board file (YAML)")
    replay_p.add_argument("events", help="Event script (YAML)")
    replay_p.add_argument("--board", dest="board", help="Board ID (default: first board)")
    replay_p.set_defaults(func=replay)

    return parser
