"""Shared helpers for CLI command handlers."""

import json
import sys
from pathlib import Path

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from kanbanwave.config import Config, ConfigError, load_config
from kanbanwave.errors import KanbanError
from kanbanwave.model.entities import Board, BoardContent, Card
from kanbanwave.seed import BoardFileError, load_boards
from kanbanwave.storage.store import KanbanStore


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2))


def load_config_or_die(path: str | None, json_mode: bool) -> Config:
    try:
        return load_config(path)
    except ConfigError as e:
        error(f"config: {e}", json_mode)


def read_text_or_die(path: str, json_mode: bool) -> str:
    try:
        return Path(path).read_text()
    except OSError as e:
        error(f"cannot read {path}: {e.strerror}", json_mode)


def load_store_or_die(path: str, json_mode: bool) -> tuple[KanbanStore, list[Board]]:
    """Build a store from a board file. Exit 1 with message if it is unusable."""
    text = read_text_or_die(path, json_mode)
    store = KanbanStore()
    try:
        boards = load_boards(store, text)
    except (BoardFileError, KanbanError) as e:
        store.close()
        error(f"{path}: {e}", json_mode)
    return store, boards


def find_board(boards: list[Board], board_id: str | None, json_mode: bool) -> Board:
    """Lookup board by id, or the first board. Exit 1 listing available boards if not found."""
    if not boards:
        error("no boards in file", json_mode)
    if board_id is None:
        return boards[0]
    for board in boards:
        if board.id == board_id:
            return board
    available = [f"  {b.id}  {b.title}" for b in boards]
    error(f"Board '{board_id}' not found. Available:\n" + "\n".join(available), json_mode)


def _card_label(card: Card) -> Text:
    label = Text(card.title)
    if card.writer is not None:
        label.append(f"  {card.writer.name}", style="dim")
    if card.due_date is not None:
        label.append(f"  due {card.due_date.isoformat()}", style="yellow")
    elif card.relative_date:
        label.append(f"  {card.relative_date}", style="yellow")
    return label


def board_tree(content: BoardContent) -> Tree:
    """Render board content as a rich tree: board → lists → cards."""
    tree = Tree(Text(content.title, style="bold"))
    for lst in content.lists:
        count = "card" if len(lst.cards) == 1 else "cards"
        branch = tree.add(Text.assemble((lst.title, "bold cyan"), f" ({len(lst.cards)} {count})"))
        for card in lst.cards:
            branch.add(_card_label(card))
    return tree


def print_board(content: BoardContent) -> None:
    Console(highlight=False).print(board_tree(content))
