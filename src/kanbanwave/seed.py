"""Load boards and drop-event scripts from YAML files.

Board file::

    boards:
      - id: b1            # optional, a UUID is generated when missing
        title: Sprint
        lists:
          - title: To Do
            cards:
              - title: Write tests
                description: ...
                writer: {id: w1, name: Ada, email: ada@example.com}
                start_date: 2024-05-01
                due_date: 2024-05-03

Event script::

    events:
      - {type: card, item: c3, source: l1, dest: l1, index: 0}
      - {type: list, item: l2, dest: b1, index: 0, reject: true}
"""

from dataclasses import dataclass
from datetime import date
from typing import Any

import yaml

from kanbanwave.ids import new_id
from kanbanwave.model.entities import Board, BoardList, Card, ItemType, Writer
from kanbanwave.reconcile import DropEvent
from kanbanwave.storage.store import KanbanStore


class BoardFileError(ValueError):
    """A board file or event script is malformed."""


@dataclass(frozen=True)
class ScriptedDrop:
    event: DropEvent
    reject: bool = False


def _mappings(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    items = data.get(key) or []
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise BoardFileError(f"'{key}' must be a list of mappings")
    return items


def _load_mapping(text: str, key: str) -> list[dict[str, Any]]:
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise BoardFileError(f"invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise BoardFileError("document must be a mapping")
    return _mappings(data, key)


def _date(value: Any, field_name: str) -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise BoardFileError(f"{field_name}: {value!r} is not an ISO date") from e


def _text(value: Any) -> str | None:
    return None if value is None else str(value)


def _card(data: dict[str, Any]) -> Card:
    writer = data.get("writer")
    if writer is not None:
        if not isinstance(writer, dict):
            raise BoardFileError("writer must be a mapping")
        writer = Writer(
            id=str(writer.get("id") or new_id()),
            name=str(writer.get("name", "")),
            email=str(writer.get("email", "")),
        )
    return Card(
        id=str(data.get("id") or new_id()),
        title=str(data.get("title", "")),
        writer=writer,
        description=str(data.get("description") or ""),
        start_date=_date(data.get("start_date"), "start_date"),
        due_date=_date(data.get("due_date"), "due_date"),
        relative_date=_text(data.get("relative_date")),
    )


def load_boards(store: KanbanStore, text: str) -> list[Board]:
    """Create every board, list and card from a board file, in file order."""
    boards = []
    for board_data in _load_mapping(text, "boards"):
        board = Board(id=str(board_data.get("id") or new_id()), title=str(board_data.get("title", "")))
        store.boards.create(board)
        boards.append(board)
        for list_data in _mappings(board_data, "lists"):
            lst = BoardList(
                id=str(list_data.get("id") or new_id()),
                title=str(list_data.get("title", "")),
                board_id=board.id,
            )
            store.lists.create(board.id, lst)
            for card_data in _mappings(list_data, "cards"):
                store.cards.create(lst.id, _card(card_data))
    return boards


def parse_events(text: str) -> list[ScriptedDrop]:
    """Parse an event script into drop events."""
    drops = []
    for i, data in enumerate(_load_mapping(text, "events")):
        try:
            item_type = ItemType(str(data["type"]).lower())
            item_id = str(data["item"])
        except (KeyError, ValueError) as e:
            raise BoardFileError(f"event {i}: needs 'type' (list or card) and 'item'") from e
        index = data.get("index")
        if index is not None and (isinstance(index, bool) or not isinstance(index, int)):
            raise BoardFileError(f"event {i}: index must be an integer")
        event = DropEvent(
            item_type=item_type,
            item_id=item_id,
            source_container_id=str(data.get("source", "")),
            dest_container_id=None if data.get("dest") is None else str(data["dest"]),
            dest_index=index,
        )
        drops.append(ScriptedDrop(event=event, reject=bool(data.get("reject", False))))
    return drops
