"""Data shapes for boards, lists and cards."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


class ItemType(Enum):
    """Kind of item carried by a drop event."""

    LIST = "list"
    CARD = "card"


@dataclass(frozen=True)
class Writer:
    id: str
    name: str
    email: str = ""


@dataclass(frozen=True)
class Board:
    id: str
    title: str


@dataclass(frozen=True)
class BoardList:
    id: str
    title: str
    board_id: str


@dataclass(frozen=True)
class Card:
    id: str
    title: str
    writer: Writer | None = None
    description: str = ""
    start_date: date | None = None
    due_date: date | None = None
    relative_date: str | None = None


@dataclass(frozen=True)
class BoardForm:
    title: str


@dataclass(frozen=True)
class ListForm:
    title: str


@dataclass(frozen=True)
class CardForm:
    title: str
    writer: Writer | None = None
    description: str = ""
    start_date: date | None = None
    due_date: date | None = None


@dataclass(frozen=True)
class ListContent:
    """A list with its cards attached, in order."""

    id: str
    title: str
    board_id: str
    cards: tuple[Card, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BoardContent:
    """A board with its lists attached, each with its cards, in order.

    Recomputed on every read and never stored.
    """

    id: str
    title: str
    lists: tuple[ListContent, ...] = field(default_factory=tuple)

    def find_list(self, list_id: str) -> ListContent | None:
        for lst in self.lists:
            if lst.id == list_id:
                return lst
        return None


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def card_to_dict(card: Card) -> dict[str, Any]:
    """Convert a card to JSON-compatible primitives."""
    writer = None
    if card.writer is not None:
        writer = {"id": card.writer.id, "name": card.writer.name, "email": card.writer.email}
    return {
        "id": card.id,
        "title": card.title,
        "writer": writer,
        "description": card.description,
        "start_date": _iso(card.start_date),
        "due_date": _iso(card.due_date),
        "relative_date": card.relative_date,
    }


def content_to_dict(content: BoardContent) -> dict[str, Any]:
    """Convert board content to JSON-compatible primitives."""
    return {
        "id": content.id,
        "title": content.title,
        "lists": [
            {
                "id": lst.id,
                "title": lst.title,
                "cards": [card_to_dict(card) for card in lst.cards],
            }
            for lst in content.lists
        ],
    }
