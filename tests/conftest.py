"""Shared test helpers."""

import re

import pytest

from kanbanwave.model.entities import Board, BoardList, Card
from kanbanwave.storage.content import BoardContentStore
from kanbanwave.storage.store import KanbanStore


_UUID = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


def _is_uuid(s):
    return bool(_UUID.match(s))


def _make_board(board_id="b1", title="Sprint"):
    return Board(id=board_id, title=title)


def _make_list(list_id, board_id="b1", title=None):
    return BoardList(id=list_id, title=title or list_id.upper(), board_id=board_id)


def _make_card(card_id, title=None, **fields):
    return Card(id=card_id, title=title or card_id.upper(), **fields)


def _fill(store, layout):
    """Populate store from {board_id: {list_id: [card_ids]}}."""
    for board_id, lists in layout.items():
        store.boards.create(_make_board(board_id, board_id.upper()))
        for list_id, card_ids in lists.items():
            store.lists.create(board_id, _make_list(list_id, board_id))
            for card_id in card_ids:
                store.cards.create(list_id, _make_card(card_id))
    return store


@pytest.fixture
def store():
    """Board b1 with lists l1 [c1, c2, c3] and l2 [c4]; board b2 with empty list l3."""
    s = _fill(
        KanbanStore(),
        {
            "b1": {"l1": ["c1", "c2", "c3"], "l2": ["c4"]},
            "b2": {"l3": []},
        },
    )
    yield s
    s.close()


@pytest.fixture
def content(store):
    return BoardContentStore(store)
