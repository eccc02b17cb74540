"""Optimistic reordering of lists and cards from drop events.

A drop is applied to the local view immediately, then sent to the
backend. If the backend rejects it, the orders captured before the drop
are put back.

Each container in the view carries a version that is bumped whenever the
reconciler writes to it. A rejected gesture only restores a container
whose version is still the one it set; if a later gesture has touched
that container since, the captured order is stale and the container is
re-read from the backend instead, once no other drop on it is still
waiting for the backend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable

from kanbanwave.backend import KanbanBackend
from kanbanwave.errors import Failure, KanbanError, NotFound, Outcome
from kanbanwave.model.entities import BoardContent, ItemType
from kanbanwave.model.node import Node
from kanbanwave.model.view import (
    build_view,
    card_order,
    list_order,
    move_card,
    move_list,
    set_card_order,
    set_list_order,
    view_to_content,
)

logger = logging.getLogger(__name__)

# Version keys: ("lists", board_id) or ("cards", list_id)
ContainerKey = tuple[str, str]


@dataclass(frozen=True)
class DropEvent:
    """A decoded drag-and-drop result.

    A missing destination container or index means the drag was cancelled.
    """

    item_type: ItemType
    item_id: str
    source_container_id: str
    dest_container_id: str | None = None
    dest_index: int | None = None

    @property
    def cancelled(self) -> bool:
        return self.dest_container_id is None or self.dest_index is None


class Reconciler:
    """Keeps a board's view in step with the backend under optimistic drops."""

    def __init__(self, backend: KanbanBackend, board_id: str) -> None:
        self.backend = backend
        self.board_id = board_id
        self.view: Node | None = None
        self._versions: dict[ContainerKey, int] = {}
        self._pending: dict[ContainerKey, int] = {}
        self._stale: set[ContainerKey] = set()

    @property
    def content(self) -> BoardContent:
        return view_to_content(self.view)

    async def load(self) -> Outcome:
        """Pull authoritative content into the view, keeping existing watchers."""
        outcome = await self.backend.get_board_content(self.board_id)
        if not outcome.ok:
            logger.warning("loading board %s failed: %s", self.board_id, outcome.error)
            return outcome
        self._replace_view(outcome.value)
        return outcome

    refresh = load

    def _replace_view(self, content: BoardContent) -> None:
        fresh = build_view(content)
        if self.view is None:
            self.view = fresh
        else:
            self.view.update(fresh)
        self._stamp(list(self._versions))

    async def handle_drop(self, event: DropEvent) -> Outcome | None:
        """Apply a drop locally, confirm it with the backend, roll back on failure.

        Returns None for a cancelled drag, otherwise the backend outcome.
        """
        if event.cancelled:
            return None
        if self.view is None:
            raise RuntimeError("board not loaded")
        if event.item_type is ItemType.LIST:
            return await self._drop_list(event)
        return await self._drop_card(event)


    async def _drop_list(self, event: DropEvent) -> Outcome:
        if event.item_id not in self.view.lists:
            return self._reject(event, NotFound(f"list {event.item_id!r} not on board"))

        captured = {("lists", self.board_id): list_order(self.view)}
        move_list(self.view, event.item_id, event.dest_index)
        return await self._confirm(
            event,
            captured,
            self.backend.reorder_list(self.board_id, event.item_id, event.dest_index),
        )

    async def _drop_card(self, event: DropEvent) -> Outcome:
        source, target = event.source_container_id, event.dest_container_id
        lists = self.view.lists
        for list_id in (source, target):
            if list_id not in lists:
                return self._reject(event, NotFound(f"list {list_id!r} not on board"))
        if event.item_id not in lists[source].links:
            return self._reject(event, NotFound(f"card {event.item_id!r} not in list {source!r}"))

        captured = {
            ("cards", source): card_order(self.view, source),
            ("cards", target): card_order(self.view, target),
        }
        move_card(self.view, event.item_id, source, target, event.dest_index)
        return await self._confirm(
            event,
            captured,
            self.backend.reorder_card(self.board_id, source, target, event.item_id, event.dest_index),
        )

    async def _confirm(
        self,
        event: DropEvent,
        captured: dict[ContainerKey, tuple[str, ...]],
        call: Awaitable[Outcome],
    ) -> Outcome:
        """Await the backend for a move already applied to the view.

        Stale containers are only re-read once no gesture on them is in
        flight, so the read sees every confirmed move.
        """
        stamps = self._stamp(captured)
        for key in captured:
            self._pending[key] = self._pending.get(key, 0) + 1
        try:
            outcome = await call
        finally:
            for key in captured:
                self._pending[key] -= 1

        if not outcome.ok:
            self._rollback(event, outcome, captured, stamps)
        settled = [key for key in captured if key in self._stale and not self._pending[key]]
        if settled:
            self._stale.difference_update(settled)
            await self._resync(settled)
        return outcome

    def _stamp(self, keys) -> dict[ContainerKey, int]:
        for key in keys:
            self._versions[key] = self._versions.get(key, 0) + 1
        return {key: self._versions[key] for key in keys}

    def _reject(self, event: DropEvent, error: KanbanError) -> Failure:
        logger.warning("%s %s drop ignored: %s", event.item_type.value, event.item_id, error)
        return Failure(error)

    def _rollback(
        self,
        event: DropEvent,
        outcome: Failure,
        captured: dict[ContainerKey, tuple[str, ...]],
        stamps: dict[ContainerKey, int],
    ) -> None:
        logger.warning(
            "%s %s move to %s[%s] failed, rolling back: %s",
            event.item_type.value,
            event.item_id,
            event.dest_container_id,
            event.dest_index,
            outcome.error,
        )
        for key, order in captured.items():
            if self._versions.get(key) != stamps[key]:
                self._stale.add(key)
                continue
            self._write_order(key, order)
            self._stamp([key])

    def _write_order(self, key: ContainerKey, order: tuple[str, ...]) -> None:
        kind, container_id = key
        if kind == "lists":
            set_list_order(self.view, order)
        else:
            set_card_order(self.view, container_id, order)

    async def _resync(self, keys: list[ContainerKey]) -> None:
        """Re-read containers whose captured order was overtaken by a later drop."""
        logger.info("resyncing %d container(s) of board %s", len(keys), self.board_id)
        before = {key: self._versions.get(key) for key in keys}
        outcome = await self.backend.get_board_content(self.board_id)
        if not outcome.ok:
            logger.error("resync of board %s failed: %s", self.board_id, outcome.error)
            return
        content: BoardContent = outcome.value

        # A drop made while reading is newer than what was read
        moved = [key for key in keys if self._versions.get(key) != before[key]]
        self._stale.update(moved)
        for key in keys:
            if key in moved:
                continue
            kind, container_id = key
            if kind == "lists":
                order = tuple(lst.id for lst in content.lists)
                if sorted(order) != sorted(list_order(self.view)):
                    self._replace_view(content)
                    break
                set_list_order(self.view, order)
            else:
                lst = content.find_list(container_id)
                if lst is None or container_id not in self.view.lists:
                    self._replace_view(content)
                    break
                for card in lst.cards:
                    self.view.cards[card.id] = card
                set_card_order(self.view, container_id, tuple(card.id for card in lst.cards))
            self._stamp([key])

        settled = [key for key in moved if not self._pending.get(key)]
        if settled:
            self._stale.difference_update(settled)
            await self._resync(settled)
