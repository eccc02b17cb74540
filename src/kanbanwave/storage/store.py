"""Change-notifying adapters over storage units.

An ExternalStore wraps one unit and follows the subscribe/get_snapshot
contract used by polling or diffing consumers: the snapshot object keeps
its identity until the next mutation, and every mutation replaces it and
calls each listener once.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from kanbanwave.storage.unit import BoardStorage, CardStorage, ContainerStorage, ListStorage

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Read access to a unit at the time of the last mutation.

    Holds function references rather than data, so calls always return
    current state. Consumers compare snapshots by identity.
    """

    get_all: Callable[..., tuple]
    get_orders: Callable[..., tuple]
    get: Callable[..., Any]


class ExternalStore:
    """Wraps a storage unit, caches a snapshot and notifies listeners."""

    def __init__(self, unit: ContainerStorage, cascades: Iterable[ExternalStore] = ()) -> None:
        self.unit = unit
        self.cascades = tuple(cascades)
        self._listeners: dict[int, Listener] = {}
        self._tokens = itertools.count()
        self._snapshot = self._make_snapshot()

    def _make_snapshot(self) -> Snapshot:
        return Snapshot(get_all=self.unit.get_all, get_orders=self.unit.get_orders, get=self.unit.get)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener. Returns a callable that removes this registration."""
        token = next(self._tokens)
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    def get_snapshot(self) -> Snapshot:
        return self._snapshot

    def emit_change(self) -> None:
        """Replace the snapshot and call every listener in registration order."""
        self._refresh()
        self._notify()

    def _refresh(self) -> None:
        self._snapshot = self._make_snapshot()

    def _notify(self) -> None:
        for listener in list(self._listeners.values()):
            listener()

    def create(self, *args: Any) -> None:
        self.unit.create(*args)
        self.emit_change()

    def update(self, *args: Any) -> None:
        self.unit.update(*args)
        self.emit_change()

    def delete(self, *args: Any) -> None:
        touched = self.unit.delete(*args)
        changed = [self] + [store for store in self.cascades if store.unit in touched]
        for store in changed:
            store._refresh()
        for store in changed:
            store._notify()

    def reorder(self, *args: Any) -> None:
        self.unit.reorder(*args)
        self.emit_change()

    def close(self) -> None:
        self._listeners.clear()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class CardStore(ExternalStore):
    """Card adapter with the compound cross-list move."""

    unit: CardStorage

    def move(self, source_list_id: str, target_list_id: str, card_id: str, target_index: int) -> None:
        self.unit.move(source_list_id, target_list_id, card_id, target_index)
        self.emit_change()


class KanbanStore:
    """The three storage units and their adapters, wired for cascades.

    Construct one per application session and close it when done.
    """

    def __init__(self) -> None:
        board_unit = BoardStorage()
        list_unit = ListStorage(parent=board_unit)
        card_unit = CardStorage(parent=list_unit)

        self.cards = CardStore(card_unit)
        self.lists = ExternalStore(list_unit, cascades=[self.cards])
        self.boards = ExternalStore(board_unit, cascades=[self.lists, self.cards])
        self.closed = False

    def close(self) -> None:
        for store in (self.boards, self.lists, self.cards):
            store.close()
        self.closed = True
        logger.debug("store closed")

    def __enter__(self) -> KanbanStore:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
