"""Ordered-collection storage units.

One unit per entity type. Each unit groups its entities into containers
(the board set, a board's lists, a list's cards) and keeps one explicit
order per container. Units are linked parent → child so that deleting a
board takes its lists, and deleting a list takes its cards.
"""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

from kanbanwave.errors import DuplicateID, InvalidMove, KanbanError, NotFound
from kanbanwave.model.entities import Board, BoardList, Card

logger = logging.getLogger(__name__)

E = TypeVar("E", Board, BoardList, Card)

# Container key for the top level, which has no parent id
ROOT = None


def _clamp(index: int, upper: int) -> int:
    return max(0, min(index, upper))


class ContainerStorage(Generic[E]):
    """Entities grouped by container, each container with an explicit order.

    The order list is the only source of display order. Every create
    appends to it, every delete removes from it, and reorder only ever
    permutes it.
    """

    name = "entity"

    def __init__(self, parent: ContainerStorage | None = None) -> None:
        self.parent = parent
        self.child: ContainerStorage | None = None
        if parent is not None:
            parent.child = self
        self._entities: dict[str | None, dict[str, E]] = {}
        self._orders: dict[str | None, list[str]] = {}
        self._index: dict[str, str | None] = {}

    def get_all(self, container: str | None) -> tuple[E, ...]:
        """Entities in container order. Unknown containers are empty."""
        entities = self._entities.get(container, {})
        return tuple(entities[entity_id] for entity_id in self._orders.get(container, ()))

    def get_orders(self, container: str | None) -> tuple[str, ...]:
        return tuple(self._orders.get(container, ()))

    def contains(self, entity_id: str) -> bool:
        return entity_id in self._index

    def get(self, container: str | None, entity_id: str) -> E:
        self._require(container, entity_id)
        return self._entities[container][entity_id]

    def create(self, container: str | None, entity: E) -> None:
        if entity.id in self._index:
            raise DuplicateID(f"{self.name} {entity.id!r} already exists")
        if self.parent is not None and not self.parent.contains(container):
            raise NotFound(f"{self.parent.name} {container!r} not found")
        self._entities.setdefault(container, {})[entity.id] = entity
        self._orders.setdefault(container, []).append(entity.id)
        self._index[entity.id] = container

    def update(self, container: str | None, entity: E) -> None:
        """Replace the entity with the same id."""
        self._require(container, entity.id)
        self._entities[container][entity.id] = entity

    def delete(self, container: str | None, entity_id: str) -> set[ContainerStorage]:
        """Delete an entity and everything it owns in descendant units.

        The whole removal plan is worked out before anything is removed.
        Returns the units that changed.
        """
        self._require(container, entity_id)

        plan: list[tuple[ContainerStorage, str | None, list[str] | None]] = [(self, container, [entity_id])]
        unit, ids = self, [entity_id]
        while unit.child is not None:
            child = unit.child
            child_ids: list[str] = []
            for owner_id in ids:
                if owner_id in child._orders:
                    plan.append((child, owner_id, None))
                    child_ids.extend(child._orders[owner_id])
            unit, ids = child, child_ids

        for unit, key, ids in plan:
            unit._remove(key, ids)

        if len(plan) > 1:
            logger.debug("deleted %s %s with %d owned containers", self.name, entity_id, len(plan) - 1)
        return {unit for unit, _, _ in plan}

    def reorder(self, container: str | None, entity_id: str, target_index: int) -> None:
        """Move entity_id to target_index, clamped into range."""
        self._require(container, entity_id, InvalidMove)
        order = self._orders[container]
        order.remove(entity_id)
        order.insert(_clamp(target_index, len(order)), entity_id)

    def _require(
        self,
        container: str | None,
        entity_id: str,
        elsewhere: type[KanbanError] = NotFound,
    ) -> None:
        """Raise unless entity_id is a member of container."""
        if entity_id not in self._index:
            raise NotFound(f"{self.name} {entity_id!r} not found")
        if self._index[entity_id] != container:
            raise elsewhere(f"{self.name} {entity_id!r} is not in {container!r}")

    def _remove(self, container: str | None, ids: list[str] | None) -> None:
        """Drop ids from a container, or the whole container when ids is None."""
        if ids is None:
            ids = self._orders.pop(container, [])
            self._entities.pop(container, None)
        else:
            for entity_id in ids:
                self._orders[container].remove(entity_id)
                del self._entities[container][entity_id]
        for entity_id in ids:
            self._index.pop(entity_id, None)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {len(self._index)} {self.name}s>"


class BoardStorage(ContainerStorage[Board]):
    """All boards, in a single top-level container."""

    name = "board"

    def get_all(self) -> tuple[Board, ...]:
        return super().get_all(ROOT)

    def get_orders(self) -> tuple[str, ...]:
        return super().get_orders(ROOT)

    def get(self, board_id: str) -> Board:
        return super().get(ROOT, board_id)

    def create(self, board: Board) -> None:
        super().create(ROOT, board)

    def update(self, board: Board) -> None:
        super().update(ROOT, board)

    def delete(self, board_id: str) -> set[ContainerStorage]:
        return super().delete(ROOT, board_id)

    def reorder(self, board_id: str, target_index: int) -> None:
        super().reorder(ROOT, board_id, target_index)


class ListStorage(ContainerStorage[BoardList]):
    """Lists, one container per board id."""

    name = "list"


class CardStorage(ContainerStorage[Card]):
    """Cards, one container per list id."""

    name = "card"

    def move(self, source_list_id: str, target_list_id: str, card_id: str, target_index: int) -> None:
        """Move a card within a list, or across lists in one step.

        Everything is checked before either list is touched, so a failed
        move leaves both lists as they were.
        """
        if source_list_id == target_list_id:
            self.reorder(source_list_id, card_id, target_index)
            return

        self._require(source_list_id, card_id, InvalidMove)
        if self.parent is not None and not self.parent.contains(target_list_id):
            raise NotFound(f"{self.parent.name} {target_list_id!r} not found")

        card = self._entities[source_list_id].pop(card_id)
        self._orders[source_list_id].remove(card_id)

        order = self._orders.setdefault(target_list_id, [])
        order.insert(_clamp(target_index, len(order)), card_id)
        self._entities.setdefault(target_list_id, {})[card_id] = card
        self._index[card_id] = target_list_id
