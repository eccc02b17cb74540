"""Ordered storage units, change-notifying adapters and the board aggregator."""

from kanbanwave.storage.content import BoardContentStore
from kanbanwave.storage.store import CardStore, ExternalStore, KanbanStore, Snapshot
from kanbanwave.storage.unit import BoardStorage, CardStorage, ContainerStorage, ListStorage

__all__ = [
    "BoardContentStore",
    "BoardStorage",
    "CardStorage",
    "CardStore",
    "ContainerStorage",
    "ExternalStore",
    "KanbanStore",
    "ListStorage",
    "Snapshot",
]
