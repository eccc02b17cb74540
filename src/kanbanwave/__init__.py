"""Ordered boards, lists and cards with change notification and optimistic reordering."""

from kanbanwave.backend import KanbanBackend, LocalBackend
from kanbanwave.errors import DuplicateID, Failure, InvalidMove, KanbanError, NotFound, Success
from kanbanwave.reconcile import DropEvent, Reconciler
from kanbanwave.storage import BoardContentStore, KanbanStore

__all__ = [
    "BoardContentStore",
    "DropEvent",
    "DuplicateID",
    "Failure",
    "InvalidMove",
    "KanbanBackend",
    "KanbanError",
    "KanbanStore",
    "LocalBackend",
    "NotFound",
    "Reconciler",
    "Success",
]
