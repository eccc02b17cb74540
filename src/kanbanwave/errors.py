"""Error kinds raised by storage and outcomes returned by the backend."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    DUPLICATE_ID = "duplicate_id"
    INVALID_MOVE = "invalid_move"


class KanbanError(Exception):
    """Base for all storage errors."""

    kind: ErrorKind


class NotFound(KanbanError):
    """Referenced entity or container id is absent."""

    kind = ErrorKind.NOT_FOUND


class DuplicateID(KanbanError):
    """Create was called with an id that already exists."""

    kind = ErrorKind.DUPLICATE_ID


class InvalidMove(KanbanError):
    """The item exists, but not in the container the move names."""

    kind = ErrorKind.INVALID_MOVE


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    error: KanbanError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


Outcome = Union[Success[Any], Failure]
