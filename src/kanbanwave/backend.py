"""The fallible, possibly remote, boundary behind the reconciler.

Backends never raise for storage errors; they resolve to an Outcome so
callers branch on Success/Failure.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

from kanbanwave.errors import Failure, KanbanError, Outcome, Success
from kanbanwave.storage.content import BoardContentStore

logger = logging.getLogger(__name__)


class KanbanBackend(ABC):
    """Operations the reconciler needs from the authoritative store."""

    @abstractmethod
    async def get_board_content(self, board_id: str) -> Outcome: ...

    @abstractmethod
    async def reorder_list(self, board_id: str, list_id: str, target_index: int) -> Outcome: ...

    @abstractmethod
    async def reorder_card(
        self,
        board_id: str,
        source_list_id: str,
        target_list_id: str,
        card_id: str,
        target_index: int,
    ) -> Outcome: ...


class LocalBackend(KanbanBackend):
    """Backend over an in-process BoardContentStore.

    ``latency`` delays every call, standing in for a network round trip.
    ``reject_next`` makes the next mutating call fail without touching
    the store.
    """

    def __init__(self, content: BoardContentStore, latency: float = 0.0) -> None:
        self.content = content
        self.latency = latency
        self._rejection: KanbanError | None = None

    def reject_next(self, error: KanbanError | None) -> None:
        """Fail the next mutating call with error. None disarms."""
        self._rejection = error

    async def _call(self, fn: Callable[..., Any], *args: Any, mutating: bool = True) -> Outcome:
        if self.latency:
            await asyncio.sleep(self.latency)
        if mutating and self._rejection is not None:
            error, self._rejection = self._rejection, None
            return Failure(error)
        try:
            return Success(fn(*args))
        except KanbanError as exc:
            logger.debug("%s rejected: %s", fn.__name__, exc)
            return Failure(exc)

    async def get_board_content(self, board_id: str) -> Outcome:
        return await self._call(self.content.get_board_content, board_id, mutating=False)

    async def reorder_list(self, board_id: str, list_id: str, target_index: int) -> Outcome:
        return await self._call(self.content.reorder_list, board_id, list_id, target_index)

    async def reorder_card(
        self,
        board_id: str,
        source_list_id: str,
        target_list_id: str,
        card_id: str,
        target_index: int,
    ) -> Outcome:
        return await self._call(
            self.content.reorder_card,
            board_id,
            source_list_id,
            target_list_id,
            card_id,
            target_index,
        )
