"""Tests for optimistic reordering and rollback."""

import asyncio
from dataclasses import dataclass, field

import pytest

from kanbanwave.backend import KanbanBackend, LocalBackend
from kanbanwave.errors import ErrorKind, Failure, InvalidMove, KanbanError
from kanbanwave.model.entities import ItemType
from kanbanwave.model.view import card_order, list_order
from kanbanwave.reconcile import DropEvent, Reconciler


@dataclass
class Gate:
    event: asyncio.Event = field(default_factory=asyncio.Event)
    error: KanbanError | None = None

    def release(self, error: KanbanError | None = None) -> None:
        self.error = error
        self.event.set()


class GatedBackend(KanbanBackend):
    """Holds every mutating call until its gate is released."""

    def __init__(self, inner: KanbanBackend) -> None:
        self.inner = inner
        self.calls = []
        self.gates = []

    async def get_board_content(self, board_id):
        return await self.inner.get_board_content(board_id)

    async def reorder_list(self, *args):
        return await self._gated("reorder_list", args)

    async def reorder_card(self, *args):
        return await self._gated("reorder_card", args)

    async def _gated(self, name, args):
        gate = Gate()
        self.calls.append((name, args))
        self.gates.append(gate)
        await gate.event.wait()
        if gate.error is not None:
            return Failure(gate.error)
        return await getattr(self.inner, name)(*args)


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


def _card(item, source, dest=None, index=None):
    return DropEvent(ItemType.CARD, item, source, dest, index)


def _list(item, index, board="b1"):
    return DropEvent(ItemType.LIST, item, board, board, index)


async def _reconciler(backend):
    reconciler = Reconciler(backend, "b1")
    assert (await reconciler.load()).ok
    return reconciler


# --- loading ---


@pytest.mark.asyncio
async def test_load_builds_view(content):
    reconciler = await _reconciler(LocalBackend(content))
    assert list_order(reconciler.view) == ("l1", "l2")
    assert card_order(reconciler.view, "l1") == ("c1", "c2", "c3")
    assert reconciler.content == content.get_board_content("b1")


@pytest.mark.asyncio
async def test_load_missing_board_fails(content):
    reconciler = Reconciler(LocalBackend(content), "b9")
    outcome = await reconciler.load()
    assert outcome.kind is ErrorKind.NOT_FOUND
    assert reconciler.view is None


@pytest.mark.asyncio
async def test_drop_before_load_raises(content):
    reconciler = Reconciler(LocalBackend(content), "b1")
    with pytest.raises(RuntimeError):
        await reconciler.handle_drop(_card("c1", "l1", "l1", 0))


@pytest.mark.asyncio
async def test_refresh_keeps_watchers(content):
    reconciler = await _reconciler(LocalBackend(content))
    events = []
    reconciler.view.lists.watch("l1", lambda n, k, old, new: events.append((k, old, new)))
    content.reorder_card("b1", "l1", "l1", "c1", 2)
    await reconciler.refresh()
    assert card_order(reconciler.view, "l1") == ("c2", "c3", "c1")
    assert events == [("links", ("c1", "c2", "c3"), ("c2", "c3", "c1"))]


# --- cancelled and unknown drops ---


@pytest.mark.asyncio
async def test_cancelled_drop_is_noop(content):
    backend = GatedBackend(LocalBackend(content))
    reconciler = await _reconciler(backend)
    before = reconciler.content
    assert await reconciler.handle_drop(_card("c1", "l1")) is None
    assert await reconciler.handle_drop(_card("c1", "l1", "l2", None)) is None
    assert backend.calls == []
    assert reconciler.content == before


@pytest.mark.asyncio
async def test_unknown_card_rejected_without_call(content):
    backend = GatedBackend(LocalBackend(content))
    reconciler = await _reconciler(backend)
    outcome = await reconciler.handle_drop(_card("c4", "l1", "l1", 0))
    assert outcome.kind is ErrorKind.NOT_FOUND
    assert backend.calls == []
    assert card_order(reconciler.view, "l1") == ("c1", "c2", "c3")


@pytest.mark.asyncio
async def test_unknown_list_rejected_without_call(content):
    backend = GatedBackend(LocalBackend(content))
    reconciler = await _reconciler(backend)
    assert not (await reconciler.handle_drop(_list("l3", 0))).ok
    assert not (await reconciler.handle_drop(_card("c1", "l1", "l3", 0))).ok
    assert backend.calls == []


# --- same-list cards ---


@pytest.mark.asyncio
async def test_same_list_drop_applies_before_confirmation(content, store):
    backend = GatedBackend(LocalBackend(content))
    reconciler = await _reconciler(backend)

    task = asyncio.create_task(reconciler.handle_drop(_card("c3", "l1", "l1", 0)))
    await _settle()
    assert card_order(reconciler.view, "l1") == ("c3", "c1", "c2")
    assert store.cards.get_snapshot().get_orders("l1") == ("c1", "c2", "c3")

    backend.gates[0].release()
    outcome = await task
    assert outcome.ok
    assert card_order(reconciler.view, "l1") == ("c3", "c1", "c2")
    assert store.cards.get_snapshot().get_orders("l1") == ("c3", "c1", "c2")


@pytest.mark.asyncio
async def test_same_list_drop_rolls_back_on_failure(content, store):
    backend = LocalBackend(content)
    reconciler = await _reconciler(backend)
    backend.reject_next(InvalidMove("server said no"))

    outcome = await reconciler.handle_drop(_card("c3", "l1", "l1", 0))

    assert outcome.kind is ErrorKind.INVALID_MOVE
    assert card_order(reconciler.view, "l1") == ("c1", "c2", "c3")
    assert store.cards.get_snapshot().get_orders("l1") == ("c1", "c2", "c3")


@pytest.mark.asyncio
async def test_rollback_is_logged(content, caplog):
    backend = LocalBackend(content)
    reconciler = await _reconciler(backend)
    backend.reject_next(InvalidMove("server said no"))
    with caplog.at_level("WARNING", logger="kanbanwave.reconcile"):
        await reconciler.handle_drop(_card("c3", "l1", "l1", 0))
    assert "rolling back" in caplog.text
    assert "server said no" in caplog.text


@pytest.mark.asyncio
async def test_watchers_see_speculation_and_rollback(content):
    backend = LocalBackend(content)
    reconciler = await _reconciler(backend)
    events = []
    reconciler.view.lists.watch("l1", lambda n, k, old, new: events.append(new))
    backend.reject_next(InvalidMove("no"))

    await reconciler.handle_drop(_card("c3", "l1", "l1", 0))

    assert events == [("c3", "c1", "c2"), ("c1", "c2", "c3")]


# --- cross-list cards ---


@pytest.mark.asyncio
async def test_cross_list_drop_success(content, store):
    reconciler = await _reconciler(LocalBackend(content))
    outcome = await reconciler.handle_drop(_card("c1", "l1", "l2", 0))
    assert outcome.ok
    assert card_order(reconciler.view, "l1") == ("c2", "c3")
    assert card_order(reconciler.view, "l2") == ("c1", "c4")
    assert reconciler.content == content.get_board_content("b1")


@pytest.mark.asyncio
async def test_cross_list_drop_restores_both_lists(content, store):
    backend = GatedBackend(LocalBackend(content))
    reconciler = await _reconciler(backend)

    task = asyncio.create_task(reconciler.handle_drop(_card("c1", "l1", "l2", 0)))
    await _settle()
    assert card_order(reconciler.view, "l1") == ("c2", "c3")
    assert card_order(reconciler.view, "l2") == ("c1", "c4")

    backend.gates[0].release(InvalidMove("no"))
    outcome = await task

    assert not outcome.ok
    assert card_order(reconciler.view, "l1") == ("c1", "c2", "c3")
    assert card_order(reconciler.view, "l2") == ("c4",)
    assert reconciler.content == content.get_board_content("b1")


# --- lists ---


@pytest.mark.asyncio
async def test_list_drop_success(content):
    reconciler = await _reconciler(LocalBackend(content))
    assert (await reconciler.handle_drop(_list("l2", 0))).ok
    assert list_order(reconciler.view) == ("l2", "l1")
    assert [lst.id for lst in content.get_board_content("b1").lists] == ["l2", "l1"]


@pytest.mark.asyncio
async def test_list_drop_rolls_back(content):
    backend = LocalBackend(content)
    reconciler = await _reconciler(backend)
    events = []
    reconciler.view.lists.watch("*", lambda n, k, old, new: events.append(new))
    backend.reject_next(InvalidMove("no"))

    assert not (await reconciler.handle_drop(_list("l2", 0))).ok

    assert list_order(reconciler.view) == ("l1", "l2")
    assert events == [["l2", "l1"], ["l1", "l2"]]


# --- overlapping gestures ---


@pytest.mark.asyncio
async def test_each_gesture_captures_fresh_state(content):
    backend = GatedBackend(LocalBackend(content))
    reconciler = await _reconciler(backend)

    first = asyncio.create_task(reconciler.handle_drop(_card("c3", "l1", "l1", 0)))
    await _settle()
    second = asyncio.create_task(reconciler.handle_drop(_card("c1", "l1", "l1", 2)))
    await _settle()
    assert card_order(reconciler.view, "l1") == ("c3", "c2", "c1")

    backend.gates[1].release(InvalidMove("no"))
    await second
    # The second gesture's capture already included the first's speculation
    assert card_order(reconciler.view, "l1") == ("c3", "c1", "c2")

    backend.gates[0].release()
    assert (await first).ok
    assert card_order(reconciler.view, "l1") == ("c3", "c1", "c2")


@pytest.mark.asyncio
async def test_stale_capture_resyncs_instead_of_restoring(content, store):
    backend = GatedBackend(LocalBackend(content))
    reconciler = await _reconciler(backend)

    first = asyncio.create_task(reconciler.handle_drop(_card("c3", "l1", "l1", 0)))
    await _settle()
    second = asyncio.create_task(reconciler.handle_drop(_card("c1", "l1", "l1", 2)))
    await _settle()

    backend.gates[1].release()
    assert (await second).ok
    assert store.cards.get_snapshot().get_orders("l1") == ("c2", "c3", "c1")

    backend.gates[0].release(InvalidMove("no"))
    assert not (await first).ok
    # Restoring the first capture would undo the confirmed second move
    assert card_order(reconciler.view, "l1") == ("c2", "c3", "c1")
    assert reconciler.content == content.get_board_content("b1")


@pytest.mark.asyncio
async def test_both_overlapping_gestures_fail(content):
    backend = GatedBackend(LocalBackend(content))
    reconciler = await _reconciler(backend)

    first = asyncio.create_task(reconciler.handle_drop(_card("c1", "l1", "l2", 0)))
    await _settle()
    second = asyncio.create_task(reconciler.handle_drop(_card("c4", "l2", "l2", 1)))
    await _settle()
    assert card_order(reconciler.view, "l2") == ("c1", "c4")

    backend.gates[0].release(InvalidMove("no"))
    await first
    backend.gates[1].release(InvalidMove("no"))
    await second

    assert card_order(reconciler.view, "l1") == ("c1", "c2", "c3")
    assert card_order(reconciler.view, "l2") == ("c4",)


@pytest.mark.asyncio
async def test_stale_resync_waits_for_pending_gesture(content, store):
    backend = GatedBackend(LocalBackend(content))
    reconciler = await _reconciler(backend)

    first = asyncio.create_task(reconciler.handle_drop(_card("c3", "l1", "l1", 0)))
    await _settle()
    second = asyncio.create_task(reconciler.handle_drop(_card("c1", "l1", "l1", 2)))
    await _settle()

    backend.gates[0].release(InvalidMove("no"))
    assert not (await first).ok
    # The second gesture is still in flight, so its speculation stays
    assert card_order(reconciler.view, "l1") == ("c3", "c2", "c1")

    backend.gates[1].release()
    assert (await second).ok
    assert store.cards.get_snapshot().get_orders("l1") == ("c2", "c3", "c1")
    assert card_order(reconciler.view, "l1") == ("c2", "c3", "c1")
    assert reconciler.content == content.get_board_content("b1")


@pytest.mark.asyncio
async def test_stale_resync_after_pending_gesture_fails_too(content, store):
    backend = GatedBackend(LocalBackend(content))
    reconciler = await _reconciler(backend)

    first = asyncio.create_task(reconciler.handle_drop(_card("c3", "l1", "l1", 0)))
    await _settle()
    second = asyncio.create_task(reconciler.handle_drop(_card("c1", "l1", "l2", 1)))
    await _settle()

    backend.gates[0].release(InvalidMove("no"))
    await first
    backend.gates[1].release(InvalidMove("no"))
    await second

    assert card_order(reconciler.view, "l1") == ("c1", "c2", "c3")
    assert card_order(reconciler.view, "l2") == ("c4",)
    assert reconciler.content == content.get_board_content("b1")
