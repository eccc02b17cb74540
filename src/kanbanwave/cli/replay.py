"""Handler for 'kanbanwave replay': run drop events through the reconciler."""

import asyncio
import sys

from kanbanwave.backend import LocalBackend
from kanbanwave.cli._common import (
    error,
    find_board,
    load_config_or_die,
    load_store_or_die,
    output_json,
    print_board,
    read_text_or_die,
)
from kanbanwave.errors import InvalidMove
from kanbanwave.model.entities import content_to_dict
from kanbanwave.reconcile import Reconciler
from kanbanwave.seed import BoardFileError, ScriptedDrop, parse_events
from kanbanwave.storage.content import BoardContentStore
from kanbanwave.storage.store import KanbanStore


def _describe(drop: ScriptedDrop) -> str:
    event = drop.event
    if event.cancelled:
        return f"{event.item_type.value} {event.item_id} (cancelled)"
    return f"{event.item_type.value} {event.item_id} -> {event.dest_container_id}[{event.dest_index}]"


async def _run(store: KanbanStore, backend: LocalBackend, board_id: str, drops: list[ScriptedDrop]) -> list[dict]:
    changes = 0

    def on_change() -> None:
        nonlocal changes
        changes += 1

    for adapter in (store.boards, store.lists, store.cards):
        adapter.subscribe(on_change)

    reconciler = Reconciler(backend, board_id)
    await reconciler.load()

    steps = []
    for drop in drops:
        before = changes
        if drop.reject:
            backend.reject_next(InvalidMove("rejected by script"))
        outcome = await reconciler.handle_drop(drop.event)
        backend.reject_next(None)

        if outcome is None:
            status, message = "skipped", None
        elif outcome.ok:
            status, message = "ok", None
        else:
            status, message = "rejected", str(outcome.error)
        steps.append(
            {
                "event": _describe(drop),
                "status": status,
                "error": message,
                "changes": changes - before,
            }
        )
    return steps


def replay(args) -> int:
    """Replay an event script against a board file."""
    config = load_config_or_die(args.config, args.json)
    store, boards = load_store_or_die(args.file, args.json)
    try:
        drops = parse_events(read_text_or_die(args.events, args.json))
    except BoardFileError as e:
        store.close()
        error(f"{args.events}: {e}", args.json)

    with store:
        board = find_board(boards, args.board, args.json)
        content = BoardContentStore(store, default_lists=config.default_lists)
        backend = LocalBackend(content, latency=config.latency)
        steps = asyncio.run(_run(store, backend, board.id, drops))
        final = content.get_board_content(board.id)

    if args.json:
        output_json({"steps": steps, "board": content_to_dict(final)})
    else:
        for i, step in enumerate(steps, start=1):
            line = f"{i}. {step['event']}: {step['status']}"
            if step["error"]:
                line += f" ({step['error']})"
            print(line)
        print_board(final)

    rejected = sum(1 for step in steps if step["status"] == "rejected")
    if rejected:
        print(f"{rejected} of {len(steps)} drops rolled back", file=sys.stderr)
    return 0
