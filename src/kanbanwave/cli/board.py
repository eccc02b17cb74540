"""Handlers for 'kanbanwave board' commands."""

from kanbanwave.cli._common import (
    find_board,
    load_config_or_die,
    load_store_or_die,
    output_json,
    print_board,
)
from kanbanwave.model.entities import content_to_dict
from kanbanwave.storage.content import BoardContentStore


def board_list(args) -> int:
    """List boards in order."""
    load_config_or_die(args.config, args.json)
    store, _ = load_store_or_die(args.file, args.json)
    with store:
        content = BoardContentStore(store)
        items = []
        for board in content.get_boards():
            lists = store.lists.get_snapshot().get_all(board.id)
            cards = sum(len(store.cards.get_snapshot().get_orders(lst.id)) for lst in lists)
            items.append({"id": board.id, "title": board.title, "lists": len(lists), "cards": cards})

    if args.json:
        output_json(items)
    else:
        for b in items:
            lists = "list" if b["lists"] == 1 else "lists"
            cards = "card" if b["cards"] == 1 else "cards"
            print(f"{b['id']}  {b['title']:<20} {b['lists']} {lists}, {b['cards']} {cards}")

    return 0


def board_show(args) -> int:
    """Show one board with its lists and cards."""
    load_config_or_die(args.config, args.json)
    store, boards = load_store_or_die(args.file, args.json)
    with store:
        board = find_board(boards, args.board, args.json)
        content = BoardContentStore(store).get_board_content(board.id)

    if args.json:
        output_json(content_to_dict(content))
    else:
        print_board(content)

    return 0
