"""Local board view state and the reorder operations applied to it.

The view is a reactive Node tree built from a BoardContent:

- ``view.lists``: ListNode of list Nodes (id, title, links) in display order
- ``view.lists[list_id].links``: tuple of card ids in display order
- ``view.cards``: ListNode of Card values keyed by id, order irrelevant
"""

from kanbanwave.model.entities import BoardContent, ListContent
from kanbanwave.model.node import ListNode, Node


def build_view(content: BoardContent) -> Node:
    """Build a fresh view tree from board content."""
    lists = ListNode()
    cards = ListNode()
    for lst in content.lists:
        for card in lst.cards:
            cards[card.id] = card
        lists[lst.id] = Node(id=lst.id, title=lst.title, links=tuple(card.id for card in lst.cards))
    return Node(id=content.id, title=content.title, lists=lists, cards=cards)


def view_to_content(view: Node) -> BoardContent:
    """Project the view back into an immutable BoardContent."""
    return BoardContent(
        id=view.id,
        title=view.title,
        lists=tuple(
            ListContent(
                id=lst.id,
                title=lst.title,
                board_id=view.id,
                cards=tuple(view.cards[card_id] for card_id in lst.links),
            )
            for lst in view.lists
        ),
    )


def list_order(view: Node) -> tuple[str, ...]:
    return tuple(view.lists.keys())


def card_order(view: Node, list_id: str) -> tuple[str, ...]:
    return tuple(view.lists[list_id].links)


def set_list_order(view: Node, order: tuple[str, ...]) -> None:
    view.lists.reorder(list(order))


def set_card_order(view: Node, list_id: str, order: tuple[str, ...]) -> None:
    view.lists[list_id].links = tuple(order)


def move_list(view: Node, list_id: str, index: int) -> None:
    """Move a list to index in the board's list order."""
    view.lists.move(list_id, index)


def move_card(view: Node, card_id: str, source_list_id: str, target_list_id: str, index: int) -> None:
    """Move a card from one list's links to another's at index.

    Same-list moves are a single links assignment so watchers never see
    the card missing from the list.
    """
    source = view.lists[source_list_id]
    target = view.lists[target_list_id]

    if source is target:
        links = list(source.links)
        links.remove(card_id)
        links.insert(max(0, min(index, len(links))), card_id)
        source.links = tuple(links)
        return

    links = list(source.links)
    links.remove(card_id)
    source.links = tuple(links)

    links = list(target.links)
    links.insert(max(0, min(index, len(links))), card_id)
    target.links = tuple(links)
