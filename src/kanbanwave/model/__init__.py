"""Entities, board content projection and reactive view state."""

from kanbanwave.model.entities import (
    Board,
    BoardContent,
    BoardForm,
    BoardList,
    Card,
    CardForm,
    ItemType,
    ListContent,
    ListForm,
    Writer,
    card_to_dict,
    content_to_dict,
)
from kanbanwave.model.node import ListNode, Node
from kanbanwave.model.view import (
    build_view,
    card_order,
    list_order,
    move_card,
    move_list,
    set_card_order,
    set_list_order,
    view_to_content,
)

__all__ = [
    "Board",
    "BoardContent",
    "BoardForm",
    "BoardList",
    "Card",
    "CardForm",
    "ItemType",
    "ListContent",
    "ListForm",
    "ListNode",
    "Node",
    "Writer",
    "build_view",
    "card_order",
    "card_to_dict",
    "content_to_dict",
    "list_order",
    "move_card",
    "move_list",
    "set_card_order",
    "set_list_order",
    "view_to_content",
]
