"""Board-level read model and write facade over the three stores."""

from __future__ import annotations

from kanbanwave.errors import InvalidMove, NotFound
from kanbanwave.ids import new_id
from kanbanwave.model.entities import (
    Board,
    BoardContent,
    BoardForm,
    BoardList,
    Card,
    CardForm,
    ListContent,
    ListForm,
)
from kanbanwave.storage.store import KanbanStore


class BoardContentStore:
    """Reads whole boards and routes writes to the store that owns them.

    Never touches a unit directly: reads go through adapter snapshots and
    writes through adapters, so subscribers are notified.
    """

    def __init__(self, store: KanbanStore, default_lists: tuple[str, ...] = ()) -> None:
        self.store = store
        self.default_lists = tuple(default_lists)

    # --- boards ---

    def get_boards(self) -> tuple[Board, ...]:
        return self.store.boards.get_snapshot().get_all()

    def get_board(self, board_id: str) -> Board:
        return self.store.boards.get_snapshot().get(board_id)

    def create_board(self, form: BoardForm) -> Board:
        """Create a board with a fresh id, plus any configured default lists."""
        board = Board(id=new_id(), title=form.title)
        self.store.boards.create(board)
        for title in self.default_lists:
            self.create_list(board.id, ListForm(title=title))
        return board

    def update_board(self, board: Board) -> None:
        self.store.boards.update(board)

    def delete_board(self, board_id: str) -> None:
        self.store.boards.delete(board_id)

    def reorder_board(self, board_id: str, target_index: int) -> None:
        self.store.boards.reorder(board_id, target_index)

    # --- content ---

    def get_board_content(self, board_id: str) -> BoardContent:
        """Board with its ordered lists, each with its ordered cards."""
        board = self.get_board(board_id)
        lists = self.store.lists.get_snapshot()
        cards = self.store.cards.get_snapshot()
        return BoardContent(
            id=board.id,
            title=board.title,
            lists=tuple(
                ListContent(id=lst.id, title=lst.title, board_id=lst.board_id, cards=cards.get_all(lst.id))
                for lst in lists.get_all(board_id)
            ),
        )

    # --- lists ---

    def create_list(self, board_id: str, form: ListForm) -> BoardList:
        lst = BoardList(id=new_id(), title=form.title, board_id=board_id)
        self.store.lists.create(board_id, lst)
        return lst

    def update_list(self, board_id: str, lst: BoardList) -> None:
        if lst.board_id != board_id:
            raise InvalidMove(f"list {lst.id!r} names board {lst.board_id!r}, not {board_id!r}")
        self.store.lists.update(board_id, lst)

    def delete_list(self, board_id: str, list_id: str) -> None:
        self.store.lists.delete(board_id, list_id)

    def reorder_list(self, board_id: str, list_id: str, target_index: int) -> None:
        self.store.lists.reorder(board_id, list_id, target_index)

    # --- cards ---

    def _require_list(self, board_id: str, list_id: str) -> None:
        if list_id not in self.store.lists.get_snapshot().get_orders(board_id):
            raise NotFound(f"list {list_id!r} not found on board {board_id!r}")

    def create_card(self, board_id: str, list_id: str, form: CardForm) -> Card:
        self._require_list(board_id, list_id)
        card = Card(
            id=new_id(),
            title=form.title,
            writer=form.writer,
            description=form.description,
            start_date=form.start_date,
            due_date=form.due_date,
        )
        self.store.cards.create(list_id, card)
        return card

    def update_card(self, board_id: str, list_id: str, card: Card) -> None:
        self._require_list(board_id, list_id)
        self.store.cards.update(list_id, card)

    def delete_card(self, board_id: str, list_id: str, card_id: str) -> None:
        self._require_list(board_id, list_id)
        self.store.cards.delete(list_id, card_id)

    def reorder_card(
        self,
        board_id: str,
        source_list_id: str,
        target_list_id: str,
        card_id: str,
        target_index: int,
    ) -> None:
        """Reorder a card within its list, or move it to another list of the same board."""
        self._require_list(board_id, source_list_id)
        self._require_list(board_id, target_list_id)
        self.store.cards.move(source_list_id, target_list_id, card_id, target_index)
