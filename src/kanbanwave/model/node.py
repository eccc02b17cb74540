"""Reactive tree nodes for presentation state.

Watchers fire on change and bubble up through the parent chain, so a
widget watching ``view.lists`` hears about a card moving inside any list.
"""

from __future__ import annotations

from typing import Any, Callable

Callback = Callable[["Node | ListNode", str, Any, Any], None]


def _wrap(value: Any, parent: Node | ListNode, key: str) -> Any:
    """Auto-wrap dicts as Nodes. Reparent existing Nodes/ListNodes."""
    if isinstance(value, dict):
        return Node(_parent=parent, _key=key, **value)
    if isinstance(value, (Node, ListNode)):
        object.__setattr__(value, "_parent", parent)
        object.__setattr__(value, "_key", key)
    return value


def _emit(node: Node | ListNode, key: str, old: Any, new: Any) -> None:
    """Fire local watchers for key, then bubble up the parent chain."""
    for cb in list(node._watchers.get(key, ())):
        cb(node, key, old, new)
    child = node
    while child._parent is not None:
        parent = child._parent
        for cb in list(parent._watchers.get(child._key, ())):
            cb(node, key, old, new)
        child = parent


def _unwatcher(watchers: dict[str, list[Callback]], key: str, callback: Callback) -> Callable[[], None]:
    def unwatch() -> None:
        callbacks = watchers.get(key, [])
        if callback in callbacks:
            callbacks.remove(callback)

    return unwatch


class Node:
    """Reactive dict-like tree node.

    Values are read and written as attributes. Setting a value to None
    deletes the key. Dict values become child Nodes.
    """

    def __init__(
        self,
        _parent: Node | ListNode | None = None,
        _key: str | None = None,
        **data: Any,
    ) -> None:
        object.__setattr__(self, "_children", {})
        object.__setattr__(self, "_watchers", {})
        object.__setattr__(self, "_parent", None)
        object.__setattr__(self, "_key", _key)
        object.__setattr__(self, "_version", 0)
        for k, v in data.items():
            setattr(self, k, v)
        object.__setattr__(self, "_parent", _parent)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._children.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        old = self._children.get(name)
        if value is None:
            self._children.pop(name, None)
        else:
            value = _wrap(value, parent=self, key=name)
            self._children[name] = value
        if old != value:
            self._version += 1
            _emit(self, name, old, value)

    def __contains__(self, key: str) -> bool:
        return key in self._children

    def watch(self, key: str, callback: Callback) -> Callable[[], None]:
        """Watch a key for changes. Returns an unwatch callable."""
        self._watchers.setdefault(key, []).append(callback)
        return _unwatcher(self._watchers, key, callback)

    def keys(self):
        return self._children.keys()

    def items(self):
        return self._children.items()

    def update(self, other: Node) -> None:
        """Update this node in-place to match other, preserving watchers."""
        for key in set(self.keys()) - set(other.keys()):
            setattr(self, key, None)
        for key, new_value in other.items():
            old_value = self._children.get(key)
            if isinstance(old_value, (Node, ListNode)) and type(old_value) is type(new_value):
                old_value.update(new_value)
            elif old_value != new_value:
                setattr(self, key, new_value)

    def __repr__(self) -> str:
        return f"<Node [{', '.join(self._children)}]>"


class ListNode:
    """Ordered, id-keyed collection with change notification.

    Items are accessed by string id. Setting an item to None deletes it.
    A change of order alone is reported under the key ``"*"`` with the
    old and new key lists.
    """

    def __init__(
        self,
        _parent: Node | None = None,
        _key: str | None = None,
    ) -> None:
        object.__setattr__(self, "_by_id", {})
        object.__setattr__(self, "_watchers", {})
        object.__setattr__(self, "_parent", _parent)
        object.__setattr__(self, "_key", _key)
        object.__setattr__(self, "_version", 0)

    def __getitem__(self, key: str) -> Any:
        return self._by_id.get(str(key))

    def __setitem__(self, key: str, value: Any) -> None:
        key = str(key)
        old = self._by_id.get(key)
        if value is None:
            if old is None:
                return
            del self._by_id[key]
        else:
            value = _wrap(value, parent=self, key=key)
            self._by_id[key] = value
            if old == value:
                return
        self._version += 1
        _emit(self, key, old, value)

    def __iter__(self):
        return iter(list(self._by_id.values()))

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, key: str) -> bool:
        return str(key) in self._by_id

    def watch(self, key: str, callback: Callback) -> Callable[[], None]:
        """Watch an item id, or ``"*"`` for reorders. Returns an unwatch callable."""
        key = str(key)
        self._watchers.setdefault(key, []).append(callback)
        return _unwatcher(self._watchers, key, callback)

    def keys(self) -> list[str]:
        return list(self._by_id)

    def items(self) -> list[tuple[str, Any]]:
        return list(self._by_id.items())

    def reorder(self, keys: list[str]) -> None:
        """Rearrange items to follow keys, which must be a permutation of the current keys."""
        old_keys = self.keys()
        new_keys = [str(k) for k in keys]
        if sorted(old_keys) != sorted(new_keys):
            raise ValueError(f"{new_keys!r} is not a permutation of {old_keys!r}")
        if old_keys == new_keys:
            return
        object.__setattr__(self, "_by_id", {k: self._by_id[k] for k in new_keys})
        self._version += 1
        _emit(self, "*", old_keys, new_keys)

    def move(self, key: str, index: int) -> None:
        """Move one item to index, clamped into range."""
        keys = self.keys()
        keys.remove(str(key))
        keys.insert(max(0, min(index, len(keys))), str(key))
        self.reorder(keys)

    def update(self, other: ListNode) -> None:
        """Update this list in-place to match other, preserving watchers."""
        for key in set(self._by_id) - set(other._by_id):
            self[key] = None
        for key, new_value in other._by_id.items():
            old_value = self._by_id.get(key)
            if isinstance(old_value, (Node, ListNode)) and type(old_value) is type(new_value):
                old_value.update(new_value)
            elif old_value != new_value:
                self[key] = new_value
        self.reorder(list(other._by_id))

    def __repr__(self) -> str:
        return f"<ListNode [{', '.join(self._by_id)}]>"
