from __future__ import annotations

from typing import Generic, Iterator, List, Optional, TypeVar

from .errors import OutOfRangeError, RangeNotFoundError

T = TypeVar("T")

NOT_FOUND = -1


class Node(Generic[T]):
    """A single link of an OrderedSequence. Owned by exactly one sequence."""

    __slots__ = ("value", "next")

    def __init__(self, value: T, next: Optional["Node[T]"] = None) -> None:
        self.value = value
        self.next = next

    def __repr__(self) -> str:
        return f"Node({self.value!r})"


class SequenceIterator(Generic[T]):
    """
    Forward-only, single-pass cursor over a live OrderedSequence.

    The cursor holds a reference to the next node to visit and follows ``next``
    links as it goes, so structural changes made through the sequence during a
    scan are observed. Removing the node most recently returned is safe;
    removing a node ahead of the cursor is unspecified.
    """

    __slots__ = ("_cursor",)

    def __init__(self, start: Optional[Node[T]]) -> None:
        self._cursor = start

    def has_next(self) -> bool:
        return self._cursor is not None

    def __iter__(self) -> "SequenceIterator[T]":
        return self

    def __next__(self) -> T:
        if self._cursor is None:
            raise StopIteration
        node = self._cursor
        self._cursor = node.next
        return node.value


class OrderedSequence(Generic[T]):
    """
    Singly linked, insertion-ordered container.

    Insertion at either end is O(1). Anything addressed by index, and removal of
    a node by reference, walks from the front.
    """

    __slots__ = ("_first", "_last", "_size")

    def __init__(self) -> None:
        self._first: Optional[Node[T]] = None
        self._last: Optional[Node[T]] = None
        self._size = 0

    @property
    def first(self) -> Optional[Node[T]]:
        return self._first

    @property
    def last(self) -> Optional[Node[T]]:
        return self._last

    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def _check_index(self, index: int, upper: int) -> None:
        if index < 0 or index >= upper:
            raise OutOfRangeError(f"index {index} out of range for sequence of size {self._size}")

    def node_at(self, index: int) -> Node[T]:
        self._check_index(index, self._size)
        current = self._first
        for _ in range(index):
            current = current.next
        return current

    def insert_at(self, index: int, value: T) -> None:
        """Insert ``value`` so that it ends up at position ``index``."""
        self._check_index(index, self._size + 1)
        if index == 0:
            self.insert_first(value)
        elif index == self._size:
            self.append_last(value)
        else:
            previous = self.node_at(index - 1)
            previous.next = Node(value, previous.next)
            self._size += 1

    def append_last(self, value: T) -> None:
        node = Node(value)
        if self._last is None:
            self._first = node
        else:
            self._last.next = node
        self._last = node
        self._size += 1

    def insert_first(self, value: T) -> None:
        self._first = Node(value, self._first)
        if self._last is None:
            self._last = self._first
        self._size += 1

    def value_at(self, index: int) -> T:
        return self.node_at(index).value

    def index_of(self, value: T) -> int:
        for index, candidate in enumerate(self):
            if candidate == value:
                return index
        return NOT_FOUND

    def remove_node(self, node: Optional[Node[T]]) -> None:
        """
        Unlink ``node`` from the sequence.

        Does nothing if ``node`` is None, the sequence is empty, or the node does
        not belong to this sequence.
        """
        if node is None or self._first is None:
            return
        if node is self._first:
            self._first = node.next
            if self._first is None:
                self._last = None
            self._size -= 1
            return
        previous = self._first
        while previous.next is not None and previous.next is not node:
            previous = previous.next
        if previous.next is None:
            return
        previous.next = node.next
        if node is self._last:
            self._last = previous
        self._size -= 1

    def remove_at(self, index: int) -> None:
        self._check_index(index, self._size)
        if index == 0:
            self.remove_node(self._first)
            return
        previous = self.node_at(index - 1)
        removed = previous.next
        previous.next = removed.next
        if removed is self._last:
            self._last = previous
        self._size -= 1

    def remove_value(self, value: T) -> None:
        index = self.index_of(value)
        if index == NOT_FOUND:
            raise RangeNotFoundError(f"{value} is not in the sequence")
        self.remove_at(index)

    def nodes(self) -> Iterator[Node[T]]:
        """Yield nodes front to back, following links live."""
        current = self._first
        while current is not None:
            yield current
            # unlinked nodes keep their ``next``
            current = current.next

    def values(self) -> List[T]:
        return list(self)

    def iterator(self) -> SequenceIterator[T]:
        return SequenceIterator(self._first)

    def __iter__(self) -> SequenceIterator[T]:
        return self.iterator()

    def __str__(self) -> str:
        return " ".join(str(value) for value in self)

    def __repr__(self) -> str:
        return f"OrderedSequence([{', '.join(repr(value) for value in self)}])"
