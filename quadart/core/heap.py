"""Binary max-heap keyed by a score extracted from each item.

The heap knows nothing about what it stores: callers pass a key function
and get items back in descending key order. Ties come out in an arbitrary
(currently insertion) order, which callers must not rely on.

Example:
    >>> heap = MaxHeap(key=lambda node: node.error)
    >>> heap.push(tree.root)
    >>> worst = heap.pop()
"""

from __future__ import annotations

import heapq
from itertools import count
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class MaxHeap(Generic[T]):
    """Max-heap over arbitrary items ordered by ``key(item)``.

    Internally a heapq min-heap of (-key, sequence, item) entries; the
    sequence number keeps items themselves out of comparisons.
    """

    def __init__(self, key: Callable[[T], float]):
        self._key = key
        self._entries: list[tuple[float, int, T]] = []
        self._sequence = count()

    def push(self, item: T) -> None:
        heapq.heappush(self._entries, (-self._key(item), next(self._sequence), item))

    def pop(self) -> T:
        """Remove and return the item with the largest key.

        Raises:
            IndexError: If the heap is empty
        """
        if not self._entries:
            raise IndexError("pop from empty MaxHeap")
        return heapq.heappop(self._entries)[2]

    def peek(self) -> T:
        if not self._entries:
            raise IndexError("peek at empty MaxHeap")
        return self._entries[0][2]

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"MaxHeap(size={len(self._entries)})"
