"""Binary min-heap frontier for the route solvers."""

from __future__ import annotations

import heapq
import itertools
from typing import Generic, TypeVar

T = TypeVar("T")


class MinHeap(Generic[T]):
    """Min-heap of items keyed on a numeric cost.

    Equal costs pop in insertion order. Duplicate items are allowed; callers
    are expected to skip stale entries for already-settled nodes.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, T]] = []
        self._sequence = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def push(self, cost: float, item: T) -> None:
        """Insert `item` with priority `cost` in O(log n)."""
        heapq.heappush(self._heap, (float(cost), next(self._sequence), item))

    def pop(self) -> tuple[float, T]:
        """Remove and return the `(cost, item)` pair with minimum cost.

        Raises:
            IndexError: If the heap is empty.
        """
        if not self._heap:
            raise IndexError("pop from an empty heap")
        cost, _, item = heapq.heappop(self._heap)
        return cost, item

    def peek(self) -> tuple[float, T]:
        if not self._heap:
            raise IndexError("peek at an empty heap")
        cost, _, item = self._heap[0]
        return cost, item

    def is_empty(self) -> bool:
        return not self._heap
