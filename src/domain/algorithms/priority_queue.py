from __future__ import annotations

import heapq
import itertools
from typing import Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)


class MinPriorityQueue(Generic[K]):
    """Binary-heap min-priority queue with decrease-key.

    Updates push a fresh heap entry and leave the old one behind; stale entries
    are discarded on pop. Ties are broken by insertion order.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, K]] = []
        self._priority: dict[K, float] = {}
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._priority)

    def __bool__(self) -> bool:
        return bool(self._priority)

    def __contains__(self, key: object) -> bool:
        return key in self._priority

    def is_empty(self) -> bool:
        return not self._priority

    def priority(self, key: K) -> float | None:
        return self._priority.get(key)

    def push(self, key: K, priority: float) -> None:
        if key in self._priority:
            raise KeyError(f"{key!r} already queued; use update()")
        self._set(key, priority)

    def update(self, key: K, priority: float) -> None:
        """Insert `key`, or change its priority if already queued."""

        self._set(key, priority)

    def pop(self) -> K:
        while self._heap:
            priority, _, key = heapq.heappop(self._heap)
            if self._priority.get(key) == priority:
                del self._priority[key]
                return key
        raise IndexError("pop from an empty priority queue")

    def discard(self, key: K) -> None:
        self._priority.pop(key, None)

    def _set(self, key: K, priority: float) -> None:
        self._priority[key] = priority
        heapq.heappush(self._heap, (priority, next(self._counter), key))
