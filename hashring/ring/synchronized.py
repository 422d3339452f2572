"""
Thread-Safe Ring Wrapper

A ConsistentHash rebuilds its derived state lazily inside get() and
get_points(), so readers mutate the ring too. The wrapper therefore
serializes reads against writes, not only writes against writes.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

from hashring.core.types import Node
from hashring.ring.consistent_hash import ConsistentHash


class SynchronizedConsistentHash:
    """
    ConsistentHash guarded by a single reentrant lock.

    Usage:
        ring = SynchronizedConsistentHash(ConsistentHash(weight=64))
        ring.add("cache-1")

        with ring.locked() as inner:
            if "cache-2" not in inner:
                inner.add("cache-2")
    """

    __slots__ = ("_ring", "_lock")

    def __init__(
        self,
        ring: Optional[ConsistentHash] = None,
        **options: Any,
    ) -> None:
        self._ring = ring if ring is not None else ConsistentHash(**options)
        self._lock = threading.RLock()

    def add(
        self,
        node: Node,
        weight: Optional[int] = None,
        points: Optional[Iterable[int]] = None,
    ) -> SynchronizedConsistentHash:
        with self._lock:
            self._ring.add(node, weight, points)
        return self

    def remove(self, node: Node) -> SynchronizedConsistentHash:
        with self._lock:
            self._ring.remove(node)
        return self

    def get(self, key: Any, count: Optional[int] = None) -> Any:
        with self._lock:
            return self._ring.get(key, count)

    def get_nodes(self) -> list[Node]:
        with self._lock:
            return self._ring.get_nodes()

    def get_points(self, node: Node) -> Optional[list[int]]:
        with self._lock:
            return self._ring.get_points(node)

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return self._ring.get_stats()

    @contextmanager
    def locked(self) -> Iterator[ConsistentHash]:
        """Hold the lock across several operations on the wrapped ring."""
        with self._lock:
            yield self._ring

    def __len__(self) -> int:
        with self._lock:
            return len(self._ring)

    def __contains__(self, node: object) -> bool:
        with self._lock:
            return node in self._ring

    def __iter__(self) -> Iterator[Node]:
        return iter(self.get_nodes())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._ring!r})"
