"""
Position Index: Sorted Control Points with Successor Search

The index is a pure cache over the ring store: it is rebuilt from
scratch whenever the store changes and never patched incrementally.

Complexity:
- Rebuild: O(p log p) for p control points
- Search: O(log p) to narrow the window, then O(gap) linear scan
"""

from __future__ import annotations

from typing import Iterable, Sequence

from hashring.core import constants as C


def successor_search(
    points: Sequence[int],
    position: int,
    gap: int = C.SEARCH_LINEAR_GAP,
) -> int:
    """
    Find the index of the first value >= position in a sorted sequence.

    Binary search narrows the window to ``gap`` items, then a linear
    scan finishes. Positions past the largest value wrap to index 0.

    Returns:
        Index into ``points``, or -1 if ``points`` is empty
    """
    length = len(points)
    if length == 0:
        return -1

    lo, hi = 0, length - 1
    while hi - lo > gap:
        mid = (lo + hi) >> 1
        if points[mid] < position:
            lo = mid + 1
        else:
            hi = mid

    # Faster to scan once the location is narrowed to gap items
    for i in range(lo, length):
        if points[i] >= position:
            return i
    return 0


class PositionIndex:
    """
    Sorted array of every active control point.

    Usage:
        index = PositionIndex()
        index.rebuild([[20, 10], [15]])
        index.locate(12)   # -> 1 (points[1] == 15)
    """

    __slots__ = ("_points", "_gap", "_stale")

    def __init__(self, gap: int = C.SEARCH_LINEAR_GAP) -> None:
        self._points: list[int] = []
        self._gap = gap
        self._stale = True

    def invalidate(self) -> None:
        """Mark the index for rebuild before the next search."""
        self._stale = True

    @property
    def stale(self) -> bool:
        return self._stale

    def rebuild(self, point_lists: Iterable[Iterable[int]]) -> None:
        """Flatten and sort the given control point lists."""
        points = [point for points in point_lists for point in points]
        points.sort()
        self._points = points
        self._stale = False

    def locate(self, position: int) -> int:
        """Index of the first control point at or after position (circular)."""
        return successor_search(self._points, position, self._gap)

    def point_at(self, index: int) -> int:
        return self._points[index]

    @property
    def points(self) -> Sequence[int]:
        return self._points

    def __len__(self) -> int:
        return len(self._points)
