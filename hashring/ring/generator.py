"""
Control-Point Generator: Random and Uniform Placement

Random placement:
- Rejection-sample integers in [0, range) until one is unused
- Points chosen earlier in the same batch count as used
- Give up after a fixed probe budget per point

Uniform placement:
- Space ``weight`` points per pending node evenly around the ring
- Interleave nodes so that each node's points alternate with the others'
- A point that lands on an occupied slot moves to the middle of the free
  arc that follows it, so later batches fill the gaps of earlier ones

Complexity:
- Random: O(count) expected while the ring is sparse, O(count * probes) worst
- Uniform: O(nodes * weight)
"""

from __future__ import annotations

import bisect
import math
import random
from collections.abc import Container, Iterable
from typing import Optional

from hashring.core.types import Result, Ok, Err
from hashring.core.errors import PlacementError
from hashring.core import constants as C


class ControlPointGenerator:
    """
    Produces the control points a node occupies on the ring.

    The generator holds no ring state; callers pass in the set of points
    already in use.
    """

    __slots__ = ("_ring_range", "_max_probes", "_rng")

    def __init__(
        self,
        ring_range: int = C.DEFAULT_RANGE,
        max_probes: int = C.MAX_PROBES_PER_POINT,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._ring_range = ring_range
        self._max_probes = max_probes
        self._rng = rng or random.Random()

    def random_points(
        self,
        count: int,
        reserved: Container[int] = frozenset(),
    ) -> Result[list[int], PlacementError]:
        """
        Sample ``count`` distinct unused control points.

        Args:
            count: Number of points to place
            reserved: Points already owned by nodes on the ring

        Returns:
            Ok[list[int]]: Points in sampling order
            Err[PlacementError]: Probe budget exhausted for some point
        """
        points: list[int] = []
        chosen: set[int] = set()
        randrange = self._rng.randrange

        for placed in range(count):
            for _ in range(self._max_probes):
                point = randrange(self._ring_range)
                if point not in reserved and point not in chosen:
                    break
            else:
                return Err(PlacementError.point_exhaustion(
                    ring_range=self._ring_range,
                    requested=count,
                    placed=placed,
                    probes=self._max_probes,
                ))
            chosen.add(point)
            points.append(point)

        return Ok(points)

    def uniform_points(
        self,
        node_count: int,
        weight: int,
        occupied: Iterable[int] = (),
    ) -> list[list[int]]:
        """
        Evenly spaced points for ``node_count`` nodes, ``weight`` each.

        Point j of node i sits at
        ``step * i + step / 2 + step * node_count * j``
        with ``step = range / (node_count * weight)``, rounded half up.

        A computed point that is already taken, either in ``occupied`` or
        earlier in this batch, is moved by ``_free_slot``. When nothing
        collides the layout is exactly the formula above.

        Args:
            node_count: Pending nodes to place together
            weight: Points per node
            occupied: Points held by entries already on the ring

        Returns:
            One list of ``weight`` points per node, in node order
        """
        if node_count <= 0:
            return []

        total = node_count * weight
        step = self._ring_range / total
        stride = step * node_count

        taken = sorted(set(occupied))
        taken_set = set(taken)

        layout: list[list[int]] = []
        for i in range(node_count):
            base = step * i + step / 2
            points: list[int] = []
            for j in range(weight):
                point = math.floor(base + stride * j + 0.5) % self._ring_range
                if point in taken_set:
                    point = self._free_slot(point, taken, taken_set)
                if point not in taken_set:
                    taken_set.add(point)
                    bisect.insort(taken, point)
                points.append(point)
            layout.append(points)
        return layout

    def _free_slot(self, point: int, taken: list[int], taken_set: set[int]) -> int:
        """
        Free position for a taken ``point``: the middle of the arc up to the
        next taken point clockwise, or the first free slot after it when
        that arc is empty. A full ring returns ``point`` unchanged.
        """
        ring_range = self._ring_range
        idx = bisect.bisect_right(taken, point)
        following = taken[idx] if idx < len(taken) else taken[0] + ring_range
        gap = following - point
        if gap > 1:
            return (point + gap // 2) % ring_range

        for offset in range(1, ring_range):
            candidate = (point + offset) % ring_range
            if candidate not in taken_set:
                return candidate
        return point

    @property
    def ring_range(self) -> int:
        return self._ring_range
