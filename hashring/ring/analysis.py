"""
Load Analysis: How Evenly a Ring Spreads Keys

Offline helpers for sizing ``range`` and ``weight``:
- Per-node key counts for a sample of keys
- Balance factor (most-loaded / least-loaded) and coefficient of variation
- Fraction of the ring each node owns
- Fraction of keys that moved between two assignments

None of these are used on the lookup path.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, Union

import numpy as np

from hashring.core.types import Node
from hashring.ring.consistent_hash import ConsistentHash

Counts = Union[Mapping[Any, int], Sequence[int]]


def assignments(ring: ConsistentHash, keys: Iterable[Any]) -> list[Node]:
    """Owning node of each key, in key order."""
    return [ring.get(key) for key in keys]


def key_distribution(ring: ConsistentHash, keys: Iterable[Any]) -> dict[Node, int]:
    """
    Count keys per node.

    Every node on the ring appears in the result, with zero if no key
    resolved to it.
    """
    counts: dict[Node, int] = {node: 0 for node in ring.get_nodes()}
    for node in assignments(ring, keys):
        if node is not None:
            counts[node] = counts.get(node, 0) + 1
    return counts


def _as_array(counts: Counts) -> np.ndarray:
    values = counts.values() if isinstance(counts, Mapping) else counts
    return np.asarray(list(values), dtype=np.float64)


def balance_factor(counts: Counts) -> float:
    """
    Ratio of most-loaded to least-loaded bin.

    Returns:
        1.0 = perfectly balanced (or fewer than two bins),
        inf when some bin is empty
    """
    values = _as_array(counts)
    if values.size < 2:
        return 1.0

    lowest = values.min()
    if lowest == 0:
        return float("inf")
    return float(values.max() / lowest)


def coefficient_of_variation(counts: Counts) -> float:
    """Population standard deviation over mean; 0.0 for no load."""
    values = _as_array(counts)
    if values.size == 0:
        return 0.0

    mean = values.mean()
    if mean == 0:
        return 0.0
    return float(values.std() / mean)


def ownership(ring: ConsistentHash) -> dict[Node, float]:
    """
    Fraction of the ring range owned by each node.

    A control point owns the arc from its predecessor (exclusive) up to
    itself (inclusive); the first point also owns the wraparound arc.
    """
    ring_range = ring.config.ring_range
    owners: dict[int, Node] = {}
    nodes = list(dict.fromkeys(ring.get_nodes()))
    for node in nodes:
        for point in ring.get_points(node) or ():
            owners[point] = node

    share: dict[Node, float] = {node: 0.0 for node in nodes}
    if not owners:
        return share

    points = np.sort(np.fromiter(owners.keys(), dtype=np.int64))
    arcs = np.diff(points, prepend=points[-1] - ring_range)

    for point, arc in zip(points.tolist(), arcs.tolist()):
        share[owners[point]] += arc / ring_range
    return share


def reassigned_fraction(before: Sequence[Node], after: Sequence[Node]) -> float:
    """
    Fraction of keys whose node differs between two assignments.

    Raises:
        ValueError: The assignments cover different numbers of keys
    """
    if len(before) != len(after):
        raise ValueError(
            f"assignment length mismatch: {len(before)} != {len(after)}"
        )
    if len(before) == 0:
        return 0.0

    moved = np.fromiter(
        (old != new for old, new in zip(before, after)),
        dtype=bool,
        count=len(before),
    )
    return float(moved.mean())
