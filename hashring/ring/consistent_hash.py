"""
Consistent Hash Ring: Key to Node Assignment

Maps resource keys onto a dynamic set of nodes so that adding or
removing a node remaps only about 1/N of the keys:
- Each node owns ``weight`` control points in [0, range)
- A key resolves to the owner of the first control point at or after
  its hashed position, wrapping past the end of the ring
- Adding a node more than once is the weighting mechanism: every add
  creates an independent entry with its own control points

Derived state (the sorted position index and the point -> node map) is
cached and rebuilt on the next lookup after any structural change, so a
reader can trigger a rebuild.

Complexity:
- add: O(w) random placement, O(1) uniform (deferred)
- remove: O(n + w)
- get: O(len(key) + log p), plus O(p log p) after a change
"""

from __future__ import annotations

import random
from typing import Any, Iterable, Iterator, Optional, overload

from hashring.core.types import NodeEntry, Node
from hashring.core.config import RingConfig
from hashring.core.errors import ConfigurationError, PlacementError
from hashring.observability.logging import StructuredLogger, LogLevel
from hashring.observability.metrics import RingMetrics
from hashring.ring.generator import ControlPointGenerator
from hashring.ring.hasher import KeyHasher
from hashring.ring.index import PositionIndex

logger = StructuredLogger(__name__)


class ConsistentHash:
    """
    Consistent hash ring with weighted nodes.

    Usage:
        ring = ConsistentHash(range=100003, weight=40)
        ring.add("cache-1").add("cache-2").add("cache-3", 80)

        node = ring.get("user:1234")
        replicas = ring.get("user:1234", 2)

        ring.remove("cache-2")

    Uniform placement defers point assignment to the next lookup so all
    pending nodes are spaced together:
        ring = ConsistentHash(distribution="uniform", orderNodes=sorted)
    """

    __slots__ = (
        "_config", "_entries", "_point_map", "_point_map_stale",
        "_pending", "_point_count", "_index", "_hasher", "_generator",
        "_metrics",
    )

    def __init__(
        self,
        config: Optional[RingConfig] = None,
        *,
        metrics: Optional[RingMetrics] = None,
        rng: Optional[random.Random] = None,
        **options: Any,
    ) -> None:
        config = config or RingConfig()
        result = config.with_options(**options)
        if result.is_err():
            raise result.error
        config = result.unwrap()

        self._config = config
        self._entries: list[NodeEntry] = []
        self._point_map: dict[int, Node] = {}
        self._point_map_stale = False
        self._pending = 0
        self._point_count = 0
        self._index = PositionIndex(gap=config.search_gap)
        self._hasher = KeyHasher(config.ring_range, config.amplify_bits)
        self._generator = ControlPointGenerator(
            ring_range=config.ring_range,
            max_probes=config.max_probes,
            rng=rng or random.Random(config.seed),
        )
        self._metrics = metrics

    # -------------------------------------------------------------------------
    # Ring store mutations
    # -------------------------------------------------------------------------
    def add(
        self,
        node: Node,
        weight: Optional[int] = None,
        points: Optional[Iterable[int]] = None,
    ) -> ConsistentHash:
        """
        Add an entry for ``node`` to the ring.

        Args:
            node: Caller-supplied node identifier
            weight: Control points to generate (random placement only;
                uniform placement always uses the configured weight)
            points: Explicit control points, used verbatim

        Returns:
            self, for chaining

        Raises:
            ConfigurationError: ``weight`` is not a non-negative integer
            PlacementError: Random placement exhausted its probe budget;
                the ring is left unmodified
        """
        if weight is not None and (
            isinstance(weight, bool) or not isinstance(weight, int) or weight < 0
        ):
            raise ConfigurationError.invalid_option(
                "weight", weight, "expected a non-negative integer",
            )

        if points is not None:
            placed: Optional[list[int]] = [int(p) for p in points]
        elif self._config.uniform:
            placed = None
        else:
            count = weight or self._config.weight
            # Removal leaves the map stale; sample against live owners only
            if self._point_map_stale:
                self._rebuild_point_map()
            result = self._generator.random_points(count, self._point_map)
            if result.is_err():
                self._on_placement_failure(node, result.error)
                raise result.error
            placed = result.unwrap()

        self._entries.append(NodeEntry(node=node, points=placed))
        if placed is None:
            self._pending += 1
            self._point_map_stale = True
        else:
            for point in placed:
                self._point_map[point] = node
            self._point_count += len(placed)
        self._index.invalidate()

        logger.debug(
            "Node added",
            node=node,
            points=len(placed) if placed is not None else 0,
            pending=placed is None,
        )
        self._record_size()
        return self

    def remove(self, node: Node) -> ConsistentHash:
        """
        Remove every entry for ``node``. Removing an absent node is a no-op.

        Remaining uniform points keep their positions; the gaps left by
        the removed node are not re-spaced.
        """
        kept: list[NodeEntry] = []
        removed: list[NodeEntry] = []
        for entry in self._entries:
            (removed if entry.node == node else kept).append(entry)

        if not removed:
            return self

        self._entries = kept
        for entry in removed:
            if entry.pending:
                self._pending -= 1
            else:
                self._point_count -= entry.point_count

        self._point_map_stale = True
        self._index.invalidate()

        logger.debug("Node removed", node=node, entries=len(removed))
        self._record_size()
        return self

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------
    @overload
    def get(self, key: Any) -> Optional[Node]: ...

    @overload
    def get(self, key: Any, count: int) -> list[Node]: ...

    def get(self, key: Any, count: Optional[int] = None) -> Any:
        """
        Resolve ``key`` to its node.

        Args:
            key: Resource key (str, bytes, or anything with a str() form)
            count: When given, return up to ``count`` distinct nodes in
                ring order starting at the key's position

        Returns:
            The owning node, or None on an empty ring; with ``count``,
            a list of distinct nodes (empty on an empty ring)
        """
        self._refresh()
        if self._metrics is not None:
            self._metrics.record_lookup()

        if not len(self._index):
            return None if count is None else []

        start = self._locate(key)
        if count is None:
            return self._point_map[self._index.point_at(start)]
        return self._walk(start, count)

    def _locate(self, key: Any) -> int:
        """Index of the key's successor control point in the position index."""
        return self._index.locate(self._hasher.position(key))

    def _walk(self, start: int, count: int) -> list[Node]:
        """Collect distinct nodes clockwise from ``start``, wrapping once."""
        found: list[Node] = []
        seen: set[Node] = set()
        points = self._index.points
        total = len(points)

        for offset in range(total):
            if len(found) >= count:
                break
            node = self._point_map[points[(start + offset) % total]]
            if node not in seen:
                seen.add(node)
                found.append(node)

        return found

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------
    def get_nodes(self) -> list[Node]:
        """Node of every entry, duplicates included, in store order."""
        return [entry.node for entry in self._entries]

    def get_points(self, node: Node) -> Optional[list[int]]:
        """
        Control points owned by ``node`` (all of its entries).

        Resolves pending uniform placement first. Returns None if the
        node is not on the ring.
        """
        if self._pending:
            self._resolve_pending()

        owned: Optional[list[int]] = None
        for entry in self._entries:
            if entry.node == node:
                owned = (owned or []) + list(entry.points or ())
        return owned

    @property
    def config(self) -> RingConfig:
        return self._config

    @property
    def node_count(self) -> int:
        """Number of node entries (a node added twice counts twice)."""
        return len(self._entries)

    @property
    def point_count(self) -> int:
        """Number of assigned control points (pending entries own none)."""
        return self._point_count

    @property
    def pending_count(self) -> int:
        """Entries awaiting uniform placement."""
        return self._pending

    def get_stats(self) -> dict[str, Any]:
        """Get ring statistics."""
        return {
            "nodes": self.node_count,
            "distinct_nodes": len(set(self.get_nodes())),
            "control_points": self._point_count,
            "pending": self._pending,
            "range": self._config.ring_range,
            "weight": self._config.weight,
            "distribution": self._config.distribution.value,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, node: object) -> bool:
        return any(entry.node == node for entry in self._entries)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.get_nodes())

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"nodes={len(self._entries)}, "
            f"points={self._point_count}, "
            f"distribution={self._config.distribution.value!r})"
        )

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------
    def _refresh(self) -> None:
        """Bring pending placements, point map and index up to date."""
        if self._pending:
            self._resolve_pending()
        if self._point_map_stale:
            self._rebuild_point_map()
        if self._index.stale:
            self._index.rebuild(
                entry.points for entry in self._entries if entry.points
            )
            if self._metrics is not None:
                self._metrics.record_index_rebuild()
            logger.debug("Position index rebuilt", points=len(self._index))

    def _resolve_pending(self) -> None:
        """Assign evenly spaced points to every entry still pending."""
        resolved = [entry for entry in self._entries if not entry.pending]
        pending = self._order_pending(
            [entry for entry in self._entries if entry.pending]
        )

        occupied = {point for entry in resolved for point in entry.points}
        layout = self._generator.uniform_points(
            len(pending), self._config.weight, occupied,
        )
        for entry, points in zip(pending, layout):
            entry.points = points
            self._point_count += len(points)

        self._entries = resolved + pending
        self._pending = 0
        self._point_map_stale = True
        self._index.invalidate()

        logger.debug(
            "Uniform placement resolved",
            entries=len(pending),
            weight=self._config.weight,
        )
        self._record_size()

    def _order_pending(self, pending: list[NodeEntry]) -> list[NodeEntry]:
        """Apply the configured node ordering to pending entries."""
        order_nodes = self._config.order_nodes
        if order_nodes is None or len(pending) < 2:
            return pending

        by_node: dict[Node, list[NodeEntry]] = {}
        for entry in pending:
            by_node.setdefault(entry.node, []).append(entry)

        ordered: list[NodeEntry] = []
        for node in order_nodes([entry.node for entry in pending]):
            bucket = by_node.get(node)
            if bucket:
                ordered.append(bucket.pop(0))

        # Entries the ordering dropped keep their relative order at the end
        for entry in pending:
            bucket = by_node.get(entry.node)
            if bucket and bucket[0] is entry:
                ordered.append(bucket.pop(0))

        return ordered

    def _rebuild_point_map(self) -> None:
        """Regenerate point -> node from the entries; last writer wins."""
        point_map: dict[int, Node] = {}
        for entry in self._entries:
            for point in entry.points or ():
                point_map[point] = entry.node
        self._point_map = point_map
        self._point_map_stale = False
        if self._metrics is not None:
            self._metrics.record_point_map_rebuild()

    # -------------------------------------------------------------------------
    # Observability
    # -------------------------------------------------------------------------
    def _record_size(self) -> None:
        if self._metrics is not None:
            self._metrics.record_size(len(self._entries), self._point_count)

    def _on_placement_failure(self, node: Node, error: PlacementError) -> None:
        if self._metrics is not None:
            self._metrics.record_placement_failure()
        if logger.is_enabled_for(LogLevel.ERROR):
            logger.error(str(error), node=node, **error.context)
