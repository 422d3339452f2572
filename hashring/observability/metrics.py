"""
Metrics Collector: Prometheus-Compatible Counters and Gauges

Provides:
- Thread-safe counters and gauges with label dimensions
- A registry that exports Prometheus text format
- RingMetrics, the instrument set a ConsistentHash reports into
"""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence


@dataclass(frozen=True)
class MetricLabels:
    """Immutable label set for metric dimensions."""
    labels: tuple[tuple[str, str], ...]

    @classmethod
    def from_dict(cls, d: dict[str, str]) -> MetricLabels:
        return cls(labels=tuple(sorted(d.items())))

    def to_dict(self) -> dict[str, str]:
        return dict(self.labels)


class Counter:
    """
    Monotonically increasing counter metric.

    Usage:
        lookups = Counter("hashring_lookups_total", ["ring"])
        lookups.inc(ring="sessions")
    """

    __slots__ = ("_name", "_help", "_label_names", "_values", "_lock")

    def __init__(
        self,
        name: str,
        label_names: Sequence[str] = (),
        help_text: str = "",
    ) -> None:
        self._name = name
        self._help = help_text
        self._label_names = tuple(label_names)
        self._values: dict[MetricLabels, float] = defaultdict(float)
        self._lock = threading.Lock()

    def inc(self, value: float = 1.0, **labels: str) -> None:
        """Increment counter."""
        if value < 0:
            raise ValueError("Counter can only increase")
        key = self._make_key(labels)
        with self._lock:
            self._values[key] += value

    def get(self, **labels: str) -> float:
        """Get current value."""
        key = self._make_key(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def _make_key(self, labels: dict[str, str]) -> MetricLabels:
        filtered = {k: labels.get(k, "") for k in self._label_names}
        return MetricLabels.from_dict(filtered)

    def collect(self) -> Iterator[tuple[dict[str, str], float]]:
        """Iterate all label combinations."""
        with self._lock:
            items = list(self._values.items())
        for key, value in items:
            yield (key.to_dict(), value)

    @property
    def name(self) -> str:
        return self._name

    @property
    def help_text(self) -> str:
        return self._help


class Gauge:
    """
    Gauge metric that can go up and down.

    Usage:
        nodes = Gauge("hashring_nodes", ["ring"])
        nodes.set(12, ring="sessions")
    """

    __slots__ = ("_name", "_help", "_label_names", "_values", "_lock")

    def __init__(
        self,
        name: str,
        label_names: Sequence[str] = (),
        help_text: str = "",
    ) -> None:
        self._name = name
        self._help = help_text
        self._label_names = tuple(label_names)
        self._values: dict[MetricLabels, float] = {}
        self._lock = threading.Lock()

    def set(self, value: float, **labels: str) -> None:
        """Set gauge value."""
        key = self._make_key(labels)
        with self._lock:
            self._values[key] = value

    def get(self, **labels: str) -> float:
        """Get current value."""
        key = self._make_key(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def _make_key(self, labels: dict[str, str]) -> MetricLabels:
        filtered = {k: labels.get(k, "") for k in self._label_names}
        return MetricLabels.from_dict(filtered)

    def collect(self) -> Iterator[tuple[dict[str, str], float]]:
        with self._lock:
            items = list(self._values.items())
        for key, value in items:
            yield (key.to_dict(), value)

    @property
    def name(self) -> str:
        return self._name

    @property
    def help_text(self) -> str:
        return self._help


class MetricsCollector:
    """
    Central registry for all metrics.

    Usage:
        collector = MetricsCollector()

        lookups = collector.counter("hashring_lookups_total")

        # Export to Prometheus
        output = collector.export_prometheus()
    """

    __slots__ = ("_counters", "_gauges", "_lock")

    _instance: Optional[MetricsCollector] = None

    def __init__(self) -> None:
        self._counters: dict[str, Counter] = {}
        self._gauges: dict[str, Gauge] = {}
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> MetricsCollector:
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def counter(
        self,
        name: str,
        label_names: Sequence[str] = (),
        help_text: str = "",
    ) -> Counter:
        """Get or create counter."""
        with self._lock:
            if name not in self._counters:
                self._counters[name] = Counter(name, label_names, help_text)
            return self._counters[name]

    def gauge(
        self,
        name: str,
        label_names: Sequence[str] = (),
        help_text: str = "",
    ) -> Gauge:
        """Get or create gauge."""
        with self._lock:
            if name not in self._gauges:
                self._gauges[name] = Gauge(name, label_names, help_text)
            return self._gauges[name]

    def export_prometheus(self) -> str:
        """Export all metrics in Prometheus text format."""
        lines: list[str] = []

        with self._lock:
            counters = list(self._counters.values())
            gauges = list(self._gauges.values())

        for kind, metrics in (("counter", counters), ("gauge", gauges)):
            for metric in metrics:
                if metric.help_text:
                    lines.append(f"# HELP {metric.name} {metric.help_text}")
                lines.append(f"# TYPE {metric.name} {kind}")
                for labels, value in metric.collect():
                    label_str = self._format_labels(labels)
                    lines.append(f"{metric.name}{label_str} {value}")

        return "\n".join(lines)

    def _format_labels(self, labels: dict[str, str]) -> str:
        """Format labels as Prometheus label string."""
        if not labels:
            return ""
        pairs = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(pairs) + "}"


class RingMetrics:
    """
    Instruments reported by one ConsistentHash.

    Every instrument carries a ``ring`` label so several rings can share
    one collector.
    """

    __slots__ = (
        "ring", "lookups", "index_rebuilds", "point_map_rebuilds",
        "placement_failures", "nodes", "control_points",
    )

    def __init__(
        self,
        collector: Optional[MetricsCollector] = None,
        ring: str = "default",
    ) -> None:
        collector = collector or MetricsCollector.get_instance()
        self.ring = ring
        self.lookups = collector.counter(
            "hashring_lookups_total", ["ring"], "Key lookups served",
        )
        self.index_rebuilds = collector.counter(
            "hashring_index_rebuilds_total", ["ring"], "Sorted position index rebuilds",
        )
        self.point_map_rebuilds = collector.counter(
            "hashring_point_map_rebuilds_total", ["ring"], "Control point map rebuilds",
        )
        self.placement_failures = collector.counter(
            "hashring_placement_failures_total", ["ring"], "Failed control point placements",
        )
        self.nodes = collector.gauge(
            "hashring_nodes", ["ring"], "Node entries on the ring",
        )
        self.control_points = collector.gauge(
            "hashring_control_points", ["ring"], "Assigned control points",
        )

    def record_lookup(self) -> None:
        self.lookups.inc(ring=self.ring)

    def record_index_rebuild(self) -> None:
        self.index_rebuilds.inc(ring=self.ring)

    def record_point_map_rebuild(self) -> None:
        self.point_map_rebuilds.inc(ring=self.ring)

    def record_placement_failure(self) -> None:
        self.placement_failures.inc(ring=self.ring)

    def record_size(self, node_count: int, point_count: int) -> None:
        self.nodes.set(node_count, ring=self.ring)
        self.control_points.set(point_count, ring=self.ring)

    def snapshot(self) -> dict[str, Any]:
        """Current values for this ring."""
        return {
            "lookups": self.lookups.get(ring=self.ring),
            "index_rebuilds": self.index_rebuilds.get(ring=self.ring),
            "point_map_rebuilds": self.point_map_rebuilds.get(ring=self.ring),
            "placement_failures": self.placement_failures.get(ring=self.ring),
            "nodes": self.nodes.get(ring=self.ring),
            "control_points": self.control_points.get(ring=self.ring),
        }
