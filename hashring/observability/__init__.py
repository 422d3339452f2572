"""
Observability module: Metrics and structured logging.
"""

from hashring.observability.metrics import (
    MetricsCollector,
    Counter,
    Gauge,
    RingMetrics,
)
from hashring.observability.logging import (
    StructuredLogger,
    JsonFormatter,
    LogLevel,
    setup_logging,
)

__all__ = [
    "MetricsCollector",
    "Counter",
    "Gauge",
    "RingMetrics",
    "StructuredLogger",
    "JsonFormatter",
    "LogLevel",
    "setup_logging",
]
