"""
Consistent Hash Ring

Maps resource keys onto a dynamic set of named nodes so that membership
changes remap only a small, bounded fraction of keys:
- Random or uniform control-point placement
- PJW string hashing tuned for correlated keys
- Sorted position index with successor search and wraparound
- Distinct-node walks for replica and fallback selection

Library only: no I/O, networking, or persistence.

License: MIT
"""

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from hashring.core.types import (
    Result,
    Ok,
    Err,
    Distribution,
)
from hashring.core.errors import (
    ErrorCode,
    HashRingError,
    PlacementError,
    ConfigurationError,
)
from hashring.core.config import RingConfig
from hashring.ring import (
    ConsistentHash,
    SynchronizedConsistentHash,
    pjw_hash,
)
from hashring.observability import RingMetrics, MetricsCollector

# Name used by callers that think of the failure by its kind
PointExhaustionError = PlacementError

__all__ = [
    # Version
    "__version__",
    # Result monad
    "Result",
    "Ok",
    "Err",
    # Enums
    "Distribution",
    # Errors
    "ErrorCode",
    "HashRingError",
    "PlacementError",
    "PointExhaustionError",
    "ConfigurationError",
    # Config
    "RingConfig",
    # Ring
    "ConsistentHash",
    "SynchronizedConsistentHash",
    "pjw_hash",
    # Observability
    "RingMetrics",
    "MetricsCollector",
]
