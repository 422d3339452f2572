"""
Error Hierarchy for the Consistent Hash Ring

The ring is a set of total functions except for two failure kinds:
- Placement: random placement could not find a free control point
- Configuration: construction options are missing, unknown, or invalid

Each error type includes:
- Unique error code for programmatic handling
- Human-readable message for logging
- Optional cause chain for root cause analysis
- Timestamp for correlation with logs

Usage:
    try:
        ring.add("cache-7", 500)
    except PlacementError as e:
        log.error(str(e), **e.to_dict())
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Unique error codes for programmatic error handling.

    Codes are grouped by subsystem:
    - 1xxx: Control-point placement errors
    - 2xxx: Configuration errors
    """

    # Placement errors (1xxx)
    PLACEMENT_POINT_EXHAUSTION = 1001

    # Configuration errors (2xxx)
    CONFIG_INVALID_OPTION = 2001
    CONFIG_UNKNOWN_OPTION = 2002


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass
class HashRingError(Exception):
    """
    Base class for all hash ring errors.

    Provides common infrastructure for error handling:
    - Unique error ID for log correlation
    - Error code for programmatic handling
    - Timestamp (nanoseconds since epoch)
    - Cause chain for root cause analysis
    """

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp_ns: int = field(default_factory=time.time_ns)
    cause: Optional[Exception] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Initialize Exception base class with message
        super().__init__(self.message)

    def with_context(self, **kwargs: Any) -> HashRingError:
        """
        Add context to error (returns new instance of the same class).
        """
        return self.__class__(
            code=self.code,
            message=self.message,
            error_id=self.error_id,
            timestamp_ns=self.timestamp_ns,
            cause=self.cause,
            context={**self.context, **kwargs},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize error to dictionary for structured logging."""
        return {
            "error_id": self.error_id,
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "timestamp_ns": self.timestamp_ns,
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (id={self.error_id[:8]})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r}, "
            f"error_id={self.error_id!r})"
        )


# =============================================================================
# PLACEMENT ERRORS
# =============================================================================
@dataclass
class PlacementError(HashRingError):
    """
    Errors from the control-point generator.

    Only random placement can fail; uniform placement is a total
    function of the pending node count.
    """

    @classmethod
    def point_exhaustion(
        cls,
        ring_range: int,
        requested: int,
        placed: int,
        probes: int,
    ) -> PlacementError:
        """No unused control point found within the probe budget."""
        return cls(
            code=ErrorCode.PLACEMENT_POINT_EXHAUSTION,
            message=(
                f"unable to place control point {placed + 1} of {requested} "
                f"after {probes} probes (range {ring_range})"
            ),
            context={
                "ring_range": ring_range,
                "requested": requested,
                "placed": placed,
                "probes": probes,
            },
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================
@dataclass
class ConfigurationError(HashRingError):
    """Errors from ring construction options."""

    @classmethod
    def invalid_option(
        cls,
        name: str,
        value: Any,
        reason: str,
    ) -> ConfigurationError:
        """Option is recognized but its value is not acceptable."""
        return cls(
            code=ErrorCode.CONFIG_INVALID_OPTION,
            message=f"Invalid value for {name}: {reason}",
            context={"option": name, "value": repr(value)},
        )

    @classmethod
    def unknown_option(cls, name: str) -> ConfigurationError:
        """Option name is not recognized."""
        return cls(
            code=ErrorCode.CONFIG_UNKNOWN_OPTION,
            message=f"Unknown ring option: {name}",
            context={"option": name},
        )
