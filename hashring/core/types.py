"""
Core Type Definitions for the Consistent Hash Ring

Implements Result/Either monads for exception-free control flow inside
the library, plus the small value types shared by the ring components.

Design Principles:
- Never use null for a failed computation (use Result)
- Node identities are opaque: only equality and hashing are required
- Derived state is rebuilt from the node entries, never patched in place
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Callable,
    Generic,
    Literal,
    Optional,
    TypeVar,
    Union,
)

# =============================================================================
# TYPE VARIABLES FOR GENERIC CONTAINERS
# =============================================================================
T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Transform result type

# Caller-supplied node identifier; stored and returned, never interpreted
Node = Hashable


# =============================================================================
# RESULT MONAD
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Success variant of Result monad.

    Immutable, hashable container for successful computation results.
    """

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        """
        Extract value. Safe to call after is_ok() check.

        Returns:
            T: The wrapped success value
        """
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return value, ignoring default."""
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply transformation to success value."""
        return Ok(fn(self.value))

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Monadic bind for chaining fallible operations."""
        return fn(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failure variant of Result monad.

    Carries the error that describes why the computation failed.
    """

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Attempting to unwrap an error is a programming error.

        Raises:
            RuntimeError: Always, with error context
        """
        raise RuntimeError(f"Called unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Return default value on error."""
        return default

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        """No-op on error variant - propagates error unchanged."""
        return self

    def flat_map(self, fn: Callable[[Any], Result[U, E]]) -> Err[E]:
        """Propagate error through monadic chain."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Union type for pattern matching
Result = Union[Ok[T], Err[E]]


# =============================================================================
# PLACEMENT STRATEGY
# =============================================================================
class Distribution(Enum):
    """
    Control-point placement strategy, fixed for the lifetime of a ring.
    """

    RANDOM = "random"     # Rejection-sampled positions, assigned on add
    UNIFORM = "uniform"   # Evenly spaced positions, assigned on next lookup

    @classmethod
    def parse(cls, value: Union[str, Distribution]) -> Result[Distribution, str]:
        """
        Parse a distribution name.

        Returns:
            Ok[Distribution]: Recognized strategy
            Err[str]: Explanation of the unrecognized value
        """
        if isinstance(value, cls):
            return Ok(value)
        try:
            return Ok(cls(str(value).strip().lower()))
        except ValueError:
            names = ", ".join(d.value for d in cls)
            return Err(f"expected one of {names}, got {value!r}")


# =============================================================================
# RING STORE ENTRIES
# =============================================================================
@dataclass(slots=True)
class NodeEntry:
    """
    One ownership record in the ring store.

    Adding the same node twice creates two entries, each with its own
    control points. ``points`` is None while uniform placement is pending.
    """

    node: Node
    points: Optional[list[int]] = None

    @property
    def pending(self) -> bool:
        return self.points is None

    @property
    def point_count(self) -> int:
        return 0 if self.points is None else len(self.points)
