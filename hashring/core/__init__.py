"""
Core module: Type definitions, error hierarchy, and configuration.

This module provides the foundational abstractions for the ring:
- Result/Either monads for exception-free control flow
- Error hierarchy with stable error codes
- Configuration management with validation
"""

from hashring.core.types import (
    Result,
    Ok,
    Err,
    Node,
    NodeEntry,
    Distribution,
)
from hashring.core.errors import (
    ErrorCode,
    HashRingError,
    PlacementError,
    ConfigurationError,
)
from hashring.core.config import RingConfig

__all__ = [
    "Result",
    "Ok",
    "Err",
    "Node",
    "NodeEntry",
    "Distribution",
    "ErrorCode",
    "HashRingError",
    "PlacementError",
    "ConfigurationError",
    "RingConfig",
]
