"""
Configuration Management for the Consistent Hash Ring

Provides validated configuration with sensible defaults.
Supports keyword construction options and environment variable overrides.

Design:
- Immutable after validation
- Fail-fast on invalid configuration
- Type-safe with dataclasses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Sequence

from hashring.core.types import Result, Ok, Err, Distribution, Node
from hashring.core.errors import ConfigurationError
from hashring.core import constants as C

# Reorders newly pending nodes before uniform spacing, e.g. ``sorted``
NodeOrdering = Callable[[list[Node]], Sequence[Node]]

# Construction option name -> RingConfig field
_OPTION_FIELDS: dict[str, str] = {
    "range": "ring_range",
    "ring_range": "ring_range",
    "weight": "weight",
    "controlPoints": "weight",
    "control_points": "weight",
    "distribution": "distribution",
    "orderNodes": "order_nodes",
    "order_nodes": "order_nodes",
    "seed": "seed",
    "max_probes": "max_probes",
    "search_gap": "search_gap",
    "amplify_bits": "amplify_bits",
}

_INT_FIELDS = ("ring_range", "weight", "max_probes", "search_gap", "amplify_bits")


@dataclass(frozen=True)
class RingConfig:
    """
    Ring construction parameters.

    Attributes:
        ring_range: Control points and key positions live in [0, ring_range)
        weight: Default control points per node
        distribution: Random or uniform placement
        order_nodes: Optional reordering of pending nodes (uniform only)
        seed: Seed for the random placement PRNG (None = OS entropy)
        max_probes: Probe budget per control point (random only)
        search_gap: Window size where index search turns linear
        amplify_bits: Left shift applied to the raw hash before reduction
    """

    ring_range: int = C.DEFAULT_RANGE
    weight: int = C.DEFAULT_WEIGHT
    distribution: Distribution = Distribution.RANDOM
    order_nodes: Optional[NodeOrdering] = None
    seed: Optional[int] = None
    max_probes: int = C.MAX_PROBES_PER_POINT
    search_gap: int = C.SEARCH_LINEAR_GAP
    amplify_bits: int = C.AMPLIFY_BITS

    @property
    def uniform(self) -> bool:
        return self.distribution is Distribution.UNIFORM

    @classmethod
    def from_options(cls, **options: Any) -> Result[RingConfig, ConfigurationError]:
        """
        Build configuration from construction options.

        Accepts ``range``, ``weight`` (alias ``controlPoints``),
        ``distribution``, ``orderNodes`` and ``seed``, plus the snake_case
        field names. None values fall back to the defaults.
        """
        return cls().with_options(**options)

    def with_options(self, **options: Any) -> Result[RingConfig, ConfigurationError]:
        """Return a copy of this configuration with options applied."""
        changes: dict[str, Any] = {}

        for name, value in options.items():
            field_name = _OPTION_FIELDS.get(name)
            if field_name is None:
                return Err(ConfigurationError.unknown_option(name))
            if value is None:
                continue

            if field_name in _INT_FIELDS:
                if isinstance(value, bool) or not isinstance(value, int):
                    return Err(ConfigurationError.invalid_option(
                        name, value, "expected an integer",
                    ))
            elif field_name == "distribution":
                parsed = Distribution.parse(value)
                if parsed.is_err():
                    return Err(ConfigurationError.invalid_option(
                        name, value, parsed.error,
                    ))
                value = parsed.unwrap()
            elif field_name == "order_nodes" and not callable(value):
                return Err(ConfigurationError.invalid_option(
                    name, value, "expected a callable",
                ))

            changes[field_name] = value

        config = replace(self, **changes)
        return config.validate().map(lambda _: config)

    @classmethod
    def from_env(cls) -> Result[RingConfig, ConfigurationError]:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with HASHRING_.
        Example: HASHRING_RANGE, HASHRING_WEIGHT, HASHRING_DISTRIBUTION
        """
        options: dict[str, Any] = {}
        for option, var in (
            ("range", "RANGE"),
            ("weight", "WEIGHT"),
            ("seed", "SEED"),
        ):
            raw = os.getenv(C.ENV_PREFIX + var)
            if raw is None:
                continue
            try:
                options[option] = int(raw)
            except ValueError:
                return Err(ConfigurationError.invalid_option(
                    C.ENV_PREFIX + var, raw, "expected an integer",
                ))

        distribution = os.getenv(C.ENV_PREFIX + "DISTRIBUTION")
        if distribution:
            options["distribution"] = distribution

        return cls.from_options(**options)

    def validate(self) -> Result[None, ConfigurationError]:
        """Validate configuration invariants."""
        if self.ring_range < 1:
            return Err(ConfigurationError.invalid_option(
                "range", self.ring_range, "must be >= 1",
            ))
        if self.weight < 1:
            return Err(ConfigurationError.invalid_option(
                "weight", self.weight, "must be >= 1",
            ))
        if self.max_probes < 1:
            return Err(ConfigurationError.invalid_option(
                "max_probes", self.max_probes, "must be >= 1",
            ))
        if self.search_gap < 0:
            return Err(ConfigurationError.invalid_option(
                "search_gap", self.search_gap, "must be >= 0",
            ))
        if self.amplify_bits < 0:
            return Err(ConfigurationError.invalid_option(
                "amplify_bits", self.amplify_bits, "must be >= 0",
            ))
        return Ok(None)
