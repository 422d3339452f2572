"""
System-Wide Constants for the Consistent Hash Ring

All magic numbers and configuration defaults centralized here.
"""

from typing import Final

# =============================================================================
# RING GEOMETRY
# =============================================================================
# Prime, so modulo reduction does not set up beat patterns with structured keys
DEFAULT_RANGE: Final[int] = 100003
DEFAULT_WEIGHT: Final[int] = 40

# =============================================================================
# RANDOM PLACEMENT
# =============================================================================
MAX_PROBES_PER_POINT: Final[int] = 100

# =============================================================================
# KEY HASHER
# =============================================================================
HASH_BITS: Final[int] = 24
HASH_TOP_MASK: Final[int] = 0xFF000000
HASH_SHIFT: Final[int] = 4
AMPLIFY_BITS: Final[int] = 5

# =============================================================================
# POSITION INDEX
# =============================================================================
SEARCH_LINEAR_GAP: Final[int] = 10

# =============================================================================
# ENVIRONMENT
# =============================================================================
ENV_PREFIX: Final[str] = "HASHRING_"
