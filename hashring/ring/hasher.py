"""
Key Hasher: String to Ring Position

PJW-style rolling hash:
- Shift the accumulator left 4 bits and add the next character code
- When the top byte becomes non-zero, clear it and xor it into the low byte

Folding the top byte back down spreads the bits of long common prefixes
into the low bits that dominate the final modulo reduction. The result
fits in 24 bits and depends only on the input (no seed), so independent
processes agree on every key's position.

Complexity: O(len(key)) per hash, O(1) reduction
"""

from __future__ import annotations

from typing import Any, Iterable

from hashring.core import constants as C


def pjw_hash(key: Any) -> int:
    """
    Compute the 24-bit PJW hash of a key.

    ``str`` keys hash their code points, ``bytes`` keys hash their byte
    values, anything else is hashed through ``str(key)``.
    """
    if isinstance(key, (bytes, bytearray, memoryview)):
        codes: Iterable[int] = bytes(key)
    else:
        if not isinstance(key, str):
            key = str(key)
        codes = map(ord, key)

    h = 0
    for code in codes:
        h = (h << C.HASH_SHIFT) + code
        top = h & C.HASH_TOP_MASK
        if top:
            h ^= top
            h ^= top >> C.HASH_BITS
    return h


def reduce_hash(
    h: int,
    ring_range: int,
    amplify_bits: int = C.AMPLIFY_BITS,
) -> int:
    """
    Map a raw hash onto [0, ring_range).

    The low bits of ``h`` track trailing characters of correlated keys
    too closely, so the hash is shifted up before the modulo.
    """
    return (h << amplify_bits) % ring_range


class KeyHasher:
    """
    Key to ring position mapping bound to one ring geometry.

    Usage:
        hasher = KeyHasher(ring_range=100003)
        position = hasher.position("user:1234")
    """

    __slots__ = ("_ring_range", "_amplify_bits")

    def __init__(
        self,
        ring_range: int = C.DEFAULT_RANGE,
        amplify_bits: int = C.AMPLIFY_BITS,
    ) -> None:
        self._ring_range = ring_range
        self._amplify_bits = amplify_bits

    def hash(self, key: Any) -> int:
        """Raw 24-bit hash of the key."""
        return pjw_hash(key)

    def position(self, key: Any) -> int:
        """Ring position of the key, in [0, ring_range)."""
        return reduce_hash(pjw_hash(key), self._ring_range, self._amplify_bits)

    @property
    def ring_range(self) -> int:
        return self._ring_range
