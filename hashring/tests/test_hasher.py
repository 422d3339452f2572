"""
Unit Tests: Key Hasher

Tests:
    - PJW hash values and folding of the top byte
    - Input types (str, bytes, other)
    - Spread of correlated keys
    - Reduction onto the ring
"""

import pytest

from hashring.core import constants as C
from hashring.ring.hasher import KeyHasher, pjw_hash, reduce_hash


class TestPjwHash:
    """Tests for the raw string hash."""

    def test_single_character(self):
        """A one-character key hashes to its code point."""
        assert pjw_hash("A") == 0x41

    def test_empty_string(self):
        assert pjw_hash("") == 0

    def test_similar_strings_differ(self):
        """Keys differing in one character get different hashes."""
        assert pjw_hash("a1") != pjw_hash("b1")

    def test_known_values(self):
        """Pinned values: every process must agree on them."""
        assert pjw_hash("abcdefghij") == 11953760
        assert pjw_hash("user:1234") == 6136280
        assert pjw_hash("resource-0042") == 12230579

    def test_stays_within_24_bits(self):
        """Folding keeps long keys inside the 24-bit range."""
        for key in ("x" * 200, "\U0010ffff" * 50, "prefix-" * 40 + "tail"):
            assert 0 <= pjw_hash(key) < (1 << C.HASH_BITS)

    def test_bytes_match_ascii_text(self):
        assert pjw_hash(b"user:1234") == pjw_hash("user:1234")

    def test_non_string_keys_use_str(self):
        assert pjw_hash(1234) == pjw_hash("1234")
        assert pjw_hash(0) == pjw_hash("0")

    def test_deterministic(self):
        assert pjw_hash("session-42") == pjw_hash("session-42")

    def test_correlated_keys_spread(self):
        """
        Structured keys like a<n><n><n><n> land within 2x across
        20 buckets (a bucket count prime to the digit alphabet).
        """
        bins = [0] * 20
        for i in range(10000):
            bins[pjw_hash(f"a{i}{i}{i}{i}") % len(bins)] += 1

        bins.sort()
        assert bins[0] * 2 >= bins[-1]


class TestReduction:
    """Tests for mapping hashes onto the ring."""

    def test_reduce_shifts_before_mod(self):
        assert reduce_hash(0x41, 100003, 5) == (0x41 << 5) % 100003
        assert reduce_hash(0x41, 100003, 0) == 0x41

    @pytest.mark.parametrize("ring_range", [1, 10, 24, 1 << 16, 100003])
    def test_position_in_range(self, ring_range):
        hasher = KeyHasher(ring_range=ring_range)
        for i in range(500):
            assert 0 <= hasher.position(f"key-{i}") < ring_range

    def test_default_position(self):
        hasher = KeyHasher()
        assert hasher.ring_range == C.DEFAULT_RANGE
        assert hasher.position("A") == 2080
        assert hasher.position("abcdefghij") == 8845

    def test_independent_hashers_agree(self):
        first = KeyHasher(ring_range=5003, amplify_bits=3)
        second = KeyHasher(ring_range=5003, amplify_bits=3)
        for i in range(200):
            key = f"tenant/{i}/profile"
            assert first.position(key) == second.position(key)
