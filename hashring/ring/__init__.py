"""
Ring module: Consistent hashing of keys onto nodes.
"""

from hashring.ring.consistent_hash import ConsistentHash
from hashring.ring.generator import ControlPointGenerator
from hashring.ring.hasher import KeyHasher, pjw_hash, reduce_hash
from hashring.ring.index import PositionIndex, successor_search
from hashring.ring.synchronized import SynchronizedConsistentHash

__all__ = [
    "ConsistentHash",
    "ControlPointGenerator",
    "KeyHasher",
    "pjw_hash",
    "reduce_hash",
    "PositionIndex",
    "successor_search",
    "SynchronizedConsistentHash",
]
