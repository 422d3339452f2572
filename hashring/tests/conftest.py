"""
Shared fixtures for the ring test suite.
"""

import logging

import pytest

from hashring.core.config import RingConfig
from hashring.core.types import Distribution
from hashring.observability.metrics import MetricsCollector, RingMetrics
from hashring.ring.consistent_hash import ConsistentHash


@pytest.fixture
def ring() -> ConsistentHash:
    """Random-placement ring with a fixed seed."""
    return ConsistentHash(seed=1234)


@pytest.fixture
def uniform_config() -> RingConfig:
    return RingConfig(distribution=Distribution.UNIFORM)


@pytest.fixture
def small_uniform_ring() -> ConsistentHash:
    """Uniform ring small enough to check every point by hand."""
    return ConsistentHash(range=24, weight=4, distribution="uniform")


@pytest.fixture
def collector() -> MetricsCollector:
    """Private registry so tests do not share the singleton."""
    return MetricsCollector()


@pytest.fixture
def ring_metrics(collector: MetricsCollector) -> RingMetrics:
    return RingMetrics(collector, ring="test")


@pytest.fixture
def ring_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.DEBUG, logger="hashring")
    return caplog
