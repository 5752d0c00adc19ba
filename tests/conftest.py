"""Shared fixtures for the tspsom test suite."""

from typing import Sequence, Tuple

import pytest

from som_core.ring import NeuralRing
from som_core.vector import Vector


def _make_ring(points: Sequence[Tuple[float, float]]) -> NeuralRing:
    ring = NeuralRing(Vector(*points[0]))
    index = ring.entry
    for p in points[1:]:
        index = ring.insert_after(index)
        ring.neuron(index).position = Vector(*p)
    return ring


@pytest.fixture
def make_ring():
    """Build a ring whose neurons sit at ``points``, in that order."""
    return _make_ring


def assert_ring_valid(ring: NeuralRing) -> None:
    """Walk the ring by hand and check links and cycle length."""
    index = ring.entry
    for _ in range(ring.size):
        assert ring.prev(ring.next(index)) == index
        assert ring.next(ring.prev(index)) == index
        index = ring.next(index)
    assert index == ring.entry


@pytest.fixture
def ring_valid():
    return assert_ring_valid
