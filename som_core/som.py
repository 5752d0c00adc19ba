"""
tspsom - Adaptive Ring Engine

Learning, growth and pruning for the ring self-organising map.

Each learning step draws one sample, finds the closest neuron (the
winner) and pulls the winner and its ``spread`` ring neighbours on each
side toward the sample:

    position += (sample - position) * exp(-(1 + |i|) / (2 * t))

where ``i`` is the ring offset from the winner and ``t`` in (0, 1] is the
caller's time progress.  Smaller ``t`` gives smaller, sharper updates.

Growth runs every ``learn_after(n)`` steps while the ring is smaller than
``ln(n) * n``: every neuron that won at least ``grow_threshold(n)`` times
gets a new successor at the midpoint of its outgoing edge.

Pruning collapses neighbours closer than ``remove_distance``.

On rings with ``size <= 2 * spread + 1`` the update window wraps around
and a neuron can be pulled more than once in a single step.  Updates are
applied one after another, each starting from the position left by the
previous one.

# ---- Changelog ----
# [2026-10-02] Initial creation.
#   What: train(), grow(), prune() on a NeuralRing, plus the RingSOM
#         facade that owns ring, samples, random generator and config.
#   How:  Module-level functions keep the algorithm testable on bare
#         rings; RingSOM adds policy defaults, counters and logging.
# -------------------
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional, Tuple

import numpy as np

from som_core.ring import NeuralRing
from som_core.samples import PositionBounds, SampleMap
from som_core.vector import Vector

logger = logging.getLogger("tspsom.som")


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

# Ring neighbours updated on each side of the winner
SPREAD = 3

# Neighbours at most this far apart are merged by prune()
REMOVE_DISTANCE = 1.0

DEFAULT_CONFIG: Dict[str, Any] = {
    "spread": SPREAD,
    "remove_distance": REMOVE_DISTANCE,
    "seed": None,
}


def learn_after(n: int) -> int:
    """Learning steps between two growth events for ``n`` samples."""
    return n


def grow_threshold(n: int) -> float:
    """Hits a neuron needs before it grows a successor, for ``n`` samples.

    Raises:
        ValueError: If ``n < 2`` (ln(1) is zero).
    """
    if n < 2:
        raise ValueError(f"grow threshold needs at least 2 samples, got {n}")
    return 1.0 / math.log(n)


def max_ring_size(n: int) -> float:
    """Growth stops once the ring reaches ``ln(n) * n`` neurons."""
    return math.log(n) * n


def neighbourhood_factor(offset: int, time_progress: float) -> float:
    """Fraction of the way a neuron ``offset`` ring steps from the winner moves."""
    return math.exp(-(1.0 + abs(offset)) / (2.0 * time_progress))


def _check_time_progress(time_progress: float) -> None:
    if not math.isfinite(time_progress) or not 0.0 < time_progress <= 1.0:
        raise ValueError(
            f"time_progress must be in (0, 1], got {time_progress}"
        )


# ---------------------------------------------------------------------------
# Core operations
# ---------------------------------------------------------------------------

def train(
    ring: NeuralRing,
    samples: SampleMap,
    time_progress: float,
    rng: np.random.Generator,
    spread: int = SPREAD,
) -> NeuralRing:
    """Run one learning step and, when due, a growth step.

    Args:
        ring: The ring to train, mutated in place.
        samples: Non-empty sample map.
        time_progress: Decay parameter in (0, 1].
        rng: Generator used to draw the sample.
        spread: Neighbours updated on each side of the winner.

    Returns:
        The same ring.

    Raises:
        ValueError: If time_progress is outside (0, 1] or spread < 0.
    """
    _check_time_progress(time_progress)
    if spread < 0:
        raise ValueError(f"spread must be non-negative, got {spread}")

    n = samples.items
    sample = samples[int(rng.integers(n))]

    winner = ring.nearest(sample)
    ring.neuron(winner).hits += 1

    current = winner
    for _ in range(spread):
        current = ring.prev(current)

    for offset in range(-spread, spread + 1):
        neuron = ring.neuron(current)
        factor = neighbourhood_factor(offset, time_progress)
        neuron.position = neuron.position + (sample - neuron.position).scale(factor)
        current = neuron.next

    ring.learned += 1

    if ring.size < max_ring_size(n) and ring.learned >= learn_after(n):
        grow(ring, grow_threshold(n))

    return ring


def grow(ring: NeuralRing, threshold: float) -> NeuralRing:
    """Insert a successor after every neuron with ``hits >= threshold``.

    Only neurons present when the call starts are examined.  A neuron
    that grows has its hits reset.  Resets ``ring.learned``.

    Raises:
        RingInvariantError: If the links are broken afterwards.
    """
    grown = 0
    for index in ring.indices():
        neuron = ring.neuron(index)
        if neuron.hits >= threshold:
            ring.insert_after(index)
            # Only growth clears hits; training never does.
            neuron.hits = 0
            grown += 1

    ring.learned = 0
    ring.check_invariants()

    logger.debug("Grew %d neurons, ring size is now %d", grown, ring.size)
    return ring


def prune(ring: NeuralRing, remove_distance: float = REMOVE_DISTANCE) -> NeuralRing:
    """Merge ring neighbours that are at most ``remove_distance`` apart.

    A neuron keeps swallowing its successor until the pair is far enough
    apart, then the walk moves on.  Each removal makes the surviving
    neuron the entry, so the walk only stops after a full lap without
    removals.

    Raises:
        ValueError: If remove_distance is negative.
        RingInvariantError: If the links are broken afterwards.
    """
    if remove_distance < 0:
        raise ValueError(
            f"remove_distance must be non-negative, got {remove_distance}"
        )

    def collapse(index: int) -> None:
        while (ring.size > 1
               and ring.position(index).distance(ring.position(ring.next(index)))
               <= remove_distance):
            ring.remove_after(index)
            ring.entry = index

    index = ring.entry
    collapse(index)
    index = ring.next(index)

    while index != ring.entry:
        collapse(index)
        index = ring.next(index)

    ring.check_invariants()
    return ring


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------

class RingSOM:
    """A growing ring self-organising map over one sample map.

    Owns the ring, the samples and the random generator for a whole
    training run.  The ring starts as a single neuron at the centre of
    the samples' bounding box.

    Usage:
        som = RingSOM(samples, config={"seed": 7})
        for t in range(1, iterations + 1):
            som.train((iterations - t + 1) / iterations)
        som.prune()
        print(som.length())
    """

    def __init__(
        self,
        samples: SampleMap,
        config: Optional[Dict[str, Any]] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = {**DEFAULT_CONFIG, **(config or {})}
        self.samples = samples
        self.bounds: PositionBounds = samples.bounds()
        self.ring = NeuralRing(self.bounds.center)

        self._rng = rng if rng is not None else np.random.default_rng(self.config["seed"])

        # Counters
        self._train_steps = 0
        self._growth_events = 0
        self._neurons_grown = 0
        self._neurons_pruned = 0

    # -------------------------------------------------------------------
    # Core API
    # -------------------------------------------------------------------

    def train(self, time_progress: float) -> NeuralRing:
        """One learning step with the configured spread."""
        size_before = self.ring.size
        learned_before = self.ring.learned

        train(
            self.ring, self.samples, time_progress, self._rng,
            spread=self.config["spread"],
        )
        self._train_steps += 1

        if self.ring.learned <= learned_before:
            self._growth_events += 1
            self._neurons_grown += self.ring.size - size_before

        return self.ring

    def grow(self, threshold: Optional[float] = None) -> NeuralRing:
        """Grow now, by default with the sample-count threshold."""
        if threshold is None:
            threshold = grow_threshold(self.samples.items)
        size_before = self.ring.size
        grow(self.ring, threshold)
        self._growth_events += 1
        self._neurons_grown += self.ring.size - size_before
        return self.ring

    def prune(self) -> NeuralRing:
        size_before = self.ring.size
        prune(self.ring, self.config["remove_distance"])
        removed = size_before - self.ring.size
        self._neurons_pruned += removed
        logger.info("Pruned %d neurons, ring size is now %d", removed, self.ring.size)
        return self.ring

    def length(self) -> float:
        return self.ring.length()

    def describe(self) -> str:
        return self.ring.describe()

    def positions(self) -> Tuple[Vector, ...]:
        return self.ring.positions()

    # -------------------------------------------------------------------
    # Stats & Telemetry
    # -------------------------------------------------------------------

    def get_stats(self) -> Dict[str, Any]:
        """Current state statistics."""
        n = self.samples.items
        return {
            "sample_count": n,
            "ring_size": self.ring.size,
            "learned": self.ring.learned,
            "tour_length": self.ring.length(),
            "train_steps": self._train_steps,
            "growth_events": self._growth_events,
            "neurons_grown": self._neurons_grown,
            "neurons_pruned": self._neurons_pruned,
            "learn_after": learn_after(n),
            "grow_threshold": grow_threshold(n) if n >= 2 else None,
            "max_ring_size": max_ring_size(n),
            "spread": self.config["spread"],
            "remove_distance": self.config["remove_distance"],
        }
