"""
tspsom - Topology Store

The ring of neurons that approximates a closed tour.  Neurons live in an
arena (a plain list of records) and refer to their ring neighbours by
arena index, so splicing a neuron in or out only rewrites the links of
the two affected neighbours and never moves an existing record.

Slots freed by removal are kept on a free list and handed out again by
later insertions.  A freed slot is marked dead; any attempt to use it as
a ring position raises ValueError.

Structural invariants (checked by check_invariants()):
    - Following ``next`` exactly ``size`` times from the entry returns to
      the entry.
    - For every live neuron n: next(n).prev == n and prev(n).next == n.
    - size >= 1.  A single neuron is its own successor and predecessor.

# ---- Changelog ----
# [2026-10-02] Initial creation.
#   What: NeuralRing arena with insert_after(), remove_after(), nearest(),
#         length(), describe() and an explicit invariant check.
#   How:  Index-linked records.  The entry index is the only handle the
#         ring needs; any live neuron may serve as the entry.
# -------------------
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from som_core.vector import Vector

logger = logging.getLogger("tspsom.ring")


class RingInvariantError(RuntimeError):
    """The ring's links no longer form a single symmetric cycle.

    Signals a defect in growth or pruning.  Never raised for bad input.
    """


@dataclass
class Neuron:
    """A neuron record in the ring arena.

    Attributes:
        position: Current location in the plane.
        hits: How often this neuron won a nearest-neuron search since it
            last grew a successor.
        next: Arena index of the successor.
        prev: Arena index of the predecessor.
        alive: False once the slot has been freed by remove_after().
    """

    position: Vector
    hits: int = 0
    next: int = 0
    prev: int = 0
    alive: bool = True


class NeuralRing:
    """Circular, index-linked sequence of neurons.

    Usage:
        ring = NeuralRing(Vector(5.0, 5.0))
        new = ring.insert_after(ring.entry)
        ring.remove_after(ring.entry)
        ring.check_invariants()
    """

    def __init__(self, center: Vector):
        self._neurons: List[Neuron] = [Neuron(position=center, next=0, prev=0)]
        self._free: List[int] = []

        self.entry = 0
        self.size = 1

        # Learning steps performed since the last growth event
        self.learned = 0

    # -------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------

    def neuron(self, index: int) -> Neuron:
        """Return the live neuron record at ``index``.

        Raises:
            ValueError: If the index is out of range or the slot is dead.
        """
        if index < 0 or index >= len(self._neurons):
            raise ValueError(f"neuron index {index} out of range")
        neuron = self._neurons[index]
        if not neuron.alive:
            raise ValueError(f"neuron index {index} has been removed")
        return neuron

    def next(self, index: int) -> int:
        return self.neuron(index).next

    def prev(self, index: int) -> int:
        return self.neuron(index).prev

    def position(self, index: int) -> Vector:
        return self.neuron(index).position

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[int]:
        """Arena indices in ring order, starting at the entry."""
        index = self.entry
        for _ in range(self.size):
            yield index
            index = self._neurons[index].next

    def indices(self) -> List[int]:
        """Snapshot of the arena indices in ring order from the entry."""
        return list(self)

    def positions(self) -> Tuple[Vector, ...]:
        """Read-only snapshot of neuron positions in ring order."""
        return tuple(self._neurons[i].position for i in self)

    # -------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------

    def insert_after(self, index: int) -> int:
        """Splice a new neuron in right after ``index``.

        The new neuron sits at the midpoint between ``index`` and its
        current successor and starts with zero hits.

        Returns:
            Arena index of the new neuron.
        """
        neuron = self.neuron(index)
        successor = self._neurons[neuron.next]

        position = neuron.position.midpoint(successor.position)
        logger.debug("Adding neuron at (%.2f, %.2f)", position.x, position.y)

        record = Neuron(position=position, hits=0, next=neuron.next, prev=index)
        if self._free:
            new_index = self._free.pop()
            self._neurons[new_index] = record
        else:
            new_index = len(self._neurons)
            self._neurons.append(record)

        successor.prev = new_index
        neuron.next = new_index
        self.size += 1
        return new_index

    def remove_after(self, index: int) -> int:
        """Remove the successor of ``index`` from the ring.

        If the removed neuron was the entry, ``index`` becomes the entry.

        Returns:
            ``index``, whose successor is now the removed neuron's successor.

        Raises:
            ValueError: If the ring has a single neuron.
        """
        if self.size <= 1:
            raise ValueError("cannot remove the last neuron of a ring")

        neuron = self.neuron(index)
        removed_index = neuron.next
        removed = self._neurons[removed_index]

        logger.debug(
            "Removing neuron at (%.2f, %.2f)",
            removed.position.x, removed.position.y,
        )

        neuron.next = removed.next
        self._neurons[removed.next].prev = index

        removed.alive = False
        self._free.append(removed_index)
        self.size -= 1

        if removed_index == self.entry:
            self.entry = index
        return index

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------

    def nearest(self, point: Vector) -> int:
        """Arena index of the neuron closest to ``point``.

        Scans the whole ring from the entry.  Ties go to the neuron met
        first.
        """
        best = self.entry
        best_distance = self._neurons[best].position.distance(point)

        for index in self:
            distance = self._neurons[index].position.distance(point)
            if distance < best_distance:
                best = index
                best_distance = distance

        return best

    def length(self) -> float:
        """Perimeter of the closed tour described by the ring."""
        total = 0.0
        for index in self:
            neuron = self._neurons[index]
            total += neuron.position.distance(self._neurons[neuron.next].position)
        return total

    def describe(self) -> str:
        """Human-readable dump, starting right after the entry."""
        lines = ["Neural net ::", f"  size : {self.size}"]
        index = self._neurons[self.entry].next
        for i in range(self.size):
            p = self._neurons[index].position
            lines.append(f"  neuron {i} at ({p.x:f}, {p.y:f})")
            index = self._neurons[index].next
        return "\n".join(lines)

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------

    def check_invariants(self) -> None:
        """Verify that the links form one symmetric cycle of ``size`` neurons.

        Raises:
            RingInvariantError: On any broken link, dead neuron in the
                cycle, or cycle length different from ``size``.
        """
        if self.size < 1:
            raise RingInvariantError(f"ring size is {self.size}")

        index = self.entry
        for step in range(self.size):
            neuron = self._neurons[index]
            if not neuron.alive:
                raise RingInvariantError(
                    f"dead neuron {index} reachable at step {step}"
                )
            if self._neurons[neuron.next].prev != index:
                raise RingInvariantError(
                    f"neuron {index}: next.prev does not point back"
                )
            if self._neurons[neuron.prev].next != index:
                raise RingInvariantError(
                    f"neuron {index}: prev.next does not point back"
                )
            index = neuron.next
            if index == self.entry and step != self.size - 1:
                raise RingInvariantError(
                    f"cycle closes after {step + 1} neurons, size is {self.size}"
                )

        if index != self.entry:
            raise RingInvariantError(
                f"cycle does not close after {self.size} neurons"
            )

        live = sum(1 for n in self._neurons if n.alive)
        if live != self.size:
            raise RingInvariantError(
                f"{live} live neurons in arena, size is {self.size}"
            )
