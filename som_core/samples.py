"""
tspsom - Sample Map

The cities of a tour instance: an ordered, non-empty collection of 2D
positions, plus the axis-aligned bounding box around them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List

import numpy as np

from som_core.vector import Vector


@dataclass(frozen=True)
class PositionBounds:
    """Axis-aligned bounding box.

    Attributes:
        top_left: Component-wise minimum of the samples.
        bottom_right: Component-wise maximum of the samples.
    """

    top_left: Vector
    bottom_right: Vector

    @property
    def center(self) -> Vector:
        """Centroid of the box."""
        return self.top_left.midpoint(self.bottom_right)

    @property
    def width(self) -> float:
        return self.bottom_right.x - self.top_left.x

    @property
    def height(self) -> float:
        return self.bottom_right.y - self.top_left.y

    def to_dict(self) -> dict:
        return {
            "left": self.top_left.x,
            "right": self.bottom_right.x,
            "top": self.top_left.y,
            "bottom": self.bottom_right.y,
        }


class SampleMap:
    """Ordered collection of sample positions.

    Usage:
        samples = SampleMap([Vector(0, 0), Vector(10, 10)])
        bounds = samples.bounds()
        samples[1]       # Vector(10, 10)
        samples.items    # 2
    """

    def __init__(self, samples: Iterable[Vector]):
        self._samples: List[Vector] = list(samples)
        if not self._samples:
            raise ValueError("a sample map needs at least one sample")

    @classmethod
    def from_array(cls, points: np.ndarray) -> SampleMap:
        """Build from an array of shape (n, 2)."""
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(
                f"points must have shape (n, 2), got {points.shape}"
            )
        return cls(Vector(float(x), float(y)) for x, y in points)

    @property
    def items(self) -> int:
        return len(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __getitem__(self, index: int) -> Vector:
        return self._samples[index]

    def __iter__(self) -> Iterator[Vector]:
        return iter(self._samples)

    def as_array(self) -> np.ndarray:
        """Samples as a float64 array of shape (n, 2)."""
        return np.array([s.as_tuple() for s in self._samples], dtype=np.float64)

    def bounds(self) -> PositionBounds:
        """Smallest axis-aligned box containing every sample."""
        points = self.as_array()
        lo = points.min(axis=0)
        hi = points.max(axis=0)
        return PositionBounds(
            top_left=Vector(float(lo[0]), float(lo[1])),
            bottom_right=Vector(float(hi[0]), float(hi[1])),
        )

    def describe(self) -> str:
        lines = ["Sample Map ::", f"  items : {self.items}"]
        for i, s in enumerate(self._samples):
            lines.append(f"  {i} : ({s.x:f}, {s.y:f})")
        return "\n".join(lines)
