"""
tspsom - 2D Vector primitives

Immutable value type used for sample positions and neuron positions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Vector:
    """A point or displacement in the plane.

    Attributes:
        x: Horizontal component.
        y: Vertical component.
    """

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Vector:
        return self.scale(factor)

    __rmul__ = __mul__

    def scale(self, factor: float) -> Vector:
        """Scale both components by ``factor``."""
        return Vector(self.x * factor, self.y * factor)

    def length(self) -> float:
        """Euclidean norm."""
        return math.sqrt(self.x * self.x + self.y * self.y)

    def distance(self, other: Vector) -> float:
        return (self - other).length()

    def midpoint(self, other: Vector) -> Vector:
        """Point halfway along the segment from self to other."""
        return self + (other - self).scale(0.5)

    def rotate(self, angle: float) -> Vector:
        """Rotate counter-clockwise around the origin.

        Args:
            angle: Rotation angle in degrees.
        """
        a = math.radians(angle)
        cos_a = math.cos(a)
        sin_a = math.sin(a)
        return Vector(
            self.x * cos_a - self.y * sin_a,
            self.x * sin_a + self.y * cos_a,
        )

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)
