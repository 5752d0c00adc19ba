"""
tspsom - Drawer

Renders the samples and the current ring to a PNG image.

Object space (sample coordinates) is mapped into picture space with a
linear projection built once from the samples' bounding box.  The y axis
is flipped so larger y values end up higher in the picture.  A margin of
two marker radii keeps markers on the bounding box edge fully visible.

Drawing order: white background, red sample markers, black ring edges,
green neuron markers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw

from som_core.samples import PositionBounds, SampleMap
from som_core.vector import Vector

logger = logging.getLogger("tspsom.drawer")

WIDTH = 1024
HEIGHT = 768
RADIUS_RATIO = 0.005

BACKGROUND = (255, 255, 255)
SAMPLE_COLOR = (255, 0, 0)
EDGE_COLOR = (0, 0, 0)
NEURON_COLOR = (0, 255, 0)


@dataclass(frozen=True)
class Projection:
    """Linear map from object space into a fixed-size canvas.

    Attributes:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        radius: Marker radius in pixels.
        scale: Pixels per object-space unit, per axis.
        origin: Object-space point mapped to the lower-left margin corner.
    """

    width: int
    height: int
    radius: float
    scale: Vector
    origin: Vector

    @classmethod
    def from_bounds(
        cls,
        bounds: PositionBounds,
        width: int = WIDTH,
        height: int = HEIGHT,
        radius_ratio: float = RADIUS_RATIO,
    ) -> Projection:
        """Fit ``bounds`` into the canvas minus a two-radius margin.

        A zero-extent axis (all samples on one line) gets a scale of 1.
        """
        radius = radius_ratio * min(width, height)
        extent_x = bounds.width if bounds.width > 0 else 1.0
        extent_y = bounds.height if bounds.height > 0 else 1.0
        scale = Vector(
            (width - 4 * radius) / extent_x,
            (height - 4 * radius) / extent_y,
        )
        return cls(
            width=width, height=height, radius=radius,
            scale=scale, origin=bounds.top_left,
        )

    def project(self, point: Vector) -> Tuple[float, float]:
        return (
            self.scale.x * (point.x - self.origin.x) + 2 * self.radius,
            self.height - self.scale.y * (point.y - self.origin.y) - 2 * self.radius,
        )

    def project_array(self, points: np.ndarray) -> np.ndarray:
        """Project an array of shape (n, 2) into picture space."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        out = np.empty_like(points)
        out[:, 0] = self.scale.x * (points[:, 0] - self.origin.x) + 2 * self.radius
        out[:, 1] = self.height - self.scale.y * (points[:, 1] - self.origin.y) - 2 * self.radius
        return out


class TourDrawer:
    """Draws ring snapshots over a fixed set of samples.

    The samples are projected once, when the drawer is created.

    Usage:
        drawer = TourDrawer(samples, Projection.from_bounds(samples.bounds()))
        drawer.draw(som.positions(), "img/1000.png")
    """

    def __init__(self, samples: SampleMap, projection: Projection):
        self.projection = projection
        self._sample_pos = projection.project_array(samples.as_array())
        self._drawn = 0

    def render(self, positions: Sequence[Vector]) -> Image.Image:
        """Render the samples and the ring given by ``positions``."""
        p = self.projection
        image = Image.new("RGB", (p.width, p.height), BACKGROUND)
        draw = ImageDraw.Draw(image)
        r = p.radius

        for x, y in self._sample_pos:
            draw.ellipse([x - r, y - r, x + r, y + r], fill=SAMPLE_COLOR)

        if positions:
            neuron_pos = p.project_array(np.array([v.as_tuple() for v in positions]))
            count = len(neuron_pos)
            for i in range(count):
                a = neuron_pos[i]
                b = neuron_pos[(i + 1) % count]
                draw.line(
                    [(float(a[0]), float(a[1])), (float(b[0]), float(b[1]))],
                    fill=EDGE_COLOR, width=1,
                )
            for x, y in neuron_pos:
                draw.ellipse([x - r, y - r, x + r, y + r], fill=NEURON_COLOR)

        return image

    def draw(self, positions: Sequence[Vector], filename: Union[str, Path]) -> Path:
        """Render and write a PNG to ``filename``, creating parent dirs."""
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Rendering %s", path)
        self.render(positions).save(path, format="PNG")
        self._drawn += 1
        return path

    @property
    def images_drawn(self) -> int:
        return self._drawn
