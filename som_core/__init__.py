"""
tspsom Core - Growing ring self-organising map for 2D tour approximation.

# ---- Changelog ----
# [2026-10-02] Initial creation.
#   What: Package init for som_core.
#   Where: som_core/__init__.py
# -------------------
"""

from som_core.ring import NeuralRing, Neuron, RingInvariantError
from som_core.samples import PositionBounds, SampleMap
from som_core.som import RingSOM, grow, prune, train
from som_core.vector import Vector

__version__ = "0.1.0"

__all__ = [
    "NeuralRing",
    "Neuron",
    "PositionBounds",
    "RingInvariantError",
    "RingSOM",
    "SampleMap",
    "Vector",
    "grow",
    "prune",
    "train",
]
