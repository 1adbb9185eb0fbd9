"""Block extraction, merging and subdivision."""

from .detector import ShapeDetector
from .grid import TransposeGrid
from .merger import ShapeMerger
from .subdivider import spawn_cross_subdividers, spawn_subdividers

__all__ = ["ShapeDetector", "ShapeMerger", "TransposeGrid", "spawn_cross_subdividers", "spawn_subdividers"]
