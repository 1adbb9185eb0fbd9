"""Geometry kernel - points, segments, polylines and polygons."""

from .point import EPSILON, ZERO, Point
from .polygon import Bounds, Polygon
from .polyline import Polyline
from .segment import Capsule, Segment

__all__ = [
    "EPSILON",
    "ZERO",
    "Bounds",
    "Capsule",
    "Point",
    "Polygon",
    "Polyline",
    "Segment",
]
