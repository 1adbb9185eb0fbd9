"""Removal of road segments that ended up in water."""

from __future__ import annotations

from ..geometry import Segment
from .river import HeightField


def cull_segments(segments: list[Segment], elevation: HeightField, water_level: float) -> list[Segment]:
    """
    Keep segments whose endpoints are both on land.

    Bridges are protected infrastructure and always survive.
    """
    return [
        s
        for s in segments
        if s.is_bridge
        or (
            elevation.get_height(s.p1.x, s.p1.y) >= water_level
            and elevation.get_height(s.p2.x, s.p2.y) >= water_level
        )
    ]
