"""Open and closed polylines."""

from __future__ import annotations

from .point import Point
from .segment import Segment


class Polyline:
    """
    An ordered run of points.

    A closed polyline adds the implicit edge from the last point back to the
    first (only when it has more than two points).
    """

    def __init__(self, points: list[Point], closed: bool = False):
        self.points = list(points)
        self.closed = closed

    def __len__(self) -> int:
        return len(self.points)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self.points)} points, closed={self.closed})"

    def to_segments(self) -> list[Segment]:
        segments = [
            Segment(self.points[i], self.points[i + 1]) for i in range(len(self.points) - 1)
        ]
        if self.closed and len(self.points) > 2:
            segments.append(Segment(self.points[-1], self.points[0]))
        return segments

    def length(self) -> float:
        return sum(s.length() for s in self.to_segments())

    def point_at_distance(self, distance: float) -> Point:
        """Point reached after walking `distance` along the polyline."""
        if not self.points:
            raise ValueError("empty polyline")
        walked = 0.0
        for seg in self.to_segments():
            seg_len = seg.length()
            if seg_len > 0 and walked + seg_len >= distance:
                return seg.p1.lerp(seg.p2, (distance - walked) / seg_len)
            walked += seg_len
        return self.points[0] if self.closed else self.points[-1]

    def midpoint(self) -> Point:
        """Point halfway along the polyline by arc length."""
        return self.point_at_distance(self.length() / 2)

    def intersects_segment(self, segment: Segment) -> list[Point]:
        """All distinct points where the segment crosses this polyline."""
        hits: list[Point] = []
        for edge in self.to_segments():
            p = edge.intersect(segment)
            if p is not None and not any(h.equals(p) for h in hits):
                hits.append(p)
        return hits

    def intersects_path(self, other: Polyline) -> list[Point]:
        hits: list[Point] = []
        for seg in other.to_segments():
            for p in self.intersects_segment(seg):
                if not any(h.equals(p) for h in hits):
                    hits.append(p)
        return hits
