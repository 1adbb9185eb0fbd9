"""Arterial detection along block boundaries."""

from __future__ import annotations

import math

from ..geometry import Point, Polygon, Polyline

POINT_EPSILON = 0.01


class ArterialDetector:
    """
    Groups boundary edges into low-curvature runs.

    A closed boundary is cut at every vertex turning more than the
    threshold; a boundary with no sharp vertex is one closed arterial.
    """

    @staticmethod
    def detect(shape: Polygon, angle_threshold_deg: float = 50.0) -> list[Polyline]:
        threshold = math.radians(angle_threshold_deg)

        pts: list[Point] = []
        for p in shape.points:
            if not pts or p.dist(pts[-1]) > POINT_EPSILON:
                pts.append(p)
        if len(pts) > 2 and pts[0].dist(pts[-1]) < POINT_EPSILON:
            pts.pop()
        if len(pts) < 2:
            return []

        n = len(pts)
        sharp: list[int] = []
        for i in range(n):
            prev, curr, nxt = pts[i - 1], pts[i], pts[(i + 1) % n]
            if curr.dist(prev) < POINT_EPSILON or nxt.dist(curr) < POINT_EPSILON:
                continue
            dot = max(-1.0, min(1.0, curr.sub(prev).normalize().dot(nxt.sub(curr).normalize())))
            if math.acos(dot) > threshold:
                sharp.append(i)

        if not sharp:
            return [Polyline(pts, closed=True)]

        sharp_set = set(sharp)
        start = sharp[0]
        paths: list[Polyline] = []
        current = [pts[start]]
        for step in range(1, n + 1):
            idx = (start + step) % n
            current.append(pts[idx])
            if idx in sharp_set:
                if len(current) >= 2:
                    paths.append(Polyline(current))
                current = [pts[idx]]
        return paths

    @classmethod
    def detect_from_shapes(cls, shapes: list[Polygon], angle_threshold_deg: float = 50.0) -> list[Polyline]:
        """Arterials of every shape; runs shared by neighbouring blocks appear once."""
        found: list[Polyline] = []
        for shape in shapes:
            found.extend(cls.detect(shape, angle_threshold_deg))
        return deduplicate(found)


def _same_path(a: Polyline, b: Polyline) -> bool:
    if len(a.points) != len(b.points):
        return False
    a_start, a_end = a.points[0], a.points[-1]
    b_start, b_end = b.points[0], b.points[-1]
    if not (
        (a_start.equals(b_start) and a_end.equals(b_end))
        or (a_start.equals(b_end) and a_end.equals(b_start))
    ):
        return False
    if len(a.points) > 2:
        mid = a.points[len(a.points) // 2]
        return any(p.equals(mid) for p in b.points)
    return True


def deduplicate(paths: list[Polyline]) -> list[Polyline]:
    unique: list[Polyline] = []
    for p in paths:
        if len(p.points) >= 2 and not any(_same_path(u, p) for u in unique):
            unique.append(p)
    return unique
