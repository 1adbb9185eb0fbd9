"""Closed polygons with a fixed winding convention."""

from __future__ import annotations

from dataclasses import dataclass

from .point import Point
from .polyline import Polyline

AREA_EPSILON = 1e-6


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def contains(self, p: Point, margin: float = 0.0) -> bool:
        return (
            self.min_x - margin <= p.x <= self.max_x + margin
            and self.min_y - margin <= p.y <= self.max_y + margin
        )

    @classmethod
    def of_points(cls, points: list[Point]) -> Bounds:
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))


class Polygon(Polyline):
    """
    A closed polyline treated as an area.

    The shoelace signed area is positive for blocks wound clockwise on
    screen (y down), which is the winding face detection produces; such
    polygons are solid. Negative area marks a hole or outer boundary.
    """

    def __init__(self, points: list[Point]):
        super().__init__(points, closed=True)

    def signed_area(self) -> float:
        pts = self.points
        n = len(pts)
        if n < 3:
            return 0.0
        total = 0.0
        for i in range(n):
            a = pts[i]
            b = pts[(i + 1) % n]
            total += a.x * b.y - b.x * a.y
        return total / 2

    def area(self) -> float:
        return abs(self.signed_area())

    def is_solid(self) -> bool:
        return self.signed_area() > AREA_EPSILON

    def is_hole(self) -> bool:
        return self.signed_area() < -AREA_EPSILON

    def reversed(self) -> Polygon:
        return Polygon(self.points[::-1])

    def bounds(self) -> Bounds:
        return Bounds.of_points(self.points)

    def centroid(self) -> Point:
        """Vertex average, good enough for labelling and proximity checks."""
        n = len(self.points)
        return Point(sum(p.x for p in self.points) / n, sum(p.y for p in self.points) / n)

    def contains_point(self, p: Point) -> bool:
        """Ray-casting point-in-polygon test."""
        pts = self.points
        n = len(pts)
        if n < 3:
            return False
        inside = False
        j = n - 1
        for i in range(n):
            xi, yi = pts[i].x, pts[i].y
            xj, yj = pts[j].x, pts[j].y
            if ((yi > p.y) != (yj > p.y)) and (p.x < (xj - xi) * (p.y - yi) / (yj - yi) + xi):
                inside = not inside
            j = i
        return inside

    def simplify(self, epsilon: float = 1e-3) -> Polygon:
        """
        Drop vertices whose incident edges are collinear.

        A vertex is kept when the unit directions of its two edges differ,
        i.e. |v1 . v2 - 1| > epsilon. Repeated vertices are dropped too.
        Polygons with three or fewer points are returned unchanged.
        """
        if len(self.points) <= 3:
            return self

        deduped: list[Point] = []
        for p in self.points:
            if not deduped or not p.equals(deduped[-1]):
                deduped.append(p)
        if len(deduped) > 1 and deduped[0].equals(deduped[-1]):
            deduped.pop()

        n = len(deduped)
        kept: list[Point] = []
        for i in range(n):
            prev = deduped[(i - 1) % n]
            curr = deduped[i]
            nxt = deduped[(i + 1) % n]
            v1 = curr.sub(prev).normalize()
            v2 = nxt.sub(curr).normalize()
            if abs(v1.dot(v2) - 1) > epsilon:
                kept.append(curr)
        if len(kept) < 3:
            return self
        return Polygon(kept)

    def get_inward_normal(self, index: int) -> Point:
        """
        Unit vector pointing into the polygon at vertex `index`.

        Bisects the normals of the two incident edges, then flips the
        result if stepping two units along it leaves the polygon, which
        covers concave and degenerate corners.
        """
        n = len(self.points)
        prev = self.points[(index - 1) % n]
        curr = self.points[index % n]
        nxt = self.points[(index + 1) % n]

        v1 = curr.sub(prev).normalize()
        v2 = nxt.sub(curr).normalize()
        n1 = Point(-v1.y, v1.x)
        n2 = Point(-v2.y, v2.x)
        bisector = n1.add(n2).normalize()
        if bisector.mag() == 0:
            bisector = n1 if n1.mag() > 0 else n2

        if not self.contains_point(curr.add(bisector.mul(2))):
            bisector = bisector.mul(-1)
        return bisector

    def get_edge_inward_normal(self, index: int) -> Point:
        """Inward unit normal of the edge starting at vertex `index`."""
        n = len(self.points)
        a = self.points[index % n]
        b = self.points[(index + 1) % n]
        d = b.sub(a).normalize()
        normal = Point(-d.y, d.x)
        mid = a.lerp(b, 0.5)
        if not self.contains_point(mid.add(normal.mul(2))):
            normal = normal.mul(-1)
        return normal

    def guide_vector(self) -> Point:
        """Direction of the longest edge; orients grids laid over the shape."""
        best = Point(1.0, 0.0)
        best_len = 0.0
        for seg in self.to_segments():
            seg_len = seg.length()
            if seg_len > best_len:
                best_len = seg_len
                best = seg.direction()
        return best
