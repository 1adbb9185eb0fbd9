"""Line segments and capsules."""

from __future__ import annotations

from dataclasses import dataclass

from .point import EPSILON, Point

# Tolerance for "point lies on segment" tests
ON_SEGMENT_EPSILON = 1e-3
# Tolerance on the sine of the angle between two directions
COLLINEAR_EPSILON = 1e-6


@dataclass(eq=False)
class Segment:
    """
    A straight road or boundary piece between two points.

    Equality is undirected and tolerant (see `equals`). Instances hash by
    identity so they can key usage maps. `is_bridge` marks protected
    infrastructure that survives terrain culling.
    """

    p1: Point
    p2: Point
    is_bridge: bool = False

    def length(self) -> float:
        return self.p1.dist(self.p2)

    def midpoint(self) -> Point:
        return self.p1.lerp(self.p2, 0.5)

    def direction(self) -> Point:
        """Unit vector from p1 to p2."""
        return self.p2.sub(self.p1).normalize()

    def reversed(self) -> Segment:
        return Segment(self.p2, self.p1, self.is_bridge)

    def equals(self, other: Segment, epsilon: float = EPSILON) -> bool:
        """Undirected tolerant equality."""
        return (self.p1.equals(other.p1, epsilon) and self.p2.equals(other.p2, epsilon)) or (
            self.p1.equals(other.p2, epsilon) and self.p2.equals(other.p1, epsilon)
        )

    def key(self, digits: int = 2) -> tuple[tuple[float, float], tuple[float, float]]:
        """Order-independent rounded key."""
        a = self.p1.key(digits)
        b = self.p2.key(digits)
        return (a, b) if a <= b else (b, a)

    def shares_vertex(self, other: Segment, epsilon: float = EPSILON) -> bool:
        return (
            self.p1.equals(other.p1, epsilon)
            or self.p1.equals(other.p2, epsilon)
            or self.p2.equals(other.p1, epsilon)
            or self.p2.equals(other.p2, epsilon)
        )

    def contains_point(self, p: Point, epsilon: float = ON_SEGMENT_EPSILON) -> bool:
        """Whether p lies on the segment (endpoints included)."""
        return abs(self.p1.dist(p) + p.dist(self.p2) - self.length()) < epsilon

    def strictly_contains(self, p: Point, epsilon: float = ON_SEGMENT_EPSILON) -> bool:
        """Whether p lies on the segment but is not one of its endpoints."""
        if p.equals(self.p1, epsilon) or p.equals(self.p2, epsilon):
            return False
        return self.contains_point(p, epsilon)

    def closest_point(self, p: Point) -> Point:
        """Projection of p onto the segment, clamped to the endpoints."""
        d = self.p2.sub(self.p1)
        len_sq = d.mag_sq()
        if len_sq == 0:
            return self.p1
        t = p.sub(self.p1).dot(d) / len_sq
        t = max(0.0, min(1.0, t))
        return self.p1.add(d.mul(t))

    def distance_to_point(self, p: Point) -> float:
        return p.dist(self.closest_point(p))

    def intersect(self, other: Segment) -> Point | None:
        """
        Intersection point of two segments.

        Solves the two line equations with Cramer's rule and accepts the hit
        only when both parameters lie in [0, 1]. Parallel and collinear
        segments return None even when they overlap; see `overlaps`.
        """
        x1, y1 = self.p1.x, self.p1.y
        x2, y2 = self.p2.x, self.p2.y
        x3, y3 = other.p1.x, other.p1.y
        x4, y4 = other.p2.x, other.p2.y

        denom = (y4 - y3) * (x2 - x1) - (x4 - x3) * (y2 - y1)
        if denom == 0:
            return None

        ua = ((x4 - x3) * (y1 - y3) - (y4 - y3) * (x1 - x3)) / denom
        ub = ((x2 - x1) * (y1 - y3) - (y2 - y1) * (x1 - x3)) / denom
        if ua < 0 or ua > 1 or ub < 0 or ub > 1:
            return None
        return Point(x1 + ua * (x2 - x1), y1 + ua * (y2 - y1))

    def is_collinear_with(self, other: Segment, epsilon: float = ON_SEGMENT_EPSILON) -> bool:
        d1 = self.p2.sub(self.p1)
        d2 = other.p2.sub(other.p1)
        if d1.mag() == 0 or d2.mag() == 0:
            return False
        if abs(d1.normalize().cross(d2.normalize())) > COLLINEAR_EPSILON:
            return False
        # Parallel; also require the other segment to sit on our supporting line
        offset = abs(d1.normalize().cross(other.p1.sub(self.p1)))
        return offset < epsilon

    def overlaps(self, other: Segment, epsilon: float = ON_SEGMENT_EPSILON) -> bool:
        """
        Collinear overlap test.

        True when the segments are equal, or collinear with an endpoint of
        either one strictly inside the other. Two collinear segments that
        only touch at a shared vertex do not overlap.
        """
        if self.equals(other):
            return True
        if not self.is_collinear_with(other, epsilon):
            return False
        return (
            self.strictly_contains(other.p1, epsilon)
            or self.strictly_contains(other.p2, epsilon)
            or other.strictly_contains(self.p1, epsilon)
            or other.strictly_contains(self.p2, epsilon)
        )


@dataclass
class Capsule:
    """A segment swept by a circle, used for thick-trail collision checks."""

    p1: Point
    p2: Point
    radius: float

    @property
    def core(self) -> Segment:
        return Segment(self.p1, self.p2)

    def distance_to(self, other: Capsule) -> float:
        """Distance between the two core segments (0 if they cross)."""
        a = self.core
        b = other.core
        if a.intersect(b) is not None:
            return 0.0
        return min(
            a.distance_to_point(b.p1),
            a.distance_to_point(b.p2),
            b.distance_to_point(a.p1),
            b.distance_to_point(a.p2),
        )

    def intersects(self, other: Capsule) -> bool:
        return self.distance_to(other) <= self.radius + other.radius
