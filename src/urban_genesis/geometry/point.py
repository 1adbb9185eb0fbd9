"""Immutable 2D point / vector type."""

from __future__ import annotations

import math
from dataclasses import dataclass

EPSILON = 1e-4


@dataclass(frozen=True, slots=True)
class Point:
    """
    A 2D point that doubles as a vector.

    Every operation returns a new instance. World coordinates follow the
    screen convention: x grows to the right and y grows downward.
    """

    x: float
    y: float

    @classmethod
    def from_angle(cls, angle: float, length: float = 1.0) -> Point:
        """Create a vector of the given length pointing along angle (radians)."""
        return cls(math.cos(angle) * length, math.sin(angle) * length)

    def add(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def sub(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def mul(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    def div(self, divisor: float) -> Point:
        """Divide by a scalar. Division by zero yields the zero vector."""
        if divisor == 0:
            return Point(0.0, 0.0)
        return Point(self.x / divisor, self.y / divisor)

    def __add__(self, other: Point) -> Point:
        return self.add(other)

    def __sub__(self, other: Point) -> Point:
        return self.sub(other)

    def __mul__(self, factor: float) -> Point:
        return self.mul(factor)

    def __neg__(self) -> Point:
        return Point(-self.x, -self.y)

    def mag(self) -> float:
        return math.hypot(self.x, self.y)

    def mag_sq(self) -> float:
        return self.x * self.x + self.y * self.y

    def normalize(self) -> Point:
        """Unit vector in the same direction. The zero vector stays zero."""
        m = self.mag()
        if m == 0:
            return Point(0.0, 0.0)
        return Point(self.x / m, self.y / m)

    def dot(self, other: Point) -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: Point) -> float:
        """Z component of the 3D cross product."""
        return self.x * other.y - self.y * other.x

    def dist(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def dist_sq(self, other: Point) -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def angle(self) -> float:
        return math.atan2(self.y, self.x)

    def rotate(self, angle: float) -> Point:
        c = math.cos(angle)
        s = math.sin(angle)
        return Point(self.x * c - self.y * s, self.x * s + self.y * c)

    def perpendicular(self) -> Point:
        """Rotate 90 degrees (clockwise on screen)."""
        return Point(-self.y, self.x)

    def lerp(self, other: Point, t: float) -> Point:
        return Point(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def equals(self, other: Point, epsilon: float = EPSILON) -> bool:
        """Tolerant equality. Use this instead of == for derived coordinates."""
        return abs(self.x - other.x) < epsilon and abs(self.y - other.y) < epsilon

    def key(self, digits: int = 2) -> tuple[float, float]:
        """Rounded coordinate tuple used to key adjacency maps."""
        # + 0.0 folds -0.0 into 0.0
        return (round(self.x, digits) + 0.0, round(self.y, digits) + 0.0)

    def copy(self) -> Point:
        return Point(self.x, self.y)


ZERO = Point(0.0, 0.0)
