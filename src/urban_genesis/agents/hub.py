"""Urban hubs - the seeds road growth starts from."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

from ..geometry import Point, Polygon


@dataclass
class Hub:
    """
    A settlement core with a polygonal boundary.

    Agents are spawned from boundary vertices. Each vertex index may be
    consumed by exactly one spawn; `used_vertex_indices` records which.
    """

    position: Point
    size: float = 20.0
    tier: int = 1
    id: int = 0
    spawn_time: int = 0
    boundary: list[Point] = field(default_factory=list)
    used_vertex_indices: set[int] = field(default_factory=set)

    def contains_point(self, p: Point) -> bool:
        return self.position.dist(p) <= self.size

    def overlaps(self, other: Hub) -> bool:
        return self.position.dist(other.position) < self.size + other.size

    def polygon(self) -> Polygon:
        return Polygon(self.boundary)

    def available_vertices(self) -> list[int]:
        return [i for i in range(len(self.boundary)) if i not in self.used_vertex_indices]

    def take_vertex(self, rng: random.Random) -> int | None:
        """Consume a random unused boundary vertex, or None if all are used."""
        available = self.available_vertices()
        if not available:
            return None
        index = rng.choice(available)
        self.used_vertex_indices.add(index)
        return index

    @staticmethod
    def build_boundary(center: Point, radius: float, vertex_count: int) -> list[Point]:
        """Regular polygon of `vertex_count` vertices around center."""
        return [
            center.add(Point.from_angle(v / vertex_count * math.pi * 2, radius))
            for v in range(vertex_count)
        ]
