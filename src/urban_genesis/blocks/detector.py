"""Face extraction from a planar road graph."""

from __future__ import annotations

import logging
import math
from collections import defaultdict

from ..geometry import Point, Polygon, Segment

logger = logging.getLogger(__name__)

Key = tuple[float, float]


class ShapeDetector:
    """
    Finds the minimal enclosed faces (city blocks) of a road graph.

    Dangling trees are pruned first so overhangs never open or split a
    face. Each remaining directed edge is walked once, always taking the
    sharpest turn at every vertex, which traces the smallest face on one
    side of the edge. Only solid faces (positive signed area) are kept,
    which drops the unbounded outer face.
    """

    max_face_vertices = 1000

    @classmethod
    def detect(cls, segments: list[Segment]) -> list[Polygon]:
        coords: dict[Key, Point] = {}
        graph: dict[Key, list[Key]] = defaultdict(list)
        for s in segments:
            k1, k2 = s.p1.key(), s.p2.key()
            if k1 == k2:
                continue
            coords.setdefault(k1, s.p1)
            coords.setdefault(k2, s.p2)
            if k2 not in graph[k1]:
                graph[k1].append(k2)
            if k1 not in graph[k2]:
                graph[k2].append(k1)

        cls._prune_dangling(graph)

        visited: set[tuple[Key, Key]] = set()
        shapes: list[Polygon] = []
        for start, neighbours in graph.items():
            for neighbour in neighbours:
                if (start, neighbour) in visited:
                    continue
                cycle = cls._trace_face(start, neighbour, graph, coords, visited)
                if cycle is not None and len(cycle) >= 3:
                    shape = Polygon(cycle)
                    if shape.is_solid():
                        shapes.append(shape)

        logger.debug("Detected %d shapes from %d segments", len(shapes), len(segments))
        return shapes

    @staticmethod
    def _prune_dangling(graph: dict[Key, list[Key]]) -> None:
        """Repeatedly strip degree-0 and degree-1 vertices."""
        stack = [k for k, n in graph.items() if len(n) < 2]
        while stack:
            k = stack.pop()
            if k not in graph:
                continue
            for other in graph.pop(k):
                if other in graph:
                    graph[other].remove(k)
                    if len(graph[other]) < 2:
                        stack.append(other)

    @classmethod
    def _trace_face(
        cls,
        start: Key,
        first: Key,
        graph: dict[Key, list[Key]],
        coords: dict[Key, Point],
        visited: set[tuple[Key, Key]],
    ) -> list[Point] | None:
        face = [coords[start]]
        prev, curr = start, first
        while True:
            if (prev, curr) in visited:
                return None
            visited.add((prev, curr))
            if curr == start:
                return face
            face.append(coords[curr])
            if len(face) > cls.max_face_vertices:
                return None

            here = coords[curr]
            back = coords[prev].sub(here)
            back_angle = math.atan2(back.y, back.x)

            best: Key | None = None
            best_turn = -math.inf
            for n in graph[curr]:
                if n == prev:
                    continue
                d = coords[n].sub(here)
                turn = (math.atan2(d.y, d.x) - back_angle) % (math.pi * 2)
                if turn > best_turn:
                    best_turn = turn
                    best = n
            if best is None:
                return None
            prev, curr = curr, best
