"""Merging of adjacent blocks."""

from __future__ import annotations

import logging
from collections import defaultdict

from ..geometry import Point, Polygon, Segment

logger = logging.getLogger(__name__)


def _insert_touching_vertices(shape: Polygon, others: list[Point]) -> list[Point]:
    """Boundary of shape with every point of `others` lying inside an edge spliced in."""
    result: list[Point] = []
    for edge in shape.to_segments():
        result.append(edge.p1)
        d = edge.p2.sub(edge.p1)
        inner = sorted(
            (p for p in others if edge.strictly_contains(p)),
            key=lambda p: p.sub(edge.p1).dot(d),
        )
        for p in inner:
            if not p.equals(result[-1]):
                result.append(p)
    return result


def _component_count(segments: list[Segment]) -> int:
    parent: dict[tuple, tuple] = {}

    def find(k: tuple) -> tuple:
        while parent.setdefault(k, k) != k:
            parent[k] = parent[parent[k]]
            k = parent[k]
        return k

    for s in segments:
        parent[find(s.p1.key())] = find(s.p2.key())
    return len({find(k) for k in list(parent)})


class ShapeMerger:
    """
    Joins blocks that share boundary.

    Two shapes are neighbours only when a boundary edge of one overlaps a
    boundary edge of the other along a proper sub-edge; touching at a
    single vertex is not enough. A merge is only performed when the shared
    boundary forms one contiguous run, so the union stays a simple polygon
    without holes.
    """

    @staticmethod
    def are_neighbors(a: Polygon, b: Polygon) -> bool:
        ba, bb = a.bounds(), b.bounds()
        if ba.max_x < bb.min_x - 1e-3 or bb.max_x < ba.min_x - 1e-3:
            return False
        if ba.max_y < bb.min_y - 1e-3 or bb.max_y < ba.min_y - 1e-3:
            return False
        b_segments = b.to_segments()
        return any(sa.overlaps(sb) for sa in a.to_segments() for sb in b_segments)

    @classmethod
    def find_neighbors(cls, index: int, shapes: list[Polygon]) -> list[int]:
        """Indices of the shapes adjacent to shapes[index]."""
        target = shapes[index]
        return [i for i, other in enumerate(shapes) if i != index and cls.are_neighbors(target, other)]

    @staticmethod
    def merge(a: Polygon, b: Polygon) -> Polygon | None:
        """
        Union of two adjacent shapes.

        Vertices of each shape that sit inside an edge of the other are
        spliced in first, so partially overlapping edges become identical
        shared edges. The shared run is dropped and the remaining edges are
        stitched into one closed boundary.

        Returns:
            The simplified union, or None when the shapes share no edge,
            share more than one disjoint run, or do not form a single loop
        """
        a_points = _insert_touching_vertices(a, b.points)
        b_points = _insert_touching_vertices(b, a.points)
        a_segments = Polygon(a_points).to_segments()
        b_segments = Polygon(b_points).to_segments()

        shared = [s for s in a_segments if any(s.equals(t) for t in b_segments)]
        if not shared or _component_count(shared) != 1:
            return None

        remaining = [s for s in a_segments + b_segments if not any(s.equals(t) for t in shared)]
        if len(remaining) < 3:
            return None

        adjacency: dict[tuple, list[Point]] = defaultdict(list)
        for s in remaining:
            adjacency[s.p1.key()].append(s.p2)
            adjacency[s.p2.key()].append(s.p1)
        if any(len(n) != 2 for n in adjacency.values()):
            return None

        start = remaining[0].p1
        loop = [start]
        prev_key = None
        curr = start
        for _ in range(len(remaining)):
            options = adjacency[curr.key()]
            nxt = options[0] if options[0].key() != prev_key else options[1]
            prev_key = curr.key()
            curr = nxt
            if curr.key() == start.key():
                break
            loop.append(curr)

        if len(loop) != len(remaining):
            return None

        merged = Polygon(loop)
        if merged.signed_area() < 0:
            merged = merged.reversed()
        return merged.simplify()

    @classmethod
    def run_auto_merge(cls, shapes: list[Polygon], area_threshold: float, max_iterations: int = 500) -> list[Polygon]:
        """
        Fold undersized shapes into their largest mergeable neighbour.

        The smallest undersized shape is handled first. After each merge the
        adjacency is recomputed; the loop ends when no undersized shape can
        be merged. `max_iterations` only bounds runaway inputs and is logged
        when reached.
        """
        current = list(shapes)
        for _ in range(max_iterations):
            merged_any = False
            order = sorted(range(len(current)), key=lambda i: current[i].area())
            for i in order:
                if current[i].area() >= area_threshold:
                    break
                neighbours = sorted(cls.find_neighbors(i, current), key=lambda j: current[j].area(), reverse=True)
                for j in neighbours:
                    merged = cls.merge(current[i], current[j])
                    if merged is not None:
                        current = [s for k, s in enumerate(current) if k not in (i, j)]
                        current.append(merged)
                        merged_any = True
                        break
                if merged_any:
                    break
            if not merged_any:
                break
        else:
            logger.warning("Auto-merge hit its limit of %d merges", max_iterations)

        logger.debug("Auto-merge: %d shapes in, %d out", len(shapes), len(current))
        return current
