"""Non-forking road stretches."""

from __future__ import annotations

from collections import defaultdict

from ..geometry import Point, Polyline, Segment


class RoadPath(Polyline):
    """A run of connected points whose interior vertices all have degree 2."""

    def __init__(self, points: list[Point]):
        super().__init__(points, closed=False)

    def midpoint(self) -> Point:
        if len(self.points) < 2:
            return Point(0.0, 0.0)
        return super().midpoint()

    def is_loop(self) -> bool:
        return len(self.points) > 2 and self.points[0].equals(self.points[-1])


def _edge_key(a: Point, b: Point) -> tuple:
    ka, kb = a.key(), b.key()
    return (ka, kb) if ka <= kb else (kb, ka)


def detect_stretches(segments: list[Segment]) -> list[RoadPath]:
    """
    Split a road graph into maximal degree-2 runs.

    Vertices with degree other than 2 are junctions; every run between
    junctions becomes one RoadPath. A component made only of degree-2
    vertices (an isolated loop) becomes a stretch whose endpoints coincide.
    """
    adjacency: dict[tuple[float, float], list[Point]] = defaultdict(list)
    coords: dict[tuple[float, float], Point] = {}
    for s in segments:
        coords.setdefault(s.p1.key(), s.p1)
        coords.setdefault(s.p2.key(), s.p2)
        adjacency[s.p1.key()].append(s.p2)
        adjacency[s.p2.key()].append(s.p1)

    visited: set[tuple] = set()
    stretches: list[RoadPath] = []

    def walk(prev: Point, curr: Point, points: list[Point], stop_at: Point | None) -> None:
        while len(adjacency[curr.key()]) == 2:
            nxt = next((n for n in adjacency[curr.key()] if not n.equals(prev)), None)
            if nxt is None or _edge_key(curr, nxt) in visited:
                return
            points.append(nxt)
            visited.add(_edge_key(curr, nxt))
            prev, curr = curr, nxt
            if stop_at is not None and curr.equals(stop_at):
                return

    junctions = [coords[k] for k, neighbours in adjacency.items() if len(neighbours) != 2]
    for start in junctions:
        for neighbour in adjacency[start.key()]:
            if _edge_key(start, neighbour) in visited:
                continue
            points = [start, neighbour]
            visited.add(_edge_key(start, neighbour))
            walk(start, neighbour, points, None)
            stretches.append(RoadPath(points))

    for s in segments:
        if _edge_key(s.p1, s.p2) in visited:
            continue
        points = [s.p1, s.p2]
        visited.add(_edge_key(s.p1, s.p2))
        walk(s.p1, s.p2, points, s.p1)
        stretches.append(RoadPath(points))

    return stretches
