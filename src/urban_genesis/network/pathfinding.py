"""A* routing over the road graph."""

from __future__ import annotations

import heapq
import itertools
from collections import defaultdict

from ..geometry import Point, Segment
from ..terrain import HeightField


class Pathfinder:
    """
    Shortest routes over segment endpoints.

    With an elevation field, each directed edge costs its length times
    (1 + max(0, climb * sensitivity)), so routes avoid hills.
    """

    @staticmethod
    def build_graph(
        segments: list[Segment], elevation: HeightField | None = None, sensitivity: float = 10.0
    ) -> tuple[dict[tuple, Point], dict[tuple, list[tuple[tuple, float]]]]:
        nodes: dict[tuple, Point] = {}
        edges: dict[tuple, list[tuple[tuple, float]]] = defaultdict(list)
        heights: dict[tuple, float] = {}

        def height(k: tuple) -> float:
            if k not in heights:
                p = nodes[k]
                heights[k] = elevation.get_height(p.x, p.y)
            return heights[k]

        for s in segments:
            k1, k2 = s.p1.key(), s.p2.key()
            if k1 == k2:
                continue
            nodes.setdefault(k1, s.p1)
            nodes.setdefault(k2, s.p2)
            length = s.length()
            cost_forward = cost_back = length
            if elevation is not None:
                dh = height(k2) - height(k1)
                cost_forward = length * (1 + max(0.0, dh * sensitivity))
                cost_back = length * (1 + max(0.0, -dh * sensitivity))
            edges[k1].append((k2, cost_forward))
            edges[k2].append((k1, cost_back))
        return nodes, edges

    @classmethod
    def find_path(
        cls,
        start: Point,
        end: Point,
        segments: list[Segment],
        elevation: HeightField | None = None,
        sensitivity: float = 10.0,
    ) -> list[Point] | None:
        """
        Route between the graph nodes nearest to start and end.

        Returns:
            Node positions from start to end, or None when the two nodes
            lie in disconnected components (or there is no graph)
        """
        return cls.route(start, end, cls.build_graph(segments, elevation, sensitivity))

    @staticmethod
    def route(
        start: Point, end: Point, graph: tuple[dict[tuple, Point], dict[tuple, list[tuple[tuple, float]]]]
    ) -> list[Point] | None:
        """Like `find_path` over a graph from `build_graph`, for repeated queries."""
        nodes, edges = graph
        if not nodes:
            return None

        start_key = min(nodes, key=lambda k: nodes[k].dist_sq(start))
        end_key = min(nodes, key=lambda k: nodes[k].dist_sq(end))
        goal = nodes[end_key]

        counter = itertools.count()
        open_heap = [(nodes[start_key].dist(goal), next(counter), start_key)]
        g_score = {start_key: 0.0}
        came_from: dict[tuple, tuple] = {}
        closed: set[tuple] = set()

        while open_heap:
            _, _, current = heapq.heappop(open_heap)
            if current == end_key:
                path = [nodes[current]]
                while current in came_from:
                    current = came_from[current]
                    path.append(nodes[current])
                path.reverse()
                return path
            if current in closed:
                continue
            closed.add(current)

            for neighbour, cost in edges.get(current, ()):
                tentative = g_score[current] + cost
                if tentative < g_score.get(neighbour, float("inf")):
                    came_from[neighbour] = current
                    g_score[neighbour] = tentative
                    f = tentative + nodes[neighbour].dist(goal)
                    heapq.heappush(open_heap, (f, next(counter), neighbour))

        return None
