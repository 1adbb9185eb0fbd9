"""Tests for road assembly, stretches, arterials and routing."""

import math

import pytest

from urban_genesis.geometry import Point, Polygon, Segment
from urban_genesis.network import (
    ArterialDetector,
    Pathfinder,
    SegmentIndex,
    add_segment_snapped,
    cleanup_network,
    dedupe_segments,
    detect_stretches,
    index_segments,
    merge_vertices,
    split_intersections,
)
from urban_genesis.terrain import ElevationMap

from .conftest import square


def seg(x1: float, y1: float, x2: float, y2: float) -> Segment:
    return Segment(Point(x1, y1), Point(x2, y2))


class TestAddSegmentSnapped:
    def test_snaps_to_existing_vertex(self) -> None:
        roads: list[Segment] = []
        grid = index_segments(roads)
        add_segment_snapped(Point(0, 0), Point(100, 0), roads, 8.0, grid)
        added = add_segment_snapped(Point(102, 1), Point(200, 0), roads, 8.0, grid)

        assert added is not None
        assert added.p1 == Point(100, 0)
        assert len(roads) == 2

    def test_snaps_to_the_nearest_candidate(self) -> None:
        roads = [seg(0, 0, 100, 0), seg(106, 0, 106, 100)]
        for grid in (None, index_segments(roads)):
            candidates = list(roads)
            added = add_segment_snapped(Point(104, 0), Point(104, -100), candidates, 8.0, grid)
            assert added is not None
            assert added.p1 == Point(106, 0)

    def test_zero_length_is_rejected(self) -> None:
        roads = [seg(0, 0, 100, 0)]
        assert add_segment_snapped(Point(0, 0), Point(3, 0), roads, 8.0) is None
        assert add_segment_snapped(Point(50, 50), Point(52, 50), roads, 8.0) is None
        assert len(roads) == 1

    def test_duplicate_promotes_bridge(self) -> None:
        roads = [seg(0, 0, 100, 0)]
        assert add_segment_snapped(Point(100, 0), Point(0, 0), roads, 8.0) is None
        assert not roads[0].is_bridge
        assert add_segment_snapped(Point(100, 0), Point(0, 0), roads, 8.0, is_bridge=True) is None
        assert roads[0].is_bridge


class TestCleanup:
    def test_merge_vertices(self) -> None:
        merged = merge_vertices([seg(0, 0, 10, 0), seg(10.5, 0, 20, 0), seg(0, 0, 0.5, 0)], 1.0)
        assert len(merged) == 2
        assert merged[1].p1 == Point(10, 0)

    def test_dedupe_keeps_bridge_flag(self) -> None:
        bridge = Segment(Point(10, 0), Point(0, 0), is_bridge=True)
        unique = dedupe_segments([seg(0, 0, 10, 0), bridge])
        assert len(unique) == 1
        assert unique[0].is_bridge

    def test_split_crossing(self) -> None:
        result = split_intersections([seg(0, 0, 10, 10), seg(0, 10, 10, 0)])
        assert len(result) == 4
        assert all(s.p1.equals(Point(5, 5)) or s.p2.equals(Point(5, 5)) for s in result)

    def test_split_t_junction(self) -> None:
        assert len(split_intersections([seg(0, 0, 10, 0), seg(5, 0, 5, 5)])) == 3

    def test_split_collinear_overlap(self) -> None:
        result = split_intersections([seg(0, 0, 10, 0), seg(5, 0, 15, 0)])
        assert sorted(s.length() for s in result) == pytest.approx([5, 5, 5])

    def test_cleanup_splits_a_cross(self) -> None:
        cleaned = cleanup_network([seg(0, 50, 100, 50), seg(50, 0, 50, 100)], threshold=3.0)
        assert len(cleaned) == 4
        assert all(s.p1.equals(Point(50, 50)) or s.p2.equals(Point(50, 50)) for s in cleaned)
        assert all(s.length() == pytest.approx(50) for s in cleaned)

    def test_cleanup_collapses_split_points_near_vertices(self) -> None:
        threshold = 3.0
        cleaned = cleanup_network([seg(0, 0, 100, 0), seg(1, -50, 1, 50)], threshold)

        assert len(cleaned) == 3
        assert all(s.p1.equals(Point(0, 0)) or s.p2.equals(Point(0, 0)) for s in cleaned)
        vertices = list({p.key(): p for s in cleaned for p in (s.p1, s.p2)}.values())
        for i, a in enumerate(vertices):
            for b in vertices[i + 1 :]:
                assert a.dist(b) >= threshold

    def test_cleanup_is_planar(self) -> None:
        tangle = [seg(0, 0, 100, 0), seg(50, -50, 50, 50), seg(0.5, 0.5, 0, 60), seg(0, 0, 100, 0)]
        cleaned = cleanup_network(tangle, threshold=3.0)
        assert len(split_intersections(cleaned)) == len(cleaned)
        assert not any(a.intersect(b) and not a.shares_vertex(b) for a in cleaned for b in cleaned if a is not b)


class TestSegmentIndex:
    def test_finds_long_segments_near_their_ends(self) -> None:
        long_road = seg(0, 0, 1000, 0)
        far_road = seg(0, 500, 10, 500)
        index = SegmentIndex([long_road, far_road])

        near = index.near(Point(900, 5), Point(910, 5), margin=10)
        assert long_road in near
        assert far_road not in near
        assert index.size == 2


class TestStretches:
    def test_collinear_chain(self) -> None:
        stretches = detect_stretches([seg(0, 0, 10, 0), seg(10, 0, 20, 0), seg(20, 0, 30, 0)])
        assert len(stretches) == 1
        assert len(stretches[0].points) == 4
        assert stretches[0].length() == pytest.approx(30)

    def test_t_junction(self) -> None:
        stretches = detect_stretches([seg(0, 0, 10, 0), seg(10, 0, 20, 0), seg(10, 0, 10, 10)])
        assert len(stretches) == 3

    def test_isolated_loop(self) -> None:
        stretches = detect_stretches(square(0, 0, 10).to_segments())
        assert len(stretches) == 1
        assert stretches[0].is_loop()
        assert stretches[0].length() == pytest.approx(40)


class TestArterials:
    def test_square_corners_are_sharp(self) -> None:
        paths = ArterialDetector.detect(square(0, 0, 100), 50)
        assert len(paths) == 4
        assert all(len(p.points) == 2 for p in paths)

    def test_smooth_octagon_is_one_loop(self) -> None:
        octagon = Polygon([Point.from_angle(i * math.pi / 4, 100) for i in range(8)])
        paths = ArterialDetector.detect(octagon, 50)
        assert len(paths) == 1
        assert paths[0].closed

    def test_shared_edges_appear_once(self) -> None:
        paths = ArterialDetector.detect_from_shapes([square(0, 0, 10), square(10, 0, 10)], 50)
        assert len(paths) == 7


class HillElevation(ElevationMap):
    """Flat ground with a single steep peak at (50, 0)."""

    def get_height(self, x: float, y: float) -> float:
        return 1.0 if Point(x, y).dist(Point(50, 0)) < 5 else 0.0


class TestPathfinder:
    roads = [seg(0, 0, 50, 0), seg(50, 0, 100, 0), seg(0, 0, 50, 60), seg(50, 60, 100, 0)]

    def test_shortest_route(self) -> None:
        path = Pathfinder.find_path(Point(1, 1), Point(99, 1), self.roads)
        assert path == [Point(0, 0), Point(50, 0), Point(100, 0)]

    def test_route_avoids_climbs(self) -> None:
        path = Pathfinder.find_path(Point(0, 0), Point(100, 0), self.roads, HillElevation(), 10.0)
        assert path == [Point(0, 0), Point(50, 60), Point(100, 0)]

    def test_disconnected(self) -> None:
        roads = self.roads + [seg(500, 500, 600, 500)]
        assert Pathfinder.find_path(Point(0, 0), Point(600, 500), roads) is None

    def test_empty_graph(self) -> None:
        assert Pathfinder.find_path(Point(0, 0), Point(1, 1), []) is None

    def test_cached_graph(self) -> None:
        graph = Pathfinder.build_graph(self.roads)
        first = Pathfinder.route(Point(0, 0), Point(100, 0), graph)
        second = Pathfinder.route(Point(100, 0), Point(0, 0), graph)
        assert first is not None and second is not None
        assert first == list(reversed(second))
