"""Tests for points, segments, polylines and polygons."""

import math

import pytest

from urban_genesis.geometry import Bounds, Capsule, Point, Polygon, Polyline, Segment

from .conftest import square


class TestPoint:
    def test_arithmetic(self) -> None:
        a = Point(1, 2)
        b = Point(3, -1)
        assert a + b == Point(4, 1)
        assert a - b == Point(-2, 3)
        assert a * 2 == Point(2, 4)
        assert -a == Point(-1, -2)

    def test_division_by_zero_is_zero_vector(self) -> None:
        assert Point(5, 5).div(0) == Point(0, 0)

    def test_normalize(self) -> None:
        n = Point(3, 4).normalize()
        assert n.mag() == pytest.approx(1.0)
        assert n.equals(Point(0.6, 0.8))
        assert Point(0, 0).normalize() == Point(0, 0)

    def test_dot_and_cross(self) -> None:
        assert Point(1, 0).dot(Point(0, 1)) == 0
        assert Point(1, 0).cross(Point(0, 1)) == 1

    def test_rotate(self) -> None:
        r = Point(1, 0).rotate(math.pi / 2)
        assert r.equals(Point(0, 1))

    def test_tolerant_equality(self) -> None:
        assert Point(1, 1).equals(Point(1 + 1e-5, 1 - 1e-5))
        assert not Point(1, 1).equals(Point(1.01, 1))

    def test_key_rounds_and_folds_negative_zero(self) -> None:
        assert Point(1.004, -0.0001).key() == (1.0, 0.0)
        assert Point(-0.0, 2.0).key() == Point(0.0, 2.0).key()

    def test_from_angle(self) -> None:
        assert Point.from_angle(math.pi, 2).equals(Point(-2, 0))


class TestSegment:
    def test_equality_is_undirected(self) -> None:
        a = Segment(Point(0, 0), Point(10, 0))
        assert a.equals(Segment(Point(10, 0), Point(0, 0)))
        assert a.key() == Segment(Point(10, 0), Point(0, 0)).key()

    def test_intersect_crossing(self) -> None:
        a = Segment(Point(0, 0), Point(10, 10))
        b = Segment(Point(0, 10), Point(10, 0))
        hit = a.intersect(b)
        assert hit is not None
        assert hit.equals(Point(5, 5))

    def test_intersect_disjoint(self) -> None:
        a = Segment(Point(0, 0), Point(1, 0))
        b = Segment(Point(5, -1), Point(5, 1))
        assert a.intersect(b) is None

    def test_parallel_segments_do_not_intersect(self) -> None:
        a = Segment(Point(0, 0), Point(10, 0))
        b = Segment(Point(0, 5), Point(10, 5))
        assert a.intersect(b) is None

    def test_collinear_overlap(self) -> None:
        a = Segment(Point(0, 0), Point(10, 0))
        assert a.intersect(Segment(Point(5, 0), Point(15, 0))) is None
        assert a.overlaps(Segment(Point(5, 0), Point(15, 0)))
        # Touching end to end is not an overlap
        assert not a.overlaps(Segment(Point(10, 0), Point(20, 0)))

    def test_closest_point_clamps(self) -> None:
        s = Segment(Point(0, 0), Point(10, 0))
        assert s.closest_point(Point(5, 3)).equals(Point(5, 0))
        assert s.closest_point(Point(-4, 3)).equals(Point(0, 0))
        assert s.distance_to_point(Point(5, 3)) == pytest.approx(3)

    def test_contains_point(self) -> None:
        s = Segment(Point(0, 0), Point(10, 0))
        assert s.contains_point(Point(10, 0))
        assert not s.strictly_contains(Point(10, 0))
        assert s.strictly_contains(Point(4, 0))


class TestCapsule:
    def test_parallel_capsules(self) -> None:
        a = Capsule(Point(0, 0), Point(10, 0), 2)
        assert a.intersects(Capsule(Point(0, 3), Point(10, 3), 2))
        assert not a.intersects(Capsule(Point(0, 5), Point(10, 5), 0.5))

    def test_crossing_capsules_touch(self) -> None:
        a = Capsule(Point(0, 0), Point(10, 10), 0)
        b = Capsule(Point(0, 10), Point(10, 0), 0)
        assert a.distance_to(b) == 0


class TestPolyline:
    def test_length_and_midpoint(self) -> None:
        line = Polyline([Point(0, 0), Point(10, 0), Point(10, 10)])
        assert line.length() == pytest.approx(20)
        assert line.midpoint().equals(Point(10, 0))

    def test_closed_adds_return_edge(self) -> None:
        line = Polyline([Point(0, 0), Point(10, 0), Point(10, 10)], closed=True)
        assert len(line.to_segments()) == 3

    def test_intersects_segment(self) -> None:
        line = Polyline([Point(0, 0), Point(10, 0), Point(10, 10)])
        hits = line.intersects_segment(Segment(Point(5, -5), Point(5, 5)))
        assert len(hits) == 1
        assert hits[0].equals(Point(5, 0))


class TestPolygon:
    def test_signed_area_and_orientation(self) -> None:
        sq = square(0, 0, 10)
        assert sq.signed_area() == pytest.approx(100)
        assert sq.is_solid()
        assert sq.reversed().is_hole()
        assert sq.reversed().area() == pytest.approx(100)

    def test_contains_point(self) -> None:
        sq = square(0, 0, 10)
        assert sq.contains_point(Point(5, 5))
        assert not sq.contains_point(Point(15, 5))

    def test_simplify_drops_collinear_vertices(self) -> None:
        poly = Polygon([Point(0, 0), Point(5, 0), Point(10, 0), Point(10, 10), Point(0, 10)])
        simplified = poly.simplify()
        assert len(simplified.points) == 4
        assert simplified.area() == pytest.approx(100)

    def test_simplify_keeps_triangles(self) -> None:
        tri = Polygon([Point(0, 0), Point(10, 0), Point(0, 10)])
        assert tri.simplify() is tri

    def test_inward_normals_point_inside(self) -> None:
        sq = square(0, 0, 10)
        for i in range(4):
            n = sq.get_inward_normal(i)
            assert sq.contains_point(sq.points[i].add(n.mul(1)))
            e = sq.get_edge_inward_normal(i)
            mid = sq.points[i].lerp(sq.points[(i + 1) % 4], 0.5)
            assert sq.contains_point(mid.add(e.mul(1)))

    def test_bounds(self) -> None:
        b = square(2, 3, 10).bounds()
        assert b == Bounds(2, 3, 12, 13)
        assert b.center.equals(Point(7, 8))
        assert b.width == pytest.approx(10)

    def test_guide_vector_follows_longest_edge(self) -> None:
        rect = Polygon([Point(0, 0), Point(0, 40), Point(10, 40), Point(10, 0)])
        g = rect.guide_vector()
        assert abs(g.y) == pytest.approx(1)
