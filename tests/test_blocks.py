"""Tests for block detection, merging, grids and subdivider seeding."""

import logging
import random

import numpy as np
import pytest

from urban_genesis.blocks import (
    ShapeDetector,
    ShapeMerger,
    TransposeGrid,
    spawn_cross_subdividers,
    spawn_subdividers,
)
from urban_genesis.geometry import Point, Polygon, Segment

from .conftest import lattice, square


class TestShapeDetector:
    def test_single_square(self) -> None:
        shapes = ShapeDetector.detect(square(0, 0, 100).to_segments())
        assert len(shapes) == 1
        assert shapes[0].area() == pytest.approx(10000)
        assert shapes[0].is_solid()

    def test_grid_blocks(self) -> None:
        shapes = ShapeDetector.detect(lattice(3, 50))
        assert len(shapes) == 9
        assert all(s.area() == pytest.approx(2500) for s in shapes)

    def test_blocks_sharing_an_edge_stay_separate(self) -> None:
        shapes = ShapeDetector.detect(square(0, 0, 1).to_segments() + square(1, 0, 1).to_segments())
        assert len(shapes) == 2
        assert all(s.area() == pytest.approx(1) for s in shapes)
        assert sorted(s.centroid().x for s in shapes) == pytest.approx([0.5, 1.5])

    def test_dangling_roads_are_ignored(self) -> None:
        segments = square(0, 0, 100).to_segments()
        segments.append(Segment(Point(100, 50), Point(200, 50)))
        segments.append(Segment(Point(50, 50), Point(0, 0)))
        shapes = ShapeDetector.detect(segments)
        assert len(shapes) == 1
        assert shapes[0].area() == pytest.approx(10000)

    def test_no_faces_in_a_tree(self) -> None:
        tree = [Segment(Point(0, 0), Point(10, 0)), Segment(Point(10, 0), Point(10, 10))]
        assert ShapeDetector.detect(tree) == []


class TestShapeMerger:
    def test_neighbours_share_an_edge(self) -> None:
        a, b, c = square(0, 0, 10), square(10, 0, 10), square(10, 10, 10)
        assert ShapeMerger.are_neighbors(a, b)
        assert not ShapeMerger.are_neighbors(a, c)
        assert ShapeMerger.find_neighbors(0, [a, b, c]) == [1]

    def test_merge_squares(self) -> None:
        merged = ShapeMerger.merge(square(0, 0, 10), square(10, 0, 10))
        assert merged is not None
        assert merged.area() == pytest.approx(200)
        assert len(merged.points) == 4
        assert merged.is_solid()

    def test_merge_t_junction(self) -> None:
        tall = Polygon([Point(10, 0), Point(20, 0), Point(20, 20), Point(10, 20)])
        merged = ShapeMerger.merge(square(0, 0, 10), tall)
        assert merged is not None
        assert merged.area() == pytest.approx(300)

    def test_corner_contact_does_not_merge(self) -> None:
        assert ShapeMerger.merge(square(0, 0, 10), square(10, 10, 10)) is None

    def test_auto_merge_small_shapes(self) -> None:
        shapes = [square(0, 0, 30), square(30, 0, 10)]
        merged = ShapeMerger.run_auto_merge(shapes, area_threshold=500)
        assert len(merged) == 1
        assert merged[0].area() == pytest.approx(1000)

    def test_auto_merge_cap_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        shapes = [square(0, 0, 10), square(10, 0, 10), square(20, 0, 10)]
        with caplog.at_level(logging.WARNING, logger="urban_genesis.blocks.merger"):
            merged = ShapeMerger.run_auto_merge(shapes, area_threshold=1000, max_iterations=1)
        assert len(merged) == 2
        assert "limit" in caplog.text

    def test_auto_merge_runs_until_nothing_is_mergeable(self) -> None:
        shapes = [square(0, 0, 10), square(10, 0, 10), square(20, 0, 10)]
        merged = ShapeMerger.run_auto_merge(shapes, area_threshold=1000)
        assert len(merged) == 1
        assert merged[0].area() == pytest.approx(300)

    def test_auto_merge_keeps_large_shapes(self) -> None:
        shapes = [square(0, 0, 30), square(30, 0, 30)]
        assert len(ShapeMerger.run_auto_merge(shapes, area_threshold=500)) == 2


class TestTransposeGrid:
    def test_mesh_shape(self) -> None:
        mesh = TransposeGrid.generate_mesh(Point(0, 0), 100, 50, 10, 10)
        assert mesh.shape == (11, 6, 2)
        assert mesh[0, 0] == pytest.approx([-50, -25])
        assert len(TransposeGrid.mesh_to_segments(mesh)) == 11 * 5 + 10 * 6

    def test_invalid_spacing(self) -> None:
        with pytest.raises(ValueError):
            TransposeGrid.generate_mesh(Point(0, 0), 100, 100, 0, 10)

    def test_rotation(self) -> None:
        mesh = TransposeGrid.generate_mesh(Point(0, 0), 20, 0, 10, 10, rotation=np.pi / 2)
        assert mesh[-1, 0] == pytest.approx([0, 10])

    def test_relax_holds_the_border(self) -> None:
        mesh = TransposeGrid.generate_mesh(Point(0, 0), 100, 100, 10, 10)
        warped = TransposeGrid.warp_mesh(mesh, 5.0, seed=2.0)
        relaxed = TransposeGrid.relax_mesh(warped, 5)
        np.testing.assert_allclose(relaxed[0], warped[0])
        np.testing.assert_allclose(relaxed[-1], warped[-1])
        np.testing.assert_allclose(relaxed[:, 0], warped[:, 0])
        np.testing.assert_allclose(relaxed[:, -1], warped[:, -1])
        assert not np.allclose(relaxed, warped)

    def test_clip_keeps_inside_pieces(self) -> None:
        shape = square(0, 0, 100)
        grid = TransposeGrid.generate_raw_grid(Point(50, 50), 200, 200, 25, 25, rotation=0.3)
        clipped = TransposeGrid.clip_grid_to_shape(grid, shape, snap_threshold=4.0)
        assert clipped
        for piece in clipped:
            assert shape.contains_point(piece.midpoint())
            for p in (piece.p1, piece.p2):
                assert -4 <= p.x <= 104
                assert -4 <= p.y <= 104


def on_or_inside(shape: Polygon, p: Point, tolerance: float = 0.5) -> bool:
    return shape.contains_point(p) or min(e.distance_to_point(p) for e in shape.to_segments()) <= tolerance


class TestSubdividers:
    def test_agents_start_at_edge_vertices(self) -> None:
        shape = square(0, 0, 300)
        agents = spawn_subdividers(shape, 3, first_id=100, rng=random.Random(1))
        assert len(agents) == 8
        assert [a.id for a in agents] == list(range(100, 108))
        assert all(a.parent_shape == 3 for a in agents)
        assert {a.position.key() for a in agents} == {p.key() for p in shape.points}

        directions = {(round(a.direction.x, 6) + 0.0, round(a.direction.y, 6) + 0.0) for a in agents}
        assert directions == {(0.0, 1.0), (-1.0, 0.0), (0.0, -1.0), (1.0, 0.0)}
        for a in agents:
            assert on_or_inside(shape, a.position.add(a.direction.mul(5)))

    def test_both_vertices_of_an_edge_share_its_normal(self) -> None:
        shape = square(0, 0, 300)
        guide = shape.get_edge_inward_normal(0)
        agents = spawn_subdividers(shape, 0)
        starts = {a.position.key() for a in agents if a.direction.equals(guide)}
        assert starts == {Point(0, 0).key(), Point(300, 0).key()}

    def test_primary_is_on_the_longest_edge(self) -> None:
        shape = Polygon([Point(0, 0), Point(400, 0), Point(400, 100), Point(0, 100)])
        agents = spawn_subdividers(shape, 0)
        primaries = [a for a in agents if a.is_primary]
        assert len(primaries) == 1
        assert primaries[0].position == Point(0, 0)
        assert primaries[0].direction.equals(Point(0, 1))
        assert primaries[0].history == [Point(0, 0)]

    def test_starts_leaving_the_block_are_dropped(self) -> None:
        shape = Polygon([Point(0, 0), Point(400, 0), Point(0, 100)])
        agents = spawn_subdividers(shape, 0)
        assert len(agents) == 2
        assert all(a.position == Point(0, 0) for a in agents)
        for a in agents:
            assert on_or_inside(shape, a.position.add(a.direction.mul(3)))

    def test_small_shapes_get_no_agents(self) -> None:
        assert spawn_subdividers(square(0, 0, 20), 0, min_area=1500) == []

    def test_cross_pass_cuts_perpendicular_to_the_guide(self) -> None:
        shape = square(0, 0, 300)
        path = [Point(0, y) for y in range(0, 300, 24)]
        agents = spawn_cross_subdividers(shape, 2, path, Point(0, 1), first_id=10, rng=random.Random(4))

        assert [a.position for a in agents] == [Point(0, y) for y in (48, 96, 144, 192, 240, 288)]
        assert [a.id for a in agents] == list(range(10, 16))
        assert all(a.direction.equals(Point(1, 0)) for a in agents)
        assert all(a.parent_shape == 2 and not a.is_primary for a in agents)

    def test_cross_pass_needs_a_path(self) -> None:
        assert spawn_cross_subdividers(square(0, 0, 300), 0, [Point(0, 50)], Point(0, 1)) == []
