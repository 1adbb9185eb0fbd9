"""Tests for noise, elevation, rivers, shorelines and water regions."""

import numpy as np
import pytest

from urban_genesis.geometry import Point, Segment
from urban_genesis.terrain import (
    ElevationMap,
    River,
    RiverGenerator,
    SeededNoise,
    ShorelineDetector,
    TerrainCategory,
    cull_segments,
    find_water_regions,
)

from .conftest import FlatElevation, RampElevation, StripElevation


class DescendingElevation(ElevationMap):
    def get_height(self, x: float, y: float) -> float:
        return min(1.0, max(0.0, 1 - x / 1000))


class TestSeededNoise:
    def test_same_seed_same_field(self) -> None:
        a = SeededNoise(0.42)
        b = SeededNoise(0.42)
        for x, y in [(0.3, 0.7), (12.5, -3.25), (100.1, 7.9)]:
            assert a.noise(x, y) == b.noise(x, y)

    def test_different_seeds_differ(self) -> None:
        a = SeededNoise(0.1)
        b = SeededNoise(0.9)
        samples = [(x * 0.37, x * 0.61) for x in range(1, 20)]
        assert any(a.noise(x, y) != b.noise(x, y) for x, y in samples)

    def test_zero_at_lattice_points(self) -> None:
        n = SeededNoise(0.5)
        assert n.noise(3, 7) == 0
        assert n.noise(-2, 11) == 0

    def test_range(self) -> None:
        n = SeededNoise(0.5)
        values = [n.noise(x * 0.13, y * 0.29) for x in range(30) for y in range(30)]
        assert all(-1.5 <= v <= 1.5 for v in values)

    def test_grid_matches_scalar(self) -> None:
        n = SeededNoise(0.3)
        xs = np.array([0.2, 1.7, 5.5])[:, None]
        ys = np.array([0.9, 3.3])[None, :]
        grid = n.noise_grid(xs, ys)
        for i in range(3):
            for j in range(2):
                assert grid[i, j] == pytest.approx(n.noise(float(xs[i, 0]), float(ys[0, j])))


class TestElevationMap:
    def test_heights_are_clamped(self) -> None:
        elevation = ElevationMap(seed=0.7, scale=0.01)
        heights = [elevation.get_height(x * 37.0, y * 23.0) for x in range(20) for y in range(20)]
        assert all(0.0 <= h <= 1.0 for h in heights)

    def test_deterministic(self) -> None:
        a = ElevationMap(seed=0.25)
        b = ElevationMap(seed=0.25)
        assert a.get_height(123.4, 567.8) == b.get_height(123.4, 567.8)

    def test_nearby_points_have_similar_heights(self) -> None:
        elevation = ElevationMap(seed=0.42, scale=0.005)
        for i in range(200):
            x, y = i * 13.7, i * 7.3
            h = elevation.get_height(x, y)
            assert abs(elevation.get_height(x + 0.5, y) - h) < 0.05
            assert abs(elevation.get_height(x, y + 0.5) - h) < 0.05

    def test_sample_grid_matches_get_height(self) -> None:
        elevation = ElevationMap(seed=0.6, scale=0.004)
        xs = np.array([10.0, 250.0, 780.0])[:, None]
        ys = np.array([40.0, 600.0])[None, :]
        grid = elevation.sample_grid(xs, ys)
        assert grid[2, 1] == pytest.approx(elevation.get_height(780.0, 600.0))

    def test_river_lowers_terrain(self) -> None:
        elevation = ElevationMap(seed=0.6, scale=0.004)
        before = elevation.get_height(100.0, 50.0)
        elevation.add_river(River([Point(0, 50), Point(200, 50)], width=30, depth=0.3))
        after = elevation.get_height(100.0, 50.0)
        assert after == pytest.approx(max(0.0, before - 0.3))

    def test_invalid_octaves(self) -> None:
        with pytest.raises(ValueError):
            ElevationMap(octaves=0)

    def test_categories(self) -> None:
        assert ElevationMap.get_category(0.1, 0.3) is TerrainCategory.WATER
        assert ElevationMap.get_category(0.32, 0.3) is TerrainCategory.SAND
        assert ElevationMap.get_category(0.5, 0.3) is TerrainCategory.GRASS
        assert ElevationMap.get_category(0.9, 0.3) is TerrainCategory.SNOW


class TestRiver:
    def test_influence_profile(self) -> None:
        river = River([Point(0, 0), Point(100, 0)], width=20)
        assert river.get_influence(50, 0) == pytest.approx(1.0)
        assert 0 < river.get_influence(50, 10) < 1
        assert river.get_influence(50, 25) == 0

    def test_influence_grid_matches_scalar(self) -> None:
        river = River([Point(0, 0), Point(100, 0), Point(100, 100)], width=20)
        xs = np.array([50.0, 95.0, 300.0])
        ys = np.array([5.0, 50.0, 0.0])
        grid = river.influence_grid(xs, ys)
        for i in range(3):
            assert grid[i] == pytest.approx(river.get_influence(xs[i], ys[i]))

    def test_generator_walks_downhill_into_water(self) -> None:
        # Height falls with x; water begins at x = 500
        downhill = DescendingElevation()

        generator = RiverGenerator(seed=3.0)
        points = generator.generate(downhill, 0.5, Point(100, 500), step_size=5, max_steps=800, bias=Point(1, 0))

        assert points is not None
        assert len(points) >= RiverGenerator.min_points
        assert points[-1].x > 500
        assert all(b.x > a.x for a, b in zip(points, points[1:]))

    def test_generator_discards_short_walks(self) -> None:
        generator = RiverGenerator()
        assert generator.generate(FlatElevation(0.1), 0.5, Point(100, 100)) is None


class TestShorelineDetector:
    def test_straight_shoreline(self) -> None:
        # Water level reached at x = 410
        segments = ShorelineDetector.detect(RampElevation(1000.0), 0.41, 800, 200, resolution=20)
        assert segments
        for s in segments:
            assert s.p1.x == pytest.approx(410)
            assert s.p2.x == pytest.approx(410)
        total = sum(s.length() for s in segments)
        assert total == pytest.approx(200)

    def test_no_shoreline_on_dry_land(self) -> None:
        assert ShorelineDetector.detect(FlatElevation(0.8), 0.42, 300, 300) == []

    def test_invalid_resolution(self) -> None:
        with pytest.raises(ValueError):
            ShorelineDetector.detect(FlatElevation(0.8), 0.42, 100, 100, resolution=0)


class TestWaterRegions:
    def test_strip_is_one_region(self) -> None:
        elevation = StripElevation(200, 400)
        regions = find_water_regions(elevation, 0.42, 800, 400, cell_size=40, min_area=1000)
        assert len(regions) == 1
        region = regions[0]
        assert 200 <= region.center.x <= 400
        assert region.area == region.cell_count * 1600

    def test_small_regions_are_ignored(self) -> None:
        elevation = StripElevation(200, 230)
        assert find_water_regions(elevation, 0.42, 800, 80, cell_size=40, min_area=100000) == []


class TestCulling:
    def test_keeps_land_and_bridges(self) -> None:
        elevation = StripElevation(100, 200)
        land = Segment(Point(0, 0), Point(50, 0))
        wet = Segment(Point(50, 0), Point(150, 0))
        bridge = Segment(Point(90, 10), Point(210, 10), is_bridge=True)
        kept = cull_segments([land, wet, bridge], elevation, 0.42)
        assert kept == [land, bridge]
