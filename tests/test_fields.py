"""Tests for the noise flow field and the terrain-aware field."""

import pytest

from urban_genesis.fields import FlowField, TerrainFlowField
from urban_genesis.geometry import Point

from .conftest import FlatElevation, RampElevation


class TestFlowField:
    def test_vectors_are_unit_length(self) -> None:
        field = FlowField(400, 300, resolution=20, seed=0.3)
        for x, y in [(15.0, 15.0), (123.0, 77.0), (350.5, 250.25)]:
            assert field.get_vector_at(x, y).mag() == pytest.approx(1.0)

    def test_zero_outside_grid(self) -> None:
        field = FlowField(200, 200, resolution=20)
        assert field.get_vector_at(-10, 50) == Point(0.0, 0.0)
        assert field.get_vector_at(50, -10) == Point(0.0, 0.0)
        assert field.get_vector_at(5000, 50) == Point(0.0, 0.0)

    def test_deterministic(self) -> None:
        a = FlowField(200, 200, seed=0.77)
        b = FlowField(200, 200, seed=0.77)
        assert a.get_vector_at(91.0, 47.0) == b.get_vector_at(91.0, 47.0)

    def test_invalid_resolution(self) -> None:
        with pytest.raises(ValueError):
            FlowField(100, 100, resolution=0)


class TestTerrainFlowField:
    def test_flat_terrain_uses_noise_flow(self) -> None:
        plain = FlowField(200, 200, seed=0.4)
        terrain = TerrainFlowField(FlatElevation(0.8), 0.42, 200, 200, seed=0.4)
        assert terrain.get_vector_at(60.0, 60.0) == plain.get_vector_at(60.0, 60.0)

    def test_water_flow_heads_for_land(self, ramp: RampElevation) -> None:
        # Land starts at x = 500 on the ramp
        terrain = TerrainFlowField(ramp, 0.5, 800, 200, seed=0.1)
        for y in (30.0, 90.0, 150.0):
            assert terrain.get_vector_at(300.0, y).dot(Point(1, 0)) > 0
