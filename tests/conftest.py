"""Shared fixtures: synthetic height fields and small configurations."""

import numpy as np
import pytest

from urban_genesis.config import Config
from urban_genesis.geometry import Point, Polygon, Segment
from urban_genesis.simulation import GenerationState
from urban_genesis.terrain import ElevationMap


class FlatElevation(ElevationMap):
    """Constant height everywhere."""

    def __init__(self, height: float = 0.8):
        super().__init__()
        self.height = height

    def get_height(self, x: float, y: float) -> float:
        return self.height

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        xs, ys = np.broadcast_arrays(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))
        return np.full(xs.shape, self.height)


class RampElevation(ElevationMap):
    """Height rising linearly with x: 0 at x=0, 1 at x=extent."""

    def __init__(self, extent: float = 1000.0):
        super().__init__()
        self.extent = extent

    def get_height(self, x: float, y: float) -> float:
        return min(1.0, max(0.0, x / self.extent))

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        xs, ys = np.broadcast_arrays(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))
        return np.clip(xs / self.extent, 0.0, 1.0)


class StripElevation(ElevationMap):
    """Land everywhere except a vertical water strip between x0 and x1."""

    def __init__(self, x0: float, x1: float, land: float = 0.8, water: float = 0.2):
        super().__init__()
        self.x0 = x0
        self.x1 = x1
        self.land = land
        self.water = water

    def get_height(self, x: float, y: float) -> float:
        return self.water if self.x0 <= x <= self.x1 else self.land

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        xs, ys = np.broadcast_arrays(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))
        return np.where((xs >= self.x0) & (xs <= self.x1), self.water, self.land)


def square(x: float, y: float, size: float) -> Polygon:
    """Solid axis-aligned square with its top-left corner at (x, y)."""
    return Polygon([Point(x, y), Point(x + size, y), Point(x + size, y + size), Point(x, y + size)])


def lattice(n: int, size: float) -> list[Segment]:
    """Road segments of an n x n grid of square blocks."""
    segments = []
    for i in range(n + 1):
        for j in range(n):
            segments.append(Segment(Point(i * size, j * size), Point(i * size, (j + 1) * size)))
            segments.append(Segment(Point(j * size, i * size), Point((j + 1) * size, i * size)))
    return segments


@pytest.fixture
def flat_land() -> FlatElevation:
    return FlatElevation(0.8)


@pytest.fixture
def ramp() -> RampElevation:
    return RampElevation(1000.0)


def make_small_config() -> Config:
    """A world small enough to generate in a few seconds."""
    config = Config.default()
    config.world.width = 800
    config.world.height = 600
    config.world.seed = 1234
    config.terrain.river_count = 1
    config.growth.hub_count = 4
    config.growth.ant_waves = 2
    config.growth.ant_max_life = 250
    config.growth.max_ticks_per_wave = 1500
    config.traffic.max_trips = 10
    return config


@pytest.fixture
def small_config() -> Config:
    return make_small_config()


@pytest.fixture
def flat_state(small_config: Config) -> GenerationState:
    """Generation state over dry flat land, with no landscape stage run."""
    state = GenerationState(small_config, seed=7)
    state.elevation = FlatElevation(0.8)
    return state
