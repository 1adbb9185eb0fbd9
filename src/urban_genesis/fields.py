"""Vector fields that steer agents."""

from __future__ import annotations

import math

import numpy as np

from .geometry import Point
from .terrain import ElevationMap, SeededNoise


class FlowField:
    """
    A grid of unit vectors sampled from two-frequency noise.

    The noise at each grid node is a 75/25 blend of a large-scale and a
    fine-detail sample, mapped to an angle spanning two full turns.
    """

    def __init__(
        self,
        width: float,
        height: float,
        resolution: float = 20.0,
        origin: Point = Point(0.0, 0.0),
        scale_large: float = 0.05,
        scale_small: float = 0.2,
        seed: float = 0.5,
    ):
        if resolution <= 0:
            raise ValueError(f"resolution must be positive, got {resolution}")
        self.width = width
        self.height = height
        self.resolution = resolution
        self.origin = origin
        self.scale_large = scale_large
        self.scale_small = scale_small
        self.noise = SeededNoise(seed)
        self.cols = math.ceil(width / resolution) + 1
        self.rows = math.ceil(height / resolution) + 1
        self.grid = np.zeros((self.cols, self.rows, 2))
        self.generate(0.0)

    def generate(self, z_offset: float = 0.0) -> None:
        """Regenerate the vector grid for a time / z offset."""
        gx = np.arange(self.cols, dtype=np.float64)[:, None]
        gy = np.arange(self.rows, dtype=np.float64)[None, :]
        n_large = self.noise.noise_grid(gx * self.scale_large, gy * self.scale_large + z_offset)
        n_small = self.noise.noise_grid(gx * self.scale_small, gy * self.scale_small + z_offset * 1.3)
        angle = (n_large * 0.75 + n_small * 0.25) * math.pi * 4
        self.grid = np.stack([np.cos(angle), np.sin(angle)], axis=-1)

    def get_vector_at(self, x: float, y: float) -> Point:
        """
        Bilinearly interpolated unit vector at a world position.

        Returns the zero vector outside the generated grid.
        """
        gx = (x - self.origin.x) / self.resolution
        gy = (y - self.origin.y) / self.resolution
        x0 = math.floor(gx)
        y0 = math.floor(gy)
        x1 = x0 + 1
        y1 = y0 + 1
        if x0 < 0 or x1 >= self.cols or y0 < 0 or y1 >= self.rows:
            return Point(0.0, 0.0)

        tx = gx - x0
        ty = gy - y0
        g = self.grid
        top = g[x0, y0] * (1 - tx) + g[x1, y0] * tx
        bottom = g[x0, y1] * (1 - tx) + g[x1, y1] * tx
        result = top * (1 - ty) + bottom * ty
        return Point(float(result[0]), float(result[1])).normalize()


class TerrainFlowField(FlowField):
    """
    Flow field that bends the noise flow around relief.

    In water the flow climbs back toward land while sliding along the
    contour. On land near the shore it banks away from the water, and
    further inland it follows the downhill direction so agents trace
    valleys. The terrain weight grows with slope and shore proximity.
    """

    # Height band above water level treated as shore
    shore_band = 0.15

    def __init__(
        self,
        elevation: ElevationMap,
        water_level: float,
        width: float,
        height: float,
        resolution: float = 20.0,
        origin: Point = Point(0.0, 0.0),
        scale_large: float = 0.05,
        scale_small: float = 0.2,
        seed: float = 0.5,
    ):
        super().__init__(width, height, resolution, origin, scale_large, scale_small, seed)
        self.elevation = elevation
        self.water_level = water_level

    def get_vector_at(self, x: float, y: float) -> Point:
        base = super().get_vector_at(x, y)

        h = self.elevation.get_height(x, y)
        in_water = h < self.water_level
        eps = 3.0 if in_water else 1.5

        dx = (self.elevation.get_height(x + eps, y) - self.elevation.get_height(x - eps, y)) / (2 * eps)
        dy = (self.elevation.get_height(x, y + eps) - self.elevation.get_height(x, y - eps)) / (2 * eps)
        gradient = Point(dx, dy)
        steepness = gradient.mag()
        if steepness < 1e-4:
            return base

        # Pick the contour direction that agrees with the noise flow
        t1 = Point(-dy, dx).normalize()
        t2 = Point(dy, -dx).normalize()
        tangent = t1 if base.dot(t1) > base.dot(t2) else t2

        if in_water:
            land_seeker = gradient.normalize()
            water_flow = land_seeker.mul(0.3).add(tangent.mul(0.7)).normalize()
            return base.mul(0.1).add(water_flow.mul(0.9)).normalize()

        uphill = gradient.normalize()
        shore_proximity = max(0.0, 1 - (h - self.water_level) / self.shore_band)
        if shore_proximity > 0.05:
            repulsion = shore_proximity * 0.5
            flow = uphill.mul(repulsion).add(tangent.mul(1 - repulsion)).normalize()
        else:
            flow = uphill.mul(-1)

        influence = min(0.95, steepness * 40 + shore_proximity * 0.8)
        return base.mul(1 - influence).add(flow.mul(influence)).normalize()
