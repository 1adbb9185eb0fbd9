"""Rivers and the downhill walk that traces them."""

from __future__ import annotations

import logging
import math
from typing import Protocol

import numpy as np
from noise import snoise2

from ..geometry import Point, Polyline

logger = logging.getLogger(__name__)


class HeightField(Protocol):
    """Anything that can be sampled for a height in [0, 1]."""

    def get_height(self, x: float, y: float) -> float: ...


class River:
    """
    A river spine with a carved valley profile.

    Influence is 1.0 on the spine and falls off along a cosine curve to 0
    at `width` units away.
    """

    def __init__(self, points: list[Point], width: float = 15.0, depth: float = 0.3):
        self.points = list(points)
        self.width = width
        self.depth = depth
        self.path = Polyline(self.points)

        coords = np.array([(p.x, p.y) for p in self.points], dtype=np.float64).reshape(-1, 2)
        if len(coords) < 2:
            coords = np.vstack([coords, coords])
        self._starts = coords[:-1]
        self._deltas = coords[1:] - coords[:-1]
        self._len_sq = np.maximum((self._deltas**2).sum(axis=1), 1e-12)
        self._bbox = (
            coords[:, 0].min() - width,
            coords[:, 1].min() - width,
            coords[:, 0].max() + width,
            coords[:, 1].max() + width,
        )

    def distance_to_spine(self, x: float, y: float) -> float:
        rel = np.array([x, y]) - self._starts
        t = np.clip((rel * self._deltas).sum(axis=1) / self._len_sq, 0.0, 1.0)
        offset = rel - self._deltas * t[:, None]
        return float(np.sqrt((offset**2).sum(axis=1)).min())

    def get_influence(self, x: float, y: float) -> float:
        """Depth modifier in [0, 1] for a world position."""
        min_x, min_y, max_x, max_y = self._bbox
        if x < min_x or x > max_x or y < min_y or y > max_y:
            return 0.0
        d = self.distance_to_spine(x, y)
        if d > self.width:
            return 0.0
        return math.cos(d / self.width * (math.pi / 2))

    def influence_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Vectorized `get_influence` over coordinate arrays."""
        xs, ys = np.broadcast_arrays(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))
        min_dist = np.full(xs.shape, np.inf)
        for (sx, sy), (dx, dy), len_sq in zip(self._starts, self._deltas, self._len_sq):
            rx = xs - sx
            ry = ys - sy
            t = np.clip((rx * dx + ry * dy) / len_sq, 0.0, 1.0)
            ox = rx - dx * t
            oy = ry - dy * t
            np.minimum(min_dist, np.sqrt(ox * ox + oy * oy), out=min_dist)
        influence = np.cos(min_dist / self.width * (math.pi / 2))
        return np.where(min_dist > self.width, 0.0, influence)


class RiverGenerator:
    """
    Traces rivers as a steepest-descent random walk.

    Each step blends the downhill gradient, a meander angle taken from
    simplex noise and an optional directional bias, then smooths the
    heading with momentum so bends stay gradual.
    """

    meander_scale = 0.012
    meander_strength = 0.4
    gravity_strength = 0.5
    bias_strength = 0.15
    momentum = 0.92
    # Stop once this far below the water level
    water_buffer = 0.03
    # Minimum number of points for a usable river
    min_points = 15
    # Points younger than this are ignored by the self-intersection guard
    self_intersection_lag = 20
    gradient_epsilon = 2.0

    def __init__(self, bounds: tuple[float, float, float, float] = (-400.0, -400.0, 3400.0, 3400.0), seed: float = 0.0):
        """
        Args:
            bounds: Safety box (min_x, min_y, max_x, max_y) the walk may not leave
            seed: Offset into the meander noise field
        """
        self.bounds = bounds
        self.seed = seed

    def generate(
        self,
        elevation: HeightField,
        water_level: float,
        start: Point,
        step_size: float = 3.0,
        max_steps: int = 800,
        bias: Point = Point(0.0, 0.0),
    ) -> list[Point] | None:
        """
        Walk downhill from start until the water is reached.

        Returns:
            The river spine, or None if the walk produced fewer than
            `min_points` points before terminating
        """
        points = [start]
        current = start
        velocity = Point(0.0, 0.0)
        eps = self.gradient_epsilon
        guard_dist_sq = (step_size * 2.5) ** 2
        min_x, min_y, max_x, max_y = self.bounds

        for _ in range(max_steps):
            h = elevation.get_height(current.x, current.y)
            if h < water_level - self.water_buffer:
                break

            gx = elevation.get_height(current.x + eps, current.y) - elevation.get_height(current.x - eps, current.y)
            gy = elevation.get_height(current.x, current.y + eps) - elevation.get_height(current.x, current.y - eps)
            downhill = Point(-gx, -gy).normalize()

            n = snoise2(
                current.x * self.meander_scale + self.seed,
                current.y * self.meander_scale + self.seed,
            )
            meander = Point.from_angle(n * math.pi * 8)

            steer = (
                downhill.mul(self.gravity_strength)
                .add(meander.mul(self.meander_strength))
                .add(bias.mul(self.bias_strength))
                .normalize()
            )
            velocity = velocity.mul(self.momentum).add(steer.mul(1 - self.momentum)).normalize()
            if velocity.mag() == 0:
                break

            nxt = current.add(velocity.mul(step_size))

            looped = any(
                p.dist_sq(nxt) < guard_dist_sq
                for p in points[: len(points) - self.self_intersection_lag]
            )
            if looped:
                break
            if nxt.x < min_x or nxt.x > max_x or nxt.y < min_y or nxt.y > max_y:
                break

            points.append(nxt)
            current = nxt

        if len(points) < self.min_points:
            logger.debug("Discarded river from %s with %d points", start, len(points))
            return None
        return points
