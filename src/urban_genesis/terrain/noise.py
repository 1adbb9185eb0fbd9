"""Seeded gradient noise with a reproducible permutation table."""

from __future__ import annotations

import math

import numpy as np

# Linear congruential generator driving the shuffle
LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6 - 15) + 10)


def _lerp(t: float, a: float, b: float) -> float:
    return a + t * (b - a)


def _grad(hash_value: int, x: float, y: float) -> float:
    h = hash_value & 15
    u = x if h < 8 else y
    if h < 4:
        v = y
    elif h == 12 or h == 14:
        v = x
    else:
        v = 0.0
    return (u if (h & 1) == 0 else -u) + (v if (h & 2) == 0 else -v)


class SeededNoise:
    """
    Classic 2D gradient noise.

    The permutation table comes from a Fisher-Yates shuffle driven by a
    linear congruential generator seeded from `seed`, so identical seeds
    always give identical fields. Output is roughly in [-1, 1].
    """

    def __init__(self, seed: float = 0.5):
        self.seed = seed
        permutation = list(range(256))

        state = math.floor(seed * 10000)
        for i in range(255, 0, -1):
            state = (state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
            j = math.floor(state / LCG_MODULUS * (i + 1))
            permutation[i], permutation[j] = permutation[j], permutation[i]

        self._p: list[int] = permutation + permutation
        self.perm = np.array(self._p, dtype=np.int64)

    def noise(self, x: float, y: float) -> float:
        """Sample the field at a single point."""
        fx = math.floor(x)
        fy = math.floor(y)
        xi = fx & 255
        yi = fy & 255
        x -= fx
        y -= fy
        u = _fade(x)
        v = _fade(y)

        p = self._p
        a = p[xi] + yi
        b = p[xi + 1] + yi
        aa, ab = p[a], p[a + 1]
        ba, bb = p[b], p[b + 1]

        return _lerp(
            v,
            _lerp(u, _grad(p[aa], x, y), _grad(p[ba], x - 1, y)),
            _lerp(u, _grad(p[ab], x, y - 1), _grad(p[bb], x - 1, y - 1)),
        )

    def noise_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """
        Vectorized `noise` over arrays of coordinates.

        Args:
            xs: x coordinates (any shape)
            ys: y coordinates (broadcastable against xs)

        Returns:
            Array of noise values with the broadcast shape
        """
        xs, ys = np.broadcast_arrays(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))
        fx = np.floor(xs)
        fy = np.floor(ys)
        xi = fx.astype(np.int64) & 255
        yi = fy.astype(np.int64) & 255
        x = xs - fx
        y = ys - fy
        u = x * x * x * (x * (x * 6 - 15) + 10)
        v = y * y * y * (y * (y * 6 - 15) + 10)

        p = self.perm
        a = p[xi] + yi
        b = p[xi + 1] + yi
        aa, ab = p[a], p[a + 1]
        ba, bb = p[b], p[b + 1]

        g1 = _grad_array(p[aa], x, y)
        g2 = _grad_array(p[ba], x - 1, y)
        g3 = _grad_array(p[ab], x, y - 1)
        g4 = _grad_array(p[bb], x - 1, y - 1)

        top = g1 + u * (g2 - g1)
        bottom = g3 + u * (g4 - g3)
        return top + v * (bottom - top)


def _grad_array(hash_values: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    h = hash_values & 15
    u = np.where(h < 8, x, y)
    v = np.where(h < 4, y, np.where((h == 12) | (h == 14), x, 0.0))
    return np.where((h & 1) == 0, u, -u) + np.where((h & 2) == 0, v, -v)
