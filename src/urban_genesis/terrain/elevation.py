"""Fractal elevation field with river carving."""

from __future__ import annotations

from enum import Enum

import numpy as np

from .noise import SeededNoise
from .river import River


class TerrainCategory(Enum):
    """Coarse land-cover class derived from height."""

    WATER = "water"
    SAND = "sand"
    GRASS = "grass"
    MOUNTAIN = "mountain"
    SNOW = "snow"


class ElevationMap:
    """
    Height as a pure function of world coordinates.

    Fractal Brownian motion over `SeededNoise`: each octave multiplies the
    amplitude by `persistence` and the frequency by `lacunarity`. The sum is
    normalized to [0, 1], then every river subtracts influence * depth.
    """

    def __init__(
        self,
        seed: float = 0.5,
        scale: float = 0.005,
        octaves: int = 4,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
    ):
        if octaves < 1:
            raise ValueError(f"octaves must be at least 1, got {octaves}")
        self.seed = seed
        self.scale = scale
        self.octaves = octaves
        self.persistence = persistence
        self.lacunarity = lacunarity
        self.noise = SeededNoise(seed)
        self.rivers: list[River] = []

    def set_rivers(self, rivers: list[River]) -> None:
        self.rivers = list(rivers)

    def add_river(self, river: River) -> None:
        self.rivers.append(river)

    def get_height(self, x: float, y: float) -> float:
        """Sample the height at (x, y), always within [0, 1]."""
        amplitude = 1.0
        frequency = self.scale
        total = 0.0
        max_amplitude = 0.0
        offset = self.seed * 10000

        for _ in range(self.octaves):
            total += self.noise.noise((x + offset) * frequency, (y + offset) * frequency) * amplitude
            max_amplitude += amplitude
            amplitude *= self.persistence
            frequency *= self.lacunarity

        height = (total / max_amplitude + 1) / 2
        for river in self.rivers:
            influence = river.get_influence(x, y)
            if influence > 0:
                height -= influence * river.depth

        return max(0.0, min(1.0, height))

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """
        Vectorized `get_height` over coordinate arrays.

        Args:
            xs: x coordinates
            ys: y coordinates, broadcastable against xs

        Returns:
            Heights with the broadcast shape
        """
        xs, ys = np.broadcast_arrays(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))
        amplitude = 1.0
        frequency = self.scale
        total = np.zeros(xs.shape)
        max_amplitude = 0.0
        offset = self.seed * 10000

        for _ in range(self.octaves):
            total += self.noise.noise_grid((xs + offset) * frequency, (ys + offset) * frequency) * amplitude
            max_amplitude += amplitude
            amplitude *= self.persistence
            frequency *= self.lacunarity

        heights = (total / max_amplitude + 1) / 2
        for river in self.rivers:
            heights -= river.influence_grid(xs, ys) * river.depth

        return np.clip(heights, 0.0, 1.0)

    @staticmethod
    def get_category(height: float, water_level: float = 0.3) -> TerrainCategory:
        if height < water_level:
            return TerrainCategory.WATER
        if height < water_level + 0.05:
            return TerrainCategory.SAND
        if height < 0.7:
            return TerrainCategory.GRASS
        if height < 0.85:
            return TerrainCategory.MOUNTAIN
        return TerrainCategory.SNOW

    def is_water(self, x: float, y: float, water_level: float) -> bool:
        return self.get_height(x, y) < water_level
