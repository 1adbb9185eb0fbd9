"""Terrain substrate - noise, elevation, rivers and shorelines."""

from .culling import cull_segments
from .elevation import ElevationMap, TerrainCategory
from .noise import SeededNoise
from .river import HeightField, River, RiverGenerator
from .shoreline import ShorelineDetector
from .water import WaterRegion, find_water_regions

__all__ = [
    "ElevationMap",
    "HeightField",
    "River",
    "RiverGenerator",
    "SeededNoise",
    "ShorelineDetector",
    "TerrainCategory",
    "WaterRegion",
    "cull_segments",
    "find_water_regions",
]
