"""Procedural city generation: terrain, agent-grown roads, blocks and parcels."""

from .config import Config
from .simulation import GenerationState, Stage, World, WorldStats

__all__ = ["Config", "GenerationState", "Stage", "World", "WorldStats"]
