"""Landscape stage: elevation, rivers, shorelines and the terrain flow field."""

from __future__ import annotations

import logging

from ..fields import TerrainFlowField
from ..geometry import Point
from ..terrain import ElevationMap, River, RiverGenerator, ShorelineDetector, find_water_regions
from .state import GenerationState, WaterBodyInfo

logger = logging.getLogger(__name__)

# (edge name, downhill bias) for river sources
RIVER_EDGES = (
    ("top", Point(0.0, 1.0)),
    ("bottom", Point(0.0, -1.0)),
    ("left", Point(1.0, 0.0)),
    ("right", Point(-1.0, 0.0)),
)
RIVER_ATTEMPTS = 20
RIVER_EDGE_INSET = 10.0
# Sources must sit this far above the water level
RIVER_SOURCE_HEIGHT = 0.1
RIVER_MARGIN = 400.0


def _river_start(state: GenerationState, edge: str) -> Point:
    rng = state.rng
    w, h = state.width, state.height
    if edge == "top":
        return Point(rng.random() * w, RIVER_EDGE_INSET)
    if edge == "bottom":
        return Point(rng.random() * w, h - RIVER_EDGE_INSET)
    if edge == "left":
        return Point(RIVER_EDGE_INSET, rng.random() * h)
    return Point(w - RIVER_EDGE_INSET, rng.random() * h)


def generate_rivers(state: GenerationState) -> list[River]:
    """
    Trace up to `river_count` rivers inward from random world edges.

    Each river keeps the longest of several downhill walks. Rivers carve
    the elevation as they are added, so later walks see earlier valleys.
    """
    terrain = state.config.terrain
    water_level = terrain.water_level
    generator = RiverGenerator(
        bounds=(-RIVER_MARGIN, -RIVER_MARGIN, state.width + RIVER_MARGIN, state.height + RIVER_MARGIN),
        seed=state.rng.random() * 1000,
    )

    rivers = []
    for _ in range(terrain.river_count):
        edge, bias = state.rng.choice(RIVER_EDGES)
        best: list[Point] | None = None
        for _ in range(RIVER_ATTEMPTS):
            start = _river_start(state, edge)
            if state.elevation.get_height(start.x, start.y) <= water_level + RIVER_SOURCE_HEIGHT:
                continue
            points = generator.generate(
                state.elevation, water_level, start, step_size=8.0, max_steps=1000, bias=bias.mul(0.5)
            )
            if points is not None and (best is None or len(points) > len(best)):
                best = points

        if best is None:
            logger.debug("No river source found on the %s edge", edge)
            continue
        river = River(best, width=40 + state.rng.random() * 40, depth=0.25 + state.rng.random() * 0.15)
        state.elevation.add_river(river)
        rivers.append(river)
    return rivers


def run(state: GenerationState) -> None:
    """Build the terrain every later stage samples."""
    terrain = state.config.terrain
    state.elevation = ElevationMap(seed=state.rng.random(), scale=terrain.terrain_scale)
    state.rivers = generate_rivers(state)

    state.shorelines = ShorelineDetector.detect(
        state.elevation,
        terrain.water_level,
        state.width,
        state.height,
        resolution=terrain.shoreline_resolution,
    )
    state.flow_field = TerrainFlowField(
        state.elevation,
        terrain.water_level,
        state.width,
        state.height,
        resolution=terrain.flow_field_resolution,
        scale_large=terrain.flow_field_scale_large,
        scale_small=terrain.flow_field_scale_small,
        seed=state.rng.random(),
    )

    regions = find_water_regions(
        state.elevation,
        terrain.water_level,
        state.width,
        state.height,
        min_area=terrain.min_water_body_area,
    )
    state.geography.water_bodies = [
        WaterBodyInfo(id=state.next_id(), position=region.center, area=region.area) for region in regions
    ]

    logger.info(
        "Landscape ready: %d rivers, %d shoreline segments, %d water bodies",
        len(state.rivers),
        len(state.shorelines),
        len(state.geography.water_bodies),
    )
