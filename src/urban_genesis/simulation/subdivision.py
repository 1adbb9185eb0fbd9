"""Subdivision stage: cut mid-sized blocks into parcels."""

from __future__ import annotations

import logging
import math
from collections import deque

from ..agents import Agent
from ..blocks import TransposeGrid, spawn_cross_subdividers, spawn_subdividers
from ..config import SubdivisionMode
from ..geometry import Point, Polygon, Polyline, Segment
from ..network import ArterialDetector, cleanup_network
from ..terrain import cull_segments
from . import growth
from .state import EventType, GenerationState
from .structure import build_shape_grid

logger = logging.getLogger(__name__)

# Aspect ratios between row and column spacing
GRID_RATIOS = (1.0, 1.0, 1.0, 1.25, 1.5, 2.0, 0.5, 0.75, 0.8)
LOCAL_ARTERIAL_ANGLE = 45.0
MIN_GRID_SPACING = 12.0


def prepare(state: GenerationState) -> int:
    """Queue every shape whose area is inside the subdivision range."""
    s = state.config.structure
    state.agents = []
    state.processed_shapes = set()
    state.subdivision_queue = deque(
        i for i, shape in enumerate(state.shapes) if s.min_subdivision_area <= shape.area() <= s.max_subdivision_area
    )
    logger.debug("Queued %d of %d shapes for subdivision", len(state.subdivision_queue), len(state.shapes))
    return len(state.subdivision_queue)


def _mid_vertex(path: Polyline) -> Point:
    """The path vertex closest to its halfway point by arc length."""
    half = path.length() / 2
    accumulated = 0.0
    for seg in path.to_segments():
        d = seg.length()
        if accumulated + d >= half:
            return seg.p1 if abs(half - accumulated) < abs(half - (accumulated + d)) else seg.p2
        accumulated += d
    return path.points[0]


def grid_rotation(shape: Polygon) -> float:
    """
    Orientation for a block's grid.

    The grid follows the inward normal at the middle of the block's longest
    arterial, or the block's longest edge when it has no arterial.
    """
    arterials = ArterialDetector.detect_from_shapes([shape], LOCAL_ARTERIAL_ANGLE)
    guide = None
    if arterials:
        mid = _mid_vertex(max(arterials, key=lambda p: p.length()))
        index = next((i for i, p in enumerate(shape.points) if p.equals(mid)), None)
        if index is not None:
            guide = shape.get_inward_normal(index)
    if guide is None or guide.mag() == 0:
        guide = shape.guide_vector()
    return math.atan2(guide.y, guide.x)


def subdivide_shape(state: GenerationState, index: int) -> list[Segment]:
    """
    Lay a warped transpose grid over one block and keep what falls inside.

    Spacing and aspect ratio are drawn per block so neighbouring blocks
    read differently.

    Returns:
        The clipped segments, already appended to the road list
    """
    shape = state.shapes[index]
    s = state.config.structure
    rng = state.rng

    base_scale = 3.5 + rng.random() * 5
    ratio = rng.choice(GRID_RATIOS)
    base = state.config.growth.ant_trail_distance * base_scale / s.subdivision_density
    col_spacing = max(MIN_GRID_SPACING, base)
    row_spacing = max(MIN_GRID_SPACING, base * ratio)

    bounds = shape.bounds()
    raw = TransposeGrid.generate_raw_grid(
        bounds.center,
        bounds.width * 1.5,
        bounds.height * 1.5,
        col_spacing,
        row_spacing,
        grid_rotation(shape),
        s.subdivide_warp,
        s.subdivide_relax,
        state.flow_field,
    )
    snap = s.subdivide_snap if s.enable_sliver_reduction else 0.0
    clipped = TransposeGrid.clip_grid_to_shape(raw, shape, snap)
    state.set_roads(state.roads + clipped)
    return clipped


def _register(state: GenerationState, agents: list[Agent]) -> list[Agent]:
    for agent in agents:
        agent.id = state.next_id()
        agent.spawn_tick = state.tick
        agent.max_turn = state.config.growth.ant_max_turn
    state.agents.extend(agents)
    return agents


def _subdivider_trail(state: GenerationState) -> float:
    return max(state.config.growth.ant_trail_distance, state.config.structure.ant_subdivide_snap * 1.5)


def spawn_agents(state: GenerationState, index: int) -> list[Agent]:
    """Seed subdivider agents for one block and add them to the live agents."""
    s = state.config.structure
    agents = spawn_subdividers(
        state.shapes[index],
        index,
        min_area=s.min_subdivision_area,
        trail_distance=_subdivider_trail(state),
        wander_intensity=s.ant_subdivide_wander,
        rng=state.rng,
    )
    return _register(state, agents)


def spawn_cross_agents(state: GenerationState, index: int, first_pass: list[Agent]) -> list[Agent]:
    """Seed the perpendicular pass from the path the primary agent recorded."""
    primary = next((a for a in first_pass if a.is_primary), None)
    if primary is None or primary.initial_direction is None:
        return []
    agents = spawn_cross_subdividers(
        state.shapes[index],
        index,
        primary.history,
        primary.initial_direction,
        trail_distance=_subdivider_trail(state),
        wander_intensity=state.config.structure.ant_subdivide_wander,
        rng=state.rng,
    )
    return _register(state, agents)


def step(state: GenerationState) -> bool:
    """
    Subdivide the next queued block.

    Returns:
        False once the queue is empty
    """
    if not state.subdivision_queue:
        return False
    index = state.subdivision_queue.popleft()
    if state.config.structure.subdivision_mode is SubdivisionMode.GRID:
        subdivide_shape(state, index)
    else:
        first_pass = spawn_agents(state, index)
        growth.run_agents(state, state.config.growth.max_ticks_per_wave)
        if spawn_cross_agents(state, index, first_pass):
            growth.run_agents(state, state.config.growth.max_ticks_per_wave)
    state.processed_shapes.add(index)
    return True


def finalize(state: GenerationState) -> None:
    """Cull, clean up the network and reindex shapes after subdivision."""
    s = state.config.structure
    if state.elevation is not None:
        state.set_roads(cull_segments(state.roads, state.elevation, state.config.terrain.water_level))
    snap = s.subdivide_snap if s.subdivision_mode is SubdivisionMode.GRID else s.ant_subdivide_snap
    state.set_roads(cleanup_network(state.roads, snap))
    build_shape_grid(state)
    state.add_event(
        EventType.SUBDIVISION_COMPLETE,
        Point(state.width / 2, state.height / 2),
        message=f"Subdivided {len(state.processed_shapes)} blocks",
    )
    logger.info("Subdivision complete: %d blocks, %d segments", len(state.processed_shapes), len(state.roads))


def resolve(state: GenerationState) -> None:
    """Subdivide every queued block, then finalize."""
    while step(state):
        pass
    finalize(state)
