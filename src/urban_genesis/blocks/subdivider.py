"""Agent-based block subdivision."""

from __future__ import annotations

import random

from ..agents import Agent, AgentKind
from ..geometry import Point, Polygon

# Distance of the look-ahead point used to check a start heading
PROBE_DISTANCE = 3.0
BOUNDARY_TOLERANCE = 0.5


def _boundary_distance(shape: Polygon, p: Point) -> float:
    return min(edge.distance_to_point(p) for edge in shape.to_segments())


def _subdivider(
    start: Point,
    guide: Point,
    shape_index: int,
    agent_id: int,
    trail_distance: float,
    wander_intensity: float,
    rng: random.Random,
    is_primary: bool = False,
) -> Agent:
    return Agent(
        position=start,
        target=start.add(guide.mul(10000)),
        kind=AgentKind.HUB,
        id=agent_id,
        speed=1.5,
        max_life=1500,
        trail_distance=trail_distance,
        turn_speed=0.0,
        wander_intensity=wander_intensity,
        initial_direction=guide,
        is_primary=is_primary,
        parent_shape=shape_index,
        rng_seed=rng.getrandbits(32),
    )


def spawn_subdividers(
    shape: Polygon,
    shape_index: int,
    min_area: float = 1500.0,
    min_edge_length: float = 40.0,
    trail_distance: float = 6.0,
    wander_intensity: float = 0.0,
    first_id: int = 0,
    rng: random.Random | None = None,
) -> list[Agent]:
    """
    Seed agents that partition a block from its boundary.

    For each boundary edge at least `min_edge_length` long, one agent
    starts at each of the edge's two vertices heading along the edge's
    inward normal, so both trails share one guide direction. A start whose
    heading leaves the block straight away is dropped. Where the heading
    runs along a neighbouring edge the agent traces the boundary; its
    recorded path then feeds `spawn_cross_subdividers`.

    The first agent of the longest edge is the primary and records its path.

    Returns:
        The new agents (empty when the shape is below `min_area`)
    """
    if shape.area() < min_area:
        return []
    rng = rng or random.Random(shape_index)

    agents: list[Agent] = []
    next_id = first_id

    edges = sorted(enumerate(shape.to_segments()), key=lambda item: item[1].length(), reverse=True)
    for edge_index, edge in edges:
        if edge.length() < min_edge_length:
            continue
        guide = shape.get_edge_inward_normal(edge_index)
        for start in (edge.p1, edge.p2):
            probe = start.add(guide.mul(PROBE_DISTANCE))
            if not shape.contains_point(probe) and _boundary_distance(shape, probe) > BOUNDARY_TOLERANCE:
                continue
            agents.append(
                _subdivider(
                    start, guide, shape_index, next_id, trail_distance, wander_intensity, rng, is_primary=not agents
                )
            )
            next_id += 1

    return agents


def spawn_cross_subdividers(
    shape: Polygon,
    shape_index: int,
    guide_path: list[Point],
    guide: Point,
    trail_distance: float = 6.0,
    wander_intensity: float = 0.0,
    first_id: int = 0,
    rng: random.Random | None = None,
) -> list[Agent]:
    """
    Second subdivision pass along the primary agent's recorded path.

    From every second point of `guide_path`, agents head both ways
    perpendicular to `guide`; only headings that enter the block's
    interior are kept, so the cuts run parallel across the block.
    """
    if len(guide_path) < 2:
        return []
    rng = rng or random.Random(shape_index)
    perpendiculars = (Point(-guide.y, guide.x), Point(guide.y, -guide.x))

    agents: list[Agent] = []
    next_id = first_id
    for start in guide_path[::2]:
        for direction in perpendiculars:
            probe = start.add(direction.mul(PROBE_DISTANCE))
            if not shape.contains_point(probe) or _boundary_distance(shape, probe) <= BOUNDARY_TOLERANCE:
                continue
            agents.append(_subdivider(start, direction, shape_index, next_id, trail_distance, wander_intensity, rng))
            next_id += 1
    return agents
