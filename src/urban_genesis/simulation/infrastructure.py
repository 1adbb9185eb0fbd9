"""Infrastructure stage: map exits, hub placement and the first shapes."""

from __future__ import annotations

import logging
import math

from ..agents import Hub
from ..blocks import ShapeDetector
from ..geometry import Point
from ..network import ArterialDetector
from ..terrain import cull_segments
from .state import GenerationState, HubInfo

logger = logging.getLogger(__name__)

HUB_PADDING = 150.0
HUB_SIZES = {1: (90.0, 140.0), 2: (45.0, 75.0), 3: (20.0, 35.0)}
HUB_VERTEX_COUNTS = {1: 7, 2: 5, 3: 4}
TIER1_SEPARATION = 600.0
HUB_BOUNDARY_SNAP = 5.0
# Hubs appear this many ticks apart when animated
HUB_SPAWN_INTERVAL = 300
INITIAL_ARTERIAL_ANGLE = 45.0


def place_exits(state: GenerationState) -> list[Point]:
    """Two or three exits per border, evenly spaced, skipping water."""
    w, h = state.width, state.height
    exits = []
    for side in ("top", "bottom", "left", "right"):
        count = state.rng.randint(2, 3)
        for i in range(1, count + 1):
            t = i / (count + 1)
            if side == "top":
                p = Point(w * t, 0.0)
            elif side == "bottom":
                p = Point(w * t, float(h))
            elif side == "left":
                p = Point(0.0, h * t)
            else:
                p = Point(float(w), h * t)
            if not state.is_water(p):
                exits.append(p)
    return exits


def tier_counts(hub_count: int, roll: float) -> tuple[int, int, int]:
    """Split hub_count into (tier 1, tier 2, tier 3) counts."""
    t1 = max(1, math.floor(hub_count * (0.15 + roll * 0.2)))
    t2 = max(1, math.floor(hub_count * 0.35))
    t3 = max(1, hub_count - t1 - t2)
    return t1, t2, t3


def _score_candidate(state: GenerationState, p: Point, tier: int, hubs: list[Hub]) -> float | None:
    water_level = state.config.terrain.water_level
    h = state.elevation.get_height(p.x, p.y)
    if h < water_level + 0.01:
        return None

    score = 0.0
    dist_to_water = h - water_level
    if dist_to_water < 0.15:
        score += (1 - dist_to_water / 0.15) * 500

    if hubs:
        spacing = 800.0 if tier == 1 else 200.0
        nearest = min(p.dist(other.position) for other in hubs)
        if nearest < spacing:
            score -= (1 - nearest / spacing) * 2000
        else:
            score += min(nearest, 1000.0) * 0.2
    return score


def place_hub(state: GenerationState, tier: int, parent: Hub | None, hubs: list[Hub]) -> Hub | None:
    """
    Pick the best scoring land position for a new hub.

    Children are sampled on a ring around their parent, roots uniformly.

    Returns:
        The hub, or None if every candidate was rejected
    """
    rng = state.rng
    padding = min(HUB_PADDING, state.width / 4, state.height / 4)
    min_size, max_size = HUB_SIZES[tier]
    size = min_size + rng.random() * (max_size - min_size)

    best: Point | None = None
    best_score = -math.inf
    for _ in range(15 if parent else 60):
        if parent is not None:
            dist = parent.size * (2.5 + rng.random() * 4) + (50 if tier == 3 else 150)
            p = parent.position.add(Point.from_angle(rng.random() * math.pi * 2, dist))
            p = Point(
                min(max(p.x, padding), state.width - padding),
                min(max(p.y, padding), state.height - padding),
            )
        else:
            p = Point(
                padding + rng.random() * (state.width - padding * 2),
                padding + rng.random() * (state.height - padding * 2),
            )

        score = _score_candidate(state, p, tier, hubs)
        if score is None or score <= best_score:
            continue
        if any(p.dist(other.position) < size + other.size for other in hubs):
            continue
        if tier == 1 and any(o.tier == 1 and p.dist(o.position) < TIER1_SEPARATION for o in hubs):
            continue
        best = p
        best_score = score

    if best is None:
        return None
    vertex_count = HUB_VERTEX_COUNTS[tier] + rng.randint(0, 2)
    return Hub(
        position=best,
        size=size,
        tier=tier,
        id=state.next_id(),
        boundary=Hub.build_boundary(best, max(12.0, size * 0.35), vertex_count),
    )


def place_hubs(state: GenerationState) -> list[Hub]:
    """Place tier 1 hubs first, then tier 2 and 3 around their parents."""
    counts = tier_counts(state.config.growth.hub_count, state.rng.random())
    hubs: list[Hub] = []
    for tier, count in zip((1, 2, 3), counts):
        for _ in range(count):
            parents = [h for h in hubs if h.tier < tier]
            parent = state.rng.choice(parents) if parents else None
            hub = place_hub(state, tier, parent, hubs)
            if hub is None:
                logger.debug("Could not place a tier %d hub", tier)
                continue
            hubs.append(hub)

    hubs.sort(key=lambda h: h.tier)
    for i, hub in enumerate(hubs):
        hub.spawn_time = i * HUB_SPAWN_INTERVAL
    return hubs


def _distance_to_water(state: GenerationState, p: Point) -> float:
    if not state.shorelines:
        return math.inf
    return min(s.distance_to_point(p) for s in state.shorelines)


def run(state: GenerationState) -> None:
    """Place exits and hubs, lay hub boundaries as roads and detect shapes."""
    if state.elevation is None:
        raise RuntimeError("infrastructure requires the landscape stage")

    state.exits = place_exits(state)
    state.hubs = place_hubs(state)

    for hub in state.hubs:
        n = len(hub.boundary)
        for i in range(n):
            state.add_road(hub.boundary[i], hub.boundary[(i + 1) % n], HUB_BOUNDARY_SNAP)
        state.geography.hubs.append(
            HubInfo(
                id=hub.id,
                position=hub.position,
                size=hub.size,
                tier=hub.tier,
                dist_to_water=_distance_to_water(state, hub.position),
            )
        )

    state.set_roads(cull_segments(state.roads, state.elevation, state.config.terrain.water_level))
    state.shapes = ShapeDetector.detect(state.roads)
    state.arterials = ArterialDetector.detect_from_shapes(state.shapes, INITIAL_ARTERIAL_ANGLE)

    logger.info("Placed %d hubs and %d exits", len(state.hubs), len(state.exits))
