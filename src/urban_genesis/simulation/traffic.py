"""Traffic stage: sample trips between hubs and exits and count road usage."""

from __future__ import annotations

import logging

from ..geometry import Point
from ..network import Pathfinder, find_nearest_vertex
from .state import EventType, GenerationState

logger = logging.getLogger(__name__)

EXIT_WEIGHT = 60.0
EXIT_SNAP = 5.0
# Re-draws allowed when a trip would start and end at the same place
MAX_REDRAWS = 10
EVENT_INTERVAL = 10


def usage_key(p1: Point, p2: Point) -> tuple:
    """Undirected key for the road between two route nodes."""
    k1, k2 = p1.key(), p2.key()
    return (k1, k2) if k1 <= k2 else (k2, k1)


def connect_exits(state: GenerationState) -> int:
    """Link each exit to the nearest road vertex within reach."""
    reach = state.config.traffic.exit_connect_distance
    connected = 0
    for exit_point in state.exits:
        nearest = find_nearest_vertex(exit_point, state.roads, reach)
        if nearest is not None and state.add_road(exit_point, nearest, EXIT_SNAP) is not None:
            connected += 1
    return connected


def pick_destination(state: GenerationState) -> Point:
    """Hubs weighted by size times tier, exits by a flat weight."""
    total = sum(h.size * h.tier for h in state.hubs) + len(state.exits) * EXIT_WEIGHT
    r = state.rng.random() * total
    for hub in state.hubs:
        r -= hub.size * hub.tier
        if r <= 0:
            return hub.position
    for exit_point in state.exits:
        r -= EXIT_WEIGHT
        if r <= 0:
            return exit_point
    return state.hubs[0].position


def run_trip(state: GenerationState) -> bool:
    """
    Route one weighted random trip and count the roads it uses.

    Failed routes are not counted.

    Returns:
        True while more trips remain to be sampled
    """
    t = state.config.traffic
    if state.trip_count >= t.max_trips or len(state.hubs) < 2 or not state.roads:
        state.active_path = None
        return False

    if state.route_graph is None:
        if state.trip_count == 0:
            connect_exits(state)
        state.route_graph = Pathfinder.build_graph(state.roads, state.elevation, t.slope_sensitivity)

    start = pick_destination(state)
    end = pick_destination(state)
    for _ in range(MAX_REDRAWS):
        if not start.equals(end):
            break
        end = pick_destination(state)

    path = Pathfinder.route(start, end, state.route_graph)
    state.active_path = path
    if path and len(path) > 1:
        for a, b in zip(path, path[1:]):
            key = usage_key(a, b)
            state.usage[key] = state.usage.get(key, 0) + 1
        state.trip_count += 1
        if state.trip_count % EVENT_INTERVAL == 0 or state.trip_count == t.max_trips:
            state.add_event(
                EventType.TRAFFIC_SIMULATED,
                start,
                end,
                message=f"Traffic analysis: {state.trip_count}/{t.max_trips} samples collected",
            )

    return state.trip_count < t.max_trips


def resolve(state: GenerationState) -> None:
    """Sample trips until `max_trips` succeed or attempts run out."""
    attempts = state.config.traffic.max_trips * 5
    for _ in range(attempts):
        if not run_trip(state):
            break
    logger.info("Traffic: %d trips over %d used roads", state.trip_count, len(state.usage))
