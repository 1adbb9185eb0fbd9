"""
Growth stage: waves of road-building agents.

Each wave spawns agents from hubs, dead ends, long stretches, exits and
water crossings. `tick` advances every live agent once and turns their
trails into snapped road segments; `resolve` runs all waves headless.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from ..agents import Agent, AgentKind, Hub, UpdateResult
from ..geometry import Capsule, Point, Segment
from ..network import SegmentIndex, cleanup_network, detect_stretches
from ..spatial import SpatialGrid
from .state import EventType, GenerationState, TrailEvent

logger = logging.getLogger(__name__)

# Dead ends closer than this to the border do not spawn agents
SIM_MARGIN = 50.0
COLLISION_DISTANCE = 14.0
COLLISION_FACING = -0.6
# Agents younger than this many ticks are ignored by collision checks
COLLISION_GRACE = 10
BRIDGE_SNAP = 20.0
BRIDGE_SEPARATION = 350.0
MIN_LAKE_AREA_FOR_BRIDGE = 60000.0
BRIDGE_SCAN_DIRECTIONS = 16
BRIDGE_CANDIDATES = 8
BRIDGE_MIN_SCORE = 120.0
SPRAWL_COUNT = 4
FORK_CAPSULE_RADIUS = 4.0
FORK_GRACE = 5
# Distance a survivor is pushed past the road it hit
SURVIVOR_STEP = 5.0
ROAD_QUERY_MARGIN = 40.0
# How far a subdivider may stray outside its block before it is stopped
ESCAPE_MARGIN = 1.0


@dataclass
class _Vertex:
    pos: Point
    other: Point
    count: int = 0


def _vertex_map(segments: list[Segment]) -> dict[tuple, _Vertex]:
    """Road vertices with their degree and the far end of their last segment."""
    vertices: dict[tuple, _Vertex] = {}
    for s in segments:
        for p, other in ((s.p1, s.p2), (s.p2, s.p1)):
            entry = vertices.setdefault(p.key(), _Vertex(p, other))
            entry.count += 1
            entry.other = other
    return vertices


def make_agent(state: GenerationState, position: Point, target: Point, kind: AgentKind, **overrides) -> Agent:
    """Create an agent with the configured defaults, a fresh id and its own rng seed."""
    g = state.config.growth
    params = dict(
        speed=g.ant_speed,
        max_life=g.ant_max_life,
        trail_distance=g.ant_trail_distance,
        turn_speed=g.ant_turn_speed,
        wander_intensity=g.ant_wander_intensity,
        max_turn=g.ant_max_turn,
        attraction_radius=g.ant_attraction_radius,
        attraction_strength=g.ant_attraction_strength,
        parallel_repulsion=g.ant_parallel_repulsion,
        min_parallel_distance=g.min_parallel_distance,
    )
    params.update(overrides)
    params["max_life"] = max(1, int(params["max_life"]))
    return Agent(
        position=position,
        target=target,
        kind=kind,
        id=state.next_id(),
        spawn_tick=state.tick,
        rng_seed=state.rng.getrandbits(32),
        **params,
    )


def _spawn_from_hub(state: GenerationState, hub: Hub, ants_per_hub: int) -> list[Agent]:
    g = state.config.growth
    rng = state.rng
    snap = g.ant_snap_distance
    intensity = g.spawn_intensity
    others = [h for h in state.hubs if h.id != hub.id] or [hub]
    agents = []

    for _ in range(ants_per_hub):
        index = hub.take_vertex(rng)
        if index is None:
            break
        agents.append(
            make_agent(
                state,
                hub.boundary[index],
                rng.choice(others).position,
                AgentKind.HUB,
                speed=1.1 + rng.random() * 0.8,
                max_life=g.ant_max_life * (0.8 + rng.random() * 0.4),
                turn_speed=g.ant_turn_speed * (0.8 + rng.random() * 0.4),
                trail_distance=max(g.ant_trail_distance, snap * 1.5),
                origin_hub_id=hub.id,
            )
        )

    for _ in range(g.carrier_count):
        index = hub.take_vertex(rng)
        if index is None:
            break
        agents.append(
            make_agent(
                state,
                hub.boundary[index],
                rng.choice(others).position,
                AgentKind.CARRIER,
                speed=1.2,
                max_life=g.ant_max_life * 2.5,
                turn_speed=g.ant_turn_speed * 0.1,
                trail_distance=max(g.ant_trail_distance * 1.5, snap * 2.0),
                wander_intensity=g.ant_wander_intensity * 0.1,
                origin_hub_id=hub.id,
            )
        )

    for _ in range(max(2, math.floor(ants_per_hub * 0.7 * intensity))):
        index = hub.take_vertex(rng)
        if index is None:
            break
        start = hub.boundary[index]
        outward = start.sub(hub.position).normalize()
        agents.append(
            make_agent(
                state,
                start,
                hub.position.add(outward.mul(5000)),
                AgentKind.OUTWARD,
                speed=1.4,
                max_life=g.ant_max_life * 1.5,
                turn_speed=g.ant_turn_speed * 0.05,
                trail_distance=max(g.ant_trail_distance * 1.2, snap * 1.8),
                wander_intensity=g.ant_wander_intensity * 0.2,
                origin_hub_id=hub.id,
            )
        )

    # Ring roads, each further ring half as likely
    ring_index = 1
    probability = g.ring_road_probability
    base_radius = hub.size * g.ring_road_radius_multiplier
    while rng.random() < probability and ring_index <= 3:
        radius = base_radius * ring_index
        count = max(1, math.floor(ants_per_hub * 0.6 * intensity))
        clockwise = rng.random() > 0.5
        for i in range(count):
            angle = i / count * math.pi * 2 + rng.random() * 0.3
            agents.append(
                make_agent(
                    state,
                    hub.position.add(Point.from_angle(angle, radius)),
                    hub.position,
                    AgentKind.RING,
                    speed=1.2,
                    max_life=g.ant_max_life * 2.5 * ring_index,
                    turn_speed=0.0,
                    trail_distance=max(15.0, g.ant_trail_distance * 2.5, snap * 2.5),
                    wander_intensity=g.ant_wander_intensity * 0.1,
                    ring_center=hub.position,
                    ring_radius=radius,
                    ring_clockwise=clockwise,
                    origin_hub_id=hub.id,
                )
            )
        ring_index += 1
        probability *= 0.5

    return agents


def _spawn_terminations(state: GenerationState, terminations: list[_Vertex]) -> list[Agent]:
    """Extend a random share of the dead ends straight ahead."""
    g = state.config.growth
    rng = state.rng
    count = math.floor(len(terminations) * g.spawn_intensity * 0.5)
    rng.shuffle(terminations)
    return [
        make_agent(
            state,
            v.pos,
            rng.choice(state.hubs).position,
            AgentKind.TERMINATION,
            speed=1.2,
            max_life=g.ant_max_life * 0.6,
            initial_direction=v.pos.sub(v.other).normalize(),
            trail_distance=max(g.ant_trail_distance, g.ant_snap_distance * 1.5),
            wander_intensity=g.ant_wander_intensity * 0.4,
        )
        for v in terminations[:count]
    ]


def _spawn_perpendiculars(state: GenerationState) -> list[Agent]:
    """Branch off the middle of long unbroken stretches."""
    g = state.config.growth
    rng = state.rng
    agents = []
    for path in detect_stretches(state.roads):
        if path.length() <= g.min_long_road_length:
            continue
        if rng.random() > 0.5 * g.spawn_intensity:
            continue
        mid = path.midpoint()
        mid_index = len(path.points) // 2
        prev = path.points[max(0, mid_index - 1)]
        nxt = path.points[min(len(path.points) - 1, mid_index)]
        direction = nxt.sub(prev).normalize()
        if direction.mag() == 0:
            continue
        side = 1 if rng.random() > 0.5 else -1
        agents.append(
            make_agent(
                state,
                mid,
                rng.choice(state.hubs).position,
                AgentKind.PERPENDICULAR,
                speed=1.3,
                max_life=g.ant_max_life * 0.8,
                turn_speed=g.ant_turn_speed * 0.1,
                initial_direction=Point(-direction.y * side, direction.x * side),
                trail_distance=max(g.ant_trail_distance, g.ant_snap_distance * 1.5),
                wander_intensity=0.005,
            )
        )
    return agents


def _bridge_sites(state: GenerationState) -> list[Point]:
    sites = []
    for event in state.events:
        if event.type in (EventType.BRIDGE_STARTED, EventType.BRIDGE_BUILT):
            sites.append(event.position)
            if event.extra_position is not None:
                sites.append(event.extra_position)
    return sites


def _crossing_permitted(state: GenerationState, start: Point, end: Point) -> bool:
    """Bridges may span rivers and large lakes only."""
    mid = start.lerp(end, 0.5)
    if any(river.get_influence(mid.x, mid.y) > 0.05 for river in state.rivers):
        return True
    for body in state.geography.water_bodies:
        if mid.dist(body.position) < math.sqrt(body.area / math.pi) * 1.5:
            return body.area >= MIN_LAKE_AREA_FOR_BRIDGE
    return False


def find_crossing(state: GenerationState, origin: Point, dead_ends: list[Point]) -> tuple[Point, Point, float] | None:
    """
    Scan for the best water crossing starting at a dead end.

    Each of `BRIDGE_SCAN_DIRECTIONS` rays must enter water within 10 units;
    the first land sample along the ray is the landing. Landings are scored
    by proximity to hubs and to other dead ends, minus a length penalty.

    Returns:
        (landing, direction, score) of the best landing, or None
    """
    g = state.config.growth
    water_level = state.config.terrain.water_level
    sites = _bridge_sites(state)
    best: tuple[Point, Point, float] | None = None

    for i in range(BRIDGE_SCAN_DIRECTIONS):
        direction = Point.from_angle(i / BRIDGE_SCAN_DIRECTIONS * math.pi * 2)
        if not state.is_water(origin.add(direction.mul(10))):
            continue

        d = 40.0
        while d < g.max_bridge_length:
            landing = origin.add(direction.mul(d))
            if not (0 <= landing.x <= state.width and 0 <= landing.y <= state.height):
                break
            if state.elevation.get_height(landing.x, landing.y) >= water_level + 0.02:
                if any(site.dist(landing) < BRIDGE_SEPARATION for site in sites):
                    break
                if not _crossing_permitted(state, origin, landing):
                    break
                score = 100.0
                nearest_hub = min((landing.dist(h.position) for h in state.hubs), default=math.inf)
                if nearest_hub < 400:
                    score += (400 - nearest_hub) * 2
                nearest_end = min((landing.dist(p) for p in dead_ends), default=math.inf)
                if nearest_end < 150:
                    score += (150 - nearest_end) * 3
                score -= d / g.max_bridge_length * 50
                if best is None or score > best[2]:
                    best = (landing, direction, score)
                break
            d += 20.0

    return best


def _spawn_bridges(state: GenerationState, vertices: dict[tuple, _Vertex], dead_ends: list[Point]) -> list[Agent]:
    """Send bridge builders from shoreline dead ends across rivers and lakes."""
    g = state.config.growth
    water_level = state.config.terrain.water_level
    candidates = [
        v.pos
        for v in vertices.values()
        if v.count == 1 and water_level <= state.elevation.get_height(v.pos.x, v.pos.y) < water_level + 0.15
    ]
    state.rng.shuffle(candidates)

    agents = []
    for origin in candidates[:BRIDGE_CANDIDATES]:
        if any(site.dist(origin) < BRIDGE_SEPARATION for site in _bridge_sites(state)):
            continue
        crossing = find_crossing(state, origin, dead_ends)
        if crossing is None or crossing[2] <= BRIDGE_MIN_SCORE:
            continue
        landing, direction, _ = crossing
        state.add_event(
            EventType.BRIDGE_STARTED,
            origin,
            landing,
            message=f"Linking to pocket ({math.floor(origin.dist(landing))}m)",
        )
        agents.append(
            make_agent(
                state,
                origin,
                landing,
                AgentKind.BRIDGE,
                speed=1.8,
                max_life=3000,
                turn_speed=0.001,
                trail_distance=max(15.0, g.ant_snap_distance * 1.5),
                wander_intensity=0.0,
                initial_direction=direction,
            )
        )
    return agents


def _spawn_exit_agents(state: GenerationState) -> list[Agent]:
    g = state.config.growth
    return [
        make_agent(
            state,
            exit_point,
            state.rng.choice(state.hubs).position,
            AgentKind.TERMINATION,
            speed=1.4,
            max_life=g.ant_max_life * 4.0,
            turn_speed=g.ant_turn_speed * 0.2,
            trail_distance=max(g.ant_trail_distance * 2.5, g.ant_snap_distance * 3.0),
            wander_intensity=g.ant_wander_intensity * 0.2,
        )
        for exit_point in state.exits
    ]


def spawn_wave(state: GenerationState) -> list[Agent]:
    """
    Replace the agent list with a new wave.

    Refused (returns an empty list) while agents from the previous wave
    are still alive.
    """
    if any(a.is_alive for a in state.agents):
        logger.warning("Cannot spawn wave %d: agents are still active", state.current_wave)
        return []
    if not state.hubs:
        return []

    g = state.config.growth
    ants_per_hub = max(1, round(g.ants_per_hub * g.spawn_intensity))
    vertices = _vertex_map(state.roads)

    agents: list[Agent] = []
    for hub in state.hubs:
        agents.extend(_spawn_from_hub(state, hub, ants_per_hub))

    terminations = [
        v
        for v in vertices.values()
        if v.count == 1
        and SIM_MARGIN < v.pos.x < state.width - SIM_MARGIN
        and SIM_MARGIN < v.pos.y < state.height - SIM_MARGIN
    ]
    dead_ends = [v.pos for v in terminations]
    agents.extend(_spawn_terminations(state, terminations))
    agents.extend(_spawn_perpendiculars(state))

    if state.elevation is not None and state.rng.random() < g.bridge_probability:
        agents.extend(_spawn_bridges(state, vertices, dead_ends))

    if state.current_wave == 1:
        agents.extend(_spawn_exit_agents(state))

    state.agents = agents
    state.add_event(
        EventType.WAVE_SPAWNED,
        Point(state.width / 2, state.height / 2),
        message=f"Wave {state.current_wave}: {len(agents)} agents",
    )
    logger.debug("Wave %d spawned %d agents", state.current_wave, len(agents))
    return agents


def _snap_for(state: GenerationState, agent: Agent) -> float:
    if agent.kind is AgentKind.BRIDGE:
        return BRIDGE_SNAP
    if agent.parent_shape is not None:
        return state.config.structure.ant_subdivide_snap
    return state.config.growth.ant_snap_distance


def _lay(
    state: GenerationState,
    agent: Agent,
    start: Point,
    end: Point,
    snap: float,
    events: list[TrailEvent],
    is_bridge: bool = False,
) -> Segment | None:
    segment = state.add_road(start, end, snap, is_bridge)
    events.append(TrailEvent(agent.id, start, end, segment is not None))
    return segment


def _road_hit(state: GenerationState, p1: Point, p2: Point) -> tuple[Point, Segment] | None:
    """Nearest road crossing of the move p1-p2, ignoring the starting point."""
    move = Segment(p1, p2)
    best: tuple[Point, Segment] | None = None
    min_dist = math.inf
    for road in state.segment_index.near(p1, p2, ROAD_QUERY_MARGIN):
        hit = move.intersect(road)
        if hit is None:
            continue
        d = p1.dist(hit)
        if 0.1 < d < min_dist:
            min_dist = d
            best = (hit, road)
    return best


def _boundary_hit(state: GenerationState, agent: Agent, p1: Point, p2: Point) -> Point | None:
    """Nearest crossing of a subdivider's move with its block boundary."""
    move = Segment(p1, p2)
    best: Point | None = None
    min_dist = math.inf
    for edge in state.shapes[agent.parent_shape].to_segments():
        hit = move.intersect(edge)
        if hit is None:
            continue
        d = p1.dist(hit)
        if 0.5 < d < min_dist:
            min_dist = d
            best = hit
    return best


def _escaped(state: GenerationState, agent: Agent) -> bool:
    shape = state.shapes[agent.parent_shape]
    if shape.contains_point(agent.position):
        return False
    return min(edge.distance_to_point(agent.position) for edge in shape.to_segments()) > ESCAPE_MARGIN


def _fork_blocked(state: GenerationState, agent: Agent, p1: Point, p2: Point) -> bool:
    """Thick-trail test so forks stop just short of parallel roads."""
    move = Capsule(p1, p2, FORK_CAPSULE_RADIUS)
    for road in state.segment_index.near(p1, p2, FORK_CAPSULE_RADIUS + ROAD_QUERY_MARGIN):
        if road.p1.dist(agent.last_trail_pos) < 1.5 or road.p2.dist(agent.last_trail_pos) < 1.5:
            continue
        if move.intersects(Capsule(road.p1, road.p2, 0.0)):
            return True
    return False


def _spawn_forks(state: GenerationState, carrier: Agent) -> None:
    for side in (1, -1):
        direction = carrier.direction.rotate(math.pi / 2 * side)
        state.agents.append(
            make_agent(
                state,
                carrier.position,
                carrier.position.add(direction.mul(1000)),
                AgentKind.FORK,
                speed=carrier.speed * 0.95,
                max_life=carrier.life * 0.6,
                turn_speed=0.0,
                initial_direction=direction,
                trail_distance=carrier.trail_distance,
                wander_intensity=0.001,
            )
        )
    carrier.distance_since_last_fork = 0.0


def _spawn_sprawl(state: GenerationState, origin: Point) -> None:
    g = state.config.growth
    for i in range(SPRAWL_COUNT):
        state.agents.append(
            make_agent(
                state,
                origin,
                state.rng.choice(state.hubs).position,
                AgentKind.SPRAWL,
                speed=1.2,
                max_life=g.ant_max_life * 0.7,
                initial_direction=Point.from_angle(i / SPRAWL_COUNT * math.pi * 2),
                wander_intensity=0.1,
            )
        )


def _process_bridge(state: GenerationState, agent: Agent, result: UpdateResult, events: list[TrailEvent]) -> None:
    if result not in (UpdateResult.TRAIL_LEFT, UpdateResult.TARGET_REACHED, UpdateResult.DEATH_LIFETIME):
        return
    _lay(state, agent, agent.last_trail_pos, agent.position, BRIDGE_SNAP, events, is_bridge=True)
    agent.commit_trail()
    if result is UpdateResult.TARGET_REACHED:
        state.add_event(EventType.BRIDGE_BUILT, agent.position, message="Strategic connection established.")
        if state.hubs:
            _spawn_sprawl(state, agent.position)


def process_agent(state: GenerationState, agent: Agent) -> list[TrailEvent]:
    """
    Advance one agent and apply the outcome to the road graph.

    Trails are snapped into the network before the agent is told to
    commit them. Agents crossing a road (or, for subdividers, their block
    boundary) lay a segment up to the hit and die, or with
    `ant_road_survival_chance` turn across the road and carry on.
    """
    events: list[TrailEvent] = []
    if not agent.is_alive:
        return events

    g = state.config.growth
    snap = _snap_for(state, agent)
    old_pos = agent.position
    neighbours = state.agent_grid.query(agent.position, g.ant_attraction_radius)
    result = agent.update(
        state.flow_field,
        state.config.terrain.flow_field_influence,
        (state.width, state.height),
        neighbours,
    )

    if agent.kind is AgentKind.BRIDGE:
        _process_bridge(state, agent, result, events)
        return events

    if agent.kind is AgentKind.FORK and agent.max_life - agent.life > FORK_GRACE:
        if _fork_blocked(state, agent, old_pos, agent.position):
            _lay(state, agent, agent.last_trail_pos, old_pos, snap, events)
            agent.kill()
            return events

    if result in (UpdateResult.DEATH_OOB, UpdateResult.DEATH_STALE, UpdateResult.DEATH_WATER):
        _lay(state, agent, agent.last_trail_pos, old_pos, snap, events)
        return events

    hit_road: Segment | None = None
    if agent.parent_shape is not None:
        hit = _boundary_hit(state, agent, old_pos, agent.position)
        if hit is None and _escaped(state, agent):
            _lay(state, agent, agent.last_trail_pos, old_pos, snap, events)
            agent.kill()
            return events
    else:
        road_hit = _road_hit(state, old_pos, agent.position)
        hit, hit_road = road_hit if road_hit else (None, None)

    if hit is not None:
        agent.position = hit
        _lay(state, agent, agent.last_trail_pos, hit, snap * 1.5, events)
        if agent.parent_shape is None and state.rng.random() < g.ant_road_survival_chance:
            if hit_road is not None:
                along = hit_road.direction()
                normal = Point(-along.y, along.x)
                if normal.dot(agent.direction) < 0:
                    normal = -normal
                agent.direction = normal
            agent.commit_trail()
            agent.position = agent.position.add(agent.direction.mul(SURVIVOR_STEP))
        else:
            agent.kill()
        return events

    if result is UpdateResult.TRAIL_LEFT:
        _lay(state, agent, agent.last_trail_pos, agent.position, snap, events)
        if (
            agent.kind is AgentKind.CARRIER
            and agent.travelled_distance > g.carrier_min_distance
            and agent.distance_since_last_fork >= g.carrier_fork_spacing
        ):
            _spawn_forks(state, agent)
        agent.commit_trail()
    elif result in (UpdateResult.TARGET_REACHED, UpdateResult.DEATH_LIFETIME):
        _lay(state, agent, agent.last_trail_pos, agent.position, snap, events)

    return events


def check_collisions(state: GenerationState) -> int:
    """
    Join head-on pairs at their midpoint and kill both.

    Subdividers, bridges and agents in their first ticks never collide.

    Returns:
        Number of collisions handled
    """
    snap = state.config.growth.ant_snap_distance * 1.5

    def eligible(a: Agent) -> bool:
        return (
            a.is_alive
            and a.parent_shape is None
            and a.kind is not AgentKind.BRIDGE
            and a.max_life - a.life >= COLLISION_GRACE
        )

    seen: set[tuple[int, int]] = set()
    collisions = 0
    for a in [a for a in state.agents if a.is_alive]:
        if not eligible(a):
            continue
        for b in state.agent_grid.query(a.position, COLLISION_DISTANCE):
            if b is a or not eligible(b):
                continue
            pair = (min(a.id, b.id), max(a.id, b.id))
            if pair in seen:
                continue
            seen.add(pair)
            if Agent.check_collision(a, b, COLLISION_DISTANCE, COLLISION_FACING):
                mid = a.position.lerp(b.position, 0.5)
                state.add_road(a.last_trail_pos, mid, snap)
                state.add_road(b.last_trail_pos, mid, snap)
                a.kill()
                b.kill()
                collisions += 1
                break
    return collisions


def sync_grids(state: GenerationState) -> None:
    """Rebuild the agent grid, and the segment index when roads changed."""
    if state.segment_index is None or state.segment_index.size != len(state.roads):
        state.segment_index = SegmentIndex(state.roads)
    grid: SpatialGrid[Agent] = SpatialGrid(max(20.0, state.config.growth.ant_attraction_radius))
    for agent in state.agents:
        if agent.is_alive:
            grid.insert(agent.position, agent)
    state.agent_grid = grid


def tick(state: GenerationState) -> list[TrailEvent]:
    """
    Advance every live agent by one step.

    Agents spawned during the tick (forks, sprawl) move in the same tick.

    Returns:
        The trail events emitted this tick
    """
    sync_grids(state)
    events: list[TrailEvent] = []
    i = 0
    while i < len(state.agents):
        agent = state.agents[i]
        if agent.is_alive:
            events.extend(process_agent(state, agent))
        i += 1
    collisions = check_collisions(state)
    if collisions:
        logger.debug("Tick %d: %d head-on collisions", state.tick, collisions)
    state.tick += 1
    return events


def start(state: GenerationState) -> bool:
    """Spawn the first wave. Growth needs at least two hubs."""
    if len(state.hubs) < 2:
        logger.warning("Skipping growth: %d hubs placed, need at least 2", len(state.hubs))
        return False
    state.current_wave = 1
    spawn_wave(state)
    return True


def advance_wave(state: GenerationState) -> bool:
    """Spawn the next wave once the current one has died out."""
    if any(a.is_alive for a in state.agents):
        return False
    if state.current_wave == 0 or state.current_wave >= state.config.growth.ant_waves:
        return False
    state.current_wave += 1
    spawn_wave(state)
    return True


def is_complete(state: GenerationState) -> bool:
    return not any(a.is_alive for a in state.agents) and (
        state.current_wave == 0 or state.current_wave >= state.config.growth.ant_waves
    )


def run_agents(state: GenerationState, max_ticks: int) -> int:
    """Tick until no agent is alive; stragglers are killed after max_ticks."""
    ticks = 0
    while any(a.is_alive for a in state.agents):
        if ticks >= max_ticks:
            alive = [a for a in state.agents if a.is_alive]
            logger.warning("Killing %d agents still alive after %d ticks", len(alive), ticks)
            for agent in alive:
                agent.kill()
            break
        tick(state)
        ticks += 1
    return ticks


def finish(state: GenerationState) -> None:
    """Final cleanup of the grown network."""
    state.set_roads(cleanup_network(state.roads, state.config.growth.cleanup_snap))
    state.add_event(
        EventType.GROWTH_COMPLETE,
        Point(state.width / 2, state.height / 2),
        message=f"{len(state.roads)} road segments after {state.current_wave} waves",
    )
    logger.info("Growth complete: %d segments, %d waves", len(state.roads), state.current_wave)


def resolve(state: GenerationState) -> None:
    """Run every remaining wave to completion, then clean up."""
    if state.current_wave == 0 and not start(state):
        return
    max_ticks = state.config.growth.max_ticks_per_wave
    while True:
        run_agents(state, max_ticks)
        if not advance_wave(state):
            break
    finish(state)
