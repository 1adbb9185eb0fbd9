"""Road-building agents ("ants") and their steering rules."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable

from ..fields import FlowField, TerrainFlowField
from ..geometry import Point


class AgentKind(Enum):
    """Behaviour variants sharing one update loop."""

    HUB = auto()  # seeks another hub
    TERMINATION = auto()  # extends a dead end
    PERPENDICULAR = auto()  # branches off a long stretch
    RING = auto()  # orbits a centre at a fixed radius
    OUTWARD = auto()  # explores away from the centre
    SPRAWL = auto()  # fans out after a bridge lands
    CARRIER = auto()  # long straight trunk that spawns forks
    FORK = auto()  # orthogonal branch of a carrier
    BRIDGE = auto()  # crosses water in a straight line


class UpdateResult(Enum):
    """Outcome of one agent tick."""

    ALIVE = "alive"
    TRAIL_LEFT = "trail_left"
    TARGET_REACHED = "target_reached"
    DEATH_LIFETIME = "death_lifetime"
    DEATH_OOB = "death_oob"
    DEATH_STALE = "death_stale"
    DEATH_WATER = "death_water"

    @property
    def is_death(self) -> bool:
        return self.name.startswith("DEATH")


# Kinds that never terminate by reaching their target
TARGETLESS_KINDS = frozenset(
    {AgentKind.RING, AgentKind.OUTWARD, AgentKind.SPRAWL, AgentKind.CARRIER, AgentKind.FORK}
)
NO_SEEK_KINDS = frozenset({AgentKind.OUTWARD, AgentKind.SPRAWL, AgentKind.FORK})
EXPLORER_KINDS = frozenset({AgentKind.OUTWARD, AgentKind.HUB, AgentKind.CARRIER, AgentKind.FORK})
HEAVY_KINDS = frozenset({AgentKind.CARRIER, AgentKind.FORK})


@dataclass
class Agent:
    """
    A trail-laying agent.

    Agents move every tick along a heading built from a weighted blend of
    target seeking, field following, wander, repulsion from near-parallel
    neighbours, attraction to opposing neighbours and (for rings) an orbit
    constraint. They never touch the road graph themselves: `update`
    reports TRAIL_LEFT once `trail_distance` has been covered and the caller
    validates and commits the segment, then calls `commit_trail`.
    """

    position: Point
    target: Point
    kind: AgentKind = AgentKind.HUB
    id: int = 0

    # Movement
    speed: float = 2.0
    max_life: int = 500
    trail_distance: float = 20.0
    turn_speed: float = 0.05
    wander_intensity: float = 0.05
    max_turn: float = math.pi / 8  # radians per tick

    # Neighbour interaction
    attraction_radius: float = 50.0
    attraction_strength: float = 0.2
    parallel_repulsion: float = 0.35
    min_parallel_distance: float = 45.0

    # Ring orbit
    ring_center: Point | None = None
    ring_radius: float | None = None
    ring_clockwise: bool | None = None

    # Spawn options
    initial_direction: Point | None = None
    random_initial_direction: bool = False
    is_primary: bool = False
    origin_hub_id: int | None = None
    # Index of the shape a subdivider is confined to
    parent_shape: int | None = None
    spawn_tick: int = 0

    rng_seed: int | None = None

    # Runtime state
    direction: Point = field(default=Point(1.0, 0.0), init=False)
    life: int = field(default=0, init=False)
    last_trail_pos: Point = field(default=Point(0.0, 0.0), init=False)
    stale_steps: int = field(default=0, init=False)
    travelled_distance: float = field(default=0.0, init=False)
    distance_since_last_fork: float = field(default=0.0, init=False)
    is_alive: bool = field(default=True, init=False)
    history: list[Point] = field(default_factory=list, init=False)

    # Ticks without a committed trail before the agent counts as stalled
    stale_limit = 400
    target_radius = 5.0
    bridge_target_radius = 2.0
    # Height band above water where the terrain overrides steering
    shore_alert = 0.08

    def __post_init__(self) -> None:
        self.rng = random.Random(self.rng_seed)
        self.life = self.max_life
        self.last_trail_pos = self.position
        if self.ring_clockwise is None:
            self.ring_clockwise = self.rng.random() > 0.5
        self._wander_angle = (self.rng.random() - 0.5) * math.pi

        if self.is_primary:
            self.history.append(self.position)

        if self.initial_direction is not None:
            self.direction = self.initial_direction.normalize()
        elif self.random_initial_direction:
            self.direction = Point.from_angle(self.rng.random() * math.pi * 2)
        elif self.kind is AgentKind.RING and self.ring_center is not None:
            self.direction = self._ring_tangent()
        else:
            self.direction = self.target.sub(self.position).normalize()

    def _ring_tangent(self) -> Point:
        normal = self.position.sub(self.ring_center).normalize()
        if self.ring_clockwise:
            return Point(-normal.y, normal.x)
        return Point(normal.y, -normal.x)

    def _environmental_priority(self, flow_field: FlowField | None) -> float:
        """1 at the waterline, fading to 0 `shore_alert` above it."""
        if not isinstance(flow_field, TerrainFlowField):
            return 0.0
        h = flow_field.elevation.get_height(self.position.x, self.position.y)
        dist_to_water = h - flow_field.water_level
        if dist_to_water < self.shore_alert:
            return max(0.0, 1 - dist_to_water / self.shore_alert)
        return 0.0

    def _attraction(self, neighbours: list[Agent]) -> tuple[Point, float]:
        """Pull toward the closest neighbour heading the opposite way."""
        best: Agent | None = None
        min_dist = self.attraction_radius
        for other in neighbours:
            d = self.position.dist(other.position)
            if d < min_dist and self.direction.dot(other.direction) < -0.4:
                min_dist = d
                best = other
        if best is None:
            return Point(0.0, 0.0), 0.0
        t = (1.0 - min_dist / self.attraction_radius) ** 2
        return best.position.sub(self.position).normalize(), self.attraction_strength * t

    def _repulsion(self, neighbours: list[Agent]) -> tuple[Point, float]:
        """Sideways push away from the closest near-parallel neighbour."""
        push = Point(0.0, 0.0)
        weight = 0.0
        for other in neighbours:
            d = self.position.dist(other.position)
            if d <= 0 or d >= self.min_parallel_distance:
                continue
            if self.direction.dot(other.direction) < 0.85:
                continue
            away = self.position.sub(other.position)
            lateral = away.sub(self.direction.mul(away.dot(self.direction))).normalize()
            w = self.parallel_repulsion * (1 - d / self.min_parallel_distance)
            if w > weight and lateral.mag() > 0:
                push = lateral
                weight = w
        return push, weight

    def _clamp_turn(self, new_direction: Point) -> Point:
        delta = math.atan2(self.direction.cross(new_direction), self.direction.dot(new_direction))
        if abs(delta) <= self.max_turn:
            return new_direction
        return self.direction.rotate(math.copysign(self.max_turn, delta)).normalize()

    def steer(self, flow_field: FlowField | None = None, flow_influence: float = 0.0, neighbours: Iterable[Agent] = ()) -> None:
        """Update `direction` for this tick."""
        if self.kind is AgentKind.BRIDGE:
            # Bridges hold their line regardless of terrain
            to_target = self.target.sub(self.position).normalize()
            self.direction = self._clamp_turn(self.direction.mul(0.995).add(to_target.mul(0.005)).normalize())
            return

        env_priority = self._environmental_priority(flow_field)
        field_force = flow_field.get_vector_at(self.position.x, self.position.y) if flow_field else Point(0.0, 0.0)

        others = [a for a in neighbours if a is not self and a.id != self.id]
        attraction, attraction_weight = Point(0.0, 0.0), 0.0
        repulsion, repulsion_weight = Point(0.0, 0.0), 0.0
        if others and self.parent_shape is None:
            attraction, attraction_weight = self._attraction(others)
            repulsion, repulsion_weight = self._repulsion(others)

        constraint, constraint_weight = Point(0.0, 0.0), 0.0
        if self.kind is AgentKind.RING and self.ring_center is not None and self.ring_radius:
            to_center = self.position.sub(self.ring_center)
            dist = to_center.mag()
            if dist > 0.1:
                correction = to_center.normalize().mul((self.ring_radius - dist) * 0.3)
                constraint = self._ring_tangent().add(correction).normalize()
                constraint_weight = 1.0

        inertia = 0.2 if self.kind in HEAVY_KINDS else 1.0
        self._wander_angle += (self.rng.random() - 0.5) * (0.02 if self.kind is AgentKind.RING else 0.05 * inertia)
        wander = Point.from_angle(self._wander_angle, self.wander_intensity * (1 - env_priority))
        desired = self.direction.add(wander).normalize()

        if repulsion_weight > 0:
            desired = desired.mul(1 - repulsion_weight).add(repulsion.mul(repulsion_weight)).normalize()
        if attraction_weight > 0:
            desired = desired.mul(1 - attraction_weight).add(attraction.mul(attraction_weight)).normalize()
        if constraint_weight > 0:
            desired = desired.mul(1 - constraint_weight).add(constraint.mul(constraint_weight)).normalize()

        dist_to_target = self.position.dist(self.target)
        suppressed = constraint_weight > 0.2 or attraction_weight > 0.2 or dist_to_target < 30
        turn = self.turn_speed * (1 - env_priority * 0.7) * (0.05 if suppressed else 1.0)
        if turn > 0 and self.kind not in NO_SEEK_KINDS and dist_to_target > 0.1:
            seek = self.target.sub(self.position).normalize()
            desired = desired.mul(1 - turn).add(seek.mul(turn)).normalize()

        resist = 0.05 if self.kind in EXPLORER_KINDS else 1.0
        if field_force.mag() > 0 and (flow_influence > 0 or env_priority > 0) and self.parent_shape is None:
            influence = max(flow_influence * resist, env_priority * 2.0)
            desired = desired.add(field_force.mul(influence)).normalize()

        momentum = 0.99 if self.kind in HEAVY_KINDS else 0.95
        blended = self.direction.mul(momentum).add(desired.mul(1 - momentum)).normalize()
        if blended.mag() > 0:
            self.direction = self._clamp_turn(blended)

    def update(
        self,
        flow_field: FlowField | None = None,
        flow_influence: float = 0.0,
        bounds: tuple[float, float] | None = None,
        neighbours: Iterable[Agent] = (),
    ) -> UpdateResult:
        """
        Advance one tick.

        Args:
            flow_field: Steering field; a TerrainFlowField also enables water death
            flow_influence: Weight of the field in the heading blend
            bounds: World (width, height); leaving it kills the agent
            neighbours: Nearby agents for repulsion and attraction

        Returns:
            What happened this tick
        """
        if not self.is_alive:
            return UpdateResult.ALIVE

        if bounds is not None:
            width, height = bounds
            if not (0 <= self.position.x <= width and 0 <= self.position.y <= height):
                self.is_alive = False
                return UpdateResult.DEATH_OOB

        if isinstance(flow_field, TerrainFlowField) and self.kind is not AgentKind.BRIDGE:
            if flow_field.elevation.get_height(self.position.x, self.position.y) < flow_field.water_level:
                self.is_alive = False
                return UpdateResult.DEATH_WATER

        self.steer(flow_field, flow_influence, neighbours)

        self.position = self.position.add(self.direction.mul(self.speed))
        self.travelled_distance += self.speed
        self.distance_since_last_fork += self.speed
        self.life -= 1
        self.stale_steps += 1

        if self.life <= 0:
            self.is_alive = False
            return UpdateResult.DEATH_LIFETIME
        if self.stale_steps > self.stale_limit:
            self.is_alive = False
            return UpdateResult.DEATH_STALE

        if self.kind is AgentKind.BRIDGE:
            if self.position.dist(self.target) < self.bridge_target_radius:
                self.is_alive = False
                return UpdateResult.TARGET_REACHED
        elif self.kind not in TARGETLESS_KINDS:
            if self.position.dist(self.target) < self.target_radius:
                self.is_alive = False
                return UpdateResult.TARGET_REACHED

        if self.position.dist(self.last_trail_pos) >= self.trail_distance:
            if self.is_primary:
                self.history.append(self.position)
            return UpdateResult.TRAIL_LEFT

        return UpdateResult.ALIVE

    def commit_trail(self) -> None:
        """Acknowledge the emitted trail; the next one is measured from here."""
        self.last_trail_pos = self.position
        self.stale_steps = 0

    def kill(self) -> None:
        self.is_alive = False

    @staticmethod
    def check_collision(a: Agent, b: Agent, distance_threshold: float = 10.0, facing_threshold: float = -0.9) -> bool:
        """Head-on test: both alive, close together and facing each other."""
        if not a.is_alive or not b.is_alive:
            return False
        if a.position.dist(b.position) >= distance_threshold:
            return False
        return a.direction.dot(b.direction) < facing_threshold
