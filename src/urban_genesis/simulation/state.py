"""Generation state owned by the stage driver."""

from __future__ import annotations

import itertools
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator

from ..agents import Agent, Hub
from ..config import Config
from ..fields import TerrainFlowField
from ..geometry import Point, Polygon, Polyline, Segment
from ..network import RoadGrid, SegmentIndex, add_segment_snapped, index_segments
from ..spatial import ShapeSpatialGrid, SpatialGrid
from ..terrain import ElevationMap, River


class EventType(Enum):
    """Notable things that happen during generation."""

    BRIDGE_STARTED = auto()
    BRIDGE_BUILT = auto()
    WAVE_SPAWNED = auto()
    GROWTH_COMPLETE = auto()
    SHAPES_DETECTED = auto()
    SUBDIVISION_COMPLETE = auto()
    TRAFFIC_SIMULATED = auto()


@dataclass
class SimEvent:
    """One entry in the generation event log."""

    type: EventType
    tick: int
    position: Point
    extra_position: Point | None = None
    agent_ids: tuple[int, ...] = ()
    message: str = ""


@dataclass
class TrailEvent:
    """A trail an agent emitted during one tick."""

    agent_id: int
    start: Point
    end: Point
    committed: bool


@dataclass
class HubInfo:
    id: int
    position: Point
    size: float
    tier: int
    dist_to_water: float
    name: str | None = None


@dataclass
class WaterBodyInfo:
    id: int
    position: Point
    area: float
    name: str | None = None


@dataclass
class BridgeInfo:
    id: int
    position: Point
    length: float
    name: str | None = None


@dataclass
class NotableShapeInfo:
    id: int
    position: Point
    area: float
    kind: str  # "nature_space" or "urban_district"
    dist_to_nearest_hub: float
    nearest_hub_id: int | None
    name: str | None = None


@dataclass
class Geography:
    """
    Metadata about named features.

    Every record carries an empty `name` slot for an external naming
    service to fill.
    """

    hubs: list[HubInfo] = field(default_factory=list)
    water_bodies: list[WaterBodyInfo] = field(default_factory=list)
    bridges: list[BridgeInfo] = field(default_factory=list)
    notable_shapes: list[NotableShapeInfo] = field(default_factory=list)


class GenerationState:
    """
    All mutable data of one generation run.

    Stage functions receive the state explicitly and are the only code
    mutating it. The seeded `rng` is the only randomness source.
    """

    def __init__(self, config: Config, seed: int):
        self.config = config
        self.seed = seed
        self.rng = random.Random(seed)
        self.width = config.world.width
        self.height = config.world.height

        # Landscape
        self.elevation: ElevationMap | None = None
        self.rivers: list[River] = []
        self.shorelines: list[Segment] = []
        self.flow_field: TerrainFlowField | None = None

        # Infrastructure and growth
        self.hubs: list[Hub] = []
        self.exits: list[Point] = []
        self.roads: list[Segment] = []
        self.road_grid: RoadGrid = index_segments([])
        self.agents: list[Agent] = []
        self.agent_grid: SpatialGrid[Agent] = SpatialGrid(50.0)
        self.segment_index: SegmentIndex | None = None
        self.current_wave = 0
        self.tick = 0

        # Structure
        self.shapes: list[Polygon] = []
        self.arterials: list[Polyline] = []
        self.shape_grid: ShapeSpatialGrid | None = None

        # Subdivision
        self.subdivision_queue: deque[int] = deque()
        self.processed_shapes: set[int] = set()

        # Traffic
        self.usage: dict[tuple, int] = {}
        self.trip_count = 0
        self.active_path: list[Point] | None = None
        self.route_graph: tuple | None = None

        self.geography = Geography()
        self.events: deque[SimEvent] = deque(maxlen=150)
        self._ids: Iterator[int] = itertools.count(1)

    def next_id(self) -> int:
        """Deterministic id for hubs, agents and metadata records."""
        return next(self._ids)

    def add_event(
        self,
        event_type: EventType,
        position: Point,
        extra_position: Point | None = None,
        agent_ids: tuple[int, ...] = (),
        message: str = "",
    ) -> SimEvent:
        event = SimEvent(event_type, self.tick, position, extra_position, agent_ids, message)
        self.events.append(event)
        return event

    def add_road(self, p1: Point, p2: Point, snap: float, is_bridge: bool = False) -> Segment | None:
        """Snap and append a road segment, keeping the vertex grid in sync."""
        segment = add_segment_snapped(p1, p2, self.roads, snap, self.road_grid, is_bridge)
        if segment is not None:
            self.route_graph = None
        return segment

    def set_roads(self, segments: list[Segment]) -> None:
        """Replace the road network wholesale and reindex it."""
        self.roads = segments
        self.road_grid = index_segments(segments)
        self.segment_index = None
        self.route_graph = None

    def alive_agents(self) -> list[Agent]:
        return [a for a in self.agents if a.is_alive]

    def is_water(self, p: Point) -> bool:
        if self.elevation is None:
            return False
        return self.elevation.get_height(p.x, p.y) < self.config.terrain.water_level
