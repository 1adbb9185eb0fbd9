"""Centralized configuration for city generation."""

from dataclasses import dataclass
from enum import Enum


class SubdivisionMode(Enum):
    """How blocks are cut into parcels."""

    GRID = "grid"  # warped, relaxed grid clipped to the block
    AGENTS = "agents"  # subdivider agents grown from the block edges


@dataclass
class WorldConfig:
    """Configuration for the generated world."""

    width: int = 2400
    height: int = 1800
    # Random seed for reproducibility (None = random seed)
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"world size must be positive, got {self.width}x{self.height}")


@dataclass
class TerrainConfig:
    """Configuration for landscape synthesis."""

    terrain_scale: float = 0.001
    water_level: float = 0.42  # Height threshold below which is water
    river_count: int = 2
    shoreline_resolution: float = 10.0
    flow_field_resolution: float = 15.0
    flow_field_influence: float = 0.004
    flow_field_scale_large: float = 0.003
    flow_field_scale_small: float = 0.08
    # Water bodies smaller than this are not reported
    min_water_body_area: float = 5000.0


@dataclass
class GrowthConfig:
    """Configuration for hubs and road-building agents."""

    hub_count: int = 12
    ants_per_hub: int = 2
    spawn_intensity: float = 0.2
    ant_waves: int = 8
    # Agent movement
    ant_speed: float = 2.0
    ant_turn_speed: float = 0.001
    ant_max_life: int = 1000
    ant_trail_distance: float = 6.0
    ant_wander_intensity: float = 0.01
    ant_max_turn: float = 0.4  # radians per tick
    # Neighbour interaction
    ant_parallel_repulsion: float = 0.35
    min_parallel_distance: float = 45.0
    ant_attraction_radius: float = 50.0
    ant_attraction_strength: float = 0.25
    # Probability an agent hitting a road turns along it instead of dying
    ant_road_survival_chance: float = 0.3
    min_long_road_length: float = 40.0
    # Ring roads
    ring_road_probability: float = 0.65
    ring_road_radius_multiplier: float = 1.4
    # Carriers
    carrier_count: int = 3
    carrier_fork_spacing: float = 80.0
    carrier_min_distance: float = 120.0
    # Bridges
    bridge_probability: float = 0.85
    max_bridge_length: float = 600.0
    # Snapping
    ant_snap_distance: float = 12.0
    cleanup_snap: float = 3.0
    # Upper bound on ticks per wave when resolving synchronously
    max_ticks_per_wave: int = 5000


@dataclass
class StructureConfig:
    """Configuration for block analysis and subdivision."""

    merge_area_threshold: float = 1500.0
    min_subdivision_area: float = 7400.0
    max_subdivision_area: float = 66000.0
    notable_shape_area: float = 10000.0
    arterial_angle: float = 50.0
    subdivision_mode: SubdivisionMode = SubdivisionMode.GRID
    subdivision_density: float = 0.4
    subdivide_warp: float = 4.0
    subdivide_relax: int = 1
    subdivide_snap: float = 12.0
    ant_subdivide_snap: float = 16.0
    ant_subdivide_wander: float = 0.0
    enable_sliver_reduction: bool = True


@dataclass
class TrafficConfig:
    """Configuration for the route-usage simulation."""

    max_trips: int = 100
    slope_sensitivity: float = 15.0
    exit_connect_distance: float = 500.0


@dataclass
class Config:
    """Main configuration container."""

    world: WorldConfig
    terrain: TerrainConfig
    growth: GrowthConfig
    structure: StructureConfig
    traffic: TrafficConfig

    @classmethod
    def default(cls) -> "Config":
        """Create default configuration."""
        return cls(
            world=WorldConfig(),
            terrain=TerrainConfig(),
            growth=GrowthConfig(),
            structure=StructureConfig(),
            traffic=TrafficConfig(),
        )
