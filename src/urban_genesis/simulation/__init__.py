"""Generation stages and the driver running them."""

from .state import (
    BridgeInfo,
    EventType,
    GenerationState,
    Geography,
    HubInfo,
    NotableShapeInfo,
    SimEvent,
    TrailEvent,
    WaterBodyInfo,
)
from .world import Stage, World, WorldStats

__all__ = [
    "BridgeInfo",
    "EventType",
    "GenerationState",
    "Geography",
    "HubInfo",
    "NotableShapeInfo",
    "SimEvent",
    "Stage",
    "TrailEvent",
    "WaterBodyInfo",
    "World",
    "WorldStats",
]
