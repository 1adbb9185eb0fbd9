"""Road network assembly, stretches, arterials and routing."""

from .arterials import ArterialDetector
from .pathfinding import Pathfinder
from .roads import (
    RoadGrid,
    SegmentIndex,
    add_segment_snapped,
    cleanup_network,
    dedupe_segments,
    find_nearest_vertex,
    index_segments,
    merge_vertices,
    split_intersections,
)
from .stretches import RoadPath, detect_stretches

__all__ = [
    "ArterialDetector",
    "Pathfinder",
    "RoadGrid",
    "RoadPath",
    "SegmentIndex",
    "add_segment_snapped",
    "cleanup_network",
    "dedupe_segments",
    "detect_stretches",
    "find_nearest_vertex",
    "index_segments",
    "merge_vertices",
    "split_intersections",
]
