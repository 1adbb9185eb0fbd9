"""Structure stage: blocks, bridges and notable shapes."""

from __future__ import annotations

import logging
import math
from collections import defaultdict, deque

from ..blocks import ShapeDetector, ShapeMerger
from ..geometry import Point, Segment
from ..network import ArterialDetector
from ..spatial import ShapeSpatialGrid
from ..terrain import cull_segments
from .state import BridgeInfo, EventType, GenerationState, NotableShapeInfo

logger = logging.getLogger(__name__)


def find_bridges(segments: list[Segment]) -> list[tuple[Point, float]]:
    """
    Group bridge segments that share vertices into whole bridges.

    Returns:
        (position, length) per bridge: the mean of its segment midpoints
        and its total length
    """
    bridges = [s for s in segments if s.is_bridge]
    by_vertex: dict[tuple, list[int]] = defaultdict(list)
    for i, s in enumerate(bridges):
        by_vertex[s.p1.key()].append(i)
        by_vertex[s.p2.key()].append(i)

    seen: set[int] = set()
    found = []
    for i in range(len(bridges)):
        if i in seen:
            continue
        seen.add(i)
        queue = deque([i])
        component = []
        while queue:
            current = queue.popleft()
            component.append(bridges[current])
            for key in (bridges[current].p1.key(), bridges[current].p2.key()):
                for j in by_vertex[key]:
                    if j not in seen:
                        seen.add(j)
                        queue.append(j)

        mids = [s.midpoint() for s in component]
        position = Point(sum(p.x for p in mids) / len(mids), sum(p.y for p in mids) / len(mids))
        found.append((position, sum(s.length() for s in component)))
    return found


def build_shape_grid(state: GenerationState) -> None:
    state.shape_grid = ShapeSpatialGrid()
    for i, shape in enumerate(state.shapes):
        state.shape_grid.insert(i, shape)


def find_notable_shapes(state: GenerationState) -> list[NotableShapeInfo]:
    """Large blocks, labelled nature space when too big to subdivide."""
    s = state.config.structure
    large = sorted((shape for shape in state.shapes if shape.area() > s.notable_shape_area), key=lambda p: -p.area())

    notable = []
    for shape in large:
        center = Point(
            sum(p.x for p in shape.points) / len(shape.points),
            sum(p.y for p in shape.points) / len(shape.points),
        )
        nearest_id = None
        nearest_dist = math.inf
        for hub in state.hubs:
            d = center.dist(hub.position)
            if d < nearest_dist:
                nearest_dist = d
                nearest_id = hub.id
        area = shape.area()
        notable.append(
            NotableShapeInfo(
                id=state.next_id(),
                position=center,
                area=area,
                kind="nature_space" if area > s.max_subdivision_area else "urban_district",
                dist_to_nearest_hub=nearest_dist,
                nearest_hub_id=nearest_id,
            )
        )
    return notable


def run(state: GenerationState) -> None:
    """Cull flooded roads, extract and merge blocks, and record metadata."""
    if state.elevation is None:
        raise RuntimeError("structure analysis requires the landscape stage")
    s = state.config.structure

    state.set_roads(cull_segments(state.roads, state.elevation, state.config.terrain.water_level))
    detected = ShapeDetector.detect(state.roads)
    state.shapes = ShapeMerger.run_auto_merge(detected, s.merge_area_threshold)

    state.geography.bridges = [
        BridgeInfo(id=state.next_id(), position=position, length=length)
        for position, length in find_bridges(state.roads)
    ]
    build_shape_grid(state)
    state.geography.notable_shapes = find_notable_shapes(state)
    state.arterials = ArterialDetector.detect_from_shapes(state.shapes, s.arterial_angle)

    state.add_event(
        EventType.SHAPES_DETECTED,
        Point(state.width / 2, state.height / 2),
        message=f"{len(detected)} faces, {len(state.shapes)} after merging",
    )
    logger.info(
        "Structure: %d shapes (%d before merging), %d bridges, %d arterials",
        len(state.shapes),
        len(detected),
        len(state.geography.bridges),
        len(state.arterials),
    )
