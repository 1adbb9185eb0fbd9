"""Road graph assembly: snapping, deduplication and planarization."""

from __future__ import annotations

import logging
import math
from collections import defaultdict

from ..geometry import Point, Segment
from ..spatial import SpatialGrid

logger = logging.getLogger(__name__)

# Distance below which a crossing counts as landing on an endpoint
SPLIT_EPSILON = 0.1
SPLIT_CELL_SIZE = 80.0

RoadGrid = SpatialGrid[Segment]


def index_segments(segments: list[Segment], cell_size: float = 40.0) -> RoadGrid:
    """Grid of segments keyed by both endpoints, for vertex lookups."""
    grid: RoadGrid = SpatialGrid(cell_size)
    for s in segments:
        grid.insert(s.p1, s)
        grid.insert(s.p2, s)
    return grid


class SegmentIndex:
    """
    Segments bucketed by midpoint, for "what does this move cross" queries.

    Queries widen the radius by half the longest indexed segment so long
    roads are never missed.
    """

    def __init__(self, segments: list[Segment], cell_size: float = 60.0):
        self.grid: RoadGrid = SpatialGrid(cell_size)
        self.reach = 0.0
        self.size = len(segments)
        for s in segments:
            self.grid.insert(s.midpoint(), s)
            self.reach = max(self.reach, s.length() / 2)

    def near(self, p1: Point, p2: Point, margin: float = 0.0) -> list[Segment]:
        """Segments that may come within margin of the segment p1-p2."""
        radius = p1.dist(p2) / 2 + self.reach + margin
        return list(self.grid.query(p1.lerp(p2, 0.5), radius))


def find_nearest_vertex(
    p: Point, segments: list[Segment], threshold: float, grid: RoadGrid | None = None
) -> Point | None:
    """Closest existing segment endpoint within threshold, or None."""
    if grid is not None:
        found = grid.nearest(p, threshold)
        return found[0] if found else None

    best: Point | None = None
    best_dist = threshold
    for s in segments:
        for v in (s.p1, s.p2):
            d = v.dist(p)
            if d <= best_dist:
                best_dist = d
                best = v
    return best


def find_segment(
    segment: Segment, segments: list[Segment], grid: RoadGrid | None = None
) -> Segment | None:
    """An existing segment equal to `segment`, or None."""
    candidates = grid.query(segment.p1, 1e-3) if grid is not None else segments
    for existing in candidates:
        if existing.equals(segment):
            return existing
    return None


def add_segment_snapped(
    p1: Point,
    p2: Point,
    segments: list[Segment],
    threshold: float = 8.0,
    grid: RoadGrid | None = None,
    is_bridge: bool = False,
) -> Segment | None:
    """
    Add a segment after snapping both endpoints to the road graph.

    Each endpoint moves to the nearest existing vertex within threshold.
    An unsnapped p2 within threshold of the (snapped) p1 collapses onto it.

    Returns:
        The new segment, or None when the result is zero-length or
        duplicates an existing segment. A duplicated bridge request still
        marks the existing segment as a bridge.
    """
    a = find_nearest_vertex(p1, segments, threshold, grid) or p1
    snapped_b = find_nearest_vertex(p2, segments, threshold, grid)
    b = snapped_b or p2
    if snapped_b is None and b.dist(a) < threshold:
        b = a

    if a.equals(b):
        return None

    candidate = Segment(a, b, is_bridge)
    existing = find_segment(candidate, segments, grid)
    if existing is not None:
        if is_bridge:
            existing.is_bridge = True
        return None

    segments.append(candidate)
    if grid is not None:
        grid.insert(a, candidate)
        grid.insert(b, candidate)
    return candidate


def merge_vertices(segments: list[Segment], threshold: float) -> list[Segment]:
    """
    Collapse vertices within threshold onto one representative each.

    Representatives are chosen first come, first served. Segments that
    become zero-length are dropped.
    """
    reps: SpatialGrid[Point] = SpatialGrid(max(threshold * 2, 1.0))

    def representative(p: Point) -> Point:
        found = reps.nearest(p, threshold)
        if found is not None:
            return found[1]
        reps.insert(p, p)
        return p

    merged = []
    for s in segments:
        a = representative(s.p1)
        b = representative(s.p2)
        if not a.equals(b):
            merged.append(Segment(a, b, s.is_bridge))
    return merged


def dedupe_segments(segments: list[Segment]) -> list[Segment]:
    """Drop undirected duplicates; a bridge flag on any copy survives."""
    unique: dict[tuple, Segment] = {}
    for s in segments:
        k = s.key()
        if k in unique:
            unique[k].is_bridge = unique[k].is_bridge or s.is_bridge
        else:
            unique[k] = Segment(s.p1, s.p2, s.is_bridge)
    return list(unique.values())


def _candidate_pairs(segments: list[Segment], cell_size: float) -> list[tuple[int, int]]:
    """Index pairs whose bounding boxes share a grid cell."""
    cells: dict[tuple[int, int], list[int]] = defaultdict(list)
    for i, s in enumerate(segments):
        min_col = math.floor(min(s.p1.x, s.p2.x) / cell_size)
        max_col = math.floor(max(s.p1.x, s.p2.x) / cell_size)
        min_row = math.floor(min(s.p1.y, s.p2.y) / cell_size)
        max_row = math.floor(max(s.p1.y, s.p2.y) / cell_size)
        for col in range(min_col, max_col + 1):
            for row in range(min_row, max_row + 1):
                cells[(col, row)].append(i)

    pairs: set[tuple[int, int]] = set()
    for bucket in cells.values():
        for a in range(len(bucket)):
            for b in range(a + 1, len(bucket)):
                pairs.add((bucket[a], bucket[b]))
    return sorted(pairs)


def _split_at(segment: Segment, cuts: list[Point]) -> list[Segment]:
    d = segment.p2.sub(segment.p1)
    ordered = sorted(cuts, key=lambda p: p.sub(segment.p1).dot(d))
    chain = [segment.p1]
    for p in ordered:
        if p.dist(chain[-1]) > SPLIT_EPSILON:
            chain.append(p)
    if segment.p2.dist(chain[-1]) <= SPLIT_EPSILON:
        chain.pop()
    chain.append(segment.p2)
    return [Segment(chain[i], chain[i + 1], segment.is_bridge) for i in range(len(chain) - 1)]


def split_intersections(segments: list[Segment], max_passes: int = 50) -> list[Segment]:
    """
    Split crossing and collinear-overlapping segments until the graph is planar.

    Each pass cuts every segment at all interior crossing points found
    against its neighbours, then re-merges near-identical vertices and
    duplicates. Passes repeat until none finds a cut; `max_passes` only
    bounds pathological inputs and is logged when reached.
    """
    current = list(segments)
    for pass_index in range(max_passes):
        cuts: dict[int, list[Point]] = defaultdict(list)
        for i, j in _candidate_pairs(current, SPLIT_CELL_SIZE):
            a, b = current[i], current[j]
            hit = a.intersect(b)
            if hit is not None:
                if hit.dist(a.p1) > SPLIT_EPSILON and hit.dist(a.p2) > SPLIT_EPSILON:
                    cuts[i].append(hit)
                if hit.dist(b.p1) > SPLIT_EPSILON and hit.dist(b.p2) > SPLIT_EPSILON:
                    cuts[j].append(hit)
            elif a.overlaps(b):
                cuts[i].extend(p for p in (b.p1, b.p2) if a.strictly_contains(p))
                cuts[j].extend(p for p in (a.p1, a.p2) if b.strictly_contains(p))

        if not cuts:
            break

        split: list[Segment] = []
        for i, s in enumerate(current):
            if i in cuts:
                split.extend(_split_at(s, cuts[i]))
            else:
                split.append(s)
        current = dedupe_segments(merge_vertices(split, SPLIT_EPSILON))
        logger.debug("Split pass %d cut %d segments", pass_index, len(cuts))
    else:
        logger.warning("Road graph still has crossings after %d split passes", max_passes)

    return current


def cleanup_network(segments: list[Segment], threshold: float = 3.0, max_rounds: int = 20) -> list[Segment]:
    """
    Global cleanup pass restoring the road graph invariants.

    Merges vertices within threshold, drops zero-length and duplicate
    segments, then splits every crossing so the result is planar. Split
    points can land within threshold of an existing vertex, so the merge
    and split repeat until a round leaves the graph unchanged.
    """
    current = list(segments)
    for _ in range(max_rounds):
        merged = dedupe_segments(merge_vertices(current, threshold))
        current = split_intersections(merged)
        if {s.key() for s in current} == {s.key() for s in merged}:
            break
    else:
        logger.warning("Road cleanup did not settle after %d rounds", max_rounds)
    logger.debug("Cleanup: %d segments in, %d out", len(segments), len(current))
    return current
