"""Spatial hash grids for neighbour and containment queries."""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Generic, Iterator, TypeVar

from .geometry import Point, Polygon

T = TypeVar("T")


class SpatialGrid(Generic[T]):
    """
    Spatial hash grid for O(1) neighbour lookups.

    Divides the plane into square cells keyed by floor(coord / cell_size)
    and tracks which items sit in each cell. The grid is unbounded, so items
    outside the world rectangle are still indexed.
    """

    def __init__(self, cell_size: float = 32.0):
        """
        Initialize the spatial grid.

        Args:
            cell_size: Size of each grid cell (larger = fewer cells, more items per cell)
        """
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = cell_size
        self.cells: dict[tuple[int, int], list[tuple[Point, T]]] = defaultdict(list)
        self._count = 0

    def _get_cell(self, x: float, y: float) -> tuple[int, int]:
        """Get the cell coordinates for a position."""
        return (math.floor(x / self.cell_size), math.floor(y / self.cell_size))

    def insert(self, pos: Point, item: T) -> None:
        """Add an item at a position."""
        self.cells[self._get_cell(pos.x, pos.y)].append((pos, item))
        self._count += 1

    def query(self, pos: Point, radius: float) -> Iterator[T]:
        """
        Get all items within radius of the given position.

        Args:
            pos: Centre of the search
            radius: Search radius

        Yields:
            Items within the radius
        """
        for _, item in self.query_with_positions(pos, radius):
            yield item

    def query_with_positions(self, pos: Point, radius: float) -> Iterator[tuple[Point, T]]:
        """Like `query` but yields (position, item) pairs."""
        min_col, min_row = self._get_cell(pos.x - radius, pos.y - radius)
        max_col, max_row = self._get_cell(pos.x + radius, pos.y + radius)
        radius_sq = radius * radius

        for col in range(min_col, max_col + 1):
            for row in range(min_row, max_row + 1):
                bucket = self.cells.get((col, row))
                if not bucket:
                    continue
                for item_pos, item in bucket:
                    dx = item_pos.x - pos.x
                    dy = item_pos.y - pos.y
                    if dx * dx + dy * dy <= radius_sq:
                        yield item_pos, item

    def nearest(self, pos: Point, radius: float) -> tuple[Point, T] | None:
        """Closest (position, item) within radius, or None."""
        best: tuple[Point, T] | None = None
        best_dist = math.inf
        for item_pos, item in self.query_with_positions(pos, radius):
            d = item_pos.dist_sq(pos)
            if d < best_dist:
                best_dist = d
                best = (item_pos, item)
        return best

    def occupied_cells(self) -> list[tuple[int, int]]:
        return [cell for cell, bucket in self.cells.items() if bucket]

    def clear(self) -> None:
        """Remove all items from the grid."""
        self.cells.clear()
        self._count = 0

    def __len__(self) -> int:
        """Return the total number of items in the grid."""
        return self._count


class ShapeSpatialGrid:
    """
    Coarse grid over polygon bounding boxes.

    A polygon handle is registered in every cell its bounding box touches,
    so a cell lookup returns a conservative superset of the polygons that
    could contain a point.
    """

    def __init__(self, cell_size: float = 120.0):
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = cell_size
        self.cells: dict[tuple[int, int], list[int]] = defaultdict(list)
        self.shapes: dict[int, Polygon] = {}

    def _get_cell(self, x: float, y: float) -> tuple[int, int]:
        return (math.floor(x / self.cell_size), math.floor(y / self.cell_size))

    def insert(self, handle: int, shape: Polygon) -> None:
        """Register a polygon under an integer handle."""
        self.shapes[handle] = shape
        b = shape.bounds()
        min_col, min_row = self._get_cell(b.min_x, b.min_y)
        max_col, max_row = self._get_cell(b.max_x, b.max_y)
        for col in range(min_col, max_col + 1):
            for row in range(min_row, max_row + 1):
                bucket = self.cells[(col, row)]
                if handle not in bucket:
                    bucket.append(handle)

    def query_candidates(self, pos: Point) -> list[int]:
        """Handles whose bounding box overlaps the cell containing pos."""
        return list(self.cells.get(self._get_cell(pos.x, pos.y), ()))

    def find_shape_at(self, pos: Point) -> int | None:
        """Handle of a polygon containing pos (latest inserted wins), or None."""
        for handle in reversed(self.query_candidates(pos)):
            if self.shapes[handle].contains_point(pos):
                return handle
        return None

    def clear(self) -> None:
        self.cells.clear()
        self.shapes.clear()

    def __len__(self) -> int:
        return len(self.shapes)
