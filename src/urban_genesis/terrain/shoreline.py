"""Marching-squares extraction of land/water boundaries."""

from __future__ import annotations

import math

import numpy as np

from ..geometry import Point, Segment
from .elevation import ElevationMap

# Edge pairs per cell configuration. Corner bits are TL=8, TR=4, BR=2, BL=1,
# set when the corner is below water. 5 and 10 are the saddle cases.
EDGE_TABLE: dict[int, tuple[tuple[str, str], ...]] = {
    1: (("left", "bottom"),),
    2: (("bottom", "right"),),
    3: (("left", "right"),),
    4: (("top", "right"),),
    5: (("top", "left"), ("right", "bottom")),
    6: (("top", "bottom"),),
    7: (("top", "left"),),
    8: (("top", "left"),),
    9: (("top", "bottom"),),
    10: (("top", "right"), ("left", "bottom")),
    11: (("top", "right"),),
    12: (("left", "right"),),
    13: (("bottom", "right"),),
    14: (("left", "bottom"),),
}


class ShorelineDetector:
    """Turns a sampled height grid into vector shoreline segments."""

    @staticmethod
    def detect(
        elevation: ElevationMap,
        water_level: float,
        width: float,
        height: float,
        resolution: float = 10.0,
        origin: Point = Point(0.0, 0.0),
    ) -> list[Segment]:
        """
        Extract shoreline segments inside a rectangle.

        Args:
            elevation: Height field to sample
            water_level: Threshold separating land and water
            width: Rectangle width
            height: Rectangle height
            resolution: Sample spacing (smaller = more detail, slower)
            origin: Top-left corner of the rectangle

        Returns:
            Segments, 0 to 2 per cell, placed by linear interpolation
        """
        if resolution <= 0:
            raise ValueError(f"resolution must be positive, got {resolution}")

        cols = math.ceil(width / resolution)
        rows = math.ceil(height / resolution)
        xs = origin.x + np.arange(cols + 1) * resolution
        ys = origin.y + np.arange(rows + 1) * resolution
        grid = elevation.sample_grid(xs[:, None], ys[None, :])

        below = grid < water_level
        config = (
            below[:-1, :-1].astype(np.int8) * 8
            + below[1:, :-1] * 4
            + below[1:, 1:] * 2
            + below[:-1, 1:] * 1
        )

        def lerp_point(p1: Point, p2: Point, h1: float, h2: float) -> Point:
            t = (water_level - h1) / (h2 - h1)
            return p1.lerp(p2, t)

        shorelines: list[Segment] = []
        for cx, cy in zip(*np.nonzero((config > 0) & (config < 15))):
            case = int(config[cx, cy])
            x0, x1 = float(xs[cx]), float(xs[cx + 1])
            y0, y1 = float(ys[cy]), float(ys[cy + 1])
            h_tl = float(grid[cx, cy])
            h_tr = float(grid[cx + 1, cy])
            h_br = float(grid[cx + 1, cy + 1])
            h_bl = float(grid[cx, cy + 1])
            p_tl, p_tr = Point(x0, y0), Point(x1, y0)
            p_br, p_bl = Point(x1, y1), Point(x0, y1)

            edges = {
                "top": lambda: lerp_point(p_tl, p_tr, h_tl, h_tr),
                "right": lambda: lerp_point(p_tr, p_br, h_tr, h_br),
                "bottom": lambda: lerp_point(p_bl, p_br, h_bl, h_br),
                "left": lambda: lerp_point(p_tl, p_bl, h_tl, h_bl),
            }
            for a, b in EDGE_TABLE[case]:
                shorelines.append(Segment(edges[a](), edges[b]()))

        return shorelines
