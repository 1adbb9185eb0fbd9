"""Detection of connected water regions on a coarse grid."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy import ndimage

from ..geometry import Point
from .elevation import ElevationMap


@dataclass
class WaterRegion:
    """A connected patch of water cells."""

    center: Point
    area: float
    cell_count: int


def find_water_regions(
    elevation: ElevationMap,
    water_level: float,
    width: float,
    height: float,
    cell_size: float = 40.0,
    min_area: float = 5000.0,
) -> list[WaterRegion]:
    """
    Label connected water cells into regions.

    Args:
        elevation: Height field
        water_level: Cells sampled below this are water
        width: World width
        height: World height
        cell_size: Grid spacing
        min_area: Regions smaller than this are ignored

    Returns:
        Regions sorted by area, largest first
    """
    cols = math.ceil(width / cell_size)
    rows = math.ceil(height / cell_size)
    # Sample at cell centres
    xs = np.arange(cols) * cell_size + cell_size / 2
    ys = np.arange(rows) * cell_size + cell_size / 2
    water = elevation.sample_grid(xs[:, None], ys[None, :]) < water_level

    # Default structure: four-connected components
    labels, count = ndimage.label(water)
    if count == 0:
        return []
    index = np.arange(1, count + 1)
    counts = ndimage.sum_labels(water, labels, index)
    centres = ndimage.center_of_mass(water, labels, index)

    regions: list[WaterRegion] = []
    cell_area = cell_size * cell_size
    for cells, (cx, cy) in zip(counts, centres):
        area = float(cells) * cell_area
        if area > min_area:
            centre = Point(float(cx) * cell_size + cell_size / 2, float(cy) * cell_size + cell_size / 2)
            regions.append(WaterRegion(centre, area, int(cells)))

    regions.sort(key=lambda r: r.area, reverse=True)
    return regions
