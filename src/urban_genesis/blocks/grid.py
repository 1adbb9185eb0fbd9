"""Warped, relaxed grids clipped to block boundaries."""

from __future__ import annotations

import math

import numpy as np
from noise import snoise2

from ..fields import FlowField
from ..geometry import Point, Polygon, Segment

# World-space sampling scale for the shared warp field
WARP_NOISE_SCALE = 0.005


class TransposeGrid:
    """
    Lays a rotated rectangular mesh over a block.

    The mesh is an array of shape (cols, rows, 2). Warping perturbs every
    vertex with 2D noise, relaxation smooths it, and clipping keeps only
    the pieces inside the block.
    """

    @staticmethod
    def generate_mesh(
        center: Point,
        width: float,
        height: float,
        col_spacing: float,
        row_spacing: float,
        rotation: float = 0.0,
    ) -> np.ndarray:
        if col_spacing <= 0 or row_spacing <= 0:
            raise ValueError("grid spacing must be positive")
        cols = math.floor((width + 0.01) / col_spacing) + 1
        rows = math.floor((height + 0.01) / row_spacing) + 1
        xs = -width / 2 + np.arange(cols) * col_spacing
        ys = -height / 2 + np.arange(rows) * row_spacing
        gx, gy = np.meshgrid(xs, ys, indexing="ij")

        c, s = math.cos(rotation), math.sin(rotation)
        return np.stack([gx * c - gy * s + center.x, gx * s + gy * c + center.y], axis=-1)

    @staticmethod
    def warp_mesh(mesh: np.ndarray, intensity: float, flow_field: FlowField | None = None, seed: float = 0.0) -> np.ndarray:
        """
        Displace vertices by up to `intensity` units.

        With a flow field the displacement is sampled from its noise in
        world space, so neighbouring blocks warp consistently. Without one,
        simplex noise over the mesh indices is used.
        """
        if intensity == 0:
            return mesh
        if flow_field is not None:
            wx = mesh[..., 0] * WARP_NOISE_SCALE
            wy = mesh[..., 1] * WARP_NOISE_SCALE
            nx = flow_field.noise.noise_grid(wx, wy)
            ny = flow_field.noise.noise_grid(wx + 123.4, wy + 123.4)
        else:
            cols, rows = mesh.shape[:2]
            nx = np.empty((cols, rows))
            ny = np.empty((cols, rows))
            for x in range(cols):
                for y in range(rows):
                    nx[x, y] = snoise2(x * 0.2 + seed, y * 0.2 + seed)
                    ny[x, y] = snoise2(x * 0.2 + seed + 10, y * 0.2 + seed + 10)
        return mesh + np.stack([nx, ny], axis=-1) * intensity

    @staticmethod
    def relax_mesh(mesh: np.ndarray, iterations: int) -> np.ndarray:
        """Laplacian smoothing with the outer ring of vertices held fixed."""
        current = mesh.copy()
        if current.shape[0] < 3 or current.shape[1] < 3:
            return current
        for _ in range(iterations):
            inner = current[1:-1, 1:-1]
            avg = (current[:-2, 1:-1] + current[2:, 1:-1] + current[1:-1, :-2] + current[1:-1, 2:]) / 4
            nxt = current.copy()
            nxt[1:-1, 1:-1] = inner + (avg - inner) * 0.5
            current = nxt
        return current

    @staticmethod
    def mesh_to_segments(mesh: np.ndarray) -> list[Segment]:
        segments: list[Segment] = []
        cols, rows = mesh.shape[:2]
        for x in range(cols):
            for y in range(rows):
                p = Point(float(mesh[x, y, 0]), float(mesh[x, y, 1]))
                if y < rows - 1:
                    segments.append(Segment(p, Point(float(mesh[x, y + 1, 0]), float(mesh[x, y + 1, 1]))))
                if x < cols - 1:
                    segments.append(Segment(p, Point(float(mesh[x + 1, y, 0]), float(mesh[x + 1, y, 1]))))
        return segments

    @classmethod
    def generate_raw_grid(
        cls,
        center: Point,
        width: float,
        height: float,
        col_spacing: float,
        row_spacing: float,
        rotation: float = 0.0,
        warp_intensity: float = 0.0,
        relax_iterations: int = 0,
        flow_field: FlowField | None = None,
    ) -> list[Segment]:
        mesh = cls.generate_mesh(center, width, height, col_spacing, row_spacing, rotation)
        mesh = cls.warp_mesh(mesh, warp_intensity, flow_field)
        mesh = cls.relax_mesh(mesh, relax_iterations)
        return cls.mesh_to_segments(mesh)

    @staticmethod
    def clip_grid_to_shape(grid: list[Segment], shape: Polygon, snap_threshold: float = 8.0) -> list[Segment]:
        """
        Keep the parts of grid segments that lie inside shape.

        Every segment is cut at its crossings with the boundary. Crossings
        within snap_threshold of a boundary vertex latch onto that vertex,
        which avoids sliver parcels in corners. Pieces shorter than half the
        snap threshold are dropped; a piece is kept when its midpoint is
        inside the shape.
        """
        boundary = shape.to_segments()
        clipped: list[Segment] = []

        for seg in grid:
            hits: list[Point] = []
            for edge in boundary:
                hit = seg.intersect(edge)
                if hit is None:
                    continue
                if hit.dist(edge.p1) < snap_threshold:
                    hit = edge.p1
                elif hit.dist(edge.p2) < snap_threshold:
                    hit = edge.p2
                if not any(p.equals(hit, 0.01) for p in hits):
                    hits.append(hit)

            direction = seg.direction()
            points = sorted([seg.p1, seg.p2, *hits], key=lambda p: p.sub(seg.p1).dot(direction))
            for a, b in zip(points, points[1:]):
                if a.dist(b) < snap_threshold * 0.5 or a.equals(b):
                    continue
                piece = Segment(a, b)
                if shape.contains_point(piece.midpoint()):
                    clipped.append(piece)

        return clipped
