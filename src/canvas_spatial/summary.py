"""
Grid-clustered layout summary — a cheap overview of a large canvas.

Instead of per-shape coordinates, the summary reports a handful of
spatial clusters:

  1. Every shape is dropped into a ``cell_size`` grid cell by its top-left
     corner.  Each shape touches exactly one cell, so this pass is O(n).
  2. Occupied cells are nodes of a 4-connected grid graph.  An iterative
     stack-based flood fill (no recursion, so one huge contiguous region
     cannot blow the stack) merges them into connected components.
  3. Each component becomes a ``Cluster``: union bounds, member count,
     type histogram and up to three sample briefs.
  4. Clusters are ordered by descending count; ties keep discovery order.

The overall bounds and type counts cover every shape, and
``suggested_origin`` sits ``origin_offset`` units right of the content,
top-aligned with it, as a free spot to start new layout.

Bounds here treat missing w/h as 0, not the 300 default used by layout.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .config import (
    CLUSTER_CELL,
    CLUSTER_DEFAULT_SIZE,
    CLUSTER_SAMPLE_SIZE,
    SUGGESTED_ORIGIN_OFFSET,
)
from .geometry import BoundingBox, shape_box, union_boxes
from .grouping import spatial_cell
from .models import Asset, Cluster, ClusterBounds, LayoutSummary, Point, Shape
from .briefs import compute_brief, count_types

logger = logging.getLogger(__name__)

# 4-connected neighbourhood, in push order
NEIGHBOUR_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1))

Cell = tuple[int, int]


@dataclass
class _CellItem:
    """Lightweight per-shape descriptor kept in a grid cell."""
    box: BoundingBox
    type: str
    brief: str


def _round(value: float) -> float:
    """Round half up (so -0.5 -> 0, 2.5 -> 3)."""
    return math.floor(value + 0.5)


def _cluster_bounds(box: BoundingBox) -> ClusterBounds:
    return ClusterBounds(min_x=box.x, min_y=box.y, max_x=box.right, max_y=box.bottom)


def build_grid(
    shapes: list[Shape],
    assets: Optional[dict[str, Asset]] = None,
    cell_size: float = CLUSTER_CELL,
) -> dict[Cell, list[_CellItem]]:
    """Quantize shapes into grid cells, cells in first-occupied order."""
    grid: dict[Cell, list[_CellItem]] = {}
    for shape in shapes:
        cell = spatial_cell(shape.x, shape.y, cell_size)
        grid.setdefault(cell, []).append(_CellItem(
            box=shape_box(shape, CLUSTER_DEFAULT_SIZE),
            type=shape.type,
            brief=compute_brief(shape, assets),
        ))
    return grid


def connected_regions(grid: dict[Cell, list]) -> list[list[Cell]]:
    """Flood-fill occupied cells into 4-connected regions.

    Regions come out in discovery order; cells within a region in
    traversal order.
    """
    visited: set[Cell] = set()
    regions: list[list[Cell]] = []

    for start in grid:
        if start in visited:
            continue
        region: list[Cell] = []
        stack = [start]
        while stack:
            cell = stack.pop()
            if cell in visited:
                continue
            visited.add(cell)
            region.append(cell)
            cx, cy = cell
            for dx, dy in NEIGHBOUR_OFFSETS:
                neighbour = (cx + dx, cy + dy)
                if neighbour not in visited and neighbour in grid:
                    stack.append(neighbour)
        regions.append(region)

    return regions


def cluster_shapes(
    shapes: list[Shape],
    assets: Optional[dict[str, Asset]] = None,
    cell_size: float = CLUSTER_CELL,
    sample_size: int = CLUSTER_SAMPLE_SIZE,
) -> list[Cluster]:
    """Group shapes into flood-filled grid clusters, largest first."""
    grid = build_grid(shapes, assets, cell_size)
    clusters: list[Cluster] = []

    for region in connected_regions(grid):
        items = [item for cell in region for item in grid[cell]]
        union = union_boxes(item.box for item in items)
        types: dict[str, int] = {}
        briefs: list[str] = []
        for item in items:
            types[item.type] = types.get(item.type, 0) + 1
            if len(briefs) < sample_size:
                briefs.append(item.brief)

        clusters.append(Cluster(
            center=Point(x=_round(union.center_x), y=_round(union.center_y)),
            bounds=_cluster_bounds(union),
            count=len(items),
            types=types,
            sample_briefs=briefs,
        ))

    # Stable: ties keep discovery order
    clusters.sort(key=lambda c: c.count, reverse=True)
    return clusters


def summarize_layout(
    shapes: list[Shape],
    assets: Optional[dict[str, Asset]] = None,
    cell_size: float = CLUSTER_CELL,
    sample_size: int = CLUSTER_SAMPLE_SIZE,
    origin_offset: float = SUGGESTED_ORIGIN_OFFSET,
) -> LayoutSummary:
    """Build the spatial overview for ``shapes``.

    Zero shapes yields ``LayoutSummary(shape_count=0, empty=True)``.
    """
    if not shapes:
        return LayoutSummary(shape_count=0, empty=True)

    overall = union_boxes(shape_box(s, CLUSTER_DEFAULT_SIZE) for s in shapes)
    clusters = cluster_shapes(shapes, assets, cell_size, sample_size)

    logger.info(f"Layout summary: {len(shapes)} shapes in {len(clusters)} clusters")

    return LayoutSummary(
        shape_count=len(shapes),
        bounds=_cluster_bounds(overall),
        type_counts=count_types(shapes),
        clusters=clusters,
        suggested_origin=Point(
            x=_round(overall.right + origin_offset),
            y=_round(overall.y),
        ),
    )
