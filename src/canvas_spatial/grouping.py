"""
Grouping engine — partition a shape list into named buckets.

Strategies (wire names match the ``organize_shapes`` tool):

  grid                — everything in one bucket, ``"all"``
  by-type             — bucket per shape ``type``
  by-metadata         — bucket per ``meta[field]`` value (default field: model)
  by-spatial-cluster  — bucket per coarse 500-unit cell, ``"cluster (gx,gy)"``

The spatial strategy does NOT merge neighbouring cells; that is what the
flood-fill clustering in ``summary`` is for.

Buckets keep the relative input order of their shapes.  A shape missing
the relevant field lands in ``"unknown"`` rather than being dropped, so
the union of all buckets is always the input multiset.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Optional, TypeVar

from .config import (
    DEFAULT_GROUP_FIELD,
    SPATIAL_GROUP_CELL,
    SPATIAL_ROW_BAND,
    UNKNOWN_GROUP,
)
from .models import Shape

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GroupStrategy(str, Enum):
    GRID = "grid"
    BY_TYPE = "by-type"
    BY_METADATA = "by-metadata"
    BY_SPATIAL_CLUSTER = "by-spatial-cluster"

    @classmethod
    def parse(cls, value) -> GroupStrategy:
        """Coerce a wire string to a strategy; unknown names fall back to grid."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            logger.warning(f"Unknown grouping strategy {value!r}, using 'grid'")
            return cls.GRID


def _key_text(value: Any) -> str:
    """Stringify a metadata value the way the web client displays it."""
    if value is None:
        return UNKNOWN_GROUP
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def spatial_cell(x: float, y: float, cell_size: float) -> tuple[int, int]:
    """Grid cell containing (x, y); negative coordinates floor away from zero."""
    return math.floor(x / cell_size), math.floor(y / cell_size)


def group_key(
    shape: Shape,
    strategy: GroupStrategy,
    group_field: Optional[str] = None,
    cell_size: float = SPATIAL_GROUP_CELL,
) -> str:
    """Bucket key for one shape under ``strategy``."""
    if strategy == GroupStrategy.BY_TYPE:
        return shape.type or UNKNOWN_GROUP
    if strategy == GroupStrategy.BY_METADATA:
        return _key_text(shape.meta.get(group_field or DEFAULT_GROUP_FIELD))
    if strategy == GroupStrategy.BY_SPATIAL_CLUSTER:
        gx, gy = spatial_cell(shape.x, shape.y, cell_size)
        return f"cluster ({gx},{gy})"
    return "all"


def group_shapes(
    shapes: list[Shape],
    strategy,
    group_field: Optional[str] = None,
    cell_size: float = SPATIAL_GROUP_CELL,
) -> dict[str, list[Shape]]:
    """Partition ``shapes`` into ordered buckets.

    Args:
        shapes: Shapes to group.  Not modified.
        strategy: A ``GroupStrategy`` or its wire name.
        group_field: Meta key for ``by-metadata`` (defaults to "model").
        cell_size: Cell size for ``by-spatial-cluster``.

    Returns:
        Mapping of bucket key to shapes, keys in first-seen order.
        Empty input gives an empty dict.
    """
    strategy = GroupStrategy.parse(strategy)
    groups: dict[str, list[Shape]] = {}

    for shape in shapes:
        key = group_key(shape, strategy, group_field, cell_size)
        groups.setdefault(key, []).append(shape)

    logger.debug(f"Grouped {len(shapes)} shapes into {len(groups)} buckets ({strategy.value})")
    return groups


# ---------------------------------------------------------------------------
# Listing groups
# ---------------------------------------------------------------------------

LISTING_GROUP_BY = ("none", "type", "meta.model", "meta.prompt", "spatial-row")


def listing_key(shape: Shape, group_by: str, band: float = SPATIAL_ROW_BAND) -> str:
    """Bucket key used when listing shapes (``list_shapes(groupBy=...)``).

    ``spatial-row`` bands shapes whose y is within ``band`` units together.
    """
    if group_by == "type":
        return shape.type or UNKNOWN_GROUP
    if group_by.startswith("meta."):
        return _key_text(shape.meta.get(group_by[len("meta."):]))
    if group_by == "spatial-row":
        # round half up, not Python's banker's rounding
        row = math.floor(shape.y / band + 0.5) * band
        return f"y≈{row}"
    return "all"


def group_listing(
    shapes: list[Shape],
    rows: list[T],
    group_by: str,
    band: float = SPATIAL_ROW_BAND,
) -> dict[str, list[T]]:
    """Group listing ``rows`` (one per shape, same order) by ``group_by``."""
    groups: dict[str, list[T]] = {}
    for shape, row in zip(shapes, rows):
        groups.setdefault(listing_key(shape, group_by, band), []).append(row)
    return groups
