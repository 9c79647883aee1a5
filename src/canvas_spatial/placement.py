"""
Non-overlapping placement search for newly created shapes.

Given anchor shapes (the sources of an image-to-image edit, say) the new
shape is placed next to them; with no anchor it goes to the viewport
centre.  The search:

  1. Obstacles are every shape except excluded ones and the anchors.
  2. Anchors are unioned into one anchor box.  With no anchor, a
     zero-size virtual anchor sits at the viewport centre.
  3. Without a real anchor, the centred candidate is tried first.
  4. Then 10 rounds of right, bottom, left, top candidates at distance
     ``gap * (attempt + 1)`` from the anchor box.  Right/left candidates
     are vertically centred on the anchor, top/bottom horizontally.
     A candidate wins when it keeps ``gap`` clear of every obstacle.
  5. Nothing free: right of the anchor at ``gap * 5``, overlap or not.

The search never fails; layout aesthetics must not block an agent.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Optional

from .config import (
    DEFAULT_SHAPE_SIZE,
    PLACEMENT_FALLBACK_MULTIPLIER,
    PLACEMENT_GAP,
    PLACEMENT_MAX_ATTEMPTS,
)
from .geometry import BoundingBox, overlaps_any, shape_box, union_boxes
from .models import Point, Shape

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"
    TOP = "top"


# Priority order for finding empty space
DIRECTIONS = (Direction.RIGHT, Direction.BOTTOM, Direction.LEFT, Direction.TOP)


def candidate_position(
    anchor: BoundingBox,
    width: float,
    height: float,
    direction: Direction,
    gap: float,
) -> Point:
    """Top-left of a ``width`` x ``height`` box ``gap`` away from ``anchor``."""
    if direction == Direction.RIGHT:
        return Point(x=anchor.right + gap, y=anchor.center_y - height / 2)
    if direction == Direction.BOTTOM:
        return Point(x=anchor.center_x - width / 2, y=anchor.bottom + gap)
    if direction == Direction.LEFT:
        return Point(x=anchor.x - width - gap, y=anchor.center_y - height / 2)
    return Point(x=anchor.center_x - width / 2, y=anchor.y - height - gap)


def search_position(
    obstacles: list[BoundingBox],
    anchor: BoundingBox,
    width: float,
    height: float,
    gap: float = PLACEMENT_GAP,
    try_center: bool = False,
    max_attempts: int = PLACEMENT_MAX_ATTEMPTS,
) -> tuple[Point, bool]:
    """Search around ``anchor`` for a free slot.

    Returns the position and whether it is actually free (False means the
    fallback was used).
    """
    if try_center:
        centered = BoundingBox(
            x=anchor.center_x - width / 2,
            y=anchor.center_y - height / 2,
            width=width,
            height=height,
        )
        if not overlaps_any(centered, obstacles, gap):
            return Point(x=centered.x, y=centered.y), True

    # Try each direction, with increasing distance if needed
    for attempt in range(max_attempts):
        effective_gap = gap * (attempt + 1)
        for direction in DIRECTIONS:
            candidate = candidate_position(anchor, width, height, direction, effective_gap)
            box = BoundingBox(x=candidate.x, y=candidate.y, width=width, height=height)
            if not overlaps_any(box, obstacles, gap):
                return candidate, True

    fallback = Point(
        x=anchor.right + gap * PLACEMENT_FALLBACK_MULTIPLIER,
        y=anchor.center_y - height / 2,
    )
    return fallback, False


def find_non_overlapping_position(
    shapes: list[Shape],
    anchor_ids: Iterable[str],
    width: float,
    height: float,
    gap: float = PLACEMENT_GAP,
    exclude_ids: Iterable[str] = (),
    viewport: Optional[BoundingBox] = None,
    max_attempts: int = PLACEMENT_MAX_ATTEMPTS,
    default_size: float = DEFAULT_SHAPE_SIZE,
) -> Point:
    """Find where a new ``width`` x ``height`` shape can go without overlap.

    Args:
        shapes: Every shape currently on the page.
        anchor_ids: Shapes to place next to.  Unknown ids are ignored; if
                    none are known the viewport centre is used instead.
        width, height: Size of the shape being placed.
        gap: Minimum clearance to keep from obstacles.
        exclude_ids: Shapes that should not count as obstacles.
        viewport: Current viewport in page space (defaults to a zero box
                  at the origin).
        max_attempts: Rounds of the four-direction search.

    Returns:
        Top-left corner for the new shape.  Always returns a position.
    """
    anchor_set = set(anchor_ids)
    excluded = set(exclude_ids)

    obstacles = [
        shape_box(s, default_size)
        for s in shapes
        if s.id not in excluded and s.id not in anchor_set
    ]

    anchor_boxes = [shape_box(s, default_size) for s in shapes if s.id in anchor_set]
    anchor = union_boxes(anchor_boxes)

    has_real_anchor = anchor is not None
    if anchor is None:
        view = viewport or BoundingBox(0, 0, 0, 0)
        anchor = BoundingBox(x=view.center_x, y=view.center_y, width=0, height=0)

    position, free = search_position(
        obstacles,
        anchor,
        width,
        height,
        gap=gap,
        try_center=not has_real_anchor,
        max_attempts=max_attempts,
    )

    if not free:
        logger.warning(
            f"No free slot for {width}x{height} after {max_attempts} attempts; "
            f"falling back to ({position.x}, {position.y})"
        )
    return position
