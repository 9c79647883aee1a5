"""
Row-packing organize algorithm and frame bounds for canvas-spatial.

Turns grouping output into concrete (x, y) targets without a 2D bin
packer.  The result is deliberately simple and deterministic: an agent
should be able to predict where things land.

Layout:

  1. Group keys are sorted lexicographically.
  2. The origin is the caller's, or the top-left of the shapes being moved
     (computed once, before anything moves).
  3. Groups stack vertically.  Each group optionally gets a 60px label row
     (never for the single-bucket ``grid`` strategy).
  4. Within a group, shapes run left to right and wrap to a new row when
     the next shape would cross ``origin_x + max_row_width``, but only if
     the row already holds a shape.  A single oversized shape is placed
     as-is; the shape after it wraps.
  5. Row pitch is the tallest shape in the row + ``spacing``; group pitch
     is the last row's height + ``group_spacing``.

Spacing defaults:
  - Shapes within a row / between rows: 40px
  - Between groups: 120px

Frames enclose a subset with ``padding`` on every side plus 32px of
headroom for the frame's title bar.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import (
    DEFAULT_FRAME_PADDING,
    DEFAULT_GROUP_SPACING,
    DEFAULT_SHAPE_SIZE,
    DEFAULT_SPACING,
    FRAME_LABEL_HEIGHT,
    GROUP_LABEL_FONT_SIZE,
    GROUP_LABEL_HEIGHT,
    GROUP_LABEL_WIDTH,
    MAX_ROW_WIDTH,
)
from .geometry import BoundingBox, shape_box, union_boxes
from .grouping import GroupStrategy, group_shapes
from .models import (
    FrameBounds,
    FrameResult,
    GroupReport,
    LabelInstruction,
    OrganizeResult,
    PlacementInstruction,
    Shape,
)

logger = logging.getLogger(__name__)


@dataclass
class OrganizeOptions:
    """Layout options for the organize algorithm."""
    spacing: float = DEFAULT_SPACING
    group_spacing: float = DEFAULT_GROUP_SPACING
    origin: Optional[tuple[float, float]] = None
    add_labels: bool = True
    group_field: Optional[str] = None
    max_row_width: float = MAX_ROW_WIDTH
    label_height: float = GROUP_LABEL_HEIGHT
    label_font_size: int = GROUP_LABEL_FONT_SIZE
    label_width: float = GROUP_LABEL_WIDTH
    default_size: float = DEFAULT_SHAPE_SIZE


# ---------------------------------------------------------------------------
# Core layout algorithm
# ---------------------------------------------------------------------------

def _layout_origin(shapes: list[Shape], options: OrganizeOptions) -> tuple[float, float]:
    if options.origin is not None:
        return options.origin
    return min(s.x for s in shapes), min(s.y for s in shapes)


def compute_row_layout(
    groups: dict[str, list[Shape]],
    options: Optional[OrganizeOptions] = None,
    labeled: bool = True,
) -> OrganizeResult:
    """
    Core row-packing algorithm over already-grouped shapes.

    Args:
        groups: Bucket key -> shapes, as returned by ``group_shapes``.
        options: Spacing, origin and label settings.
        labeled: Whether groups get a label row.  Combined with
                 ``options.add_labels``; callers pass False for ``grid``.

    Returns:
        An ``OrganizeResult`` whose moves/labels the caller applies.
    """
    opts = options or OrganizeOptions()
    all_shapes = [s for members in groups.values() for s in members]
    if not all_shapes:
        return OrganizeResult()

    origin_x, origin_y = _layout_origin(all_shapes, opts)
    emit_labels = labeled and opts.add_labels

    result = OrganizeResult()
    cursor_y = origin_y

    for key in sorted(groups):
        members = groups[key]
        if not members:
            continue

        if emit_labels:
            result.labels.append(LabelInstruction(
                text=key,
                x=origin_x,
                y=cursor_y,
                font_size=opts.label_font_size,
                width=opts.label_width,
            ))
            cursor_y += opts.label_height

        # Arrange shapes in rows within this group
        row_x = origin_x
        row_max_h = 0

        for shape in members:
            w = shape.width(opts.default_size)
            h = shape.height(opts.default_size)

            # Wrap only once the row holds something
            if row_x > origin_x and row_x + w > origin_x + opts.max_row_width:
                cursor_y += row_max_h + opts.spacing
                row_x = origin_x
                row_max_h = 0

            result.moves.append(PlacementInstruction(shape_id=shape.id, x=row_x, y=cursor_y))
            row_x += w + opts.spacing
            row_max_h = max(row_max_h, h)

        cursor_y += row_max_h + opts.group_spacing
        result.groups.append(GroupReport(label=key, shape_count=len(members)))

    return result


def organize_shapes(
    shapes: list[Shape],
    strategy="grid",
    options: Optional[OrganizeOptions] = None,
) -> OrganizeResult:
    """Group ``shapes`` under ``strategy`` and row-pack the groups.

    Empty input returns an empty ``OrganizeResult``; the caller decides how
    to report "nothing to organize".
    """
    opts = options or OrganizeOptions()
    strategy = GroupStrategy.parse(strategy)

    if not shapes:
        logger.info("organize_shapes called with no shapes")
        return OrganizeResult()

    groups = group_shapes(shapes, strategy, opts.group_field)
    result = compute_row_layout(
        groups,
        opts,
        labeled=strategy != GroupStrategy.GRID,
    )

    logger.info(
        f"Organized {result.total_moved} shapes into {len(result.groups)} groups "
        f"({strategy.value}, {result.total_labels_added} labels)"
    )
    return result


def apply_moves(shapes: list[Shape], moves: list[PlacementInstruction]) -> list[Shape]:
    """Return copies of ``shapes`` with ``moves`` applied.

    Shapes without a move are returned unchanged (same object).  The input
    list and its shapes are not modified.
    """
    targets = {m.shape_id: m for m in moves}
    moved = []
    for shape in shapes:
        move = targets.get(shape.id)
        if move is None:
            moved.append(shape)
        else:
            moved.append(shape.model_copy(update={"x": move.x, "y": move.y}))
    return moved


# ---------------------------------------------------------------------------
# Frame bounds
# ---------------------------------------------------------------------------

def compute_frame_bounds(
    shapes: list[Shape],
    padding: float = DEFAULT_FRAME_PADDING,
    label_height: float = FRAME_LABEL_HEIGHT,
    default_size: float = DEFAULT_SHAPE_SIZE,
) -> FrameBounds:
    """Compute a padded frame enclosing ``shapes``.

    The frame extends ``padding`` beyond the shapes' union on every side,
    plus ``label_height`` above for the title bar.

    Raises:
        ValueError: if ``shapes`` is empty.
    """
    union: Optional[BoundingBox] = union_boxes(shape_box(s, default_size) for s in shapes)
    if union is None:
        raise ValueError("Cannot compute frame bounds for an empty shape set")

    return FrameBounds(
        x=union.x - padding,
        y=union.y - padding - label_height,
        w=union.width + padding * 2,
        h=union.height + padding * 2 + label_height,
    )


def create_frame(
    shapes: list[Shape],
    label: str,
    padding: float = DEFAULT_FRAME_PADDING,
) -> FrameResult:
    """Frame bounds plus the member ids (unchanged order) for reparenting."""
    bounds = compute_frame_bounds(shapes, padding=padding)
    logger.debug(f"Frame {label!r} encloses {len(shapes)} shapes at {bounds}")
    return FrameResult(label=label, bounds=bounds, child_ids=[s.id for s in shapes])
