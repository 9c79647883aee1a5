"""Axis-aligned bounding box primitives shared by the layout algorithms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .config import DEFAULT_SHAPE_SIZE
from .models import Shape


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in page space (top-left corner + size)."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @classmethod
    def from_extent(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> BoundingBox:
        return cls(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


def shape_box(shape: Shape, default_size: float = DEFAULT_SHAPE_SIZE) -> BoundingBox:
    """Bounding box of a shape, using ``default_size`` for missing w/h."""
    return BoundingBox(
        x=shape.x,
        y=shape.y,
        width=shape.width(default_size),
        height=shape.height(default_size),
    )


def boxes_overlap(a: BoundingBox, b: BoundingBox, gap: float = 0) -> bool:
    """Check whether two boxes come closer than ``gap`` on both axes.

    Boxes separated by at least ``gap`` along x *or* y do not overlap.
    With ``gap=0``, boxes that merely touch along an edge do not overlap.
    """
    return not (
        a.right + gap <= b.x
        or b.right + gap <= a.x
        or a.bottom + gap <= b.y
        or b.bottom + gap <= a.y
    )


def overlaps_any(box: BoundingBox, others: Iterable[BoundingBox], gap: float = 0) -> bool:
    return any(boxes_overlap(box, other, gap) for other in others)


def union_boxes(boxes: Iterable[BoundingBox]) -> Optional[BoundingBox]:
    """Smallest box enclosing every box in ``boxes``.

    Returns None when ``boxes`` is empty.
    """
    min_x = float("inf")
    min_y = float("inf")
    max_x = float("-inf")
    max_y = float("-inf")

    for box in boxes:
        min_x = min(min_x, box.x)
        min_y = min(min_y, box.y)
        max_x = max(max_x, box.right)
        max_y = max(max_y, box.bottom)

    if min_x == float("inf"):
        return None
    return BoundingBox.from_extent(min_x, min_y, max_x, max_y)


def contains(outer: BoundingBox, inner: BoundingBox) -> bool:
    """True when ``inner`` lies entirely within ``outer`` (edges inclusive)."""
    return (
        outer.x <= inner.x
        and outer.y <= inner.y
        and inner.right <= outer.right
        and inner.bottom <= outer.bottom
    )
