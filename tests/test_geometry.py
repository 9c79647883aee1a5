"""Tests for bounding box primitives."""

from canvas_spatial.geometry import (
    BoundingBox,
    boxes_overlap,
    contains,
    overlaps_any,
    shape_box,
    union_boxes,
)


def test_touching_boxes_do_not_overlap():
    a = BoundingBox(0, 0, 100, 100)
    b = BoundingBox(100, 0, 100, 100)
    assert not boxes_overlap(a, b)


def test_intersecting_boxes_overlap():
    assert boxes_overlap(BoundingBox(0, 0, 100, 100), BoundingBox(50, 50, 100, 100))


def test_gap_counts_as_overlap():
    a = BoundingBox(0, 0, 100, 100)
    b = BoundingBox(120, 0, 100, 100)
    assert boxes_overlap(a, b, gap=30)
    assert not boxes_overlap(a, b, gap=20)


def test_separation_on_one_axis_is_enough():
    a = BoundingBox(0, 0, 100, 100)
    b = BoundingBox(50, 200, 100, 100)
    assert not boxes_overlap(a, b, gap=50)
    assert not overlaps_any(a, [b], gap=50)
    assert overlaps_any(a, [b, BoundingBox(90, 90, 5, 5)], gap=0)


def test_union():
    union = union_boxes([BoundingBox(0, 0, 10, 10), BoundingBox(-5, 20, 10, 10)])
    assert union == BoundingBox(-5, 0, 15, 30)
    assert union_boxes([]) is None


def test_contains():
    outer = BoundingBox(0, 0, 100, 100)
    assert contains(outer, BoundingBox(10, 10, 90, 90))
    assert not contains(outer, BoundingBox(10, 10, 91, 10))


def test_shape_box_defaults(shape):
    assert shape_box(shape("shape:a", x=5, y=6)) == BoundingBox(5, 6, 300, 300)
    assert shape_box(shape("shape:a", x=5, y=6), default_size=0) == BoundingBox(5, 6, 0, 0)
    assert shape_box(shape("shape:a", w=10, h=20)) == BoundingBox(0, 0, 10, 20)
