"""Tests for the non-overlapping placement search."""

from canvas_spatial.geometry import BoundingBox, overlaps_any, shape_box
from canvas_spatial.placement import Direction, candidate_position, find_non_overlapping_position


def test_candidates_center_on_anchor():
    anchor = BoundingBox(0, 0, 100, 100)
    right = candidate_position(anchor, 80, 50, Direction.RIGHT, 30)
    bottom = candidate_position(anchor, 80, 50, Direction.BOTTOM, 30)
    left = candidate_position(anchor, 80, 50, Direction.LEFT, 30)
    top = candidate_position(anchor, 80, 50, Direction.TOP, 30)
    assert (right.x, right.y) == (130, 25)
    assert (bottom.x, bottom.y) == (10, 130)
    assert (left.x, left.y) == (-110, 25)
    assert (top.x, top.y) == (10, -80)


def test_places_right_of_anchor_when_free(shape):
    shapes = [shape("shape:anchor", x=0, y=0, w=100, h=100)]
    pos = find_non_overlapping_position(shapes, ["shape:anchor"], 80, 50)
    assert (pos.x, pos.y) == (130, 25)


def test_skips_blocked_direction(shape):
    shapes = [
        shape("shape:anchor", x=0, y=0, w=100, h=100),
        shape("shape:blocker", x=130, y=0, w=100, h=100),
    ]
    pos = find_non_overlapping_position(shapes, ["shape:anchor"], 80, 50)
    assert (pos.x, pos.y) == (10, 130)


def test_multiple_anchors_are_unioned(shape):
    shapes = [
        shape("shape:a", x=0, y=0, w=100, h=100),
        shape("shape:b", x=0, y=200, w=300, h=100),
    ]
    pos = find_non_overlapping_position(shapes, ["shape:a", "shape:b"], 100, 100)
    assert (pos.x, pos.y) == (330, 100)


def test_no_anchor_uses_viewport_center(shape):
    viewport = BoundingBox(0, 0, 1000, 800)
    pos = find_non_overlapping_position([], [], 200, 100, viewport=viewport)
    assert (pos.x, pos.y) == (400, 350)


def test_unknown_anchor_ids_fall_back_to_viewport(shape):
    viewport = BoundingBox(100, 100, 200, 200)
    pos = find_non_overlapping_position([shape("shape:x", x=5000, y=5000)], ["shape:missing"], 20, 20, viewport=viewport)
    assert (pos.x, pos.y) == (190, 190)


def test_blocked_center_searches_outward(shape):
    shapes = [shape("shape:obstacle", x=400, y=300, w=200, h=200)]
    viewport = BoundingBox(0, 0, 1000, 800)
    pos = find_non_overlapping_position(shapes, [], 100, 100, viewport=viewport)
    # first free slot is "right" at the fifth distance step (30 * 5)
    assert (pos.x, pos.y) == (650, 350)
    box = BoundingBox(pos.x, pos.y, 100, 100)
    assert not overlaps_any(box, [shape_box(s) for s in shapes], gap=30)


def test_excluded_shapes_are_not_obstacles(shape):
    shapes = [
        shape("shape:anchor", x=0, y=0, w=100, h=100),
        shape("shape:ghost", x=130, y=0, w=100, h=100),
    ]
    pos = find_non_overlapping_position(shapes, ["shape:anchor"], 80, 50, exclude_ids=["shape:ghost"])
    assert (pos.x, pos.y) == (130, 25)


def test_result_is_clear_of_obstacles(shape):
    shapes = [shape("shape:anchor", x=0, y=0, w=200, h=200)]
    # ring of obstacles with one gap far to the left
    shapes += [shape(f"shape:r{i}", x=230 + i * 10, y=-300, w=10, h=800) for i in range(3)]
    shapes.append(shape("shape:below", x=-400, y=230, w=1000, h=300))
    shapes.append(shape("shape:above", x=-400, y=-400, w=1000, h=370))
    pos = find_non_overlapping_position(shapes, ["shape:anchor"], 100, 100, gap=30)
    obstacles = [shape_box(s) for s in shapes if s.id != "shape:anchor"]
    assert not overlaps_any(BoundingBox(pos.x, pos.y, 100, 100), obstacles, gap=30)


def test_saturated_canvas_falls_back(shape):
    shapes = [
        shape("shape:anchor", x=0, y=0, w=100, h=100),
        shape("shape:wall", x=-10000, y=-10000, w=20000, h=20000),
    ]
    pos = find_non_overlapping_position(shapes, ["shape:anchor"], 60, 40, gap=30)
    assert (pos.x, pos.y) == (250, 30)


def test_deterministic(shape):
    shapes = [shape(f"shape:{i}", x=(i * 173) % 900, y=(i * 311) % 700, w=120, h=90) for i in range(15)]
    first = find_non_overlapping_position(shapes, ["shape:3"], 150, 150)
    second = find_non_overlapping_position(list(shapes), ["shape:3"], 150, 150)
    assert first == second
