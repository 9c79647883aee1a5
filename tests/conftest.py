"""Shared pytest fixtures for canvas-spatial tests."""

import pytest

from canvas_spatial.models import CanvasSnapshot, Shape


def make_shape(shape_id, shape_type="image", x=0, y=0, w=None, h=None, meta=None, **props):
    """Build a Shape; ``w``/``h`` are only set as props when given."""
    if w is not None:
        props["w"] = w
    if h is not None:
        props["h"] = h
    return Shape(id=shape_id, type=shape_type, x=x, y=y, props=props, meta=meta or {})


@pytest.fixture
def shape():
    """Factory fixture: ``shape("shape:a", "image", x=0, y=0, w=100, h=100)``."""
    return make_shape


@pytest.fixture
def mixed_shapes():
    """Five shapes of types image, image, text, geo, image."""
    return [
        make_shape("shape:1", "image", x=0, y=0, w=400, h=300, meta={"model": "flux"}),
        make_shape("shape:2", "image", x=450, y=0, w=400, h=300, meta={"model": "sdxl"}),
        make_shape("shape:3", "text", x=0, y=400, text="Title"),
        make_shape("shape:4", "geo", x=600, y=600, w=120, h=80, geo="ellipse"),
        make_shape("shape:5", "image", x=1200, y=50, w=800, h=600, meta={"model": "flux"}),
    ]


@pytest.fixture
def snapshot(mixed_shapes):
    return CanvasSnapshot(shapes=mixed_shapes)
