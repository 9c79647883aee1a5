"""Tests for the MCP tool handlers, run directly against a session."""

import asyncio
import json

import pytest

from canvas_spatial.server import TOOL_HANDLERS, TOOLS, build_server, dispatch_tool
from canvas_spatial.session import CanvasSession


def call(session, name, arguments=None):
    result = asyncio.run(dispatch_tool(session, name, arguments or {}))
    assert len(result) == 1
    try:
        return json.loads(result[0].text)
    except json.JSONDecodeError:
        return result[0].text


@pytest.fixture
def session(snapshot):
    return CanvasSession(snapshot=snapshot)


def test_every_tool_has_a_handler(session):
    assert {tool.name for tool in TOOLS} == set(TOOL_HANDLERS)
    assert build_server(session) is not None


def test_unknown_tool(session):
    assert call(session, "paint_everything") == "Unknown tool: paint_everything"


def test_list_shapes_assigns_refs(session):
    listing = call(session, "list_shapes")
    assert listing["totalShapes"] == 5
    assert listing["summary"] == "3 image, 1 text, 1 geo"
    assert [row["ref"] for row in listing["shapes"]] == ["s1", "s2", "s3", "s4", "s5"]
    assert session.refs.resolve("s3") == "shape:3"


def test_list_shapes_filters_and_groups(session):
    listing = call(session, "list_shapes", {"type": "image", "groupBy": "meta.model", "detail": "full"})
    assert listing["totalShapes"] == 3
    assert set(listing["groups"]) == {"flux", "sdxl"}
    assert listing["groups"]["flux"][0]["id"] == "shape:1"
    # refs now only cover the filtered listing
    assert session.refs.size == 3
    assert session.refs.get_ref("shape:3") is None


def test_list_shapes_search(session):
    listing = call(session, "list_shapes", {"search": "ELLIPSE"})
    assert [row["brief"] for row in listing["shapes"]] == ["geo: ellipse"]


def test_get_shapes_reports_missing(session):
    call(session, "list_shapes")
    details = call(session, "get_shapes", {"shapeIds": ["s1", "nope"]})
    assert details["shapes"][0]["id"] == "shape:1"
    assert details["notFound"] == ["nope"]
    assert "error" in call(session, "get_shapes", {"shapeIds": ["nope"]})


def test_layout_summary(session):
    summary = call(session, "get_layout_summary")
    assert summary["shapeCount"] == 5
    assert sum(c["count"] for c in summary["clusters"]) == 5
    empty = call(CanvasSession(), "get_layout_summary")
    assert empty == {"shapeCount": 0, "empty": True}


def test_organize_by_refs_applies_moves(session):
    call(session, "list_shapes")
    result = call(session, "organize_shapes", {
        "strategy": "grid",
        "shapeIds": ["s1", "s2"],
        "origin": {"x": 3000, "y": 0},
    })
    assert result["success"] is True
    assert result["totalMoved"] == 2
    assert result["totalLabelsAdded"] == 0
    assert result["moves"][1] == {"shapeId": "shape:2", "x": 3440, "y": 0}
    assert session.snapshot.get_shape("shape:2").x == 3440
    assert session.snapshot.get_shape("shape:3").x == 0


def test_organize_nothing(session):
    assert call(session, "organize_shapes", {"strategy": "grid", "shapeIds": ["ghost"]}) == {
        "error": "No shapes to organize"
    }


def test_create_frame(session):
    call(session, "list_shapes")
    frame = call(session, "create_frame", {"label": "Images", "shapeIds": ["s1", "s2"], "padding": 10})
    assert frame["frameBounds"] == {"x": -10, "y": -42, "w": 870, "h": 352}
    assert frame["childShapeIds"] == ["shape:1", "shape:2"]
    assert frame["enclosedCount"] == 2
    assert "error" in call(session, "create_frame", {"label": "x", "shapeIds": ["ghost"]})


def test_find_placement(session):
    call(session, "list_shapes")
    pos = call(session, "find_placement", {"width": 100, "height": 100, "anchorIds": ["s5"]})
    assert pos == {"x": 2030, "y": 300}


def test_load_canvas(tmp_path):
    session = CanvasSession()
    session.refs.assign(["shape:old"])
    loaded = call(session, "load_canvas", {"content": '{"shapes": [{"id": "shape:n", "type": "geo"}]}'})
    assert loaded == {"status": "success", "shapes": 1, "assets": 0}
    assert session.refs.size == 0

    path = tmp_path / "canvas.json"
    path.write_text('{"shapes": []}', encoding="utf-8")
    assert call(session, "load_canvas", {"path": str(path)})["shapes"] == 0
    assert "error" in call(session, "load_canvas", {})
    assert "error" in call(session, "load_canvas", {"content": "   "})
