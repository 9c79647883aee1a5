"""Tests for snapshot parsing."""

import json

import pytest

from canvas_spatial.parser import parse_canvas_store, parse_file, parse_snapshot, snapshot_to_yaml

STORE_DOCUMENT = {
    "document": {
        "store": {
            "document:document": {"id": "document:document", "typeName": "document"},
            "page:page": {"id": "page:page", "typeName": "page", "name": "Page 1"},
            "shape:a": {
                "id": "shape:a",
                "typeName": "shape",
                "type": "image",
                "x": 10,
                "y": 20,
                "rotation": 0,
                "parentId": "page:page",
                "props": {"w": 400, "h": 300, "assetId": "asset:1"},
                "meta": {"model": "flux"},
            },
            "shape:b": {
                "id": "shape:b",
                "type": "text",
                "x": 500,
                "y": 20,
                "props": {"text": "Hello"},
                "meta": None,
            },
            "asset:1": {
                "id": "asset:1",
                "typeName": "asset",
                "type": "image",
                "props": {"name": "cat.png", "src": "https://cdn.example/cat.png", "mimeType": "image/png", "w": 400, "h": 300},
            },
            "broken": "not a record",
        }
    }
}

SIMPLE_YAML = """
shapes:
  - id: shape:a
    type: image
    x: 0
    y: 0
    props: {w: 400, h: 300, assetId: "asset:1"}
    meta: {model: flux}
  - id: shape:b
    type: geo
    x: 500
    y: 0
    props: {geo: star}
assets:
  asset:1:
    props: {name: cat.png}
"""


class TestCanvasStore:

    def test_splits_shapes_and_assets(self):
        snapshot = parse_canvas_store(STORE_DOCUMENT)
        assert [s.id for s in snapshot.shapes] == ["shape:a", "shape:b"]
        assert list(snapshot.assets) == ["asset:1"]
        assert snapshot.assets["asset:1"].props.mime_type == "image/png"
        assert snapshot.get_shape("shape:b").meta == {}
        assert snapshot.get_shape("shape:a").width() == 400

    @pytest.mark.parametrize("data", [None, [], {}, {"document": 3}, {"document": {"store": []}}])
    def test_malformed_store_is_empty(self, data):
        snapshot = parse_canvas_store(data)
        assert snapshot.shapes == []
        assert snapshot.assets == {}

    def test_json_text(self):
        snapshot = parse_snapshot(json.dumps(STORE_DOCUMENT))
        assert len(snapshot.shapes) == 2

    def test_unwrapped_store(self):
        snapshot = parse_snapshot(json.dumps(STORE_DOCUMENT["document"]))
        assert len(snapshot.shapes) == 2

    def test_tab_indented_json(self):
        text = json.dumps(STORE_DOCUMENT, indent="\t")
        assert "\t" in text
        snapshot = parse_snapshot(text)
        assert [s.id for s in snapshot.shapes] == ["shape:a", "shape:b"]

    def test_malformed_record_is_skipped(self):
        store = {"document": {"store": {
            "shape:ok": {"id": "shape:ok", "type": "geo", "x": 0, "y": 0, "props": {}},
            "shape:bad": {"id": "shape:bad", "type": "geo", "x": 0, "y": 0, "props": []},
            "asset:bad": {"id": "asset:bad", "typeName": "asset", "props": "nope"},
        }}}
        snapshot = parse_canvas_store(store)
        assert [s.id for s in snapshot.shapes] == ["shape:ok"]
        assert snapshot.assets == {}


class TestSimpleFormat:

    def test_yaml(self):
        snapshot = parse_snapshot(SIMPLE_YAML)
        assert [s.type for s in snapshot.shapes] == ["image", "geo"]
        assert snapshot.assets["asset:1"].props.name == "cat.png"

    def test_empty_input_raises(self):
        with pytest.raises(ValueError):
            parse_snapshot("")

    def test_non_mapping_raises(self):
        with pytest.raises(ValueError):
            parse_snapshot("- just\n- a list\n")

    def test_yaml_round_trip(self):
        snapshot = parse_snapshot(SIMPLE_YAML)
        again = parse_snapshot(snapshot_to_yaml(snapshot))
        assert [s.model_dump() for s in again.shapes] == [s.model_dump() for s in snapshot.shapes]
        assert again.assets["asset:1"].props.name == "cat.png"

    def test_parse_file(self, tmp_path):
        path = tmp_path / "canvas.yaml"
        path.write_text(SIMPLE_YAML, encoding="utf-8")
        assert len(parse_file(str(path)).shapes) == 2
