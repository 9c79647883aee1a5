"""Canvas snapshot parser for canvas-spatial.

Supports two formats:
1. tldraw store documents (``{"document": {"store": {id: record, ...}}}``),
   as persisted by the web editor
2. Simplified snapshots (``{"shapes": [...], "assets": [...]}``)

Either may be written as JSON or YAML.  JSON is tried first (PyYAML rejects
tab indentation, which JSON allows), then YAML.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .config import SHAPE_ID_PREFIX
from .models import Asset, CanvasSnapshot, Shape

logger = logging.getLogger(__name__)

ASSET_ID_PREFIX = "asset:"


def parse_snapshot(text: str) -> CanvasSnapshot:
    """Parse a JSON or YAML string into a CanvasSnapshot."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = yaml.safe_load(text)
    if not data:
        raise ValueError("Empty canvas input")
    if not isinstance(data, dict):
        raise ValueError(f"Canvas input must be a mapping, got {type(data).__name__}")

    # tldraw store document, possibly without the outer wrapper
    if "document" in data or "store" in data:
        return parse_canvas_store(data if "document" in data else {"document": data})

    return _parse_simple_format(data)


def parse_file(path: str) -> CanvasSnapshot:
    """Parse a JSON or YAML file into a CanvasSnapshot."""
    content = Path(path).read_text(encoding="utf-8")
    return parse_snapshot(content)


def parse_canvas_store(canvas_data) -> CanvasSnapshot:
    """Split a tldraw store document into shapes and assets.

    Records are classified by ``typeName`` or, failing that, by id prefix.
    Anything else in the store (pages, camera, instance state) is skipped.
    A missing or malformed store yields an empty snapshot.
    """
    if not isinstance(canvas_data, dict):
        return CanvasSnapshot()

    document = canvas_data.get("document")
    store = document.get("store") if isinstance(document, dict) else None
    if not isinstance(store, dict):
        return CanvasSnapshot()

    shapes: list[Shape] = []
    assets: dict[str, Asset] = {}

    for record in store.values():
        if not isinstance(record, dict):
            continue
        record_id = record.get("id")
        if not record_id or not isinstance(record_id, str):
            continue

        try:
            if record.get("typeName") == "shape" or record_id.startswith(SHAPE_ID_PREFIX):
                shapes.append(Shape.model_validate(record))
            elif record.get("typeName") == "asset" or record_id.startswith(ASSET_ID_PREFIX):
                assets[record_id] = Asset.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Skipping malformed record {record_id}: {e.error_count()} validation error(s)")

    logger.debug(f"Parsed store: {len(shapes)} shapes, {len(assets)} assets")
    return CanvasSnapshot(shapes=shapes, assets=assets)


def _parse_simple_format(data: dict) -> CanvasSnapshot:
    """Parse the simplified snapshot format.

    Example:
        shapes:
          - id: shape:a
            type: image
            x: 0
            y: 0
            props: {w: 400, h: 300, assetId: "asset:1"}
            meta: {model: flux}
          - id: shape:b
            type: text
            x: 500
            y: 0
            props: {text: "Hello"}
        assets:
          - id: asset:1
            props: {name: "cat.png", src: "https://..."}

    ``assets`` may also be a mapping of id -> record.
    """
    shapes = [Shape.model_validate(s) for s in data.get("shapes") or []]

    raw_assets = data.get("assets") or []
    if isinstance(raw_assets, dict):
        raw_assets = [
            {"id": asset_id, **record} for asset_id, record in raw_assets.items()
        ]
    assets = {}
    for record in raw_assets:
        asset = Asset.model_validate(record)
        assets[asset.id] = asset

    return CanvasSnapshot(shapes=shapes, assets=assets)


def snapshot_to_yaml(snapshot: CanvasSnapshot) -> str:
    """Serialize a CanvasSnapshot back to the simplified YAML format."""
    data = {"shapes": [], "assets": []}

    for shape in snapshot.shapes:
        shape_data = {
            "id": shape.id,
            "type": shape.type,
            "x": shape.x,
            "y": shape.y,
        }
        if shape.rotation:
            shape_data["rotation"] = shape.rotation
        if shape.props:
            shape_data["props"] = shape.props
        if shape.meta:
            shape_data["meta"] = shape.meta
        data["shapes"].append(shape_data)

    for asset in snapshot.assets.values():
        data["assets"].append({
            "id": asset.id,
            "type": asset.type,
            "props": asset.props.model_dump(by_alias=True, exclude_none=True),
        })

    return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
