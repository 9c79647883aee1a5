"""One-line shape descriptions used by listings and layout summaries."""

from __future__ import annotations

from typing import Any, Optional

from .models import Asset, Shape, ShapeSummary

BRIEF_TEXT_LIMIT = 60


def _num_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _rich_text_plain(rich_text: Any) -> Optional[str]:
    """Flatten a tldraw rich-text document (paragraphs of text runs)."""
    if not isinstance(rich_text, dict):
        return None
    paragraphs = rich_text.get("content")
    if not isinstance(paragraphs, list):
        return None
    lines = []
    for paragraph in paragraphs:
        runs = paragraph.get("content") if isinstance(paragraph, dict) else None
        if not isinstance(runs, list):
            lines.append("")
            continue
        lines.append("".join(
            str(run.get("text") or "") for run in runs if isinstance(run, dict)
        ))
    return "\n".join(lines)


def compute_brief(shape: Shape, assets: Optional[dict[str, Asset]] = None) -> str:
    """Generate a brief one-line description for a shape."""
    props = shape.props
    assets = assets or {}

    if shape.type == "canvas-video":
        return f"video: {props.get('fileName') or props.get('videoUrl') or ''}"
    if shape.type == "image":
        asset_id = props.get("assetId")
        asset = assets.get(asset_id) if isinstance(asset_id, str) else None
        name = asset.props.name if asset and asset.props.name else "unknown"
        if not shape.has_size():
            return f'image: "{name}"'
        return f'image: "{name}" ({_num_text(props["w"])}×{_num_text(props["h"])})'
    if shape.type == "rich-card":
        return f"card: {props.get('title') or props.get('template') or ''}"
    if shape.type == "text":
        plain = _rich_text_plain(props.get("richText"))
        if plain is None:
            plain = str(props.get("text") or "")
        return f'text: "{plain[:BRIEF_TEXT_LIMIT]}"'
    if shape.type == "geo":
        return f"geo: {props.get('geo') or 'rect'}"
    if shape.type == "arrow":
        return "arrow"
    if shape.type == "draw":
        return "draw path"
    if shape.type == "agent-turn":
        return f"agent turn ({props.get('role') or 'assistant'})"
    return shape.type


def get_shape_summary(
    shape: Shape,
    assets: Optional[dict[str, Asset]] = None,
    ref: Optional[str] = None,
) -> ShapeSummary:
    return ShapeSummary(
        id=shape.id,
        type=shape.type,
        x=shape.x,
        y=shape.y,
        w=shape.width(None),
        h=shape.height(None),
        brief=compute_brief(shape, assets),
        ref=ref,
    )


def resolve_image_asset(shape: Shape, assets: dict[str, Asset]) -> Optional[dict[str, str]]:
    """Resolve the asset source of an image shape.

    Returns ``{"src", "mimeType", "name"}`` or None when the shape has no
    asset or the asset has no source.
    """
    asset_id = shape.props.get("assetId")
    if not isinstance(asset_id, str):
        return None
    asset = assets.get(asset_id)
    if asset is None or not asset.props.src:
        return None
    return {
        "src": asset.props.src,
        "mimeType": asset.props.mime_type or "image/png",
        "name": asset.props.name or "image",
    }


def count_types(shapes: list[Shape]) -> dict[str, int]:
    """Histogram of shape types, keys in first-seen order."""
    counts: dict[str, int] = {}
    for shape in shapes:
        counts[shape.type] = counts.get(shape.type, 0) + 1
    return counts


def build_type_summary(shapes: list[Shape]) -> str:
    """e.g. ``"3 image, 1 text"``, most common type first."""
    counts = count_types(shapes)
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ", ".join(f"{count} {shape_type}" for shape_type, count in ordered)
