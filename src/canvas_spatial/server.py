"""canvas-spatial server — MCP tools for agent-driven canvas layout."""

from __future__ import annotations

import json
import logging
import os
import sys

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .config import (
    DEFAULT_FRAME_PADDING,
    DEFAULT_GROUP_SPACING,
    DEFAULT_SPACING,
    PLACEMENT_GAP,
)
from .geometry import BoundingBox
from .grouping import LISTING_GROUP_BY, GroupStrategy, group_listing
from .organize import OrganizeOptions, create_frame, organize_shapes
from .parser import parse_file, parse_snapshot
from .placement import find_non_overlapping_position
from .session import CanvasSession
from .briefs import build_type_summary, get_shape_summary, resolve_image_asset
from .summary import summarize_layout

logger = logging.getLogger(__name__)

# --- Constants ---
SNAPSHOT_PATH = os.environ.get("CANVAS_SNAPSHOT")
LOG_LEVEL = os.environ.get("CANVAS_LOG_LEVEL", "INFO")

SHAPE_TYPES = ["all", "image", "canvas-video", "text", "rich-card", "geo", "arrow", "draw"]
MAX_GET_SHAPES = 20


def _json_text(payload: dict) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2, ensure_ascii=False))]


def _error(message: str) -> list[TextContent]:
    return _json_text({"error": message})


# --- Tool definitions ---

TOOLS = [
    Tool(
        name="load_canvas",
        description=(
            "Load a canvas snapshot for this session, either from a file path or "
            "from inline JSON/YAML. Accepts a tldraw store document or a simplified "
            "{shapes, assets} document. Previously issued refs become invalid."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Path to a JSON/YAML snapshot file"},
                "content": {"type": "string", "description": "Inline JSON/YAML snapshot"},
            },
        },
    ),
    Tool(
        name="list_shapes",
        description=(
            "List shapes on the canvas with type and description. Assigns short refs "
            "(s1, s2, ...) that every other tool accepts in place of shape ids; refs "
            "from earlier listings become invalid.\n\n"
            "WORKFLOW for organizing/layout tasks:\n"
            "1. Start with get_layout_summary for spatial overview\n"
            "2. Use list_shapes(detail=\"concise\") to see all shape briefs\n"
            "3. Use organize_shapes for bulk arrangement\n"
            "4. Use create_frame to visually group related shapes"
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": SHAPE_TYPES,
                    "default": "all",
                    "description": "Filter shapes by type. Use 'all' to see everything.",
                },
                "search": {
                    "type": "string",
                    "description": "Case-insensitive substring match on the shape brief.",
                },
                "groupBy": {
                    "type": "string",
                    "enum": list(LISTING_GROUP_BY),
                    "default": "none",
                    "description": (
                        "Group shapes in the output. 'spatial-row' groups shapes whose "
                        "y coordinates are within 50px."
                    ),
                },
                "detail": {
                    "type": "string",
                    "enum": ["concise", "full"],
                    "default": "concise",
                    "description": "'concise': ref, type, brief. 'full': adds id, x, y, w, h.",
                },
            },
        },
    ),
    Tool(
        name="get_shapes",
        description="Get full details of up to 20 shapes by ref (e.g. 's1') or id.",
        inputSchema={
            "type": "object",
            "properties": {
                "shapeIds": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 1,
                    "maxItems": MAX_GET_SHAPES,
                },
            },
            "required": ["shapeIds"],
        },
    ),
    Tool(
        name="get_layout_summary",
        description=(
            "Cheap spatial overview — no per-shape data. Returns bounds, type counts, "
            "spatial clusters, and a suggested origin for new layout. Use FIRST for "
            "large canvases."
        ),
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="organize_shapes",
        description=(
            "Bulk layout — groups shapes and computes row-packed positions in one "
            "operation.\n\nStrategies:\n"
            "- \"grid\": Arrange all shapes in a simple grid\n"
            "- \"by-type\": Group shapes by type\n"
            "- \"by-metadata\": Group by a metadata field (e.g. model, prompt)\n"
            "- \"by-spatial-cluster\": Keep existing spatial clusters but tidy them"
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "strategy": {
                    "type": "string",
                    "enum": [s.value for s in GroupStrategy],
                },
                "groupField": {
                    "type": "string",
                    "description": "For 'by-metadata': which meta key to group by.",
                },
                "spacing": {"type": "number", "default": DEFAULT_SPACING},
                "groupSpacing": {"type": "number", "default": DEFAULT_GROUP_SPACING},
                "origin": {
                    "type": "object",
                    "properties": {"x": {"type": "number"}, "y": {"type": "number"}},
                    "required": ["x", "y"],
                },
                "shapeIds": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Subset of refs or ids. Omit to organize all shapes.",
                },
                "addLabels": {"type": "boolean", "default": True},
            },
            "required": ["strategy"],
        },
    ),
    Tool(
        name="create_frame",
        description=(
            "Compute a labeled frame enclosing the given shapes with padding. "
            "Returns frame bounds and the child ids to reparent."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "label": {"type": "string"},
                "shapeIds": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "padding": {"type": "number", "default": DEFAULT_FRAME_PADDING},
            },
            "required": ["label", "shapeIds"],
        },
    ),
    Tool(
        name="find_placement",
        description=(
            "Find a position for a new shape of the given size that does not "
            "overlap existing shapes, next to the anchor shapes (or at the "
            "viewport centre when no anchors are given)."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "width": {"type": "number"},
                "height": {"type": "number"},
                "anchorIds": {"type": "array", "items": {"type": "string"}},
                "excludeIds": {"type": "array", "items": {"type": "string"}},
                "gap": {"type": "number", "default": PLACEMENT_GAP},
                "viewport": {
                    "type": "object",
                    "properties": {
                        "x": {"type": "number"},
                        "y": {"type": "number"},
                        "w": {"type": "number"},
                        "h": {"type": "number"},
                    },
                    "required": ["x", "y", "w", "h"],
                },
            },
            "required": ["width", "height"],
        },
    ),
]


# --- Tool implementations ---

async def _load_canvas(session: CanvasSession, args: dict) -> list[TextContent]:
    """Load a snapshot into the session."""
    if args.get("path"):
        snapshot = parse_file(args["path"])
    elif args.get("content"):
        snapshot = parse_snapshot(args["content"])
    else:
        return _error("Provide either 'path' or 'content'")

    session.load(snapshot)
    return _json_text({
        "status": "success",
        "shapes": len(snapshot.shapes),
        "assets": len(snapshot.assets),
    })


async def _list_shapes(session: CanvasSession, args: dict) -> list[TextContent]:
    """List (optionally filtered/grouped) shapes and assign fresh refs."""
    snapshot = session.snapshot
    shape_type = args.get("type", "all")
    group_by = args.get("groupBy", "none")
    detail = args.get("detail", "concise")

    filtered = (
        snapshot.shapes if shape_type == "all"
        else [s for s in snapshot.shapes if s.type == shape_type]
    )

    if args.get("search"):
        query = args["search"].lower()
        filtered = [
            s for s in filtered
            if query in get_shape_summary(s, snapshot.assets).brief.lower()
        ]

    session.refs.assign([s.id for s in filtered])

    rows = []
    for shape in filtered:
        summary = get_shape_summary(shape, snapshot.assets, ref=session.refs.get_ref(shape.id))
        if detail == "concise":
            rows.append({"ref": summary.ref, "type": summary.type, "brief": summary.brief})
        else:
            rows.append(summary.model_dump(by_alias=True))

    payload = {"totalShapes": len(rows)}
    if detail == "concise":
        payload["summary"] = build_type_summary(filtered)
    if group_by != "none":
        payload["groupBy"] = group_by
        payload["groups"] = group_listing(filtered, rows, group_by)
    else:
        payload["shapes"] = rows
    return _json_text(payload)


async def _get_shapes(session: CanvasSession, args: dict) -> list[TextContent]:
    """Full details for specific shapes."""
    raw_ids = list(args["shapeIds"])[:MAX_GET_SHAPES]
    snapshot = session.snapshot

    details = []
    not_found = []
    for raw_id in raw_ids:
        shape = snapshot.get_shape(session.refs.resolve(raw_id))
        if shape is None:
            not_found.append(raw_id)
            continue
        entry = {"ref": session.refs.get_ref(shape.id), **shape.model_dump()}
        if shape.type == "image":
            asset = resolve_image_asset(shape, snapshot.assets)
            if asset:
                entry.update({
                    "assetName": asset["name"],
                    "mimeType": asset["mimeType"],
                    "imageUrl": asset["src"],
                })
        details.append(entry)

    if not details:
        return _error("No shapes found for the given IDs.")

    payload = {"shapes": details}
    if not_found:
        payload["_warning"] = f"{len(not_found)} shape(s) not found"
        payload["notFound"] = not_found
    return _json_text(payload)


async def _get_layout_summary(session: CanvasSession, args: dict) -> list[TextContent]:
    summary = summarize_layout(session.snapshot.shapes, session.snapshot.assets)
    if summary.empty:
        return _json_text({"shapeCount": 0, "empty": True})
    return _json_text(summary.model_dump(by_alias=True, exclude_none=True))


async def _organize_shapes(session: CanvasSession, args: dict) -> list[TextContent]:
    """Group and row-pack shapes, then apply the moves to the session copy."""
    targets = session.snapshot.shapes
    if args.get("shapeIds"):
        targets, _ = session.resolve_shapes(args["shapeIds"])

    if not targets:
        return _error("No shapes to organize")

    origin = args.get("origin")
    options = OrganizeOptions(
        spacing=args.get("spacing", DEFAULT_SPACING),
        group_spacing=args.get("groupSpacing", DEFAULT_GROUP_SPACING),
        origin=(origin["x"], origin["y"]) if origin else None,
        add_labels=args.get("addLabels", True),
        group_field=args.get("groupField"),
    )
    result = organize_shapes(targets, args["strategy"], options)
    session.apply_moves(result.moves)

    return _json_text({
        "success": True,
        "totalMoved": result.total_moved,
        "totalLabelsAdded": result.total_labels_added,
        "groups": [g.model_dump(by_alias=True) for g in result.groups],
        "moves": [m.model_dump(by_alias=True) for m in result.moves],
        "labels": [label.model_dump(by_alias=True) for label in result.labels],
    })


async def _create_frame(session: CanvasSession, args: dict) -> list[TextContent]:
    targets, _ = session.resolve_shapes(args["shapeIds"])
    if not targets:
        return _error("No matching shapes found")

    frame = create_frame(targets, args["label"], padding=args.get("padding", DEFAULT_FRAME_PADDING))
    return _json_text({
        "success": True,
        **frame.model_dump(by_alias=True),
        "enclosedCount": frame.enclosed_count,
    })


async def _find_placement(session: CanvasSession, args: dict) -> list[TextContent]:
    viewport = None
    if args.get("viewport"):
        vp = args["viewport"]
        viewport = BoundingBox(x=vp["x"], y=vp["y"], width=vp["w"], height=vp["h"])

    position = find_non_overlapping_position(
        session.snapshot.shapes,
        session.refs.resolve_all(args.get("anchorIds") or []),
        args["width"],
        args["height"],
        gap=args.get("gap", PLACEMENT_GAP),
        exclude_ids=session.refs.resolve_all(args.get("excludeIds") or []),
        viewport=viewport,
    )
    return _json_text(position.model_dump(by_alias=True))


TOOL_HANDLERS = {
    "load_canvas": _load_canvas,
    "list_shapes": _list_shapes,
    "get_shapes": _get_shapes,
    "get_layout_summary": _get_layout_summary,
    "organize_shapes": _organize_shapes,
    "create_frame": _create_frame,
    "find_placement": _find_placement,
}


async def dispatch_tool(session: CanvasSession, name: str, arguments: dict) -> list[TextContent]:
    """Run one tool against ``session``; failures come back as error text."""
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]

    try:
        return await handler(session, arguments or {})
    except Exception as e:
        logger.exception(f"Tool {name} failed")
        return _error(f"Error in {name}: {e}")


def build_server(session: CanvasSession) -> Server:
    """Create an MCP server bound to one session."""
    server = Server("canvas-spatial")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        return await dispatch_tool(session, name, arguments)

    return server


def main():
    """Entry point for the MCP server."""
    import asyncio

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    session = CanvasSession()
    if SNAPSHOT_PATH:
        session.load(parse_file(SNAPSHOT_PATH))

    asyncio.run(_run(build_server(session)))


async def _run(server: Server):
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    main()
