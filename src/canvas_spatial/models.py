"""
Data models for canvas-spatial — the snapshot the engine reads and the
instructions and summaries it emits.

Inputs (owned by the canvas document, read-only to the engine):

    CanvasSnapshot
    ├── Shape   — one tldraw record (id, type, x, y, props, meta)
    └── Asset   — a binary asset referenced by image/video shapes

Outputs (produced fresh on every call, never persisted):

    PlacementInstruction — move shape ``shapeId`` to (x, y)
    LabelInstruction     — create a text label at (x, y)
    OrganizeResult       — the moves/labels of one organize pass
    FrameResult          — bounds + child ids of one enclosing frame
    LayoutSummary        — grid-clustered overview of a canvas
    ShapeSummary         — one-line listing entry for a shape

The engine never mutates a Shape.  It emits target coordinates and the
caller applies them to its own document model.

Output models serialise with the camelCase keys the agent protocol uses
(``shapeId``, ``minX``, ``sampleBriefs``...).  Dump them with
``model_dump(by_alias=True)``; construction accepts either spelling.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import DEFAULT_SHAPE_SIZE


def _numeric(value: Any, default: float) -> float:
    """Return ``value`` if it is a real number (bools excluded), else ``default``."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return default


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Snapshot records
# ---------------------------------------------------------------------------

class Shape(BaseModel):
    """A shape record from the canvas store.

    Only the fields the engine reads are modelled; any other tldraw keys
    (``parentId``, ``index``, ``opacity``...) are ignored on parse.

    Sizing
    ------
    ``props`` may carry ``w``/``h``.  Use ``width()``/``height()`` to read
    them with a fallback: layout and framing assume 300 when absent,
    clustering bounds assume 0.
    """
    id: str
    type: str = ""
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    props: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("props", "meta", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return {} if value is None else value

    @field_validator("x", "y", "rotation", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0.0 if value is None else value

    def width(self, default: float = DEFAULT_SHAPE_SIZE) -> float:
        return _numeric(self.props.get("w"), default)

    def height(self, default: float = DEFAULT_SHAPE_SIZE) -> float:
        return _numeric(self.props.get("h"), default)

    def has_size(self) -> bool:
        """True when both ``w`` and ``h`` are numeric props."""
        return (
            _numeric(self.props.get("w"), None) is not None
            and _numeric(self.props.get("h"), None) is not None
        )


class AssetProps(BaseModel):
    """Props of an asset record.  Unknown keys are kept."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    src: Optional[str] = None
    name: Optional[str] = None
    w: Optional[float] = None
    h: Optional[float] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    file_size: Optional[int] = Field(default=None, alias="fileSize")


class Asset(BaseModel):
    """An asset record (image or video source) keyed by ``asset:...`` id."""
    id: str
    type: str = "image"
    props: AssetProps = Field(default_factory=AssetProps)

    @field_validator("props", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return {} if value is None else value


class CanvasSnapshot(BaseModel):
    """A flat, read-only view of a canvas document.

    The snapshot maintains a ``_shape_map`` for O(1) lookup by id.  Use
    ``get_shape(id)`` for single lookups and ``filter_ids(ids)`` to pick a
    subset while keeping snapshot order.
    """
    shapes: list[Shape] = Field(default_factory=list)
    assets: dict[str, Asset] = Field(default_factory=dict)

    _shape_map: dict[str, Shape] = {}

    def model_post_init(self, __context):
        """Build the lookup map after initialization."""
        self._shape_map = {}
        for shape in self.shapes:
            self._shape_map[shape.id] = shape

    def get_shape(self, shape_id: str) -> Optional[Shape]:
        return self._shape_map.get(shape_id)

    def filter_ids(self, shape_ids) -> list[Shape]:
        """Return the shapes whose id is in ``shape_ids``, in snapshot order."""
        wanted = set(shape_ids)
        return [s for s in self.shapes if s.id in wanted]


# ---------------------------------------------------------------------------
# Organize output
# ---------------------------------------------------------------------------

class PlacementInstruction(_WireModel):
    """Move ``shape_id`` so its top-left corner sits at (x, y)."""
    shape_id: str = Field(alias="shapeId")
    x: float
    y: float


class LabelInstruction(_WireModel):
    """Create a text shape reading ``text`` at (x, y)."""
    text: str
    x: float
    y: float
    font_size: int = Field(default=36, alias="fontSize")
    width: float = 600


class GroupReport(_WireModel):
    label: str
    shape_count: int = Field(alias="shapeCount")


class OrganizeResult(_WireModel):
    """Everything one organize pass wants the caller to apply.

    ``moves`` is ordered group by group, row by row.  An empty input gives
    an empty result (``total_moved == 0``) rather than an error.
    """
    moves: list[PlacementInstruction] = Field(default_factory=list)
    labels: list[LabelInstruction] = Field(default_factory=list)
    groups: list[GroupReport] = Field(default_factory=list)

    @property
    def total_moved(self) -> int:
        return len(self.moves)

    @property
    def total_labels_added(self) -> int:
        return len(self.labels)

    @property
    def empty(self) -> bool:
        return not self.moves


# ---------------------------------------------------------------------------
# Frame output
# ---------------------------------------------------------------------------

class FrameBounds(_WireModel):
    x: float
    y: float
    w: float
    h: float


class FrameResult(_WireModel):
    """Bounds for a new frame plus the ids the caller should reparent into it."""
    label: str
    bounds: FrameBounds = Field(alias="frameBounds")
    child_ids: list[str] = Field(alias="childShapeIds")

    @property
    def enclosed_count(self) -> int:
        return len(self.child_ids)


# ---------------------------------------------------------------------------
# Layout summary output
# ---------------------------------------------------------------------------

class Point(_WireModel):
    x: float
    y: float


class ClusterBounds(_WireModel):
    min_x: float = Field(alias="minX")
    min_y: float = Field(alias="minY")
    max_x: float = Field(alias="maxX")
    max_y: float = Field(alias="maxY")


class Cluster(_WireModel):
    """A flood-fill-merged region of occupied grid cells."""
    center: Point
    bounds: ClusterBounds
    count: int
    types: dict[str, int] = Field(default_factory=dict)
    sample_briefs: list[str] = Field(default_factory=list, alias="sampleBriefs")


class LayoutSummary(_WireModel):
    """Position-free overview of a canvas.

    For an empty canvas only ``shape_count`` (0) and ``empty`` (True) are
    meaningful; the remaining fields stay unset.
    """
    shape_count: int = Field(alias="shapeCount")
    empty: bool = False
    bounds: Optional[ClusterBounds] = None
    type_counts: dict[str, int] = Field(default_factory=dict, alias="typeCounts")
    clusters: list[Cluster] = Field(default_factory=list)
    suggested_origin: Optional[Point] = Field(default=None, alias="suggestedOrigin")


# ---------------------------------------------------------------------------
# Listing output
# ---------------------------------------------------------------------------

class ShapeSummary(_WireModel):
    """One listing row.  ``w``/``h`` are None when the shape has no size props."""
    id: str
    type: str
    x: float
    y: float
    w: Optional[float] = None
    h: Optional[float] = None
    brief: str
    ref: Optional[str] = None
