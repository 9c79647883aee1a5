"""
Layout policy constants for the canvas spatial engine.

These numbers are policy, not law.  Every algorithm takes them as keyword
defaults (or via its options dataclass) so a deployment can tune them
without touching the algorithm code.

Sizes are in canvas page units (tldraw pixels at zoom 1).
"""

from __future__ import annotations


# --- Shape identifiers ---

# Canonical prefix of a tldraw shape id ("shape:abc123").
SHAPE_ID_PREFIX = "shape:"

# Short alias prefix handed out by the ref map ("s1", "s2", ...).
REF_PREFIX = "s"


# --- Shape sizing ---

# Width/height assumed for a shape whose props carry no w/h, when laying
# out or framing.  Clustering bounds use 0 instead (see CLUSTER_DEFAULT_SIZE).
DEFAULT_SHAPE_SIZE = 300
CLUSTER_DEFAULT_SIZE = 0


# --- Row packing ---

MAX_ROW_WIDTH = 2000
GROUP_LABEL_HEIGHT = 60
GROUP_LABEL_FONT_SIZE = 36
GROUP_LABEL_WIDTH = 600
DEFAULT_SPACING = 40
DEFAULT_GROUP_SPACING = 120


# --- Grouping ---

SPATIAL_GROUP_CELL = 500
DEFAULT_GROUP_FIELD = "model"
UNKNOWN_GROUP = "unknown"
SPATIAL_ROW_BAND = 50


# --- Frames ---

DEFAULT_FRAME_PADDING = 40
FRAME_LABEL_HEIGHT = 32


# --- Clustering / layout summary ---

CLUSTER_CELL = 500
CLUSTER_SAMPLE_SIZE = 3
SUGGESTED_ORIGIN_OFFSET = 200


# --- Placement search ---

PLACEMENT_GAP = 30
PLACEMENT_MAX_ATTEMPTS = 10
PLACEMENT_FALLBACK_MULTIPLIER = 5
