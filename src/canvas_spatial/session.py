"""Per-session state for the agent tool layer: a snapshot plus its ref map."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .models import CanvasSnapshot, PlacementInstruction, Shape
from .organize import apply_moves
from .refs import ShapeRefMap

logger = logging.getLogger(__name__)


@dataclass
class CanvasSession:
    """One agent session.

    Owns the session's ``ShapeRefMap``; never share an instance between
    sessions.  ``snapshot`` is the session's working copy of the canvas.
    """
    snapshot: CanvasSnapshot = field(default_factory=CanvasSnapshot)
    refs: ShapeRefMap = field(default_factory=ShapeRefMap)

    def load(self, snapshot: CanvasSnapshot) -> None:
        """Swap in a new snapshot.  Refs from the old canvas are dropped."""
        self.snapshot = snapshot
        self.refs.assign([])
        logger.info(f"Loaded canvas: {len(snapshot.shapes)} shapes, {len(snapshot.assets)} assets")

    def resolve_shapes(self, values: list[str]) -> tuple[list[Shape], list[str]]:
        """Resolve refs/ids against the snapshot.

        Returns the matching shapes in snapshot order and the raw inputs
        that matched nothing.
        """
        resolved = self.refs.resolve_all(values)
        not_found = [
            raw for raw, shape_id in zip(values, resolved)
            if self.snapshot.get_shape(shape_id) is None
        ]
        return self.snapshot.filter_ids(resolved), not_found

    def apply_moves(self, moves: list[PlacementInstruction]) -> None:
        """Apply placement instructions to the session's working copy."""
        if not moves:
            return
        self.snapshot = CanvasSnapshot(
            shapes=apply_moves(self.snapshot.shapes, moves),
            assets=self.snapshot.assets,
        )
