"""
Session-scoped short ref aliases for shape ids.

``list_shapes`` hands out refs like "s1", "s2", ... for each shape it lists.
Every other tool accepts either a ref or a full tldraw shape id.  The ref
map is rebuilt from scratch each time shapes are listed, which invalidates
every previously issued ref.

A ``ShapeRefMap`` belongs to exactly one agent session.  Create one per
session and pass it to whatever needs alias resolution; ``assign`` is
destructive, so sharing an instance across sessions corrupts both.
"""

from __future__ import annotations

from typing import Optional

from .config import REF_PREFIX, SHAPE_ID_PREFIX


class ShapeRefMap:
    """Bijective ref <-> shape id map for one session.

    Resolution never fails: anything that is not a known ref degrades to a
    canonical ``shape:`` id, and whether that id exists is the caller's
    question to answer against its snapshot.
    """

    def __init__(self, id_prefix: str = SHAPE_ID_PREFIX, ref_prefix: str = REF_PREFIX):
        self.id_prefix = id_prefix
        self.ref_prefix = ref_prefix
        # ref -> full id ("s1" -> "shape:b941a1f884f8")
        self._ref_to_id: dict[str, str] = {}
        # full id -> ref (reverse lookup for output)
        self._id_to_ref: dict[str, str] = {}
        self._counter = 0

    def assign(self, shape_ids: list[str]) -> None:
        """Clear all existing refs and assign new ones, in order.

        Duplicate ids each get their own ref; the reverse map keeps the
        last one.
        """
        self._ref_to_id.clear()
        self._id_to_ref.clear()
        self._counter = 0

        for shape_id in shape_ids:
            self._counter += 1
            ref = f"{self.ref_prefix}{self._counter}"
            self._ref_to_id[ref] = shape_id
            self._id_to_ref[shape_id] = ref

    def resolve(self, value: str) -> str:
        """Resolve a ref, full id, or bare id to a full shape id.

        "s1" -> mapped id, "shape:abc" -> unchanged, "abc" -> "shape:abc".
        """
        from_ref = self._ref_to_id.get(value)
        if from_ref is not None:
            return from_ref

        if value.startswith(self.id_prefix):
            return value

        return f"{self.id_prefix}{value}"

    def resolve_all(self, values: list[str]) -> list[str]:
        return [self.resolve(value) for value in values]

    def get_ref(self, shape_id: str) -> Optional[str]:
        """Short ref for ``shape_id``, or None if it was not in the last assign."""
        return self._id_to_ref.get(shape_id)

    def refs(self) -> dict[str, str]:
        """Copy of the current ref -> id mapping."""
        return dict(self._ref_to_id)

    @property
    def size(self) -> int:
        return len(self._ref_to_id)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, ref: object) -> bool:
        return ref in self._ref_to_id
