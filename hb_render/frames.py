"""Context and data frame chains.

Frames live in a per-render arena and are addressed by integer handle. A frame
stores one value and the handle of its parent; the first frame pushed is the
root of every chain in that arena.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional

from hb_sdk.nodes import PathExpr
from hb_sdk.values import MISSING, ValueKind, kind_of, lookup_key, lookup_path


class FrameArena:
    """Append-only frame store with scoped release."""

    def __init__(self) -> None:
        self._values: List[Any] = []
        self._parents: List[Optional[int]] = []

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: Any, parent: Optional[int] = None) -> int:
        if parent is None and self._values:
            raise ValueError("only the first frame of an arena may be a root")
        if parent is not None and not 0 <= parent < len(self._values):
            raise IndexError(f"unknown parent frame {parent}")
        self._values.append(value)
        self._parents.append(parent)
        return len(self._values) - 1

    def value(self, handle: int) -> Any:
        return self._values[handle]

    def parent(self, handle: int) -> Optional[int]:
        return self._parents[handle]

    def chain(self, handle: int) -> Iterator[int]:
        """Yield ``handle`` and its ancestors up to the root."""

        current: Optional[int] = handle
        while current is not None:
            yield current
            current = self._parents[current]

    def up(self, handle: int, levels: int) -> int:
        current = handle
        for _ in range(levels):
            parent = self._parents[current]
            if parent is None:
                break
            current = parent
        return current

    @contextmanager
    def scope(self) -> Iterator[None]:
        """Release every frame pushed inside the block, on any exit path."""

        mark = len(self._values)
        try:
            yield
        finally:
            del self._values[mark:]
            del self._parents[mark:]


def resolve_context_path(arena: FrameArena, handle: int, path: PathExpr) -> Any:
    """Resolve ``path`` from the frame at ``handle``; misses yield ``None``."""

    if path.up:
        return lookup_path(arena.value(arena.up(handle, path.up)), path.segments)
    if path.this or not path.segments:
        return lookup_path(arena.value(handle), path.segments)

    head, rest = path.segments[0], path.segments[1:]
    for current in arena.chain(handle):
        value = arena.value(current)
        if kind_of(value) is not ValueKind.MAPPING:
            continue
        found = lookup_key(value, head)
        if found is not MISSING:
            return lookup_path(found, rest)
    return None


@dataclass(frozen=True)
class DataFrame:
    """Read view over the private data chain ending at ``handle``."""

    arena: FrameArena
    handle: int

    def get(self, key: str, default: Any = None) -> Any:
        for current in self.arena.chain(self.handle):
            frame: Mapping[str, Any] = self.arena.value(current)
            if key in frame:
                return frame[key]
        return default

    def __contains__(self, key: object) -> bool:
        return any(key in self.arena.value(current) for current in self.arena.chain(self.handle))

    def as_dict(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for current in reversed(list(self.arena.chain(self.handle))):
            merged.update(self.arena.value(current))
        return merged


def resolve_data_path(arena: FrameArena, handle: int, path: PathExpr) -> Any:
    """Resolve an ``@``-path; ``up`` climbs the data chain first."""

    if not path.segments:
        return None
    frame = DataFrame(arena, arena.up(handle, path.up))
    value = frame.get(path.segments[0], MISSING)
    if value is MISSING:
        return None
    return lookup_path(value, path.segments[1:])


__all__ = ["DataFrame", "FrameArena", "resolve_context_path", "resolve_data_path"]
