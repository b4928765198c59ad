"""Value model for template-visible data.

Context data stays as native Python objects; ``kind_of`` classifies them into a
closed set of kinds and every coercion below dispatches on that kind.
"""
from __future__ import annotations

import json
import math
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel

from .helpers import Helper


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

ESCAPES = {
    "&": "&amp;",
    "'": "&apos;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
}


class ValueKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    ABSENT = "absent"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    HELPER = "helper"


class SafeString(str):
    """Helper output that must not be escaped."""


def kind_of(value: Any) -> ValueKind:
    """Classify a value, raising ``TypeError`` for objects outside the model."""

    if value is None or value is MISSING:
        return ValueKind.ABSENT
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, Helper):
        return ValueKind.HELPER
    if isinstance(value, (Mapping, BaseModel)):
        return ValueKind.MAPPING
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return ValueKind.SEQUENCE
    raise TypeError(f"unsupported template value of type {type(value).__name__!r}")


def is_truthy(value: Any) -> bool:
    kind = kind_of(value)
    if kind is ValueKind.ABSENT:
        return False
    if kind is ValueKind.BOOLEAN:
        return bool(value)
    if kind in (ValueKind.INTEGER, ValueKind.FLOAT):
        return value != 0
    if kind is ValueKind.MAPPING and isinstance(value, BaseModel):
        return True
    if kind in (ValueKind.STRING, ValueKind.SEQUENCE, ValueKind.MAPPING):
        return len(value) > 0
    return True


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Helper):
        return None
    return str(value)


def to_str(value: Any) -> str:
    """Render a value as output text."""

    kind = kind_of(value)
    if kind is ValueKind.ABSENT or kind is ValueKind.HELPER:
        return ""
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.INTEGER:
        return str(int(value))
    if kind is ValueKind.FLOAT:
        return _format_float(value)
    if kind is ValueKind.STRING:
        return str(value)
    if kind is ValueKind.SEQUENCE:
        return "".join(to_str(item) for item in value)
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return json.dumps(dict(value), ensure_ascii=False, default=_json_default)


def escape(text: str) -> str:
    return "".join(ESCAPES.get(char, char) for char in text)


def lookup_key(value: Any, key: str) -> Any:
    """Index one path segment into ``value``; misses return ``MISSING``."""

    kind = kind_of(value)
    if kind is ValueKind.MAPPING:
        if isinstance(value, BaseModel):
            if key in type(value).model_fields:
                return getattr(value, key)
            extra = value.model_extra or {}
            return extra.get(key, MISSING)
        if key in value:
            return value[key]
        return MISSING
    if kind is ValueKind.SEQUENCE:
        if key == "length":
            return len(value)
        if key.isascii() and key.isdigit():
            index = int(key)
            if index < len(value):
                return value[index]
    return MISSING


def lookup_path(value: Any, segments: Iterable[str]) -> Any:
    current = value
    for segment in segments:
        current = lookup_key(current, segment)
        if current is MISSING:
            return None
    return current


__all__ = [
    "MISSING",
    "SafeString",
    "ValueKind",
    "escape",
    "is_truthy",
    "kind_of",
    "lookup_key",
    "lookup_path",
    "to_str",
]
