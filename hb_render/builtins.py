"""Built-in block and inline helpers."""
from __future__ import annotations

from typing import Any, Iterable, List, Tuple

import structlog
from pydantic import BaseModel

from hb_sdk.helpers import HelperRegistry
from hb_sdk.values import MISSING, ValueKind, is_truthy, kind_of, lookup_key, to_str

from .options import Options

LOG_LEVELS = {"debug", "info", "warning", "error"}

logger = structlog.get_logger(__name__)


def _truthy(value: Any, options: Options) -> bool:
    if options.hash_bool("includeZero") and kind_of(value) in (ValueKind.INTEGER, ValueKind.FLOAT):
        return True
    return is_truthy(value)


def if_helper(conditional: Any, options: Options) -> str:
    if _truthy(conditional, options):
        return options.render_body()
    return options.render_inverse()


def unless_helper(conditional: Any, options: Options) -> str:
    if _truthy(conditional, options):
        return options.render_inverse()
    return options.render_body()


def with_helper(context: Any, options: Options) -> str:
    if is_truthy(context):
        return options.render_body_with(context)
    return options.render_inverse()


def _items(value: Any) -> List[Tuple[str, Any]]:
    if isinstance(value, BaseModel):
        return [(name, getattr(value, name)) for name in type(value).model_fields]
    return list(value.items())


def _each(entries: Iterable[Tuple[Any, Any]], total: int, options: Options, *, keyed: bool) -> str:
    parts = []
    for index, (key, item) in enumerate(entries):
        private = {"index": index, "first": index == 0, "last": index == total - 1}
        if keyed:
            private["key"] = key
        parts.append(options.render_body_with(item, data=private))
    return "".join(parts)


def each_helper(context: Any, options: Options) -> str:
    """Iterate sequences (``@index``) and mappings (``@key``)."""

    kind = kind_of(context)
    if kind is ValueKind.SEQUENCE and context:
        return _each(enumerate(context), len(context), options, keyed=False)
    if kind is ValueKind.MAPPING:
        items = _items(context)
        if items:
            return _each(items, len(items), options, keyed=True)
    return options.render_inverse()


def lookup_helper(obj: Any, key: Any) -> Any:
    found = lookup_key(obj, to_str(key))
    return None if found is MISSING else found


def equal_helper(left: str, right: str, options: Options) -> str:
    if left == right:
        return options.render_body()
    return options.render_inverse()


def log_helper(message: Any, options: Options) -> str:
    level = options.hash_str("level").lower() or "info"
    if level not in LOG_LEVELS:
        level = "info"
    getattr(logger, level)("template.log", message=to_str(message))
    return ""


def register_builtins(registry: HelperRegistry, *, replace: bool = False) -> HelperRegistry:
    """Install the built-in helpers into ``registry``."""

    registry.register("if", if_helper, params=("any",), options=True, replace=replace)
    registry.register("unless", unless_helper, params=("any",), options=True, replace=replace)
    registry.register("with", with_helper, params=("any",), options=True, replace=replace)
    registry.register("each", each_helper, params=("any",), options=True, replace=replace)
    registry.register("lookup", lookup_helper, params=("any", "any"), replace=replace)
    registry.register("equal", equal_helper, params=("str", "str"), options=True, replace=replace)
    registry.register("log", log_helper, params=("any",), options=True, replace=replace)
    return registry


__all__ = [
    "each_helper",
    "equal_helper",
    "if_helper",
    "log_helper",
    "lookup_helper",
    "register_builtins",
    "unless_helper",
    "with_helper",
]
