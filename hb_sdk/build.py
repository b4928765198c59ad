"""Terse constructors for building syntax trees in code.

In parameter and hash position a ``str`` is read as a path; wrap string
literals with :func:`lit`. Inside bodies a ``str`` becomes a text node.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from .nodes import BlockNode, LiteralExpr, MustacheNode, PartialNode, PathExpr, Template, TextNode

ExprLike = Union[PathExpr, LiteralExpr, str, int, float, bool]
NodeLike = Union[TextNode, MustacheNode, BlockNode, PartialNode, str]


def path(text: str) -> PathExpr:
    return PathExpr.parse(text)


def lit(value: Any) -> LiteralExpr:
    """Literal whose kind follows the Python type of ``value``."""

    if isinstance(value, bool):
        kind = "boolean"
    elif isinstance(value, int):
        kind = "integer"
    elif isinstance(value, float):
        kind = "float"
    elif isinstance(value, str):
        kind = "string"
    else:
        raise TypeError(f"cannot build a literal from {type(value).__name__!r}")
    return LiteralExpr(kind=kind, value=value)


def _expr(arg: ExprLike) -> Union[PathExpr, LiteralExpr]:
    if isinstance(arg, (PathExpr, LiteralExpr)):
        return arg
    if isinstance(arg, str):
        return path(arg)
    return lit(arg)


def _hash(entries: Mapping[str, ExprLike]) -> Dict[str, Union[PathExpr, LiteralExpr]]:
    return {key: _expr(value) for key, value in entries.items()}


def _name(name: Union[str, PathExpr]) -> PathExpr:
    return name if isinstance(name, PathExpr) else path(name)


def _nodes(items: Iterable[NodeLike]) -> Tuple[Any, ...]:
    return tuple(text(item) if isinstance(item, str) else item for item in items)


def text(value: str) -> TextNode:
    return TextNode(text=value)


def mustache(name: Union[str, PathExpr], *params: ExprLike, escaped: bool = True, **hash: ExprLike) -> MustacheNode:
    return MustacheNode(
        name=_name(name),
        params=tuple(_expr(param) for param in params),
        hash=_hash(hash),
        escaped=escaped,
    )


def block(
    name: Union[str, PathExpr],
    *params: ExprLike,
    body: Iterable[NodeLike] = (),
    inverse: Optional[Iterable[NodeLike]] = None,
    **hash: ExprLike,
) -> BlockNode:
    return BlockNode(
        name=_name(name),
        params=tuple(_expr(param) for param in params),
        hash=_hash(hash),
        body=_nodes(body),
        inverse=None if inverse is None else _nodes(inverse),
    )


def raw_block(name: Union[str, PathExpr], *params: ExprLike, source: str, **hash: ExprLike) -> BlockNode:
    return BlockNode(
        name=_name(name),
        params=tuple(_expr(param) for param in params),
        hash=_hash(hash),
        raw=True,
        source=source,
    )


def partial(name: str, context: Optional[ExprLike] = None, **hash: ExprLike) -> PartialNode:
    return PartialNode(
        name=name,
        context=None if context is None else _expr(context),
        hash=_hash(hash),
    )


def template(*nodes: NodeLike, name: str = "") -> Template:
    return Template(body=_nodes(nodes), name=name)


__all__ = [
    "block",
    "lit",
    "mustache",
    "partial",
    "path",
    "raw_block",
    "template",
    "text",
]
