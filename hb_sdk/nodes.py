"""Syntax-tree contract consumed by the renderer.

Trees are produced by an external parser. Every model carries a ``type``
discriminator so a tree can be validated from plain mappings with
``Template.model_validate``.
"""
from __future__ import annotations

import re
from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

SEPARATORS = re.compile(r"[./]")
TRUE_WORDS = {"true"}
FALSE_WORDS = {"false"}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class PathExpr(_Frozen):
    """Dotted path such as ``name``, ``../prefix``, ``this.goodbye`` or ``@index``."""

    type: Literal["path"] = "path"
    segments: Tuple[str, ...] = ()
    up: int = Field(default=0, ge=0)
    this: bool = False
    data: bool = False
    original: str = ""

    @classmethod
    def parse(cls, text: str) -> "PathExpr":
        """Build a path from its template spelling (``.`` or ``/`` separated)."""

        rest = text.strip()
        data = rest.startswith("@")
        if data:
            rest = rest[1:]
        up = 0
        while rest.startswith("../"):
            up += 1
            rest = rest[3:]
        if rest == "..":
            up += 1
            rest = ""
        this = False
        if rest in ("this", "."):
            this, rest = True, ""
        elif rest.startswith(("this.", "this/")):
            this, rest = True, rest[5:]
        elif rest.startswith("./"):
            this, rest = True, rest[2:]
        if ".." in rest:
            raise ValueError(f"'..' may only lead a path: {text!r}")
        segments = tuple(part for part in SEPARATORS.split(rest) if part)
        return cls(segments=segments, up=up, this=this, data=data, original=text)

    @property
    def is_helper_name(self) -> bool:
        """Bare single identifier, the only form that may name a registered helper."""

        return not (self.this or self.data or self.up) and len(self.segments) == 1

    def __str__(self) -> str:
        if self.original:
            return self.original
        prefix = "@" if self.data else ""
        prefix += "../" * self.up
        if self.this:
            prefix += "this."
        return prefix + ".".join(self.segments)


class LiteralExpr(_Frozen):
    """Literal parameter with its parse-time kind."""

    type: Literal["literal"] = "literal"
    kind: Literal["string", "integer", "float", "boolean"]
    value: Any

    @field_validator("value")
    @classmethod
    def _normalize(cls, value: Any, info: ValidationInfo) -> Any:
        kind = info.data.get("kind")
        if kind == "string":
            if not isinstance(value, str):
                raise ValueError("string literal must hold a str")
            return value
        if kind in ("integer", "float"):
            if isinstance(value, bool) or value is None:
                raise ValueError(f"{kind} literal cannot hold {value!r}")
            try:
                number = float(value) if kind == "float" else value
                if kind == "integer":
                    if isinstance(number, float) and not number.is_integer():
                        raise ValueError(f"integer literal cannot hold {value!r}")
                    number = int(number)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{kind} literal cannot hold {value!r}") from exc
            return number
        if kind == "boolean":
            if isinstance(value, bool):
                return value
            normalized = str(value).strip().lower()
            if normalized in TRUE_WORDS:
                return True
            if normalized in FALSE_WORDS:
                return False
            raise ValueError(f"boolean literal cannot hold {value!r}")
        return value


Expr = Annotated[Union[PathExpr, LiteralExpr], Field(discriminator="type")]


class TextNode(_Frozen):
    type: Literal["text"] = "text"
    text: str


class MustacheNode(_Frozen):
    """``{{name params hash}}``; ``escaped`` is false for triple-stash output."""

    type: Literal["mustache"] = "mustache"
    name: PathExpr
    params: Tuple[Expr, ...] = ()
    hash: Dict[str, Expr] = Field(default_factory=dict)
    escaped: bool = True


class BlockNode(_Frozen):
    """``{{#name}}body{{^}}inverse{{/name}}``, or a raw block carrying ``source`` text."""

    type: Literal["block"] = "block"
    name: PathExpr
    params: Tuple[Expr, ...] = ()
    hash: Dict[str, Expr] = Field(default_factory=dict)
    body: Tuple[Node, ...] = ()
    inverse: Optional[Tuple[Node, ...]] = None
    raw: bool = False
    source: Optional[str] = None

    @model_validator(mode="after")
    def _check_raw(self) -> "BlockNode":
        if self.raw:
            if self.source is None:
                raise ValueError("raw blocks must carry their literal source")
            if self.body or self.inverse is not None:
                raise ValueError("raw blocks cannot carry parsed bodies")
        elif self.source is not None:
            raise ValueError("only raw blocks carry literal source")
        return self


class PartialNode(_Frozen):
    type: Literal["partial"] = "partial"
    name: str
    context: Optional[Expr] = None
    hash: Dict[str, Expr] = Field(default_factory=dict)


Node = Annotated[
    Union[TextNode, MustacheNode, BlockNode, PartialNode],
    Field(discriminator="type"),
]


class Template(_Frozen):
    """Root of a parsed template."""

    body: Tuple[Node, ...] = ()
    name: str = ""


BlockNode.model_rebuild()
Template.model_rebuild()


__all__ = [
    "BlockNode",
    "Expr",
    "LiteralExpr",
    "MustacheNode",
    "Node",
    "PartialNode",
    "PathExpr",
    "Template",
    "TextNode",
]
