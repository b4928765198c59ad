"""Public SDK surface for building templates and registering helpers."""
from __future__ import annotations

from .config import RenderConfig, load_render_config
from .errors import (
    ArgumentTypeError,
    ArityMismatchError,
    HelperConfigError,
    HelperInvocationError,
    PartialNotFoundError,
    RawBlockMisuseError,
    RenderDepthError,
    TemplateError,
)
from .helpers import Helper, HelperRegistry, HelperSignature, make_helper
from .log import configure_logging
from .nodes import BlockNode, LiteralExpr, MustacheNode, PartialNode, PathExpr, Template, TextNode
from .values import SafeString, ValueKind, escape, is_truthy, kind_of, to_str

__all__ = [
    "__version__",
    "ArgumentTypeError",
    "ArityMismatchError",
    "BlockNode",
    "Helper",
    "HelperConfigError",
    "HelperInvocationError",
    "HelperRegistry",
    "HelperSignature",
    "LiteralExpr",
    "MustacheNode",
    "PartialNode",
    "PartialNotFoundError",
    "PathExpr",
    "RawBlockMisuseError",
    "RenderConfig",
    "RenderDepthError",
    "SafeString",
    "Template",
    "TemplateError",
    "TextNode",
    "ValueKind",
    "configure_logging",
    "escape",
    "is_truthy",
    "kind_of",
    "load_render_config",
    "make_helper",
    "to_str",
]

__version__ = "0.1.0"
