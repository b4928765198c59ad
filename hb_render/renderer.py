"""Renderer core: walks a syntax tree and produces output text."""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import structlog

from hb_sdk.config import RenderConfig
from hb_sdk.errors import PartialNotFoundError, RawBlockMisuseError, RenderDepthError
from hb_sdk.helpers import Helper, HelperRegistry
from hb_sdk.nodes import BlockNode, MustacheNode, PartialNode, PathExpr, Template, TextNode
from hb_sdk.values import MISSING, SafeString, ValueKind, escape, is_truthy, kind_of, to_str

from .frames import FrameArena, resolve_context_path, resolve_data_path
from .invoke import evaluate, invoke_helper

logger = structlog.get_logger(__name__)

TemplateLike = Union[Template, Mapping[str, Any]]
HelpersLike = Union[HelperRegistry, Mapping[str, Helper], None]


def _as_template(template: TemplateLike) -> Template:
    if isinstance(template, Template):
        return template
    return Template.model_validate(template)


class RenderRun:
    """State owned by a single render call: frame arenas, depth and partials."""

    def __init__(
        self,
        helpers: Mapping[str, Helper],
        config: RenderConfig,
        context: Any,
        data: Optional[Mapping[str, Any]],
        partials: Mapping[str, Template],
    ) -> None:
        self.helpers = helpers
        self.config = config
        self.partials = partials
        self.contexts = FrameArena()
        self.data = FrameArena()
        self.root = self.contexts.push(context)
        root_data: Dict[str, Any] = dict(data or {})
        root_data.setdefault("root", context)
        self.root_data = self.data.push(root_data)
        self._depth = 0

    def render(self, template: Template) -> str:
        return self.render_nodes(template.body, self.root, self.root_data)

    def resolve(self, path: PathExpr, context: int, data: int) -> Any:
        if path.data:
            return resolve_data_path(self.data, data, path)
        return resolve_context_path(self.contexts, context, path)

    def render_scoped(
        self,
        nodes: Sequence[Any],
        context: int,
        data: int,
        *,
        value: Any = MISSING,
        private: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Render ``nodes`` in child frames released once rendering returns."""

        with self.contexts.scope(), self.data.scope():
            if value is not MISSING:
                context = self.contexts.push(value, context)
            if private:
                data = self.data.push(dict(private), data)
            return self.render_nodes(nodes, context, data)

    def render_nodes(self, nodes: Sequence[Any], context: int, data: int) -> str:
        self._depth += 1
        try:
            if self._depth > self.config.max_depth:
                raise RenderDepthError(f"template nesting exceeds {self.config.max_depth} levels")
            parts = []
            for node in nodes:
                if isinstance(node, TextNode):
                    parts.append(node.text)
                elif isinstance(node, MustacheNode):
                    parts.append(self._render_mustache(node, context, data))
                elif isinstance(node, BlockNode):
                    parts.append(self._render_block(node, context, data))
                elif isinstance(node, PartialNode):
                    parts.append(self._render_partial(node, context, data))
                else:
                    raise TypeError(f"unknown template node {type(node).__name__!r}")
            return "".join(parts)
        except RecursionError as exc:
            raise RenderDepthError(f"template nesting exhausted the interpreter stack at level {self._depth}") from exc
        finally:
            self._depth -= 1

    def _target(self, name: PathExpr, context: int, data: int) -> Tuple[Optional[Helper], Any]:
        """Helper to call for a call-site head, or the value it resolves to."""

        if name.is_helper_name:
            helper = self.helpers.get(name.segments[0])
            if helper is not None:
                return helper, None
        value = self.resolve(name, context, data)
        if isinstance(value, Helper):
            return value, None
        return None, value

    def _render_mustache(self, node: MustacheNode, context: int, data: int) -> str:
        helper, value = self._target(node.name, context, data)
        if helper is not None:
            if helper.signature.raw:
                raise RawBlockMisuseError(f"raw helper '{helper.name}' can only be used as a raw block")
            value = invoke_helper(self, helper, node, context, data)
        elif node.params or node.hash:
            logger.debug("render.helper.missing", name=str(node.name))

        text = to_str(value)
        if node.escaped and self.config.escape and not isinstance(value, SafeString):
            return escape(text)
        return text

    def _render_block(self, node: BlockNode, context: int, data: int) -> str:
        helper, value = self._target(node.name, context, data)
        if node.raw:
            if helper is None or not helper.signature.raw:
                raise RawBlockMisuseError(f"raw block '{node.name}' needs a raw helper")
            return to_str(invoke_helper(self, helper, node, context, data))
        if helper is not None:
            if helper.signature.raw:
                raise RawBlockMisuseError(f"raw helper '{helper.name}' can only be used as a raw block")
            return to_str(invoke_helper(self, helper, node, context, data))
        if node.params or node.hash:
            logger.debug("render.helper.missing", name=str(node.name))
        return self._render_section(node, value, context, data)

    def _render_section(self, node: BlockNode, value: Any, context: int, data: int) -> str:
        """Default block semantics when the head is not a helper."""

        inverse = node.inverse or ()
        if kind_of(value) is ValueKind.SEQUENCE:
            if not value:
                return self.render_scoped(inverse, context, data)
            last = len(value) - 1
            return "".join(
                self.render_scoped(
                    node.body,
                    context,
                    data,
                    value=item,
                    private={"index": index, "first": index == 0, "last": index == last},
                )
                for index, item in enumerate(value)
            )
        if not is_truthy(value):
            return self.render_scoped(inverse, context, data)
        if value is True:
            return self.render_scoped(node.body, context, data)
        return self.render_scoped(node.body, context, data, value=value)

    def _render_partial(self, node: PartialNode, context: int, data: int) -> str:
        partial = self.partials.get(node.name)
        if partial is None:
            raise PartialNotFoundError(node.name)
        value = MISSING if node.context is None else evaluate(self, node.context, context, data)
        extra = {key: evaluate(self, expr, context, data) for key, expr in node.hash.items()}
        with self.contexts.scope():
            if value is not MISSING:
                context = self.contexts.push(value, context)
            if extra:
                context = self.contexts.push(extra, context)
            return self.render_nodes(partial.body, context, data)


class Renderer:
    """Renders templates against a fixed helper set.

    Holds only read-only state, so one instance can serve concurrent renders.
    """

    def __init__(self, helpers: HelpersLike = None, config: Optional[RenderConfig] = None) -> None:
        if isinstance(helpers, HelperRegistry):
            helpers = helpers.snapshot()
        self._helpers: Mapping[str, Helper] = MappingProxyType(dict(helpers or {}))
        self._config = config or RenderConfig()

    @property
    def config(self) -> RenderConfig:
        return self._config

    def render(
        self,
        template: TemplateLike,
        context: Any = None,
        *,
        data: Optional[Mapping[str, Any]] = None,
        partials: Optional[Mapping[str, TemplateLike]] = None,
    ) -> str:
        tree = _as_template(template)
        resolved_partials = {name: _as_template(item) for name, item in (partials or {}).items()}
        logger.debug("render.start", template=tree.name or None, nodes=len(tree.body))
        run = RenderRun(self._helpers, self._config, context, data, resolved_partials)
        return run.render(tree)


def render_template(
    template: TemplateLike,
    context: Any = None,
    *,
    helpers: HelpersLike = None,
    data: Optional[Mapping[str, Any]] = None,
    partials: Optional[Mapping[str, TemplateLike]] = None,
    config: Optional[RenderConfig] = None,
) -> str:
    """Render ``template`` once with a throwaway :class:`Renderer`."""

    return Renderer(helpers, config).render(template, context, data=data, partials=partials)


__all__ = ["RenderRun", "Renderer", "render_template"]
