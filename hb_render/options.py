"""Per-call options object handed to helpers that declare it."""
from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, Tuple

from hb_sdk.errors import TemplateError
from hb_sdk.nodes import PathExpr
from hb_sdk.values import MISSING, is_truthy, to_str

from .frames import DataFrame

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .renderer import RenderRun


class Options:
    """Hash, private data and body rendering for one helper invocation.

    Valid only while the helper call that received it is running.
    """

    def __init__(
        self,
        run: "RenderRun",
        name: str,
        *,
        context: int,
        data: int,
        hash: Mapping[str, Any],
        params: Sequence[Any],
        body: Tuple[Any, ...] = (),
        inverse: Tuple[Any, ...] = (),
        source: Optional[str] = None,
        block: bool = False,
    ) -> None:
        self._run = run
        self._name = name
        self._context = context
        self._data = data
        self._hash = MappingProxyType(dict(hash))
        self._params = tuple(params)
        self._body = body
        self._inverse = inverse
        self._source = source
        self._block = block
        self._open = True

    def close(self) -> None:
        self._open = False

    def _ensure_open(self) -> None:
        if not self._open:
            raise TemplateError(f"options for helper '{self._name}' used after the helper returned")

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_block(self) -> bool:
        return self._block

    @property
    def is_raw(self) -> bool:
        return self._source is not None

    @property
    def hash(self) -> Mapping[str, Any]:
        return self._hash

    @property
    def params(self) -> Tuple[Any, ...]:
        """Positional arguments as evaluated, before signature coercion."""

        return self._params

    def param(self, index: int) -> Any:
        if 0 <= index < len(self._params):
            return self._params[index]
        return None

    @property
    def context(self) -> Any:
        self._ensure_open()
        return self._run.contexts.value(self._context)

    @property
    def data_frame(self) -> DataFrame:
        self._ensure_open()
        return DataFrame(self._run.data, self._data)

    def hash_prop(self, key: str) -> Any:
        return self._hash.get(key)

    def hash_str(self, key: str) -> str:
        return to_str(self._hash.get(key))

    def hash_bool(self, key: str) -> bool:
        return is_truthy(self._hash.get(key))

    def value(self, name: str) -> Any:
        """Resolve ``name`` as a path against the current context."""

        self._ensure_open()
        return self._run.resolve(PathExpr.parse(name), self._context, self._data)

    def value_str(self, name: str) -> str:
        return to_str(self.value(name))

    def render_body(self, data: Optional[Mapping[str, Any]] = None) -> str:
        """Render the primary body in the current context."""

        return self._render(MISSING, data)

    def render_body_with(self, value: Any, data: Optional[Mapping[str, Any]] = None) -> str:
        """Render the primary body with ``value`` pushed as the new context."""

        return self._render(value, data)

    def render_inverse(self) -> str:
        """Render the inverse body against the call-site context."""

        self._ensure_open()
        if self._source is not None or not self._inverse:
            return ""
        return self._run.render_scoped(self._inverse, self._context, self._data)

    def _render(self, value: Any, data: Optional[Mapping[str, Any]]) -> str:
        self._ensure_open()
        if self._source is not None:
            return self._source
        if not self._body:
            return ""
        return self._run.render_scoped(self._body, self._context, self._data, value=value, private=data)


__all__ = ["Options"]
