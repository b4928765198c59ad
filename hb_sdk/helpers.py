"""Helper signatures and the helper registry."""
from __future__ import annotations

import inspect
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Literal, Mapping, Optional, Sequence, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, model_validator

from .errors import ArityMismatchError, HelperConfigError

ParamKind = Literal["any", "str", "int", "float", "bool"]

INVALID_NAME = re.compile(r"[./\s]|^@")

logger = structlog.get_logger(__name__)


class HelperSignature(BaseModel):
    """Declared calling shape of a helper.

    ``params`` lists the positional parameter kinds in order; ``options`` appends
    the block ``Options`` object as the last argument. Raw helpers receive their
    block body as literal text and therefore always take ``options``.
    """

    model_config = ConfigDict(frozen=True)

    params: Tuple[ParamKind, ...] = ()
    options: bool = False
    raw: bool = False

    @model_validator(mode="after")
    def _raw_needs_options(self) -> "HelperSignature":
        if self.raw and not self.options:
            raise ValueError("raw helpers must declare the options parameter")
        return self

    @property
    def slots(self) -> int:
        return len(self.params) + (1 if self.options else 0)


@dataclass(frozen=True)
class Helper:
    """A callable bound to its declared signature."""

    name: str
    fn: Callable[..., Any]
    signature: HelperSignature

    def call(self, args: Sequence[Any], options: Any) -> Any:
        if self.signature.options:
            return self.fn(*args, options)
        return self.fn(*args)


def _check_callable(name: str, fn: Callable[..., Any], signature: HelperSignature) -> None:
    if not callable(fn):
        raise HelperConfigError(f"helper '{name}' is not callable", helper=name)
    try:
        declared = inspect.signature(fn)
    except (TypeError, ValueError):
        # builtins without introspectable signatures are accepted as declared
        return
    try:
        declared.bind(*([None] * signature.slots))
    except TypeError as exc:
        raise ArityMismatchError(
            f"helper '{name}' cannot accept {signature.slots} positional argument(s): {exc}",
            helper=name,
        ) from exc


def make_helper(
    fn: Callable[..., Any],
    *,
    params: Iterable[ParamKind] = (),
    options: bool = False,
    raw: bool = False,
    name: Optional[str] = None,
) -> Helper:
    """Wrap ``fn`` with an explicit signature, validating it can be called that way."""

    helper_name = name if name is not None else getattr(fn, "__name__", "<helper>")
    try:
        signature = HelperSignature(params=tuple(params), options=options, raw=raw)
    except ValueError as exc:
        raise HelperConfigError(f"invalid signature for helper '{helper_name}': {exc}", helper=helper_name) from exc
    _check_callable(helper_name, fn, signature)
    return Helper(name=helper_name, fn=fn, signature=signature)


class HelperRegistry:
    """Name to helper mapping, populated before rendering starts."""

    def __init__(self) -> None:
        self._helpers: Dict[str, Helper] = {}

    def add(self, helper: Helper, *, replace: bool = False) -> Helper:
        name = helper.name.strip()
        if not name:
            raise HelperConfigError("helper name cannot be empty.")
        if INVALID_NAME.search(name):
            raise HelperConfigError(f"helper name '{name}' cannot contain path syntax.", helper=name)
        if name in self._helpers and not replace:
            raise HelperConfigError(f"helper '{name}' is already registered.", helper=name)
        if name != helper.name:
            helper = Helper(name=name, fn=helper.fn, signature=helper.signature)
        self._helpers[name] = helper
        logger.debug(
            "helpers.registered",
            helper=name,
            params=list(helper.signature.params),
            options=helper.signature.options,
            raw=helper.signature.raw,
        )
        return helper

    def register(
        self,
        name: str,
        fn: Callable[..., Any],
        *,
        params: Iterable[ParamKind] = (),
        options: bool = False,
        raw: bool = False,
        replace: bool = False,
    ) -> Helper:
        helper = make_helper(fn, params=params, options=options, raw=raw, name=name)
        return self.add(helper, replace=replace)

    def helper(
        self,
        name: Optional[str] = None,
        *,
        params: Iterable[ParamKind] = (),
        options: bool = False,
        raw: bool = False,
        replace: bool = False,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of :meth:`register`; returns the function unchanged."""

        def decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.register(
                name or fn.__name__,
                fn,
                params=params,
                options=options,
                raw=raw,
                replace=replace,
            )
            return fn

        return decorate

    def get(self, name: str) -> Optional[Helper]:
        return self._helpers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._helpers

    def __len__(self) -> int:
        return len(self._helpers)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._helpers)

    def snapshot(self) -> Mapping[str, Helper]:
        """Read-only copy handed to renderers."""

        return MappingProxyType(dict(self._helpers))


__all__ = [
    "Helper",
    "HelperRegistry",
    "HelperSignature",
    "ParamKind",
    "make_helper",
]
