"""Error taxonomy raised by helper registration and rendering."""
from __future__ import annotations

from typing import Optional


class TemplateError(Exception):
    """Base class for every failure surfaced by the engine."""


class HelperConfigError(TemplateError, ValueError):
    """A helper is registered or called in a way its signature cannot accept."""

    def __init__(self, message: str, *, helper: Optional[str] = None) -> None:
        super().__init__(message)
        self.helper = helper


class ArityMismatchError(HelperConfigError):
    """Declared positional slots do not match the callable or the call site."""


class ArgumentTypeError(HelperConfigError):
    """An argument cannot be coerced to the declared parameter kind."""


class HelperInvocationError(TemplateError):
    """A helper raised while rendering."""

    def __init__(self, helper: str, cause: BaseException) -> None:
        super().__init__(f"helper '{helper}' failed: {cause}")
        self.helper = helper
        self.cause = cause


class RawBlockMisuseError(TemplateError):
    """Raw helpers and raw blocks must be used together."""


class PartialNotFoundError(TemplateError):
    """A partial node names a template that was not supplied."""

    def __init__(self, name: str) -> None:
        super().__init__(f"partial '{name}' not found")
        self.name = name


class RenderDepthError(TemplateError):
    """Template nesting exceeded the configured maximum depth."""


__all__ = [
    "ArgumentTypeError",
    "ArityMismatchError",
    "HelperConfigError",
    "HelperInvocationError",
    "PartialNotFoundError",
    "RawBlockMisuseError",
    "RenderDepthError",
    "TemplateError",
]
