"""Render configuration loaded from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MAX_DEPTH = 64
FALSE_VALUES = {"0", "false", "no", "off"}


def _env(name: str) -> str:
    value = os.getenv(name)
    return value.strip() if isinstance(value, str) else ""


@dataclass(frozen=True)
class RenderConfig:
    """Options shared by every render call of a renderer."""

    escape: bool = True
    max_depth: int = DEFAULT_MAX_DEPTH

    @classmethod
    def from_env(cls) -> "RenderConfig":
        """Construct from ``HB_ESCAPE`` and ``HB_MAX_DEPTH``.

        Unparseable depths fall back to the default.
        """
        escape = _env("HB_ESCAPE").lower() not in FALSE_VALUES
        raw_depth = _env("HB_MAX_DEPTH")
        try:
            max_depth = max(1, int(raw_depth)) if raw_depth else DEFAULT_MAX_DEPTH
        except ValueError:
            max_depth = DEFAULT_MAX_DEPTH
        return cls(escape=escape, max_depth=max_depth)


def load_render_config() -> RenderConfig:
    return RenderConfig.from_env()


__all__ = ["DEFAULT_MAX_DEPTH", "RenderConfig", "load_render_config"]
