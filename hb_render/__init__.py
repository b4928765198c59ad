"""Template rendering engine: scope resolution, helper dispatch and block execution."""
from __future__ import annotations

from .builtins import register_builtins
from .frames import DataFrame, FrameArena
from .options import Options
from .renderer import Renderer, render_template

__all__ = [
    "DataFrame",
    "FrameArena",
    "Options",
    "Renderer",
    "register_builtins",
    "render_template",
]
