from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest
import structlog


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from hb_render import register_builtins  # noqa: E402
from hb_sdk import HelperRegistry, configure_logging  # noqa: E402


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[None]:
    """Keep engine debug events out of test output and restore structlog afterwards."""

    configure_logging("WARNING")
    try:
        yield
    finally:
        structlog.reset_defaults()


@pytest.fixture
def registry() -> HelperRegistry:
    return HelperRegistry()


@pytest.fixture
def builtin_registry() -> HelperRegistry:
    return register_builtins(HelperRegistry())
