"""Shared fixtures: every test starts from unconfigured global state."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from spillway._config import configure, reset
from spillway._context import _reset_active
from spillway._registry import StepRegistry, default_registry


@pytest.fixture(autouse=True)
def _clean_state() -> Iterator[None]:
    reset()
    configure("logging")
    default_registry.clear()
    _reset_active()
    yield
    reset()
    default_registry.clear()
    _reset_active()


@pytest.fixture
def registry() -> StepRegistry:
    return StepRegistry()
