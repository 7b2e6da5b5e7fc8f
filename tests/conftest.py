"""Shared pytest fixtures for Inkwell tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from inkwell.config import get_settings
from inkwell.data.demo import get_demo_store

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _reset_cached_singletons() -> Iterator[None]:
    """Cached settings and the demo store must not leak between tests."""
    get_settings.cache_clear()
    get_demo_store.cache_clear()
    yield
    get_settings.cache_clear()
    get_demo_store.cache_clear()
