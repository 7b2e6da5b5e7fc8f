"""Tests for Settings and its sub-models."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from inkwell.config import Settings, WorkshopConfig, get_settings

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith(("APP__", "WORKSHOP__", "DEV__")):
            monkeypatch.delenv(key, raising=False)


class TestWorkshopConfig:
    """Toolbar and selection settings."""

    def test_defaults(self, clean_env: None) -> None:
        """Defaults match the toolbar's built-in geometry."""
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.workshop.toolbar_width == 220
        assert s.workshop.toolbar_height == 44
        assert s.workshop.toolbar_margin == 10
        assert s.workshop.selection_debounce_ms == 10

    def test_override_via_env(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """WORKSHOP__TOOLBAR_WIDTH overrides the default."""
        monkeypatch.setenv("WORKSHOP__TOOLBAR_WIDTH", "300")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.workshop.toolbar_width == 300

    def test_zero_width_rejected(self) -> None:
        """A toolbar with no area is a configuration error."""
        with pytest.raises(ValidationError, match="must be > 0"):
            WorkshopConfig(toolbar_width=0)


class TestDevConfig:
    """Demo page toggles."""

    def test_demo_pages_off_by_default(self, clean_env: None) -> None:
        """Demo pages must be switched on explicitly."""
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.dev.enable_demo_pages is False
        assert s.dev.seed_demo_piece is True

    def test_enable_via_env(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """DEV__ENABLE_DEMO_PAGES=true enables them."""
        monkeypatch.setenv("DEV__ENABLE_DEMO_PAGES", "true")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.dev.enable_demo_pages is True


class TestEnvFile:
    """.env loading."""

    def test_reads_env_file(self, clean_env: None, tmp_path: Path) -> None:
        """Values in the given .env file are applied."""
        env_file = tmp_path / ".env"
        env_file.write_text("APP__PORT=9090\n")
        s = Settings(_env_file=env_file)  # type: ignore[call-arg]
        assert s.app.port == 9090


class TestGetSettings:
    """Cached singleton."""

    def test_cached(self) -> None:
        """Repeated calls return the same instance until the cache is cleared."""
        first = get_settings()
        assert get_settings() is first
        get_settings.cache_clear()
        assert get_settings() is not first
