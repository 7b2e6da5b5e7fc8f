"""Centralised application configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/inkwell/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class AppConfig(BaseModel):
    """Application runtime configuration."""

    base_url: str = "http://localhost:8080"
    port: int = 8080
    storage_secret: SecretStr = SecretStr("dev-secret-change-me")
    log_dir: Path = Path("logs")


class WorkshopConfig(BaseModel):
    """Selection capture and floating toolbar geometry."""

    selection_debounce_ms: int = 10
    toolbar_width: int = 220
    toolbar_height: int = 44
    toolbar_margin: int = 10
    max_display_length: int = 50

    @model_validator(mode="after")
    def toolbar_must_have_area(self) -> WorkshopConfig:
        if self.toolbar_width <= 0 or self.toolbar_height <= 0:
            msg = "WORKSHOP__TOOLBAR_WIDTH and WORKSHOP__TOOLBAR_HEIGHT must be > 0"
            raise ValueError(msg)
        return self


class DevConfig(BaseModel):
    """Development and testing toggles."""

    enable_demo_pages: bool = False
    seed_demo_piece: bool = True


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Application settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``APP__PORT``, ``WORKSHOP__TOOLBAR_WIDTH``, ``DEV__ENABLE_DEMO_PAGES``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    workshop: WorkshopConfig = WorkshopConfig()
    dev: DevConfig = DevConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
