"""Application configuration and settings management."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Project-level settings loaded from environment variables/.env."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    data_dir: Path = Field(Path("data"), alias="CONTINUUM_DATA_DIR")
    log_dir: Path = Field(Path("logs"), alias="CONTINUUM_LOG_DIR")
    timezone: str = Field("UTC", alias="TIMEZONE")

    # Six hours of per-minute entries, both ends included; timeline
    # consumers run under a tight memory ceiling.
    widget_horizon_minutes: int = Field(6 * 60 - 1, alias="WIDGET_HORIZON_MINUTES", ge=0)
    widget_max_samples: int = Field(360, alias="WIDGET_MAX_SAMPLES", ge=1)


_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    """Return cached settings instance."""

    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings()
    return _SETTINGS


__all__ = ["Settings", "get_settings"]
