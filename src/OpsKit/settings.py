"""Runtime settings for OpsKit itself, read from ``OPSKIT_*`` environment variables.

These settings only govern the library's own ambient behaviour (logging and
how long callers wait for background producers).  Application configuration
is decoded with :mod:`OpsKit.Config`.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["RuntimeSettings", "get_settings", "invalidate_settings_cache"]


class RuntimeSettings(BaseSettings):
    """Pydantic settings model exposing ``OPSKIT_*`` environment overrides."""

    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_format: Literal["console", "json"] = Field(
        default="console", description="Console output format for the stdout handler"
    )
    log_dir: Optional[Path] = Field(
        default=None, description="Directory receiving rotated JSON log files"
    )
    worker_join_timeout: float = Field(
        default=5.0, ge=0, description="Seconds to wait for a cancelled producer to exit"
    )

    model_config = SettingsConfigDict(env_prefix="OPSKIT_", case_sensitive=False, extra="ignore")

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        """Normalise logging levels and ensure they match the supported set."""

        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = value.strip().upper()
        if upper not in valid_levels:
            raise ValueError(f"level must be one of {sorted(valid_levels)}")
        return upper


_SETTINGS_CACHE: Optional[RuntimeSettings] = None
_SETTINGS_LOCK = threading.Lock()


def get_settings() -> RuntimeSettings:
    """Return memoised :class:`RuntimeSettings` built from the environment."""

    global _SETTINGS_CACHE  # noqa: PLW0603

    with _SETTINGS_LOCK:
        if _SETTINGS_CACHE is None:
            _SETTINGS_CACHE = RuntimeSettings()
        return _SETTINGS_CACHE


def invalidate_settings_cache() -> None:
    """Drop the cached settings so the next access re-reads the environment."""

    global _SETTINGS_CACHE  # noqa: PLW0603

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None
