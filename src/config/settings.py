# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for the cache driver, default duration, caller
identity attribute and logging options.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Cache ===
    service_cache_driver: Literal["memory", "json", "sqlite", "redis"] = "memory"
    # 0 caches forever unless a call passes its own duration.
    cache_duration_in_seconds: int = 600
    user_identifier_key: str = "id"

    # json / sqlite drivers
    cache_root: Path = Path("~/.servicecache/cache")

    # redis driver
    cache_redis_url: str = ""
    cache_redis_prefix: str = "servicecache:"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("user_identifier_key")
    @classmethod
    def validate_identifier_key(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("user_identifier_key must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_duration_in_seconds < 0:
            errors.append("CACHE_DURATION_IN_SECONDS must be >= 0")

        if self.service_cache_driver == "redis" and not self.cache_redis_url:
            errors.append(
                "CACHE_REDIS_URL must be set when SERVICE_CACHE_DRIVER=redis"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
