"""Engine-wide configuration loaded from the environment."""

from __future__ import annotations

from functools import cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Centralized runtime settings for the rules engine."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COMMUNISTOPOLY_",
        extra="ignore",
    )

    rng_seed: int | None = None
    max_log_entries: int | None = Field(default=None, ge=1)
    log_level: str = "WARNING"


@cache
def get_settings() -> EngineSettings:
    """Return the cached settings instance."""

    return EngineSettings()


__all__ = ["EngineSettings", "get_settings"]
