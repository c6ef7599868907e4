"""
Settings module for the directory cache.
Uses pydantic-settings for environment variable management.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Directory cache settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DIRCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Cache Configuration
    directory: str = "."
    json_parsing: bool = True
    json_suffix: str = ".json"
    encoding: str = "utf-8"  # empty string keeps raw bytes

    # Watcher Configuration
    watch_debounce_ms: int = 1600
    watch_step_ms: int = 50
    watch_force_polling: bool = False

    # Logging
    log_level: str = "INFO"

    @field_validator("json_suffix")
    @classmethod
    def validate_json_suffix(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError("json_suffix must look like '.json'")
        return value

    @field_validator("watch_debounce_ms", "watch_step_ms")
    @classmethod
    def validate_positive_ms(cls, value: int) -> int:
        if value < 1:
            raise ValueError("watcher timings must be >= 1 ms")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    @property
    def directory_path(self) -> Path:
        """Return the watched directory as an absolute Path."""
        return Path(self.directory).resolve()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
