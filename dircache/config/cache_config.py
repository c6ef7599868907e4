"""
Configuration dataclasses for cache components.
Provides immutable configuration objects for dependency injection.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dircache.settings import Settings


@dataclass(frozen=True)
class WatchConfig:
    """Filesystem watcher timing configuration."""

    debounce_ms: int = 1600
    step_ms: int = 50
    force_polling: bool = False


@dataclass(frozen=True)
class CacheConfig:
    """Directory cache configuration."""

    json_parsing: bool = True
    json_suffix: str = ".json"
    encoding: str = "utf-8"
    watch: WatchConfig = field(default_factory=WatchConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "CacheConfig":
        """Create config from application settings."""
        return cls(
            json_parsing=settings.json_parsing,
            json_suffix=settings.json_suffix,
            encoding=settings.encoding,
            watch=WatchConfig(
                debounce_ms=settings.watch_debounce_ms,
                step_ms=settings.watch_step_ms,
                force_polling=settings.watch_force_polling,
            ),
        )
