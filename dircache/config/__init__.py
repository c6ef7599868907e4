"""Configuration module exports."""

from dircache.settings import Settings, get_settings

from dircache.config.cache_config import CacheConfig, WatchConfig

__all__ = [
    "Settings",
    "get_settings",
    "CacheConfig",
    "WatchConfig",
]
