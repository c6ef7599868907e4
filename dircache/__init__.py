"""dircache: an in-memory, watcher-synchronized mirror of a directory."""

from dircache.cache import NO_CONTENT, CacheState, DirectoryCache, NameFilter
from dircache.config import CacheConfig, Settings, WatchConfig, get_settings
from dircache.events import CacheEvent, EventRegistry
from dircache.exceptions import (
    CacheStateException,
    DecodeException,
    DirectoryCacheException,
    FileAccessException,
    InitializationException,
    ValidationException,
    WatcherException,
)
from dircache.interfaces import IDirectoryCache, IFileSystem, IWatcher, WatchEvent
from dircache.watcher import DirectoryWatcher

__all__ = [
    "NO_CONTENT",
    "CacheConfig",
    "CacheEvent",
    "CacheState",
    "CacheStateException",
    "DecodeException",
    "DirectoryCache",
    "DirectoryCacheException",
    "DirectoryWatcher",
    "EventRegistry",
    "FileAccessException",
    "IDirectoryCache",
    "IFileSystem",
    "IWatcher",
    "InitializationException",
    "NameFilter",
    "Settings",
    "ValidationException",
    "WatchConfig",
    "WatchEvent",
    "WatcherException",
    "get_settings",
]

__version__ = "0.1.0"
