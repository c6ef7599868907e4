"""
Interface definitions for the directory cache.

This module provides abstract base classes (ABCs) that define the contracts
at the cache's boundaries. Using interfaces enables:
- Better testability through fake filesystems and watchers
- Clear documentation of collaborator capabilities
- Dependency injection and substitution

Available Interfaces:
    IFileSystem: Directory listing, metadata probe and content read
    IWatcher: Add/change/delete batch notifications
    IDirectoryCache: Consumer-facing cache surface
"""

from dircache.interfaces.cache import IDirectoryCache
from dircache.interfaces.filesystem import IFileSystem
from dircache.interfaces.watcher import BatchListener, ErrorListener, IWatcher, WatchEvent

__all__ = [
    "BatchListener",
    "ErrorListener",
    "IDirectoryCache",
    "IFileSystem",
    "IWatcher",
    "WatchEvent",
]
