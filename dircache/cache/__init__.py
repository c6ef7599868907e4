"""Cache package for dircache.

Provides the in-memory directory mirror and its synchronization engine.
"""

from dircache.cache.binding import WatcherBinding
from dircache.cache.content_store import NO_CONTENT, ContentStore, DecodePolicy
from dircache.cache.directory_cache import CacheState, DirectoryCache
from dircache.cache.file_state import FileKind, FileStat
from dircache.cache.filesystem import LocalFileSystem
from dircache.cache.locks import KeyedLock
from dircache.cache.name_filter import FilterKind, NameFilter
from dircache.cache.pipeline import ProbeTarget, ReadOutcome, probe_and_read, probe_and_read_batch
from dircache.cache.reconciler import BatchKind, ReconciliationEngine
from dircache.cache.snapshot import SnapshotView

__all__ = [
    "NO_CONTENT",
    "BatchKind",
    "CacheState",
    "ContentStore",
    "DecodePolicy",
    "DirectoryCache",
    "FileKind",
    "FileStat",
    "FilterKind",
    "KeyedLock",
    "LocalFileSystem",
    "NameFilter",
    "ProbeTarget",
    "ReadOutcome",
    "ReconciliationEngine",
    "SnapshotView",
    "WatcherBinding",
    "probe_and_read",
    "probe_and_read_batch",
]
