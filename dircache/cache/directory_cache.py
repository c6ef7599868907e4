"""
Watcher-synchronized in-memory cache of a directory.

This module provides the DirectoryCache class, the consumer-facing entry
point. It owns a ContentStore, derives filename snapshots from it, and keeps
it current by routing watcher notifications through the
ReconciliationEngine.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional, Tuple, Union

from dircache.cache.binding import WatcherBinding
from dircache.cache.content_store import ContentStore, public_content
from dircache.cache.filesystem import LocalFileSystem
from dircache.cache.name_filter import FilterArgument, NameFilter
from dircache.cache.reconciler import ReconciliationEngine
from dircache.cache.snapshot import SnapshotView
from dircache.config.cache_config import CacheConfig, WatchConfig
from dircache.events import CacheEvent, EventRegistry, Handler
from dircache.exceptions import (
    CacheStateException,
    DirectoryCacheException,
    InitializationException,
    ValidationException,
    WatcherException,
)
from dircache.interfaces.cache import IDirectoryCache
from dircache.interfaces.filesystem import IFileSystem
from dircache.interfaces.watcher import IWatcher
from dircache.settings import Settings, get_settings
from dircache.watcher import DirectoryWatcher

logger = logging.getLogger(__name__)

WatcherFactory = Callable[[Path, WatchConfig], Awaitable[IWatcher]]
InitCallback = Callable[[Optional[Exception], Optional["DirectoryCache"]], Any]


class CacheState(str, Enum):
    """Lifecycle of a DirectoryCache. STOPPED and FAILED are terminal."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"
    STOPPED = "stopped"


class DirectoryCache(IDirectoryCache):
    """
    In-memory mirror of a directory's files and their content.

    Implements the IDirectoryCache interface.

    The cache lists and reads the directory once during init(), then follows
    add/change/delete notifications from a watcher. The watcher is either
    injected (shared, only its listeners are ours) or created by init() (owned,
    stopped together with the cache).

    Attributes:
        directory: The watched directory
        config: Cache configuration in effect

    Example:
        >>> cache = DirectoryCache("./data", filter=r"\\.json$")
        >>> cache.on(CacheEvent.UPDATED, lambda name, content: print(name, content))
        >>> await cache.init()
        >>> cache.get_file("settings.json")
        {'debug': True}
        >>> cache.get_filenames()
        ('settings.json',)
        >>> cache.stop()
    """

    def __init__(
        self,
        directory: Union[str, Path],
        filter: FilterArgument = None,
        watcher: Optional[IWatcher] = None,
        *,
        config: Optional[CacheConfig] = None,
        filesystem: Optional[IFileSystem] = None,
        watcher_factory: Optional[WatcherFactory] = None,
    ):
        """
        Initialize the cache (nothing is read until init()).

        Args:
            directory: Directory to mirror
            filter: None (keep all), a regex pattern (keep matching names) or
                    a predicate used verbatim as the keep decision
            watcher: Optional pre-built watcher to use instead of creating one
            config: Cache configuration. Defaults to CacheConfig().
            filesystem: I/O provider. Defaults to LocalFileSystem().
            watcher_factory: Coroutine function creating the owned watcher.
                             Defaults to DirectoryWatcher.create.

        Raises:
            ValidationException: If filter is not a pattern or callable
        """
        self.directory = Path(directory)
        self.config = config or CacheConfig()

        self._filter = NameFilter.from_argument(filter)
        self._fs = filesystem or LocalFileSystem()
        self._watcher_factory = watcher_factory or DirectoryWatcher.create
        self._events = EventRegistry()
        self._store = ContentStore(
            json_parsing=self.config.json_parsing,
            json_suffix=self.config.json_suffix,
            encoding=self.config.encoding,
        )
        self._snapshot = SnapshotView(self._store)
        self._engine = ReconciliationEngine(
            self.directory, self._store, self._fs, self._filter, self._events
        )
        self._binding = WatcherBinding(self._engine, self._report_error)
        self._state = CacheState.UNINITIALIZED

        if watcher is not None:
            self._binding.bind(watcher)

    @classmethod
    def create(cls, params: Union[str, Path, Mapping[str, Any]]) -> "DirectoryCache":
        """
        Build a cache from a directory path or an options mapping.

        Args:
            params: A directory path, or a mapping with "directory" and the
                    optional "filter", "watcher" and "config" keys

        Raises:
            ValidationException: If no directory is given
        """
        if isinstance(params, (str, Path)):
            return cls(params)

        directory = params.get("directory")
        if not directory:
            raise ValidationException("directory is required", details={"params": sorted(params)})

        return cls(
            directory,
            filter=params.get("filter"),
            watcher=params.get("watcher"),
            config=params.get("config"),
        )

    @classmethod
    def default(cls, settings: Optional[Settings] = None, **kwargs: Any) -> "DirectoryCache":
        """
        Create a cache configured from environment settings.

        Environment Variables:
            DIRCACHE_DIRECTORY: Directory to mirror (default: ".")
            DIRCACHE_JSON_PARSING: Decode JSON files (default: true)
            DIRCACHE_JSON_SUFFIX: JSON filename suffix (default: ".json")
            DIRCACHE_ENCODING: Text encoding; empty keeps bytes (default: "utf-8")
            DIRCACHE_WATCH_DEBOUNCE_MS / DIRCACHE_WATCH_STEP_MS: watcher timings
        """
        if settings is None:
            settings = get_settings()

        logger.info(f"Creating DirectoryCache from settings: directory={settings.directory}")

        return cls(settings.directory_path, config=CacheConfig.from_settings(settings), **kwargs)

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state is CacheState.READY

    @property
    def watcher(self) -> Optional[IWatcher]:
        return self._binding.watcher

    @property
    def name_filter(self) -> NameFilter:
        return self._filter

    @property
    def mutation_count(self) -> int:
        """Key-set mutations (adds plus deletes) applied so far."""
        return self._store.mutation_count

    @property
    def json_parsing(self) -> bool:
        return self._store.json_parsing

    def attach_watcher(self, watcher: IWatcher) -> None:
        """
        Use an existing watcher instead of creating one in init().

        The watcher is only referenced: stop() removes this cache's listeners
        but leaves the watcher running for its other consumers.

        Raises:
            CacheStateException: If called after init() started
        """
        if self._state is not CacheState.UNINITIALIZED:
            raise CacheStateException(
                "A watcher can only be attached before init()",
                details={"state": self._state.value},
            )
        try:
            self._binding.bind(watcher)
        except ValueError as e:
            raise CacheStateException(str(e)) from e

    async def init(self, callback: Optional[InitCallback] = None) -> "DirectoryCache":
        """
        Load the directory and start following its changes.

        The sequence is: list the directory (or take the injected watcher's
        file list), probe and read every admitted file, create the watcher if
        none was injected, then subscribe to it. Any failure leaves the cache
        FAILED with nothing applied.

        Args:
            callback: Optional callable invoked as callback(err, cache)

        Returns:
            This cache, now READY

        Raises:
            CacheStateException: If init() was already called
            InitializationException: If any step of the sequence fails
        """
        if self._state is not CacheState.UNINITIALIZED:
            raise CacheStateException(
                "init() can only be called once",
                details={"state": self._state.value},
            )

        self._state = CacheState.INITIALIZING
        logger.info(f"Initializing directory cache for {self.directory}")

        try:
            await self._initialize()
        except Exception as e:
            if self._state is not CacheState.STOPPED:
                self._state = CacheState.FAILED
            error = self._as_init_error(e)
            logger.error(f"Initialization of {self.directory} failed: {error.message}")
            if callback is not None:
                callback(error, None)
            if error is e:
                raise
            raise error from e

        self._state = CacheState.READY
        logger.info(f"Directory cache ready: {self.directory} ({len(self._store)} files)")

        if callback is not None:
            callback(None, self)
        return self

    async def _initialize(self) -> None:
        injected = self._binding.watcher

        if injected is None:
            names = await self._fs.list_directory(self.directory)
        else:
            names = list(injected.files)

        await self._engine.load(names)

        if injected is None:
            try:
                watcher = await self._watcher_factory(self.directory, self.config.watch)
            except Exception as e:
                raise WatcherException(
                    f"Cannot watch {self.directory}: {e}",
                    details={"directory": str(self.directory)},
                ) from e

            if self._engine.stopped:
                watcher.stop()
            else:
                self._binding.bind(watcher, owned=True)

        if self._engine.stopped:
            raise InitializationException(
                "Cache was stopped during initialization",
                details={"directory": str(self.directory)},
            )

        self._binding.attach()

    def _as_init_error(self, error: Exception) -> InitializationException:
        if isinstance(error, InitializationException):
            return error
        details = {"directory": str(self.directory)}
        if isinstance(error, DirectoryCacheException):
            details.update(error.details)
            message = error.message
        else:
            message = str(error)
        return InitializationException(f"Cannot initialize cache: {message}", details=details)

    def get_file(self, filename: str) -> Any:
        return public_content(self._store.get(filename))

    def has_file(self, filename: str) -> bool:
        """True if the name is cached, including entries without content."""
        return filename in self._store

    def get_filenames(self) -> Tuple[str, ...]:
        return self._snapshot.filenames()

    def enable_json_parsing(self) -> None:
        self._store.enable_json_parsing()

    def disable_json_parsing(self) -> None:
        self._store.disable_json_parsing()

    def on(self, event: Union[CacheEvent, str], handler: Handler) -> Handler:
        return self._events.subscribe(CacheEvent(event), handler)

    def once(self, event: Union[CacheEvent, str], handler: Handler) -> Handler:
        return self._events.once(CacheEvent(event), handler)

    def off(self, event: Union[CacheEvent, str], handler: Handler) -> bool:
        return self._events.unsubscribe(CacheEvent(event), handler)

    def stop(self) -> None:
        """
        Detach from the watcher and freeze the cache.

        Cached content stays readable. Batches already in flight run to
        completion but their results are discarded. Calling stop() again has
        no effect.
        """
        if self._state is CacheState.STOPPED:
            return

        self._engine.stop()
        self._binding.detach()
        self._state = CacheState.STOPPED
        logger.info(f"Directory cache stopped: {self.directory}")

    async def flush(self) -> None:
        """Wait for every reconciliation batch currently in flight."""
        await self._binding.flush()

    def stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            A dictionary containing:
                - directory: Watched directory
                - state: Lifecycle state
                - files: Number of cached entries
                - mutation_count: Key-set mutations applied so far
                - json_parsing: Whether JSON decoding is enabled
                - snapshot_rebuilds: How often the filename snapshot was rebuilt
                - watcher_owned: Whether stop() also stops the watcher
                - pending_batches: Batches still being reconciled
                - listeners: Subscription counts per event
        """
        return {
            "directory": str(self.directory),
            "state": self._state.value,
            "files": len(self._store),
            "mutation_count": self._store.mutation_count,
            "json_parsing": self._store.json_parsing,
            "snapshot_rebuilds": self._snapshot.rebuilds,
            "watcher_owned": self._binding.owned,
            "pending_batches": self._binding.pending,
            "listeners": self._events.snapshot(),
        }

    def _report_error(self, error: Exception) -> None:
        self._events.emit(CacheEvent.ERROR, error)

    def __contains__(self, filename: object) -> bool:
        return filename in self._store

    def __len__(self) -> int:
        return len(self._store)

    async def __aenter__(self) -> "DirectoryCache":
        """
        Async context manager entry: initialize the cache.

        Example:
            >>> async with DirectoryCache("./data") as cache:
            ...     print(cache.get_filenames())
        """
        return await self.init()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit: stop the cache."""
        self.stop()
