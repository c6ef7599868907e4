"""Shared fakes and fixtures for the dircache test suite."""

import asyncio
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pytest

from dircache.cache import DirectoryCache, FileKind, FileStat
from dircache.events import CacheEvent, EventRegistry
from dircache.interfaces import IFileSystem, IWatcher, WatchEvent

VIRTUAL_DIR = Path("/virtual/dir")


class FakeFileSystem(IFileSystem):
    """
    In-memory filesystem keyed by entry name.

    Reads can be held back with gate(name) to create races, and faults can
    be injected per name and per stage.
    """

    def __init__(self):
        self.entries: Dict[str, Union[bytes, FileKind]] = {}
        self.stat_errors: Dict[str, OSError] = {}
        self.read_errors: Dict[str, OSError] = {}
        self.list_error: Optional[OSError] = None
        self.gates: Dict[str, asyncio.Event] = {}
        self.reads: List[str] = []

    def write(self, name: str, content: Union[str, bytes]) -> None:
        self.entries[name] = content.encode("utf-8") if isinstance(content, str) else content

    def mkdir(self, name: str) -> None:
        self.entries[name] = FileKind.DIRECTORY

    def remove(self, name: str) -> None:
        self.entries.pop(name, None)

    def gate(self, name: str) -> asyncio.Event:
        """Block reads of name until the returned event is set."""
        event = asyncio.Event()
        self.gates[name] = event
        return event

    async def list_directory(self, path: Path) -> List[str]:
        await asyncio.sleep(0)
        if self.list_error is not None:
            raise self.list_error
        return list(self.entries)

    async def stat(self, path: Path) -> FileStat:
        await asyncio.sleep(0)
        name = path.name
        if name in self.stat_errors:
            raise self.stat_errors[name]
        if name not in self.entries:
            raise FileNotFoundError(str(path))
        value = self.entries[name]
        if isinstance(value, bytes):
            return FileStat(kind=FileKind.REGULAR, size=len(value))
        return FileStat(kind=value)

    async def read_bytes(self, path: Path) -> bytes:
        name = path.name
        self.reads.append(name)
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        await asyncio.sleep(0)
        if name in self.read_errors:
            raise self.read_errors[name]
        if name not in self.entries:
            raise FileNotFoundError(str(path))
        value = self.entries[name]
        if not isinstance(value, bytes):
            raise IsADirectoryError(str(path))
        return value


class FakeWatcher(IWatcher):
    """Watcher driven by the test through emit()."""

    def __init__(self, files: Iterable[str] = ()):
        self._files = list(files)
        self._events = EventRegistry()
        self.stopped = False

    @property
    def files(self) -> Sequence[str]:
        return list(self._files)

    def on(self, event: WatchEvent, listener) -> None:
        self._events.subscribe(WatchEvent(event), listener)

    def off(self, event: WatchEvent, listener) -> bool:
        return self._events.unsubscribe(WatchEvent(event), listener)

    def stop(self) -> None:
        self.stopped = True

    def emit(self, event: WatchEvent, filenames: Iterable[str]) -> int:
        return self._events.emit(WatchEvent(event), list(filenames))

    def fail(self, error: BaseException) -> int:
        return self._events.emit(WatchEvent.ERROR, error)

    def listener_count(self, event: WatchEvent) -> int:
        return self._events.listener_count(WatchEvent(event))


class EventRecorder:
    """Records every notification a cache raises, in order."""

    def __init__(self, cache: DirectoryCache):
        self.events: List[Tuple[str, Tuple[Any, ...]]] = []
        for event in CacheEvent:
            cache.on(event, self._recorder(event))

    def _recorder(self, event: CacheEvent):
        def record(*args):
            self.events.append((event.value, args))
        return record

    def of(self, event: CacheEvent) -> List[Tuple[Any, ...]]:
        return [args for name, args in self.events if name == event.value]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def fake_fs():
    """In-memory filesystem."""
    return FakeFileSystem()


@pytest.fixture
def fake_watcher():
    """Watcher whose notifications are emitted by the test."""
    return FakeWatcher()


@pytest.fixture
def watcher_factory(fake_watcher):
    """Factory handing out fake_watcher as the cache's owned watcher."""
    calls = []

    async def factory(directory, config):
        calls.append((directory, config))
        return fake_watcher

    factory.calls = calls
    return factory


@pytest.fixture
def make_cache(fake_fs, watcher_factory):
    """Build a DirectoryCache over the fake filesystem and watcher."""
    def build(filter=None, **kwargs) -> DirectoryCache:
        kwargs.setdefault("filesystem", fake_fs)
        kwargs.setdefault("watcher_factory", watcher_factory)
        return DirectoryCache(VIRTUAL_DIR, filter=filter, **kwargs)
    return build
