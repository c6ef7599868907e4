"""Directory watcher that reports add/change/delete batches."""

import asyncio
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

import aiofiles.os
from watchfiles import Change, awatch

from dircache.config.cache_config import WatchConfig
from dircache.events import EventRegistry
from dircache.interfaces.watcher import BatchListener, ErrorListener, IWatcher, WatchEvent

logger = logging.getLogger(__name__)


class DirectoryWatcher(IWatcher):
    """
    Watch the immediate entries of one directory (no recursion).

    Each change set reported by watchfiles becomes up to three batches:
    ``add`` for names not known before, ``change`` for known names and
    ``delete`` for removed names. A change set does not preserve order, so a
    name that was both deleted and created/modified inside one set is
    resolved by whether it exists when the set is dispatched.

    If the watch loop fails, listeners of ``error`` receive the exception,
    which is also kept in ``error``.
    """

    def __init__(self, directory: Union[str, Path], config: Optional[WatchConfig] = None):
        self.directory = Path(directory)
        self.config = config or WatchConfig()
        self._root = str(self.directory.resolve())
        self._events = EventRegistry()
        self._files: Dict[str, None] = {}
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self.error: Optional[BaseException] = None

    @classmethod
    async def create(
        cls,
        directory: Union[str, Path],
        config: Optional[WatchConfig] = None,
    ) -> "DirectoryWatcher":
        """Create a watcher, list the directory and start watching it."""
        watcher = cls(directory, config)
        await watcher.start()
        return watcher

    @property
    def files(self) -> Sequence[str]:
        return list(self._files)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def on(self, event: WatchEvent, listener: Union[BatchListener, ErrorListener]) -> None:
        self._events.subscribe(WatchEvent(event), listener)

    def off(self, event: WatchEvent, listener: Union[BatchListener, ErrorListener]) -> bool:
        return self._events.unsubscribe(WatchEvent(event), listener)

    def listener_count(self, event: WatchEvent) -> int:
        return self._events.listener_count(WatchEvent(event))

    async def start(self) -> None:
        """
        Record the current entries and begin watching.

        Raises:
            RuntimeError: If the watcher was already started
            NotADirectoryError: If the path is not a directory
            OSError: If the directory cannot be listed
        """
        if self._task is not None:
            raise RuntimeError(f"watcher for {self.directory} already started")
        if not await aiofiles.os.path.isdir(self.directory):
            raise NotADirectoryError(f"Not a directory: {self.directory}")

        names = await aiofiles.os.listdir(self.directory)
        self._files = dict.fromkeys(names)

        self._task = asyncio.get_running_loop().create_task(self._run())
        # Let the task set up the OS watch before the caller continues
        await asyncio.sleep(0)
        logger.info(f"Watching {self.directory} ({len(self._files)} entries)")

    def stop(self) -> None:
        """Ask the watch loop to finish. Idempotent."""
        if not self._stop_event.is_set():
            logger.info(f"Stopping watcher for {self.directory}")
            self._stop_event.set()

    async def wait_closed(self) -> None:
        """Wait for the watch loop to exit after stop()."""
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        try:
            async for changes in awatch(
                self._root,
                watch_filter=self._accept,
                debounce=self.config.debounce_ms,
                step=self.config.step_ms,
                stop_event=self._stop_event,
                force_polling=self.config.force_polling,
                recursive=False,
            ):
                self.dispatch(changes)
        except Exception as e:
            self.error = e
            logger.exception(f"Watcher for {self.directory} failed")
            self._events.emit(WatchEvent.ERROR, e)

    def _accept(self, change: Change, path: str) -> bool:
        return os.path.dirname(path) == self._root

    def dispatch(self, changes: Iterable[Tuple[Change, str]]) -> None:
        """Group one raw change set into batches and notify listeners."""
        per_name: Dict[str, Set[Change]] = {}
        for change, path in changes:
            per_name.setdefault(os.path.basename(path), set()).add(change)

        added: List[str] = []
        changed: List[str] = []
        deleted: List[str] = []

        for name in sorted(per_name):
            kinds = per_name[name]
            if Change.deleted in kinds and len(kinds) > 1:
                if os.path.lexists(self.directory / name):
                    kinds = kinds - {Change.deleted}
                else:
                    kinds = {Change.deleted}

            if Change.deleted in kinds:
                self._files.pop(name, None)
                deleted.append(name)
            elif name in self._files:
                changed.append(name)
            else:
                self._files[name] = None
                added.append(name)

        logger.debug(
            f"Changes in {self.directory}: "
            f"+{len(added)} ~{len(changed)} -{len(deleted)}"
        )

        if added:
            self._events.emit(WatchEvent.ADD, added)
        if changed:
            self._events.emit(WatchEvent.CHANGE, changed)
        if deleted:
            self._events.emit(WatchEvent.DELETE, deleted)
