"""
Reconciliation of watcher notifications with the content store.

This module provides the ReconciliationEngine class that turns add, change
and delete batches into ContentStore mutations and consumer notifications.
Notifications may be stale by the time they are handled, so every add and
change is resolved against the disk through the probe-and-read pipeline
before anything is applied.

Ordering model:
- Files within one batch are probed, read and applied concurrently. Each
  file is applied as soon as its own read completes; the batch-level
  notification follows once every file of the batch has settled.
- Batches may overlap. Work on a given filename is serialized through a
  per-filename lock held across probe, read and apply of that name only, so
  two operations on the same name never interleave their read-modify-write;
  the operation that completes last determines the entry. A slow read never
  holds up work on a different filename.
- After stop(), results that arrive are discarded without touching the store
  or raising notifications. The check is repeated before every apply, so a
  listener that stops the cache halts the rest of its batch.
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, List

from dircache.cache.content_store import ContentStore, public_content
from dircache.cache.locks import KeyedLock
from dircache.cache.name_filter import NameFilter
from dircache.cache.pipeline import ReadOutcome, probe_and_read, probe_and_read_batch
from dircache.events import CacheEvent, EventRegistry
from dircache.exceptions import FileAccessException
from dircache.interfaces.filesystem import IFileSystem

logger = logging.getLogger(__name__)


class BatchKind(str, Enum):
    ADD = "add"
    CHANGE = "change"
    DELETE = "delete"


_BATCH_EVENTS = {
    BatchKind.ADD: CacheEvent.FILES_ADDED,
    BatchKind.CHANGE: CacheEvent.FILES_CHANGED,
    BatchKind.DELETE: CacheEvent.FILES_DELETED,
}


class ReconciliationEngine:
    """
    Apply watcher batches to a ContentStore.

    Attributes:
        directory: The watched directory
        store: The ContentStore being maintained (exclusively mutated here)

    Example:
        >>> engine = ReconciliationEngine(directory, store, LocalFileSystem(),
        ...                               NameFilter.keep_all(), events)
        >>> await engine.load(["1.json"])
        ['1.json']
        >>> await engine.apply_changed(["1.json"])
        ['1.json']
        >>> await engine.apply_deleted(["1.json", "1.json"])
        ['1.json']
    """

    def __init__(
        self,
        directory: Path,
        store: ContentStore,
        filesystem: IFileSystem,
        name_filter: NameFilter,
        events: EventRegistry,
    ):
        self.directory = Path(directory)
        self.store = store
        self._fs = filesystem
        self._filter = name_filter
        self._events = events
        self._locks = KeyedLock()
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        """Freeze the store; in-flight work finishes but is not applied."""
        self._stopped = True

    def admit(self, filenames: Iterable[str]) -> List[str]:
        """Deduplicate filenames (keeping first occurrence) and apply the NameFilter."""
        return [name for name in dict.fromkeys(filenames) if self._filter.keep(name)]

    async def load(self, filenames: Iterable[str]) -> List[str]:
        """
        Apply the initial directory listing as one add batch.

        Unlike steady-state batches, any per-file fault fails the whole load
        and nothing is applied.

        Returns:
            The filenames that were loaded

        Raises:
            FileAccessException: The first per-file fault of the batch
        """
        admitted = self.admit(filenames)
        logger.debug(f"Loading {len(admitted)} file(s) from {self.directory}")

        outcomes = await probe_and_read_batch(
            self._fs, self.directory, admitted, self.store.decode_policy()
        )

        for outcome in outcomes:
            if not outcome.ok:
                raise outcome.error

        if self._stopped:
            logger.warning(f"Discarding initial load of {self.directory}: cache stopped")
            return []

        loaded = []
        for outcome in outcomes:
            if self._stopped:
                break
            self._apply_outcome(outcome, BatchKind.ADD)
            loaded.append(outcome.filename)

        if loaded and not self._stopped:
            self._events.emit(CacheEvent.FILES_ADDED, list(loaded))

        return loaded

    async def apply_added(self, filenames: Iterable[str]) -> List[str]:
        """
        Handle names reported as newly present.

        A name the store already holds is refreshed and raises ``updated``
        rather than ``added``: the watcher reported an add the cache had
        already observed (for example through the initial listing), and the
        key set does not change.

        Returns:
            The filenames that were applied to the store
        """
        return await self._reconcile(filenames, BatchKind.ADD)

    async def apply_changed(self, filenames: Iterable[str]) -> List[str]:
        """
        Handle names reported as modified.

        A change for a name the store does not hold is treated as an add,
        covering a missed add notification.

        Returns:
            The filenames that were applied to the store
        """
        return await self._reconcile(filenames, BatchKind.CHANGE)

    async def apply_deleted(self, filenames: Iterable[str]) -> List[str]:
        """
        Handle names reported as removed.

        Names the store does not hold are ignored silently, so repeated or
        filtered-out deletions are harmless.

        Returns:
            The filenames that were removed
        """
        if self._stopped:
            return []

        names = list(dict.fromkeys(filenames))
        results = await asyncio.gather(*(self._delete_one(name) for name in names))
        removed = [name for name, done in zip(names, results) if done]

        if removed and not self._stopped:
            self._events.emit(CacheEvent.FILES_DELETED, removed)

        return removed

    async def _delete_one(self, name: str) -> bool:
        async with self._locks.acquire(name):
            if self._stopped:
                return False

            found, prior = self.store.remove(name)
            if not found:
                logger.debug(f"Ignoring deletion of {name} (not in cache)")
                return False

            logger.debug(f"Deleted {name}")
            self._events.emit(CacheEvent.DELETED, name, public_content(prior))
            return True

    async def _reconcile(self, filenames: Iterable[str], kind: BatchKind) -> List[str]:
        if self._stopped:
            return []

        admitted = self.admit(filenames)
        if not admitted:
            return []

        results = await asyncio.gather(*(self._reconcile_one(name, kind) for name in admitted))
        applied = [name for name, done in zip(admitted, results) if done]

        if applied and not self._stopped:
            self._events.emit(_BATCH_EVENTS[kind], applied)

        return applied

    async def _reconcile_one(self, name: str, kind: BatchKind) -> bool:
        async with self._locks.acquire(name):
            # Policy is taken once the name is ours, i.e. at read time
            outcome = await probe_and_read(
                self._fs, self.directory, name, self.store.decode_policy()
            )

            # A listener may have stopped the cache while this file was in flight
            if self._stopped:
                logger.warning(f"Discarding {kind.value} result for {name} that completed after stop")
                return False

            if not outcome.ok:
                self._report(outcome.error)
                return False

            self._apply_outcome(outcome, kind)
            return True

    def _apply_outcome(self, outcome: ReadOutcome, kind: BatchKind) -> None:
        name = outcome.filename
        created = self.store.put(name, outcome.content)
        content = public_content(outcome.content)

        if created:
            if kind is BatchKind.CHANGE:
                logger.debug(f"Change reported for untracked {name}, adding it")
            else:
                logger.debug(f"Added {name}")
            self._events.emit(CacheEvent.ADDED, name, content)
        else:
            logger.debug(f"Updated {name}")
            self._events.emit(CacheEvent.UPDATED, name, content)

    def _report(self, error: FileAccessException) -> None:
        logger.error(f"Failed to refresh {error.filename}: {error.message}")
        self._events.emit(CacheEvent.ERROR, error)
