"""
Binding between a watcher's notifications and the reconciliation engine.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Set, Union

from dircache.cache.reconciler import ReconciliationEngine
from dircache.interfaces.watcher import BatchListener, ErrorListener, IWatcher, WatchEvent

logger = logging.getLogger(__name__)


class WatcherBinding:
    """
    Holds at most one watcher and this cache's subscriptions to it.

    Watcher listeners are synchronous; each batch is handed to the engine as
    its own task so batches can overlap. detach() removes exactly the
    listeners added by attach(), leaving other consumers of a shared watcher
    untouched, and stops the watcher only when this binding owns it. Tasks
    already running are never cancelled.
    """

    def __init__(self, engine: ReconciliationEngine, report_error: Callable[[BaseException], None]):
        self._engine = engine
        self._report_error = report_error
        self._watcher: Optional[IWatcher] = None
        self._owned = False
        self._listeners: Dict[WatchEvent, Union[BatchListener, ErrorListener]] = {}
        self._tasks: Set[asyncio.Task] = set()

    @property
    def watcher(self) -> Optional[IWatcher]:
        return self._watcher

    @property
    def owned(self) -> bool:
        """True when the watcher was created by the cache rather than injected."""
        return self._owned

    @property
    def attached(self) -> bool:
        return bool(self._listeners)

    @property
    def pending(self) -> int:
        """Number of batches still being reconciled."""
        return len(self._tasks)

    def bind(self, watcher: IWatcher, owned: bool = False) -> None:
        """Reference a watcher without subscribing to it yet."""
        if self._watcher is not None and self._watcher is not watcher:
            raise ValueError("a watcher is already bound")
        self._watcher = watcher
        self._owned = owned

    def attach(self) -> None:
        """Subscribe to the bound watcher's batch and error notifications."""
        if self._watcher is None:
            raise ValueError("no watcher bound")
        if self._listeners:
            return

        self._listeners = {
            WatchEvent.ADD: self._on_add,
            WatchEvent.CHANGE: self._on_change,
            WatchEvent.DELETE: self._on_delete,
            WatchEvent.ERROR: self._on_watcher_error,
        }
        for event, listener in self._listeners.items():
            self._watcher.on(event, listener)

    def detach(self) -> None:
        """Remove this binding's listeners; stop the watcher if owned. Idempotent."""
        if self._watcher is None:
            return

        for event, listener in self._listeners.items():
            self._watcher.off(event, listener)
        self._listeners = {}

        if self._owned:
            self._watcher.stop()

    async def flush(self) -> None:
        """Wait until every scheduled batch has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_add(self, filenames: List[str]) -> None:
        self._schedule(self._engine.apply_added, filenames)

    def _on_change(self, filenames: List[str]) -> None:
        self._schedule(self._engine.apply_changed, filenames)

    def _on_delete(self, filenames: List[str]) -> None:
        self._schedule(self._engine.apply_deleted, filenames)

    def _on_watcher_error(self, error: BaseException) -> None:
        logger.error(f"Watcher stopped reporting changes: {error}")
        self._report_error(error)

    def _schedule(self, handler, filenames: List[str]) -> None:
        if not filenames or self._engine.stopped:
            return
        task = asyncio.get_running_loop().create_task(handler(list(filenames)))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Reconciliation batch failed", exc_info=error)
            self._report_error(error)
