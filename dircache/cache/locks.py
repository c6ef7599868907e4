"""Per-filename locking for store mutations."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class KeyedLock:
    """
    A family of asyncio locks, one per key, created on demand.

    Each lock guards a single filename, so work on one name never waits for
    another. Locks are dropped once no holder or waiter references them.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._refs: Dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[None]:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        self._refs[key] = self._refs.get(key, 0) + 1
        lock = self._locks[key]

        try:
            async with lock:
                yield
        finally:
            self._refs[key] -= 1
            if self._refs[key] == 0:
                del self._refs[key]
                del self._locks[key]

    def locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
