"""Lazily derived filename snapshot."""

from typing import Tuple

from dircache.cache.content_store import ContentStore


class SnapshotView:
    """
    Filenames of a ContentStore, recomputed only when its key set changed.

    The snapshot is rebuilt if and only if the store's mutation_count differs
    from the count seen at the previous rebuild; otherwise the very same tuple
    object is returned. rebuilds counts how often that happened.
    """

    def __init__(self, store: ContentStore):
        self._store = store
        self._cached_keys: Tuple[str, ...] = ()
        self._last_seen_mutation_count = 0
        self.rebuilds = 0

    def filenames(self) -> Tuple[str, ...]:
        if self._last_seen_mutation_count != self._store.mutation_count:
            self._cached_keys = tuple(self._store)
            self._last_seen_mutation_count = self._store.mutation_count
            self.rebuilds += 1
        return self._cached_keys
