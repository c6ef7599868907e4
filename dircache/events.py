"""
Observer registry for cache and watcher notifications.

Each cache or watcher instance owns its own EventRegistry: an ordered list of
(event, handler) subscriptions delivered synchronously in registration order.
There is no global event bus.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class CacheEvent(str, Enum):
    """Notifications raised by a DirectoryCache."""

    ADDED = "added"  # (filename, content)
    UPDATED = "updated"  # (filename, content)
    DELETED = "deleted"  # (filename, prior_content)
    ERROR = "error"  # (exception)
    FILES_ADDED = "files_added"  # (filenames) once per applied batch
    FILES_CHANGED = "files_changed"  # (filenames)
    FILES_DELETED = "files_deleted"  # (filenames)


class EventRegistry:
    """
    Per-instance subscription registry.

    Handlers are called synchronously, in the order they subscribed. A handler
    that raises is logged and skipped; delivery continues with the next one so
    a faulty consumer cannot stall reconciliation.

    Example:
        >>> events = EventRegistry()
        >>> seen = []
        >>> events.subscribe(CacheEvent.ADDED, lambda name, content: seen.append(name))
        >>> events.emit(CacheEvent.ADDED, "a.txt", "hello")
        1
        >>> seen
        ['a.txt']
    """

    def __init__(self):
        self._subscriptions: List[Tuple[str, Handler, bool]] = []

    @staticmethod
    def _key(event: Any) -> str:
        return event.value if isinstance(event, Enum) else str(event)

    def subscribe(self, event: Any, handler: Handler) -> Handler:
        """Register a handler for an event. Returns the handler."""
        if not callable(handler):
            raise TypeError(f"handler must be callable, got {type(handler).__name__}")
        self._subscriptions.append((self._key(event), handler, False))
        return handler

    def once(self, event: Any, handler: Handler) -> Handler:
        """Register a handler that is removed after its first delivery."""
        if not callable(handler):
            raise TypeError(f"handler must be callable, got {type(handler).__name__}")
        self._subscriptions.append((self._key(event), handler, True))
        return handler

    def unsubscribe(self, event: Any, handler: Handler) -> bool:
        """
        Remove one subscription of handler for event.

        Only the earliest matching subscription is removed, so a handler
        registered twice needs two calls.

        Returns:
            True if a subscription was removed, False otherwise
        """
        key = self._key(event)
        for index, (sub_key, sub_handler, _) in enumerate(self._subscriptions):
            if sub_key == key and sub_handler == handler:
                del self._subscriptions[index]
                return True
        return False

    def emit(self, event: Any, *args: Any) -> int:
        """
        Deliver an event to its subscribers.

        Returns:
            The number of handlers that were invoked
        """
        key = self._key(event)
        matching = [sub for sub in self._subscriptions if sub[0] == key]
        delivered = 0

        for sub in matching:
            _, handler, one_shot = sub
            if one_shot:
                try:
                    self._subscriptions.remove(sub)
                except ValueError:
                    # Already removed by an earlier handler
                    continue
            try:
                handler(*args)
            except Exception:
                logger.warning(f"Listener for '{key}' raised", exc_info=True)
            delivered += 1

        return delivered

    def listener_count(self, event: Any) -> int:
        """Number of handlers currently subscribed to event."""
        key = self._key(event)
        return sum(1 for sub in self._subscriptions if sub[0] == key)

    def snapshot(self) -> Dict[str, int]:
        """Subscription counts keyed by event name."""
        counts: Dict[str, int] = {}
        for key, _, _ in self._subscriptions:
            counts[key] = counts.get(key, 0) + 1
        return counts
