"""
Watcher interface: the boundary with the filesystem-watching collaborator.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Sequence, Union


class WatchEvent(str, Enum):
    """Notifications emitted by a watcher."""

    ADD = "add"
    CHANGE = "change"
    DELETE = "delete"
    ERROR = "error"


BatchListener = Callable[[List[str]], None]
ErrorListener = Callable[[BaseException], None]


class IWatcher(ABC):
    """
    Abstract interface for a directory watcher.

    A watcher emits three batch notifications (add, change, delete), each
    carrying a non-empty list of filenames relative to the watched directory.
    When watching fails for good it emits ``error`` once, carrying the
    exception, and delivers no further batches. A watcher may be shared by
    several consumers, so every consumer must remove exactly the listeners it
    added and nothing else.

    Implementations:
        - DirectoryWatcher: watchfiles-backed watcher of a single directory

    Example:
        ```python
        def on_add(filenames: list[str]) -> None:
            print("added", filenames)

        watcher.on(WatchEvent.ADD, on_add)
        ...
        watcher.off(WatchEvent.ADD, on_add)
        watcher.stop()
        ```
    """

    @property
    @abstractmethod
    def files(self) -> Sequence[str]:
        """Filenames currently known to exist in the watched directory."""
        pass

    @abstractmethod
    def on(self, event: WatchEvent, listener: Union[BatchListener, ErrorListener]) -> None:
        """
        Subscribe a listener to a batch notification.

        Listeners are called synchronously and must not block; long work
        belongs in a scheduled task.
        """
        pass

    @abstractmethod
    def off(self, event: WatchEvent, listener: Union[BatchListener, ErrorListener]) -> bool:
        """
        Remove a previously subscribed listener.

        Returns:
            True if the listener was subscribed, False otherwise
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop emitting notifications and release watching resources."""
        pass
