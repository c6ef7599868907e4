"""
Consumer-facing cache interface.

Application code should depend on IDirectoryCache rather than on the
concrete DirectoryCache, which keeps handlers and services testable with
simple in-memory doubles.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence


class IDirectoryCache(ABC):
    """
    Abstract interface for an in-memory mirror of a directory.

    Implementations:
        - DirectoryCache: watcher-synchronized cache of a local directory

    Example:
        ```python
        async def render(cache: IDirectoryCache) -> list[str]:
            return [name for name in cache.get_filenames() if cache.get_file(name)]
        ```
    """

    @abstractmethod
    async def init(self, callback: Optional[Callable[..., Any]] = None) -> "IDirectoryCache":
        """
        Load the directory and start tracking changes.

        Args:
            callback: Optional callable invoked as callback(err, cache) once
                      initialization has succeeded or failed

        Returns:
            The initialized cache

        Raises:
            InitializationException: If the initial load or watcher attach fails
        """
        pass

    @abstractmethod
    def get_file(self, filename: str) -> Any:
        """
        Get cached content for a filename.

        Returns:
            Decoded JSON, text or bytes; None if the name is not cached or has
            no readable content
        """
        pass

    @abstractmethod
    def get_filenames(self) -> Sequence[str]:
        """Get the names of all cached entries."""
        pass

    @abstractmethod
    def enable_json_parsing(self) -> None:
        """Decode JSON files read from now on."""
        pass

    @abstractmethod
    def disable_json_parsing(self) -> None:
        """Keep JSON files read from now on as text."""
        pass

    @abstractmethod
    def on(self, event: Any, handler: Callable[..., Any]) -> Callable[..., Any]:
        """Subscribe to a cache notification."""
        pass

    @abstractmethod
    def off(self, event: Any, handler: Callable[..., Any]) -> bool:
        """Unsubscribe from a cache notification."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Detach from the watcher; cached content stays readable but frozen."""
        pass
