"""
Filesystem interface consumed by the probe-and-read pipeline.

The cache never touches the disk directly; it goes through an IFileSystem so
that tests can substitute slow, failing or racing filesystems.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from dircache.cache.file_state import FileStat


class IFileSystem(ABC):
    """
    Abstract interface for the raw I/O primitives the cache depends on.

    All operations are asynchronous and may fail with OSError subclasses.
    FileNotFoundError is meaningful: the pipeline treats it as a path that
    vanished after being reported, not as a fault.

    Implementations:
        - LocalFileSystem: aiofiles-backed access to the local disk

    Example:
        ```python
        class InMemoryFileSystem(IFileSystem):
            def __init__(self, files: dict[str, bytes]):
                self._files = files

            async def list_directory(self, path: Path) -> list[str]:
                return list(self._files)

            async def stat(self, path: Path) -> FileStat:
                if path.name not in self._files:
                    raise FileNotFoundError(path)
                return FileStat(kind=FileKind.REGULAR, size=len(self._files[path.name]))

            async def read_bytes(self, path: Path) -> bytes:
                return self._files[path.name]
        ```
    """

    @abstractmethod
    async def list_directory(self, path: Path) -> List[str]:
        """
        List the immediate entries of a directory.

        Args:
            path: Directory to list

        Returns:
            Entry names relative to path (no ordering guarantee)

        Raises:
            OSError: If the directory cannot be read
        """
        pass

    @abstractmethod
    async def stat(self, path: Path) -> "FileStat":
        """
        Query type and metadata for a path.

        Args:
            path: Path to probe

        Returns:
            FileStat describing the entry

        Raises:
            FileNotFoundError: If the path does not exist
            OSError: For any other failure (e.g. permission denied)
        """
        pass

    @abstractmethod
    async def read_bytes(self, path: Path) -> bytes:
        """
        Read the full content of a regular file.

        Args:
            path: File to read

        Returns:
            The raw file content

        Raises:
            OSError: If the file cannot be read
        """
        pass
