"""
Local filesystem access for the cache.
Provides list, stat and read operations without blocking the event loop.
"""

from pathlib import Path
from typing import List

import aiofiles
import aiofiles.os

from dircache.cache.file_state import FileStat
from dircache.interfaces.filesystem import IFileSystem


class LocalFileSystem(IFileSystem):
    """aiofiles-backed implementation of IFileSystem."""

    async def list_directory(self, path: Path) -> List[str]:
        """List the immediate entries of a directory asynchronously."""
        return await aiofiles.os.listdir(path)

    async def stat(self, path: Path) -> FileStat:
        """
        Probe a path asynchronously.

        Symlinks are followed, so a link to a regular file probes as a regular
        file and a dangling link raises FileNotFoundError.
        """
        result = await aiofiles.os.stat(path)
        return FileStat.from_stat_result(result)

    async def read_bytes(self, path: Path) -> bytes:
        """Read the full content of a file asynchronously."""
        async with aiofiles.open(path, mode='rb') as f:
            return await f.read()
