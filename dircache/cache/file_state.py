"""
File state values produced by metadata probes.

This module provides the FileStat value type that the probe stage returns:
what kind of entry a path currently is, plus the size and modification time
observed at probe time.
"""

import os
import stat as stat_module
from dataclasses import dataclass
from enum import Enum


class FileKind(str, Enum):
    """Kind of directory entry observed by a probe."""

    REGULAR = "regular"
    DIRECTORY = "directory"
    OTHER = "other"  # sockets, fifos, devices
    MISSING = "missing"  # vanished between notification and probe


@dataclass(frozen=True)
class FileStat:
    """
    Immutable probe result.

    Attributes:
        kind: Kind of entry at probe time
        size: Size in bytes (0 when not applicable)
        mtime: Modification time (timestamp, 0.0 when not applicable)
    """
    kind: FileKind
    size: int = 0
    mtime: float = 0.0

    @classmethod
    def from_stat_result(cls, result: os.stat_result) -> "FileStat":
        """
        Create FileStat from an os.stat_result.

        Probes follow symlinks, so the result describes the link target and
        a link never shows up as its own kind.

        Args:
            result: Result of os.stat

        Returns:
            FileStat with the entry kind decoded from st_mode
        """
        mode = result.st_mode
        if stat_module.S_ISREG(mode):
            kind = FileKind.REGULAR
        elif stat_module.S_ISDIR(mode):
            kind = FileKind.DIRECTORY
        else:
            kind = FileKind.OTHER

        return cls(kind=kind, size=result.st_size, mtime=result.st_mtime)
