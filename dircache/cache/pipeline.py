"""
Probe-and-read pipeline for candidate filenames.

For one filename the pipeline runs three explicit stages:

1. probe: query the entry's current kind on disk
2. maybe_read: read the full content if, and only if, it is a regular file
3. maybe_decode: decode JSON or text according to the DecodePolicy

A path that is not a regular file, or that vanished between the watcher's
notification and the probe or read, yields NO_CONTENT rather than an error:
watcher notifications are edge-triggered and routinely race with the disk.
Real faults (permission denied, I/O errors, malformed JSON) end that
filename's pipeline with an error outcome and never affect other filenames.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, List, Optional, Sequence

from dircache.cache.content_store import NO_CONTENT, DecodePolicy
from dircache.cache.file_state import FileKind
from dircache.exceptions import DecodeException, FileAccessException
from dircache.interfaces.filesystem import IFileSystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeTarget:
    """
    A filename threaded through the pipeline stages.

    Attributes:
        filename: Name relative to the watched directory
        path: Absolute path of the entry
        kind: Kind observed by the probe stage (None before probing)
    """
    filename: str
    path: Path
    kind: Optional[FileKind] = None


@dataclass(frozen=True)
class ReadOutcome:
    """
    Result of running the pipeline for one filename.

    Exactly one of three shapes: content, no content (content is
    NO_CONTENT and error is None) or error.
    """
    filename: str
    content: Any = NO_CONTENT
    error: Optional[FileAccessException] = None
    kind: Optional[FileKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def has_content(self) -> bool:
        return self.error is None and self.content is not NO_CONTENT


def build_target(directory: Path, filename: str) -> ProbeTarget:
    """Build the absolute path for a filename."""
    return ProbeTarget(filename=filename, path=Path(directory) / filename)


async def probe(fs: IFileSystem, target: ProbeTarget) -> ProbeTarget:
    """
    Determine the entry's kind.

    Raises:
        FileAccessException: If the probe fails for a reason other than the
                             entry having vanished
    """
    try:
        stat = await fs.stat(target.path)
    except FileNotFoundError:
        logger.debug(f"Probe: {target.filename} vanished before it could be probed")
        return replace(target, kind=FileKind.MISSING)
    except OSError as e:
        raise FileAccessException(
            f"Cannot probe '{target.filename}': {e}",
            filename=target.filename,
            path=target.path,
            stage="probe",
        ) from e

    return replace(target, kind=stat.kind)


async def maybe_read(fs: IFileSystem, target: ProbeTarget) -> Any:
    """
    Read a probed target's raw content.

    Returns:
        The raw bytes for a regular file, NO_CONTENT for anything else

    Raises:
        FileAccessException: If reading a regular file fails
    """
    if target.kind is not FileKind.REGULAR:
        return NO_CONTENT

    try:
        return await fs.read_bytes(target.path)
    except (FileNotFoundError, IsADirectoryError):
        # Replaced or removed between probe and read
        logger.debug(f"Read: {target.filename} is no longer a regular file")
        return NO_CONTENT
    except OSError as e:
        raise FileAccessException(
            f"Cannot read '{target.filename}': {e}",
            filename=target.filename,
            path=target.path,
            stage="read",
        ) from e


def maybe_decode(target: ProbeTarget, raw: Any, policy: DecodePolicy) -> Any:
    """
    Decode raw content according to the policy.

    JSON files (when enabled) are parsed; other files are decoded as text
    with the policy's encoding, falling back to the raw bytes when they are
    not valid text or no encoding is configured.

    Raises:
        DecodeException: If a JSON file does not contain valid JSON
    """
    if raw is NO_CONTENT:
        return NO_CONTENT

    if policy.wants_json(target.filename):
        try:
            text = raw.decode(policy.encoding or "utf-8")
            return json.loads(text)
        except ValueError as e:
            raise DecodeException(
                f"Invalid JSON in '{target.filename}': {e}",
                filename=target.filename,
                path=target.path,
                stage="decode",
            ) from e

    if not policy.encoding:
        return raw

    try:
        return raw.decode(policy.encoding)
    except UnicodeDecodeError:
        return raw


async def probe_and_read(
    fs: IFileSystem,
    directory: Path,
    filename: str,
    policy: DecodePolicy,
) -> ReadOutcome:
    """
    Run the full pipeline for one filename.

    Never raises for per-file faults; they are returned in the outcome.
    """
    target = build_target(directory, filename)
    try:
        target = await probe(fs, target)
        raw = await maybe_read(fs, target)
        content = maybe_decode(target, raw, policy)
    except FileAccessException as e:
        return ReadOutcome(filename=filename, error=e, kind=target.kind)

    return ReadOutcome(filename=filename, content=content, kind=target.kind)


async def probe_and_read_batch(
    fs: IFileSystem,
    directory: Path,
    filenames: Sequence[str],
    policy: DecodePolicy,
) -> List[ReadOutcome]:
    """
    Run the pipeline for every filename concurrently.

    The batch completes when its slowest file does. Outcomes are returned in
    the order of filenames.
    """
    tasks = [probe_and_read(fs, directory, filename, policy) for filename in filenames]
    return list(await asyncio.gather(*tasks))
