"""
In-memory content store for a mirrored directory.

This module provides the ContentStore class: the mapping from filename to
cached content, the mutation counter used to invalidate derived snapshots,
and the JSON decoding policy applied to files read from now on.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Tuple


class _NoContent:
    """Sentinel type for entries that exist but have no readable content."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_CONTENT"

    def __reduce__(self):
        return (_NoContent, ())


NO_CONTENT = _NoContent()


def public_content(content: Any) -> Any:
    """Map the internal no-content sentinel to None for consumers."""
    return None if content is NO_CONTENT else content


@dataclass(frozen=True)
class DecodePolicy:
    """
    Decoding rules captured when a batch is dispatched.

    Attributes:
        parse_json: Whether names ending in json_suffix are decoded as JSON
        json_suffix: Suffix marking JSON files (compared case-insensitively)
        encoding: Text encoding for non-JSON files; empty keeps raw bytes
    """
    parse_json: bool = True
    json_suffix: str = ".json"
    encoding: str = "utf-8"

    def wants_json(self, filename: str) -> bool:
        return self.parse_json and filename.lower().endswith(self.json_suffix.lower())


class ContentStore:
    """
    Filename -> content mapping with a key-set mutation counter.

    The store is exclusively owned by one cache. mutation_count increases by
    exactly one whenever a key is added or removed, and never when an
    existing key's content is overwritten.

    Example:
        >>> store = ContentStore()
        >>> store.put("a.txt", "hello")
        True
        >>> store.put("a.txt", "bye")
        False
        >>> store.mutation_count
        1
        >>> store.remove("a.txt")
        (True, 'bye')
    """

    def __init__(self, json_parsing: bool = True, json_suffix: str = ".json", encoding: str = "utf-8"):
        self._entries: Dict[str, Any] = {}
        self._mutation_count = 0
        self._json_parsing = json_parsing
        self._json_suffix = json_suffix
        self._encoding = encoding

    @property
    def mutation_count(self) -> int:
        return self._mutation_count

    @property
    def json_parsing(self) -> bool:
        return self._json_parsing

    def enable_json_parsing(self) -> None:
        self._json_parsing = True

    def disable_json_parsing(self) -> None:
        self._json_parsing = False

    def decode_policy(self) -> DecodePolicy:
        """Snapshot of the current decoding rules."""
        return DecodePolicy(
            parse_json=self._json_parsing,
            json_suffix=self._json_suffix,
            encoding=self._encoding,
        )

    def get(self, filename: str, default: Any = None) -> Any:
        """Stored content for filename (may be NO_CONTENT), or default."""
        return self._entries.get(filename, default)

    def names(self) -> List[str]:
        return list(self._entries)

    def put(self, filename: str, content: Any) -> bool:
        """
        Store content for a filename.

        Returns:
            True if the key was new (mutation_count incremented),
            False if an existing entry was overwritten
        """
        created = filename not in self._entries
        self._entries[filename] = content
        if created:
            self._mutation_count += 1
        return created

    def remove(self, filename: str) -> Tuple[bool, Any]:
        """
        Remove a filename.

        Returns:
            (True, prior_content) if it was present, (False, None) otherwise
        """
        if filename not in self._entries:
            return False, None
        prior = self._entries.pop(filename)
        self._mutation_count += 1
        return True, prior

    def __contains__(self, filename: object) -> bool:
        return filename in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
