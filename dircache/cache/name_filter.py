"""
Filename admission filter.

A NameFilter decides which directory entries are tracked at all. It is built
once from the caller's filter argument and never changes afterwards:

- None: keep every name
- a pattern (str or compiled regex): keep names the pattern matches
  (re.search semantics, so the pattern may match anywhere in the name)
- a callable: used verbatim as the keep predicate; its return value is
  already the caller's keep/drop decision
"""

import re
from enum import Enum
from typing import Any, Callable, Optional, Union

from dircache.exceptions import ValidationException

FilterArgument = Union[None, str, re.Pattern[str], Callable[[str], Any]]


class FilterKind(str, Enum):
    ALL = "all"
    PATTERN = "pattern"
    PREDICATE = "predicate"


class NameFilter:
    """Resolved keep(name) -> bool predicate."""

    def __init__(self, kind: FilterKind, keep: Callable[[str], bool], source: Any = None):
        self._kind = kind
        self._keep = keep
        self._source = source

    @classmethod
    def from_argument(cls, argument: FilterArgument) -> "NameFilter":
        """
        Resolve a filter argument into a NameFilter.

        Args:
            argument: None, a regex pattern (str or compiled) or a predicate

        Returns:
            The resolved NameFilter

        Raises:
            ValidationException: If the argument is none of the accepted kinds
                                 or the pattern does not compile
        """
        if isinstance(argument, NameFilter):
            return argument

        if argument is None:
            return cls.keep_all()

        if isinstance(argument, str):
            try:
                argument = re.compile(argument)
            except re.error as e:
                raise ValidationException(
                    f"Invalid filter pattern: {e}",
                    details={"pattern": argument},
                ) from e

        if isinstance(argument, re.Pattern):
            return cls.from_pattern(argument)

        if callable(argument):
            return cls.from_predicate(argument)

        raise ValidationException(
            "filter must be a pattern or a callable",
            details={"type": type(argument).__name__},
        )

    @classmethod
    def keep_all(cls) -> "NameFilter":
        return cls(FilterKind.ALL, lambda name: True)

    @classmethod
    def from_pattern(cls, pattern: re.Pattern[str]) -> "NameFilter":
        return cls(
            FilterKind.PATTERN,
            lambda name: pattern.search(name) is not None,
            source=pattern,
        )

    @classmethod
    def from_predicate(cls, predicate: Callable[[str], Any]) -> "NameFilter":
        return cls(
            FilterKind.PREDICATE,
            lambda name: bool(predicate(name)),
            source=predicate,
        )

    @property
    def kind(self) -> FilterKind:
        return self._kind

    @property
    def source(self) -> Optional[Any]:
        """The pattern or predicate this filter was built from."""
        return self._source

    def keep(self, filename: str) -> bool:
        return self._keep(filename)

    def __call__(self, filename: str) -> bool:
        return self._keep(filename)

    def __repr__(self) -> str:
        if self._kind is FilterKind.PATTERN:
            return f"NameFilter(pattern={self._source.pattern!r})"
        return f"NameFilter({self._kind.value})"
