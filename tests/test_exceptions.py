"""
Unit tests for the custom exception hierarchy.

Tests exception creation, attributes and inheritance.
"""

from pathlib import Path

import pytest

from dircache.exceptions import (
    CacheStateException,
    DecodeException,
    DirectoryCacheException,
    FileAccessException,
    InitializationException,
    ValidationException,
    WatcherException,
)


class TestDirectoryCacheException:
    """Test base exception class."""

    def test_base_exception_creation(self):
        """Test creating base exception with message."""
        exc = DirectoryCacheException("Test error")
        assert exc.message == "Test error"
        assert exc.details == {}
        assert exc.error_code == "INTERNAL_ERROR"
        assert str(exc) == "Test error"

    def test_base_exception_with_details(self):
        """Test creating base exception with details."""
        exc = DirectoryCacheException("Test error", details={"key": "value"})
        assert exc.details == {"key": "value"}


class TestInitializationExceptions:
    """Test initialization-related exceptions."""

    def test_initialization_exception(self):
        exc = InitializationException("cannot list")
        assert exc.error_code == "INIT_FAILED"
        assert isinstance(exc, DirectoryCacheException)

    def test_watcher_exception_is_initialization_fault(self):
        exc = WatcherException("no inotify")
        assert exc.error_code == "WATCHER_ERROR"
        assert isinstance(exc, InitializationException)


class TestFileAccessExceptions:
    """Test per-file fault exceptions."""

    def test_file_access_exception_attributes(self):
        """Test filename, path and stage are exposed and mirrored in details."""
        exc = FileAccessException("denied", filename="a.txt", path="/d/a.txt", stage="read")
        assert exc.error_code == "FILE_ACCESS_ERROR"
        assert exc.filename == "a.txt"
        assert exc.path == Path("/d/a.txt")
        assert exc.stage == "read"
        assert exc.details == {"filename": "a.txt", "path": "/d/a.txt", "stage": "read"}

    def test_file_access_exception_extra_details(self):
        exc = FileAccessException(
            "denied", filename="a.txt", path="/d/a.txt", stage="probe", details={"errno": 13}
        )
        assert exc.details["errno"] == 13
        assert exc.details["stage"] == "probe"

    def test_decode_exception_is_file_access_fault(self):
        exc = DecodeException("bad json", filename="x.json", path="/d/x.json", stage="decode")
        assert exc.error_code == "DECODE_ERROR"
        assert isinstance(exc, FileAccessException)


class TestOtherExceptions:
    """Test lifecycle and validation exceptions."""

    @pytest.mark.parametrize(
        "exc_class, code",
        [
            (CacheStateException, "INVALID_STATE"),
            (ValidationException, "VALIDATION_ERROR"),
        ],
    )
    def test_error_codes(self, exc_class, code):
        exc = exc_class("message")
        assert exc.error_code == code
        assert isinstance(exc, DirectoryCacheException)

    def test_can_be_raised_and_caught_as_base(self):
        with pytest.raises(DirectoryCacheException):
            raise CacheStateException("init twice")
