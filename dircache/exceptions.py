"""
Custom exception hierarchy for the directory cache.

Provides structured error handling with stable error codes and details.
"""

from pathlib import Path
from typing import Optional, Union


class DirectoryCacheException(Exception):
    """Base exception for all directory cache errors"""
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InitializationException(DirectoryCacheException):
    """Cache initialization failed; the cache never became ready"""
    error_code = "INIT_FAILED"


class WatcherException(InitializationException):
    """Watcher could not be created or attached"""
    error_code = "WATCHER_ERROR"


class FileAccessException(DirectoryCacheException):
    """Probing or reading a single file failed"""
    error_code = "FILE_ACCESS_ERROR"

    def __init__(
        self,
        message: str,
        filename: str,
        path: Union[str, Path],
        stage: str,
        details: Optional[dict] = None,
    ):
        merged = {"filename": filename, "path": str(path), "stage": stage}
        merged.update(details or {})
        super().__init__(message, details=merged)
        self.filename = filename
        self.path = Path(path)
        self.stage = stage


class DecodeException(FileAccessException):
    """File content could not be decoded as JSON"""
    error_code = "DECODE_ERROR"


class CacheStateException(DirectoryCacheException):
    """Operation not allowed in the cache's current lifecycle state"""
    error_code = "INVALID_STATE"


class ValidationException(DirectoryCacheException):
    """Invalid construction arguments"""
    error_code = "VALIDATION_ERROR"
