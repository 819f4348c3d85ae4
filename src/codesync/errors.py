"""Custom exceptions for codesync.

Entry-level scan failures are absorbed by the scanner and only logged;
root-level and persistence failures propagate to the caller as one of
the types below.
"""

from pathlib import Path
from typing import Optional, Union


class SyncError(RuntimeError):
    """Base class for all codesync errors."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = str(path) if path is not None else None
        super().__init__(message)


class NotFoundError(SyncError):
    """Root directory is missing or is not a directory."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(f"Root directory not found: {path}", path)


class PermissionDeniedError(SyncError):
    """A path could not be read due to permissions."""

    def __init__(self, path: Union[str, Path], reason: str = ""):
        detail = f": {reason}" if reason else ""
        super().__init__(f"Permission denied for {path}{detail}", path)


class CorruptStateError(SyncError):
    """Persisted snapshot exists but cannot be parsed or validated."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.reason = reason
        super().__init__(f"Corrupt snapshot at {path}: {reason}", path)


class PersistenceError(SyncError):
    """Writing or removing the persisted snapshot failed (e.g. disk full)."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.reason = reason
        super().__init__(f"Failed to persist snapshot to {path}: {reason}", path)
