"""codesync - snapshot-and-diff change detection for code indexing."""

from .core import ChangeSet, SyncStatus
from .errors import (
    CorruptStateError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    SyncError,
)
from .ignore import PathMatcher
from .scanner import TreeScanner
from .snapshot import Snapshot
from .store import FileSnapshotStore, MemorySnapshotStore, SnapshotStore
from .synchronizer import FileSynchronizer

__version__ = "0.1.0"

__all__ = [
    "ChangeSet",
    "CorruptStateError",
    "FileSnapshotStore",
    "FileSynchronizer",
    "MemorySnapshotStore",
    "NotFoundError",
    "PathMatcher",
    "PermissionDeniedError",
    "PersistenceError",
    "Snapshot",
    "SnapshotStore",
    "SyncError",
    "SyncStatus",
    "TreeScanner",
]
