"""Core data models for codesync."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


# ============= Synchronizer lifecycle =============

class SyncStatus(str, Enum):
    """Lifecycle state of a FileSynchronizer."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


# ============= Change Detection =============

class ChangeSet(BaseModel):
    """
    Files that changed between two snapshots.

    The three lists are disjoint and each is sorted lexicographically.
    Consumers re-embed ``added`` and ``modified`` and drop vectors for
    ``removed``.
    """

    added: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)
    modified: List[str] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """Check if there are any changes."""
        return bool(self.added or self.removed or self.modified)

    @property
    def total_changes(self) -> int:
        """Total number of changed files."""
        return len(self.added) + len(self.removed) + len(self.modified)

    @property
    def to_index(self) -> List[str]:
        """Paths whose content must be (re)embedded."""
        return sorted(self.added + self.modified)

    def summary(self) -> str:
        """Get human-readable summary."""
        if not self.has_changes:
            return "No changes"
        return (
            f"+{len(self.added)} added, "
            f"~{len(self.modified)} modified, "
            f"-{len(self.removed)} removed"
        )
