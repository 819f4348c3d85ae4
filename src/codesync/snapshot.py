"""Snapshot model: a fingerprint map of a tree at a point in time."""

from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import SNAPSHOT_VERSION
from .utils import get_timestamp


class Snapshot(BaseModel):
    """
    Mapping of root-relative POSIX paths to content fingerprints.

    This is also the persisted record: the store writes ``model_dump()``
    as JSON and validates it back on load.
    """

    version: int = SNAPSHOT_VERSION
    root: Optional[str] = None  # Canonical absolute root, None for an empty baseline
    created_at: float = Field(default_factory=get_timestamp)
    saved_at: Optional[float] = None  # Set by the store when persisted
    files: Dict[str, str] = Field(default_factory=dict)  # path -> sha256:...

    @field_validator("files")
    @classmethod
    def validate_paths(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Reject keys that are absolute or step outside the root."""
        for path in v:
            segments = path.split("/")
            if path.startswith("/") or any(s in ("", ".", "..") for s in segments):
                raise ValueError(f"not a root-relative path: {path!r}")
        return v

    @classmethod
    def empty(cls, root: Optional[str] = None) -> "Snapshot":
        """Create an empty baseline."""
        return cls(root=root)

    @property
    def file_count(self) -> int:
        return len(self.files)

    def digest_for(self, path: str) -> Optional[str]:
        """Fingerprint recorded for a path, or None."""
        return self.files.get(path)

    def same_files(self, other: "Snapshot") -> bool:
        """Compare fingerprint maps only, ignoring metadata."""
        return self.files == other.files
