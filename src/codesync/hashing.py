"""Hashing utilities for content fingerprints and storage keys."""

from pathlib import Path
from typing import Union
import hashlib

from .constants import READ_CHUNK_SIZE
from .utils import canonical_root


def compute_file_digest(path: Path) -> str:
    """Compute SHA256 hash of file contents.

    Simple byte-for-byte hashing - any change invalidates the digest, while
    mtime, permissions and host never enter into it.

    Args:
        path: Path to file to hash

    Returns:
        SHA256 digest in format "sha256:xxxx"
    """
    sha256 = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(READ_CHUNK_SIZE), b""):
            sha256.update(chunk)
    return f"sha256:{sha256.hexdigest()}"


def compute_root_key(root: Union[str, Path]) -> str:
    """Derive the storage key for a tracked root.

    The key is the SHA256 of the canonical absolute root path, so it is
    stable across process restarts and distinct for distinct roots.

    Args:
        root: Root directory (need not exist)

    Returns:
        64-character hex key
    """
    canonical = canonical_root(root).as_posix()
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


__all__ = [
    "compute_file_digest",
    "compute_root_key",
]
