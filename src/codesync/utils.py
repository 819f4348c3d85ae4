"""Utility functions for codesync."""

import time
from pathlib import Path, PurePath
from typing import Union


def canonical_root(root: Union[str, Path]) -> Path:
    """Return the canonical absolute form of a root directory.

    Symlinks are resolved and ``~`` is expanded so two spellings of the
    same directory map to the same snapshot.
    """
    return Path(root).expanduser().resolve()


def normalize_relpath(relpath: Union[str, PurePath]) -> str:
    """Normalize a root-relative path to POSIX form.

    Examples:
        "src\\main.py" -> "src/main.py"
        "./src/"       -> "src"
        "/docs/a.md"   -> "docs/a.md"
    """
    if isinstance(relpath, PurePath):
        relpath = relpath.as_posix()
    path = relpath.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    path = path.strip("/")
    if path == ".":
        return ""
    # Collapse duplicate separators left by callers joining strings
    while "//" in path:
        path = path.replace("//", "/")
    return path


def get_timestamp() -> float:
    """Get current timestamp as Unix epoch."""
    return time.time()
