"""Snapshot persistence.

One JSON record per tracked root, named by the root's storage key::

    <cache_dir>/<sha256 of canonical root>.json

Writes go to a temporary file in the same directory and are renamed into
place, so a crash mid-write leaves the previous record intact. Nothing is
locked: two processes saving the same root concurrently resolve as
last-writer-wins.

A record that fails to parse is reported as a warning and treated as an
empty baseline, which degrades to a full reindex instead of an error.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

import platformdirs
from pydantic import ValidationError

from .constants import APP_AUTHOR, APP_NAME, SNAPSHOT_SUBDIR, SNAPSHOT_SUFFIX, SNAPSHOT_VERSION
from .errors import CorruptStateError, PersistenceError
from .hashing import compute_root_key
from .snapshot import Snapshot
from .utils import canonical_root, get_timestamp

logger = logging.getLogger(__name__)


def default_cache_dir() -> Path:
    """Platform-appropriate directory for persisted snapshots.

    - Linux: ~/.cache/codesync/snapshots
    - macOS: ~/Library/Caches/codesync/snapshots
    - Windows: %LOCALAPPDATA%/codesync/codesync/Cache/snapshots
    """
    return Path(platformdirs.user_cache_dir(APP_NAME, APP_AUTHOR)) / SNAPSHOT_SUBDIR


def _fsync_dir(path: Path) -> None:
    """Fsync a directory so a rename inside it is durable.

    Best-effort: Windows and some filesystems don't support directory fsync.
    """
    try:
        flags = os.O_RDONLY
        if hasattr(os, "O_DIRECTORY"):
            flags |= os.O_DIRECTORY
        dirfd = os.open(str(path), flags)
        try:
            os.fsync(dirfd)
        finally:
            os.close(dirfd)
    except OSError:
        logger.debug("Directory fsync not supported for %s", path)


def atomic_write_text(path: Path, text: str) -> None:
    """Atomically write text to file with crash safety.

    1. Write to a temp file in the target directory and fsync it
    2. Atomic rename onto the target path
    3. Fsync the parent directory so the rename survives a crash

    The temp file is removed on any failure; the previous content of
    ``path`` is untouched until the rename succeeds.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.tmp-")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    _fsync_dir(path.parent)


def parse_record(text: str, source: Union[str, Path], expected_root: str) -> Snapshot:
    """Validate a persisted record for the given canonical root.

    Raises:
        CorruptStateError: If the text is not a valid record for this root
    """
    try:
        snapshot = Snapshot.model_validate_json(text)
    except ValidationError as e:
        raise CorruptStateError(source, f"invalid snapshot record ({e.error_count()} errors)") from e

    if snapshot.version != SNAPSHOT_VERSION:
        raise CorruptStateError(source, f"unsupported record version {snapshot.version}")
    if snapshot.root != expected_root:
        raise CorruptStateError(source, f"record belongs to {snapshot.root!r}")
    return snapshot


class SnapshotStore(Protocol):
    """
    Protocol for snapshot persistence keyed by root directory.

    ``load`` never raises for missing or corrupt state; ``save`` and
    ``delete`` raise PersistenceError when the backing medium fails.
    """

    def locate(self, root: Union[str, Path]) -> str:
        """Storage key for a root."""
        ...

    def load(self, root: Union[str, Path]) -> Snapshot:
        """Persisted snapshot, or an empty one if missing or corrupt."""
        ...

    def save(self, root: Union[str, Path], snapshot: Snapshot) -> None:
        """Replace the persisted snapshot for a root."""
        ...

    def delete(self, root: Union[str, Path]) -> None:
        """Remove the persisted snapshot; no error if absent."""
        ...


class FileSnapshotStore:
    """Snapshot store backed by one JSON file per root."""

    def __init__(self, cache_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            cache_dir: Directory holding snapshot files. If None, uses the
                platform cache directory.
        """
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else default_cache_dir()

    def locate(self, root: Union[str, Path]) -> str:
        return compute_root_key(root)

    def path_for(self, root: Union[str, Path]) -> Path:
        """File holding the snapshot for a root."""
        return self.cache_dir / f"{self.locate(root)}{SNAPSHOT_SUFFIX}"

    def load(self, root: Union[str, Path]) -> Snapshot:
        canonical = canonical_root(root).as_posix()
        path = self.path_for(root)

        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No snapshot for %s at %s", canonical, path)
            return Snapshot.empty(canonical)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("%s; starting from an empty baseline", CorruptStateError(path, str(e)))
            return Snapshot.empty(canonical)

        try:
            snapshot = parse_record(text, path, canonical)
        except CorruptStateError as e:
            logger.warning("%s; starting from an empty baseline", e)
            return Snapshot.empty(canonical)

        logger.debug("Loaded snapshot for %s (%d files)", canonical, snapshot.file_count)
        return snapshot

    def save(self, root: Union[str, Path], snapshot: Snapshot) -> None:
        canonical = canonical_root(root).as_posix()
        path = self.path_for(root)
        record = snapshot.model_copy(update={"root": canonical, "saved_at": get_timestamp()})

        try:
            atomic_write_text(path, record.model_dump_json(indent=2))
        except OSError as e:
            raise PersistenceError(path, str(e)) from e

        logger.debug("Saved snapshot for %s (%d files) to %s", canonical, record.file_count, path)

    def delete(self, root: Union[str, Path]) -> None:
        path = self.path_for(root)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(path, str(e)) from e
        logger.debug("Deleted snapshot %s", path)


class MemorySnapshotStore:
    """
    In-process snapshot store for tests and embedding hosts.

    Records are kept as serialized JSON so loads return independent copies
    and go through the same validation as the file store.
    """

    def __init__(self):
        self.records: Dict[str, str] = {}

    def locate(self, root: Union[str, Path]) -> str:
        return compute_root_key(root)

    def load(self, root: Union[str, Path]) -> Snapshot:
        canonical = canonical_root(root).as_posix()
        key = self.locate(root)
        text = self.records.get(key)
        if text is None:
            return Snapshot.empty(canonical)
        try:
            return parse_record(text, f"memory:{key}", canonical)
        except CorruptStateError as e:
            logger.warning("%s; starting from an empty baseline", e)
            return Snapshot.empty(canonical)

    def save(self, root: Union[str, Path], snapshot: Snapshot) -> None:
        canonical = canonical_root(root).as_posix()
        record = snapshot.model_copy(update={"root": canonical, "saved_at": get_timestamp()})
        self.records[self.locate(root)] = record.model_dump_json()

    def delete(self, root: Union[str, Path]) -> None:
        self.records.pop(self.locate(root), None)
