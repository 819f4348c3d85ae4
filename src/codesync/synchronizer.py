"""File synchronizer: the change-detection entry point for indexing pipelines.

Typical use::

    sync = FileSynchronizer(repo_root, ignore_patterns=["*.log"])
    sync.initialize()
    changes = sync.check_for_changes()
    for path in changes.to_index:
        ...  # embed and upsert
    for path in changes.removed:
        ...  # delete vectors

The baseline is shared through the persisted snapshot, so a synchronizer
created later (in this or another process) only sees changes since the last
successful ``check_for_changes()`` from any instance on the same root.
Calls on one instance must be serialized by the caller.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .config import SyncConfig, load_sync_config
from .core import ChangeSet, SyncStatus
from .diffing import compute_diff
from .errors import NotFoundError
from .ignore import PathMatcher
from .scanner import TreeScanner
from .snapshot import Snapshot
from .store import FileSnapshotStore, SnapshotStore
from .utils import canonical_root, normalize_relpath

logger = logging.getLogger(__name__)


class FileSynchronizer:
    """Tracks one root directory against its persisted snapshot."""

    def __init__(
        self,
        root_dir: Union[str, Path],
        ignore_patterns: Iterable[str] = (),
        store: Optional[SnapshotStore] = None,
        scanner: Optional[TreeScanner] = None,
        config: Optional[SyncConfig] = None,
    ):
        """Initialize synchronizer for a root directory.

        Args:
            root_dir: Directory tree to track
            ignore_patterns: Extra patterns, appended to the built-in
                defaults and to patterns from config / .codesyncignore
            store: Snapshot persistence; defaults to a FileSnapshotStore
                in the configured cache directory
            scanner: Tree scanner; defaults to one sized by config
            config: Settings; loaded from <root>/.codesync.yaml if None
        """
        self.root_dir = Path(root_dir)
        self.root = canonical_root(self.root_dir)
        self.config = config if config is not None else load_sync_config(self.root)
        self.store: SnapshotStore = (
            store if store is not None else FileSnapshotStore(self.config.cache_dir)
        )
        self.scanner = scanner if scanner is not None else TreeScanner(self.config.max_workers)
        self.matcher = PathMatcher.from_root(
            self.root,
            extra=[*self.config.ignore, *ignore_patterns, *self._cache_exclusions()],
            include_defaults=self.config.include_defaults,
        )

        self._baseline: Optional[Snapshot] = None
        self._status = SyncStatus.UNINITIALIZED

    def _cache_exclusions(self) -> List[str]:
        """Patterns keeping a snapshot cache inside the root out of the scan."""
        if not isinstance(self.store, FileSnapshotStore):
            return []
        try:
            rel = canonical_root(self.store.cache_dir).relative_to(self.root).as_posix()
        except ValueError:
            return []

        if rel == ".":
            # Cache is the root itself; skip only this root's record
            return [self.store.path_for(self.root).name]
        return [f"{rel}/"]

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def ignore_patterns(self) -> List[str]:
        """Effective ignore patterns (copy)."""
        return self.matcher.patterns

    @property
    def baseline(self) -> Dict[str, str]:
        """Fingerprint map diffed against on the next check (copy)."""
        if self._baseline is None:
            return {}
        return dict(self._baseline.files)

    def initialize(self) -> None:
        """Load the persisted baseline. Does not scan the tree.

        Raises:
            NotFoundError: If the root directory does not exist
        """
        if not self.root.is_dir():
            raise NotFoundError(self.root_dir)

        self._status = SyncStatus.INITIALIZING
        try:
            self._baseline = self.store.load(self.root)
        except Exception:
            self._status = SyncStatus.UNINITIALIZED
            raise
        self._status = SyncStatus.READY

        logger.info("Loaded baseline for %s (%d files)", self.root, self._baseline.file_count)

    def check_for_changes(self) -> ChangeSet:
        """Scan the tree, diff it against the baseline and persist the result.

        The new snapshot is persisted before the in-memory baseline moves,
        so a failed save leaves both at their previous values.

        Returns:
            ChangeSet relative to the baseline at call time

        Raises:
            NotFoundError: If the root directory no longer exists
            PersistenceError: If the new snapshot cannot be saved
        """
        if self._status is not SyncStatus.READY:
            self.initialize()

        current = self.scanner.scan(self.root, self.matcher)
        changes = compute_diff(self._baseline, current)

        self.store.save(self.root, current)
        self._baseline = current

        logger.info("Checked %s: %s", self.root, changes.summary())
        return changes

    def get_file_hash(self, relpath: Union[str, Path]) -> Optional[str]:
        """Fingerprint of a file in the current baseline, or None."""
        if self._baseline is None:
            return None
        return self._baseline.digest_for(normalize_relpath(relpath))

    def reset(self) -> None:
        """Delete the persisted snapshot and clear this instance's baseline.

        The next check reports every file as added.
        """
        self.store.delete(self.root)
        self._baseline = Snapshot.empty(self.root.as_posix())
        self._status = SyncStatus.READY
        logger.info("Reset baseline for %s", self.root)

    @staticmethod
    def delete_snapshot(
        root_dir: Union[str, Path],
        store: Optional[SnapshotStore] = None,
    ) -> None:
        """Remove the persisted baseline for a root.

        Live synchronizers bound to the same root keep their in-memory
        baseline until re-initialized; use reset() to clear both.
        """
        if store is None:
            store = FileSnapshotStore(load_sync_config(canonical_root(root_dir)).cache_dir)
        store.delete(root_dir)
        logger.info("Deleted snapshot for %s", canonical_root(root_dir))
