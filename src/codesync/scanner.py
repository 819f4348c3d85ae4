"""Tree scanning: walk a root with ignore pruning and fingerprint every file.

The walk is top-down and prunes excluded entries before descending, so a
directory such as ``node_modules`` costs one pattern check rather than one
per descendant. Hashing runs on a bounded thread pool; the snapshot is
assembled from (path, digest) pairs, so worker ordering never leaks into
the result.

Symbolic links are resolved to their canonical target. Targets outside the
root, broken links and link cycles are skipped, and every canonical path is
visited at most once, keyed by its root-relative form.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

from .constants import DEFAULT_MAX_WORKERS
from .errors import NotFoundError, PermissionDeniedError
from .hashing import compute_file_digest
from .ignore import PathMatcher
from .snapshot import Snapshot
from .utils import canonical_root

logger = logging.getLogger(__name__)


@dataclass
class ScanStats:
    """Statistics from one scan."""

    files_hashed: int = 0
    directories_scanned: int = 0
    entries_skipped: int = 0  # Unreadable files/directories
    symlinks_skipped: int = 0  # Broken, escaping, cyclic or duplicate links


class TreeScanner:
    """Builds a Snapshot of the live tree under a root."""

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers
        self.last_stats: Optional[ScanStats] = None

    def scan(self, root: Union[str, Path], matcher: PathMatcher) -> Snapshot:
        """Scan the tree under root and fingerprint every included file.

        Args:
            root: Directory to scan
            matcher: Ignore rules; excluded entries are pruned before descent

        Returns:
            Snapshot keyed by root-relative POSIX path

        Raises:
            NotFoundError: If root does not exist or is not a directory
            PermissionDeniedError: If root itself cannot be listed
        """
        root_path = canonical_root(root)
        if not root_path.is_dir():
            raise NotFoundError(root)

        stats = ScanStats()
        candidates = self._collect(root_path, matcher, stats)
        files = self._hash_all(candidates, stats)
        self.last_stats = stats

        logger.info(
            "Scanned %s: %d files hashed, %d directories, %d skipped",
            root_path, stats.files_hashed, stats.directories_scanned,
            stats.entries_skipped + stats.symlinks_skipped,
        )
        return Snapshot(root=root_path.as_posix(), files=files)

    def _collect(
        self,
        root_path: Path,
        matcher: PathMatcher,
        stats: ScanStats,
    ) -> List[Tuple[str, Path]]:
        """Walk the tree and return (relpath, absolute path) for every file."""
        found: List[Tuple[str, Path]] = []
        seen_files: Set[str] = set()
        seen_dirs: Set[Path] = {root_path}
        stack: List[Tuple[Path, str]] = [(root_path, "")]

        while stack:
            dir_path, dir_rel = stack.pop()
            try:
                with os.scandir(dir_path) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                if not dir_rel:
                    if isinstance(e, FileNotFoundError):
                        raise NotFoundError(root_path) from e
                    raise PermissionDeniedError(root_path, str(e)) from e
                logger.warning("Skipping unreadable directory %s: %s", dir_rel, e)
                stats.entries_skipped += 1
                continue

            stats.directories_scanned += 1

            for entry in entries:
                rel = f"{dir_rel}/{entry.name}" if dir_rel else entry.name

                try:
                    # Follows links, so "dir/" patterns also prune links to directories
                    if matcher.excludes_entry(rel, entry.is_dir()):
                        continue

                    if entry.is_symlink():
                        self._follow_link(
                            Path(entry.path), rel, root_path, matcher,
                            seen_dirs, seen_files, stack, found, stats,
                        )
                    elif entry.is_dir(follow_symlinks=False):
                        child = Path(entry.path)
                        if child not in seen_dirs:
                            seen_dirs.add(child)
                            stack.append((child, rel))
                    elif entry.is_file(follow_symlinks=False):
                        if rel not in seen_files:
                            seen_files.add(rel)
                            found.append((rel, Path(entry.path)))
                    # Sockets, FIFOs and devices are not content
                except OSError as e:
                    logger.warning("Skipping %s: %s", rel, e)
                    stats.entries_skipped += 1

        return found

    def _follow_link(
        self,
        link: Path,
        rel: str,
        root_path: Path,
        matcher: PathMatcher,
        seen_dirs: Set[Path],
        seen_files: Set[str],
        stack: List[Tuple[Path, str]],
        found: List[Tuple[str, Path]],
        stats: ScanStats,
    ) -> None:
        """Resolve a symlink and queue its canonical target once."""
        try:
            target = link.resolve(strict=True)
        except (OSError, RuntimeError) as e:
            # Broken link or symlink loop
            logger.debug("Skipping unresolvable link %s: %s", rel, e)
            stats.symlinks_skipped += 1
            return

        try:
            target_rel = target.relative_to(root_path).as_posix()
        except ValueError:
            logger.debug("Skipping link %s escaping root -> %s", rel, target)
            stats.symlinks_skipped += 1
            return

        if target_rel == ".":
            target_rel = ""

        target_is_dir = target.is_dir()
        if target_rel and matcher.is_excluded(target_rel, is_dir=target_is_dir):
            stats.symlinks_skipped += 1
            return

        if target_is_dir:
            if target in seen_dirs:
                stats.symlinks_skipped += 1
                return
            seen_dirs.add(target)
            stack.append((target, target_rel))
        elif target.is_file():
            if target_rel in seen_files:
                stats.symlinks_skipped += 1
                return
            seen_files.add(target_rel)
            found.append((target_rel, target))

    def _hash_all(
        self,
        candidates: List[Tuple[str, Path]],
        stats: ScanStats,
    ) -> Dict[str, str]:
        """Hash files in parallel; unreadable files are logged and dropped."""

        def hash_one(item: Tuple[str, Path]) -> Tuple[str, Optional[str]]:
            rel, path = item
            try:
                return rel, compute_file_digest(path)
            except OSError as e:
                logger.warning("Skipping unreadable file %s: %s", rel, e)
                return rel, None

        results: Dict[str, str] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for rel, digest in executor.map(hash_one, candidates):
                if digest is None:
                    stats.entries_skipped += 1
                    continue
                results[rel] = digest
                stats.files_hashed += 1

        return dict(sorted(results.items()))
