"""Diff computation logic - pure comparison of two fingerprint maps."""

from typing import Mapping, Union

from .core import ChangeSet
from .snapshot import Snapshot

FingerprintMap = Mapping[str, str]


def _files(state: Union[Snapshot, FingerprintMap]) -> FingerprintMap:
    if isinstance(state, Snapshot):
        return state.files
    return state


def compute_diff(
    previous: Union[Snapshot, FingerprintMap],
    current: Union[Snapshot, FingerprintMap],
) -> ChangeSet:
    """
    Compute the change set between two snapshots.

    Args:
        previous: Baseline snapshot (or path -> digest map).
        current: Freshly scanned snapshot (or path -> digest map).

    Returns:
        ChangeSet with sorted added/removed/modified path lists.

    Note:
        Paths present in both with equal digests appear in none of the
        lists. Sorting makes the result independent of traversal and
        hashing order.
    """
    old = _files(previous)
    new = _files(current)

    old_paths = set(old)
    new_paths = set(new)

    added = sorted(new_paths - old_paths)
    removed = sorted(old_paths - new_paths)
    modified = sorted(
        path for path in old_paths & new_paths
        if old[path] != new[path]
    )

    return ChangeSet(added=added, removed=removed, modified=modified)
