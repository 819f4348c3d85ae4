"""Tests for diffing logic and edge cases."""

import pytest

from codesync.core import ChangeSet
from codesync.diffing import compute_diff
from codesync.snapshot import Snapshot


def digest(char: str) -> str:
    return "sha256:" + char * 64


class TestDiffingLogic:
    """Test the core diffing logic."""

    def test_no_changes(self):
        """Identical maps produce an empty change set."""
        files = {"a.py": digest("a"), "b.py": digest("b")}
        changes = compute_diff(files, dict(files))

        assert changes == ChangeSet()
        assert not changes.has_changes
        assert changes.summary() == "No changes"

    def test_empty_baseline_reports_everything_added(self):
        """First check against an empty baseline adds every file."""
        current = Snapshot(files={"b.py": digest("b"), "a.py": digest("a")})
        changes = compute_diff(Snapshot.empty(), current)

        assert changes.added == ["a.py", "b.py"]
        assert changes.removed == []
        assert changes.modified == []

    def test_all_categories(self):
        """Added, removed and modified are classified independently."""
        previous = {
            "kept.py": digest("k"),
            "edited.py": digest("1"),
            "gone.py": digest("g"),
        }
        current = {
            "kept.py": digest("k"),
            "edited.py": digest("2"),
            "new.py": digest("n"),
        }

        changes = compute_diff(previous, current)

        assert changes.added == ["new.py"]
        assert changes.removed == ["gone.py"]
        assert changes.modified == ["edited.py"]
        assert changes.total_changes == 3
        assert changes.summary() == "+1 added, ~1 modified, -1 removed"

    def test_rename_is_remove_plus_add(self):
        """A move with identical content is not a modification."""
        changes = compute_diff({"old/name.py": digest("x")}, {"new/name.py": digest("x")})

        assert changes.added == ["new/name.py"]
        assert changes.removed == ["old/name.py"]
        assert changes.modified == []

    def test_lists_sorted_and_disjoint(self):
        """Output order does not depend on input order."""
        previous = {f"f{i}.txt": digest("0") for i in (9, 3, 7, 1)}
        current = {f"f{i}.txt": digest("1") for i in (8, 1, 2, 9)}

        changes = compute_diff(previous, current)

        for paths in (changes.added, changes.removed, changes.modified):
            assert paths == sorted(paths)
        assert changes.added == ["f2.txt", "f8.txt"]
        assert changes.removed == ["f3.txt", "f7.txt"]
        assert changes.modified == ["f1.txt", "f9.txt"]
        assert not set(changes.added) & set(changes.removed)
        assert not set(changes.added) & set(changes.modified)

    def test_to_index(self):
        """Added and modified paths are merged for reindexing."""
        changes = ChangeSet(added=["z.py", "b.py"], modified=["a.py"], removed=["c.py"])
        assert changes.to_index == ["a.py", "b.py", "z.py"]

    @pytest.mark.parametrize("previous,current", [
        ({}, {}),
        (Snapshot.empty(), Snapshot.empty()),
        (Snapshot.empty(), {}),
    ])
    def test_empty_inputs(self, previous, current):
        """Snapshots and plain mappings are interchangeable."""
        assert not compute_diff(previous, current).has_changes
