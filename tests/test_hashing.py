"""Tests for hashing module."""

import os
import re

from codesync.hashing import compute_file_digest, compute_root_key


class TestFileHashing:
    """Test file-based hashing."""

    def test_file_hash_detects_changes(self, tmp_path):
        """File hash should detect any byte changes."""
        file1 = tmp_path / "test.py"
        file1.write_text("def foo():\n    return 42")
        hash1 = compute_file_digest(file1)

        # Change a single character, same size
        file1.write_text("def foo():\n    return 43")
        hash2 = compute_file_digest(file1)

        assert hash1 != hash2, "File hash should detect changes"

    def test_same_content_same_digest(self, tmp_path):
        """Equal bytes give equal fingerprints regardless of name."""
        a = tmp_path / "a.txt"
        b = tmp_path / "nested" / "b.txt"
        b.parent.mkdir()
        a.write_bytes(b"same bytes")
        b.write_bytes(b"same bytes")

        assert compute_file_digest(a) == compute_file_digest(b)

    def test_mtime_does_not_affect_digest(self, tmp_path):
        """Touching a file without changing content keeps its digest."""
        f = tmp_path / "stable.txt"
        f.write_text("content")
        before = compute_file_digest(f)

        os.utime(f, (1_000_000, 1_000_000))

        assert compute_file_digest(f) == before

    def test_file_hash_binary_files(self, tmp_path):
        """Should handle binary and empty files correctly."""
        binary_file = tmp_path / "data.bin"
        binary_file.write_bytes(b"\x00\x01\x02\x03\x04" * 5000)
        empty = tmp_path / "empty"
        empty.write_bytes(b"")

        hash_val = compute_file_digest(binary_file)
        assert hash_val.startswith("sha256:")
        assert len(hash_val) == 71  # "sha256:" (7) + 64 hex chars

        # Well-known SHA256 of zero bytes
        assert compute_file_digest(empty) == (
            "sha256:e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )


class TestRootKey:
    """Storage key derivation."""

    def test_key_is_hex(self, tmp_path):
        """Keys are 64 lowercase hex characters."""
        assert re.fullmatch(r"[0-9a-f]{64}", compute_root_key(tmp_path))

    def test_key_stable(self, tmp_path):
        """Same root gives the same key on every call."""
        assert compute_root_key(tmp_path) == compute_root_key(tmp_path)
        assert compute_root_key(str(tmp_path)) == compute_root_key(tmp_path)

    def test_equivalent_spellings_share_key(self, tmp_path):
        """Keys are derived from the canonical path."""
        (tmp_path / "project").mkdir()
        (tmp_path / "other").mkdir()

        direct = tmp_path / "project"
        roundabout = tmp_path / "other" / ".." / "project"

        assert compute_root_key(direct) == compute_root_key(roundabout)

    def test_distinct_roots_distinct_keys(self, tmp_path):
        """Different roots never share a key."""
        keys = {compute_root_key(tmp_path / f"project{i}") for i in range(50)}
        assert len(keys) == 50
