"""Ignore pattern matching for codesync.

Patterns are compiled once into tagged rules:

- ``EXACT``: a bare name (``node_modules``) matching any path segment
- ``EXTENSION``: ``*.ext`` matching any file name with that suffix
- ``WILDCARD``: ``*``, ``?`` or ``[...]`` confined to one segment
- ``GLOBSTAR``: ``**`` matching across segments

A pattern written with a trailing ``/`` only matches directories, so
``build/`` skips a build tree but keeps a script named ``build``.

A path is excluded when any rule matches the path itself or one of its
ancestor directories, so excluding a directory excludes its whole subtree.
"""

import fnmatch
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePath
from typing import Iterable, List, Optional, Union

from pathspec import PathSpec

from .constants import IGNORE_FILE
from .utils import normalize_relpath

logger = logging.getLogger(__name__)


# Default patterns to always ignore
DEFAULTS = [
    # Version control
    ".git",  # A plain file in worktrees and submodules
    ".svn/",
    ".hg/",
    ".bzr/",

    # Python
    "__pycache__/",
    "*.pyc",
    "*.pyo",
    "*.egg-info/",
    ".eggs/",
    "dist/",
    "build/",

    # Virtual environments
    "venv/",
    ".venv/",
    "virtualenv/",

    # Node.js
    "node_modules/",
    ".npm/",
    ".yarn/",
    "bower_components/",

    # Other dependency directories
    "vendor/",
    "target/",

    # IDE and editors
    ".idea/",
    ".vscode/",
    "*.swp",
    "*.swo",

    # OS files
    ".DS_Store",
    "Thumbs.db",

    # Tool caches
    ".ipynb_checkpoints/",
    ".tox/",
    ".pytest_cache/",
    ".mypy_cache/",
    ".ruff_cache/",
    ".coverage",
    "htmlcov/",
]

_WILDCARD_CHARS = frozenset("*?[")


class RuleKind(str, Enum):
    """Compiled form of an ignore pattern."""

    EXACT = "exact"
    EXTENSION = "extension"
    WILDCARD = "wildcard"
    GLOBSTAR = "globstar"


def _has_wildcard(text: str) -> bool:
    return any(ch in _WILDCARD_CHARS for ch in text)


def _clean_pattern(raw: str) -> Optional[str]:
    """Strip a raw pattern down to its matchable form, or None to skip it."""
    pattern = raw.strip()
    if not pattern or pattern.startswith("#"):
        return None
    if pattern.startswith("!"):
        logger.warning("Negated ignore pattern not supported, skipping: %s", pattern)
        return None
    pattern = normalize_relpath(pattern)
    return pattern or None


@dataclass(frozen=True)
class IgnoreRule:
    """A single compiled ignore pattern."""

    pattern: str
    kind: RuleKind
    dir_only: bool = False  # Written with a trailing "/"
    _spec: Optional[PathSpec] = field(default=None, compare=False, repr=False)

    @classmethod
    def compile(cls, raw: str) -> Optional["IgnoreRule"]:
        """Compile a raw pattern string.

        Returns None for blank lines, comments and unsupported negations.
        """
        pattern = _clean_pattern(raw)
        if pattern is None:
            return None
        dir_only = raw.strip().replace("\\", "/").endswith("/")

        if "**" in pattern:
            spec = PathSpec.from_lines("gitwildmatch", [pattern])
            return cls(pattern, RuleKind.GLOBSTAR, dir_only, spec)

        if "/" in pattern:
            # Anchored path such as "src/*.py" or "docs/build". pathspec keeps
            # "*" from crossing separators.
            spec = PathSpec.from_lines("gitwildmatch", [pattern])
            return cls(pattern, RuleKind.WILDCARD, dir_only, spec)

        if pattern.startswith("*.") and not _has_wildcard(pattern[2:]):
            return cls(pattern, RuleKind.EXTENSION, dir_only)

        if _has_wildcard(pattern):
            return cls(pattern, RuleKind.WILDCARD, dir_only)

        return cls(pattern, RuleKind.EXACT, dir_only)

    def matches(self, candidate: str, is_dir: bool = False) -> bool:
        """Test one normalized relative path (no ancestor walk)."""
        if self.dir_only and not is_dir:
            return False

        name = candidate.rsplit("/", 1)[-1]

        if self.kind is RuleKind.EXACT:
            return name == self.pattern

        if self.kind is RuleKind.EXTENSION:
            return name.endswith(self.pattern[1:])

        if self._spec is not None:
            return self._spec.match_file(candidate)

        # Single-segment wildcard
        return fnmatch.fnmatchcase(name, self.pattern)


def _dedupe(patterns: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for pattern in patterns:
        if pattern not in seen:
            seen.add(pattern)
            result.append(pattern)
    return result


def read_ignore_file(path: Path) -> List[str]:
    """Read patterns from an ignore file, one per line.

    Comments and blank lines are dropped here; missing files yield no
    patterns.
    """
    if not path.is_file():
        return []
    patterns = []
    for line in path.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


class PathMatcher:
    """Classifies root-relative paths as included or excluded."""

    def __init__(self, patterns: Iterable[str] = (), include_defaults: bool = True):
        """Initialize matcher with default and custom patterns.

        Args:
            patterns: Additional patterns, appended to the defaults
            include_defaults: Whether to start from the built-in DEFAULTS
        """
        merged = list(DEFAULTS) if include_defaults else []
        merged.extend(patterns)
        self._patterns = _dedupe(merged)

        # Compile patterns once for efficiency
        self.rules: List[IgnoreRule] = []
        for raw in self._patterns:
            rule = IgnoreRule.compile(raw)
            if rule is not None:
                self.rules.append(rule)

    @classmethod
    def from_root(
        cls,
        root: Path,
        extra: Iterable[str] = (),
        include_defaults: bool = True,
    ) -> "PathMatcher":
        """Build a matcher that also honors the root's .codesyncignore file."""
        patterns = read_ignore_file(Path(root) / IGNORE_FILE)
        patterns.extend(extra)
        return cls(patterns, include_defaults=include_defaults)

    @property
    def patterns(self) -> List[str]:
        """Effective pattern list (copy)."""
        return list(self._patterns)

    def excludes_entry(self, relpath: str, is_dir: bool = False) -> bool:
        """Check a single entry without re-checking its ancestors.

        Intended for top-down walks where every ancestor directory has
        already been admitted.
        """
        return any(rule.matches(relpath, is_dir) for rule in self.rules)

    def is_excluded(self, relpath: Union[str, PurePath], is_dir: bool = False) -> bool:
        """Check if a root-relative path, or any ancestor of it, is excluded.

        Args:
            relpath: Root-relative path, either separator style
            is_dir: Whether the path itself is a directory; ancestors
                always are

        Returns:
            True if the path matches any ignore pattern
        """
        path = normalize_relpath(relpath)
        if not path:
            return False

        parts = path.split("/")
        for depth in range(1, len(parts) + 1):
            entry_is_dir = is_dir or depth < len(parts)
            if self.excludes_entry("/".join(parts[:depth]), entry_is_dir):
                return True
        return False

    def should_traverse(self, dirpath: Union[str, PurePath]) -> bool:
        """Check if a directory should be descended into during scanning."""
        return not self.is_excluded(dirpath, is_dir=True)
