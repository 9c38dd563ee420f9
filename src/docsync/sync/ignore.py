"""Ignore patterns for the save watcher.

This module provides:
- IgnorePatterns: gitignore-style pattern matching
- DEFAULT_IGNORE_PATTERNS: VCS metadata, editor swap files and OS clutter
"""

from __future__ import annotations

import fnmatch
from pathlib import Path

DEFAULT_IGNORE_PATTERNS = [
    ".git/",
    ".jj/",
    ".DS_Store",
    "Thumbs.db",
    "*.tmp",
    "*.swp",
    "*.swo",
    "*~",
    "~$*",
    ".#*",
    "4913",
]


class IgnorePatterns:
    """Decides which workspace paths never count as saves."""

    def __init__(self, patterns: list[str] | None = None) -> None:
        self._patterns = list(DEFAULT_IGNORE_PATTERNS)
        if patterns:
            self._patterns.extend(patterns)

    @property
    def patterns(self) -> list[str]:
        return list(self._patterns)

    def add_pattern(self, pattern: str) -> None:
        """Add an ignore pattern."""
        self._patterns.append(pattern)

    def load_from_file(self, path: Path) -> None:
        """Load patterns from a .docsyncignore file, if present."""
        if not path.exists():
            return
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#"):
                    self._patterns.append(line)

    def should_ignore(self, path: Path, base_path: Path) -> bool:
        """Check if a path should be ignored.

        Args:
            path: Absolute path to check.
            base_path: Workspace root.

        Returns:
            True for paths outside the workspace or matching a pattern.
        """
        try:
            rel_path = path.relative_to(base_path)
        except ValueError:
            return True

        rel_str = rel_path.as_posix()
        parts = rel_path.parts

        for pattern in self._patterns:
            # Directory patterns match any path component
            if pattern.endswith("/"):
                name = pattern[:-1]
                if any(fnmatch.fnmatch(part, name) for part in parts):
                    return True
            elif "/" in pattern:
                if fnmatch.fnmatch(rel_str, pattern):
                    return True
            elif fnmatch.fnmatch(path.name, pattern):
                return True

        return False
