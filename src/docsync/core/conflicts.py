"""Conflict marker detection.

A conflict region starts at a line beginning with ``<<<<<<<`` and ends at
the next line beginning with ``>>>>>>>``. The ``=======`` separator is not
validated. A start marker without a following end marker yields nothing.

When a second start marker appears before any end marker, the region is
restarted at the later start marker, so nested blocks produce one region
from the innermost start to the first end marker.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from docsync.core.types import ConflictRegion

logger = logging.getLogger(__name__)

START_MARKER = "<" * 7
SEPARATOR_MARKER = "=" * 7
END_MARKER = ">" * 7

_START_RE = re.compile(r"^<{7}", re.MULTILINE)
_END_RE = re.compile(r"^>{7}", re.MULTILINE)


class ConflictScanner:
    """Stateless scanner for conflict marker regions."""

    def scan(self, path: str, content: str) -> list[ConflictRegion]:
        """Find conflict regions in content.

        Args:
            path: File path recorded in each region.
            content: File content.

        Returns:
            Regions in file order, 1-based inclusive line numbers.
        """
        regions: list[ConflictRegion] = []
        start_line: int | None = None

        for index, line in enumerate(content.split("\n"), start=1):
            if line.startswith(START_MARKER):
                start_line = index
            elif line.startswith(END_MARKER) and start_line is not None:
                regions.append(ConflictRegion(path, start_line, index))
                start_line = None

        if regions:
            logger.info("Detected %d conflict(s) in %s", len(regions), path)
        return regions

    def contains_markers(self, content: str) -> bool:
        """Check if content holds at least one complete conflict region."""
        start = _START_RE.search(content)
        if start is None:
            return False
        return _END_RE.search(content, start.end()) is not None

    def scan_file(self, path: str | Path) -> list[ConflictRegion]:
        """Find conflict regions in a file.

        Unreadable files yield an empty list.
        """
        content = _read_text(path)
        if content is None:
            return []
        return self.scan(str(path), content)

    def file_contains_markers(self, path: str | Path) -> bool:
        """Check a file for conflict markers. Unreadable files yield False."""
        content = _read_text(path)
        return content is not None and self.contains_markers(content)

    def scan_files(self, paths: Iterable[str | Path]) -> list[ConflictRegion]:
        """Find conflict regions across several files."""
        regions: list[ConflictRegion] = []
        for path in paths:
            regions.extend(self.scan_file(path))
        return regions


def _read_text(path: str | Path) -> str | None:
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Failed to read %s for conflict detection: %s", path, e)
        return None
