"""Paged commit history."""

from __future__ import annotations

import logging

from docsync.core.errors import attempt
from docsync.core.types import CommitRecord
from docsync.sync.protocols import VcsCapability

logger = logging.getLogger(__name__)

PAGE_SIZE = 20


class HistoryPager:
    """Loads commit history one page at a time, newest first."""

    def __init__(self, vcs: VcsCapability, page_size: int = PAGE_SIZE) -> None:
        self._vcs = vcs
        self._page_size = page_size
        self._commits: list[CommitRecord] = []
        self._offset = 0
        self._has_more = True

    @property
    def commits(self) -> list[CommitRecord]:
        return list(self._commits)

    @property
    def has_more(self) -> bool:
        """False once a short page has been loaded."""
        return self._has_more

    def reset(self) -> None:
        """Drop loaded commits and load the first page."""
        self._commits = []
        self._offset = 0
        self._has_more = True
        self.load_more()

    def load_more(self) -> list[CommitRecord]:
        """Load the next page with each commit's changed files.

        Returns:
            The newly loaded commits; empty on failure.
        """
        page = attempt(self._vcs.commit_history, self._page_size, self._offset)
        if not page.ok:
            logger.error("Failed to load commit history: %s", page.error)
            return []

        commits = page.value or []
        for commit in commits:
            changed = attempt(self._vcs.changed_files, commit.commit_id)
            if not changed.ok:
                logger.error("Failed to load changed files for %s: %s", commit.short_id, changed.error)
                return []
            commit.changed_files = changed.value or []

        self._commits.extend(commits)
        self._offset += len(commits)
        self._has_more = len(commits) == self._page_size
        logger.info("Loaded %d commits, total: %d", len(commits), len(self._commits))
        return commits


def format_commit_details(commit: CommitRecord) -> str:
    """Render one commit for display."""
    if commit.changed_files:
        files = "\n".join(f"  - {path}" for path in commit.changed_files)
    else:
        files = "  (No changes)"
    return (
        "Commit Details\n"
        "--------------------\n"
        f"ID: {commit.short_id}\n"
        f"Author: {commit.author}\n"
        f"Time: {commit.timestamp:%Y-%m-%d %H:%M:%S}\n"
        f"Message: {commit.description}\n"
        "\n"
        "Changed Files:\n"
        f"{files}"
    )
