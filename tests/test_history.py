"""Tests for the commit history pager."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from docsync.core.types import CommitRecord
from docsync.history import HistoryPager, format_commit_details

if TYPE_CHECKING:
    from conftest import FakeVcs


def make_commits(count: int) -> list[CommitRecord]:
    return [
        CommitRecord(
            commit_id=f"{i:040x}",
            author="Alice",
            timestamp=datetime(2024, 1, 1, 12, 0),
            description=f"Auto-sync: change {i}",
        )
        for i in range(count)
    ]


class TestHistoryPager:
    """Tests for HistoryPager."""

    def test_pages(self, vcs: FakeVcs) -> None:
        """Should load consecutive pages until a short page arrives."""
        vcs.history = make_commits(45)
        pager = HistoryPager(vcs)

        pager.reset()
        assert len(pager.commits) == 20
        assert pager.has_more

        pager.load_more()
        pager.load_more()
        assert len(pager.commits) == 45
        assert not pager.has_more
        assert [c.description for c in pager.commits] == [c.description for c in vcs.history]

    def test_loads_changed_files(self, vcs: FakeVcs) -> None:
        """Should attach each commit's changed files."""
        vcs.history = make_commits(2)
        vcs.changed = {vcs.history[0].commit_id: ["notes.md"]}

        pager = HistoryPager(vcs, page_size=5)
        pager.reset()

        assert pager.commits[0].changed_files == ["notes.md"]
        assert pager.commits[1].changed_files == []
        assert vcs.count("changed_files") == 2

    def test_failure_leaves_pager_unchanged(self, vcs: FakeVcs) -> None:
        """Should keep loaded commits when a page fails."""
        vcs.history = make_commits(30)
        pager = HistoryPager(vcs, page_size=10)
        pager.reset()

        vcs.fail("commit_history", "Connection refused")
        assert pager.load_more() == []

        assert len(pager.commits) == 10
        assert pager.has_more

    def test_reset_starts_over(self, vcs: FakeVcs) -> None:
        """Should drop loaded commits."""
        vcs.history = make_commits(15)
        pager = HistoryPager(vcs, page_size=10)
        pager.reset()
        pager.load_more()

        pager.reset()

        assert len(pager.commits) == 10


class TestFormatCommitDetails:
    """Tests for format_commit_details()."""

    def test_details(self) -> None:
        """Should show short id, author, time, message and files."""
        commit = make_commits(1)[0]
        commit.changed_files = ["notes.md", "docs/plan.md"]

        text = format_commit_details(commit)

        assert f"ID: {commit.short_id}" in text
        assert len(commit.short_id) == 8
        assert "Author: Alice" in text
        assert "Time: 2024-01-01 12:00:00" in text
        assert "Message: Auto-sync: change 0" in text
        assert "  - docs/plan.md" in text

    def test_no_files(self) -> None:
        """Should say when a commit changed nothing."""
        assert "(No changes)" in format_commit_details(make_commits(1)[0])
