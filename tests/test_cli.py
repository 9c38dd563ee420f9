"""Tests for CLI commands - watch, sync, conflicts, history, config."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from docsync.cli import cli
from docsync.core.types import CommitRecord

if TYPE_CHECKING:
    from conftest import FakeVcs


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop the handler the CLI attaches to the docsync logger."""
    yield
    package_logger = logging.getLogger("docsync")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Settings file inside the temporary directory."""
    return tmp_path / "config" / "config.json"


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Workspace directory for commands that take PATH."""
    path = tmp_path / "notes"
    path.mkdir()
    return path


def invoke(runner: CliRunner, config_file: Path, *args: str):
    return runner.invoke(cli, ["--config-file", str(config_file), *args])


class TestConfigCommand:
    """Tests for 'docsync config'."""

    def test_show_defaults(self, runner: CliRunner, config_file: Path) -> None:
        """Should show default settings when no file exists."""
        result = invoke(runner, config_file, "config", "show")

        assert result.exit_code == 0
        assert "Auto-sync: enabled" in result.output
        assert "Pull interval: 30-90 seconds" in result.output

    def test_disable_and_enable(self, runner: CliRunner, config_file: Path) -> None:
        """Should persist the auto-sync flag."""
        assert invoke(runner, config_file, "config", "disable").exit_code == 0
        assert json.loads(config_file.read_text())["auto_sync_enabled"] is False
        assert "Auto-sync: disabled" in invoke(runner, config_file, "config", "show").output

        assert invoke(runner, config_file, "config", "enable").exit_code == 0
        assert json.loads(config_file.read_text())["auto_sync_enabled"] is True

    def test_interval(self, runner: CliRunner, config_file: Path) -> None:
        """Should persist the pull interval."""
        result = invoke(runner, config_file, "config", "interval", "10", "20")

        assert result.exit_code == 0
        data = json.loads(config_file.read_text())
        assert (data["sync_interval_min"], data["sync_interval_max"]) == (10, 20)

    def test_interval_rejects_inverted_range(self, runner: CliRunner, config_file: Path) -> None:
        """Should fail without writing when min > max."""
        result = invoke(runner, config_file, "config", "interval", "50", "5")

        assert result.exit_code == 1
        assert "Error" in result.output
        assert not config_file.exists()

    def test_invalid_file(self, runner: CliRunner, config_file: Path) -> None:
        """Should report an unreadable settings file."""
        config_file.parent.mkdir(parents=True)
        config_file.write_text("{broken")

        result = invoke(runner, config_file, "config", "show")

        assert result.exit_code == 1
        assert "Cannot read" in result.output


class TestSyncCommand:
    """Tests for 'docsync sync'."""

    def test_sync_success(
        self, runner: CliRunner, config_file: Path, workspace: Path, vcs: FakeVcs
    ) -> None:
        """Should commit and push once."""
        vcs.changes = True
        with patch("docsync.cli.sync.JujutsuRepository", return_value=vcs):
            result = invoke(runner, config_file, "sync", "--no-notify", str(workspace))

        assert result.exit_code == 0, result.output
        assert vcs.count("commit") == 1
        assert vcs.count("push") == 1
        assert "Sync Complete" in result.output

    def test_sync_no_changes(
        self, runner: CliRunner, config_file: Path, workspace: Path, vcs: FakeVcs
    ) -> None:
        """Should report that nothing changed."""
        with patch("docsync.cli.sync.JujutsuRepository", return_value=vcs):
            result = invoke(runner, config_file, "sync", "--no-notify", str(workspace))

        assert result.exit_code == 0
        assert "No Changes" in result.output
        assert vcs.count("commit") == 0

    def test_sync_inapplicable(
        self, runner: CliRunner, config_file: Path, workspace: Path, vcs: FakeVcs
    ) -> None:
        """Should exit 1 outside a repository."""
        vcs.repository = False
        with patch("docsync.cli.sync.JujutsuRepository", return_value=vcs):
            result = invoke(runner, config_file, "sync", "--no-notify", str(workspace))

        assert result.exit_code == 1
        assert "cannot be synchronized" in result.output

    def test_sync_offline(
        self, runner: CliRunner, config_file: Path, workspace: Path, vcs: FakeVcs
    ) -> None:
        """Should exit 1 when the remote is unreachable."""
        vcs.changes = True
        vcs.fail("fetch", "Could not resolve host: example.com")
        with patch("docsync.cli.sync.JujutsuRepository", return_value=vcs):
            result = invoke(runner, config_file, "sync", "--no-notify", str(workspace))

        assert result.exit_code == 1
        assert "remote unreachable" in result.output


class TestWatchCommand:
    """Tests for 'docsync watch'."""

    def test_watch_until_interrupted(
        self, runner: CliRunner, config_file: Path, workspace: Path, vcs: FakeVcs
    ) -> None:
        """Should start the watcher and clean up on Ctrl+C."""
        watcher_cls = MagicMock()
        with (
            patch("docsync.cli.sync.JujutsuRepository", return_value=vcs),
            patch("docsync.cli.sync.SaveWatcher", watcher_cls),
            patch("docsync.cli.sync.time.sleep", side_effect=KeyboardInterrupt),
        ):
            result = invoke(runner, config_file, "watch", "--no-notify", str(workspace))

        assert result.exit_code == 0, result.output
        assert "Watching" in result.output
        assert "Stopping" in result.output
        watcher_cls.assert_called_once()
        assert watcher_cls.call_args[0][0] == workspace.resolve()
        watcher_cls.return_value.__exit__.assert_called_once()

    def test_watch_inapplicable(
        self, runner: CliRunner, config_file: Path, workspace: Path, vcs: FakeVcs
    ) -> None:
        """Should exit 1 without watching when jj is missing."""
        vcs.available = False
        watcher_cls = MagicMock()
        with (
            patch("docsync.cli.sync.JujutsuRepository", return_value=vcs),
            patch("docsync.cli.sync.SaveWatcher", watcher_cls),
        ):
            result = invoke(runner, config_file, "watch", "--no-notify", str(workspace))

        assert result.exit_code == 1
        watcher_cls.assert_not_called()


class TestConflictsCommand:
    """Tests for 'docsync conflicts'."""

    def test_lists_regions(
        self, runner: CliRunner, config_file: Path, workspace: Path, vcs: FakeVcs
    ) -> None:
        """Should list each conflicted file and its line ranges."""
        (workspace / "notes.md").write_text("<<<<<<<\na\n=======\nb\n>>>>>>>\n", encoding="utf-8")
        vcs.conflicted = ["notes.md"]
        with patch("docsync.cli.conflicts.JujutsuRepository", return_value=vcs):
            result = invoke(runner, config_file, "conflicts", str(workspace))

        assert result.exit_code == 0
        assert "notes.md (1)" in result.output
        assert "lines 1-5" in result.output

    def test_prompt(
        self, runner: CliRunner, config_file: Path, workspace: Path, vcs: FakeVcs
    ) -> None:
        """Should print the resolution prompt."""
        (workspace / "notes.md").write_text("<<<<<<<\na\n>>>>>>>\n", encoding="utf-8")
        vcs.conflicted = ["notes.md"]
        with patch("docsync.cli.conflicts.JujutsuRepository", return_value=vcs):
            result = invoke(runner, config_file, "conflicts", "--prompt", str(workspace))

        assert "File: notes.md" in result.output

    def test_no_conflicts(
        self, runner: CliRunner, config_file: Path, workspace: Path, vcs: FakeVcs
    ) -> None:
        """Should say when nothing is conflicted."""
        with patch("docsync.cli.conflicts.JujutsuRepository", return_value=vcs):
            result = invoke(runner, config_file, "conflicts", str(workspace))

        assert result.exit_code == 0
        assert "No conflicts." in result.output


class TestHistoryCommand:
    """Tests for 'docsync history'."""

    @pytest.fixture
    def history_vcs(self, vcs: FakeVcs) -> FakeVcs:
        vcs.history = [
            CommitRecord("a1b2c3d4e5f6", "Alice", datetime(2024, 1, 31, 9, 15), "Auto-sync: 2024-01-31 09:15"),
            CommitRecord("b2c3d4e5f6a1", "Bob", datetime(2024, 1, 30, 18, 0), "Fix typo"),
        ]
        vcs.changed = {"a1b2c3d4e5f6": ["notes.md"]}
        return vcs

    def test_lists_commits(
        self, runner: CliRunner, config_file: Path, workspace: Path, history_vcs: FakeVcs
    ) -> None:
        """Should print one line per commit."""
        with patch("docsync.cli.history.JujutsuRepository", return_value=history_vcs):
            result = invoke(runner, config_file, "history", str(workspace))

        assert result.exit_code == 0
        assert "a1b2c3d4  2024-01-31 09:15  Alice  Auto-sync: 2024-01-31 09:15" in result.output
        assert "Fix typo" in result.output

    def test_offset_and_files(
        self, runner: CliRunner, config_file: Path, workspace: Path, history_vcs: FakeVcs
    ) -> None:
        """Should page and show changed files."""
        with patch("docsync.cli.history.JujutsuRepository", return_value=history_vcs):
            result = invoke(
                runner, config_file, "history", "--limit", "1", "--files", str(workspace)
            )

        assert "Changed Files:" in result.output
        assert "  - notes.md" in result.output
        assert "Fix typo" not in result.output

    def test_failure(
        self, runner: CliRunner, config_file: Path, workspace: Path, vcs: FakeVcs
    ) -> None:
        """Should exit 1 when the history cannot be read."""
        vcs.fail("commit_history", "There is no jj repo")
        with patch("docsync.cli.history.JujutsuRepository", return_value=vcs):
            result = invoke(runner, config_file, "history", str(workspace))

        assert result.exit_code == 1
        assert "There is no jj repo" in result.output


def test_version(runner: CliRunner) -> None:
    """Should print the version."""
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
