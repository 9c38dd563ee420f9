"""Jujutsu (jj) command-line capability.

This module provides:
- JujutsuRepository: Every VCS operation the sync engine needs, run via ``jj``

Commands run with argument lists (never through a shell) in the
workspace directory. Any failure surfaces as ``VcsCommandError``.
"""

from __future__ import annotations

import logging
import re
import subprocess
from datetime import datetime
from pathlib import Path

from docsync.core.errors import VcsCommandError
from docsync.core.types import CommitRecord

logger = logging.getLogger(__name__)

COMMAND_TIMEOUT = 30.0  # seconds

# One line per commit: id, author, ISO timestamp, first description line
_HISTORY_TEMPLATE = (
    'commit_id ++ "\\t" ++ author.name() ++ "\\t" '
    '++ author.timestamp().format("%Y-%m-%dT%H:%M:%S%:z") ++ "\\t" '
    '++ description.first_line() ++ "\\n"'
)
_NO_DESCRIPTION = "(no description set)"

# "path    2-sided conflict"
_RESOLVE_LINE = re.compile(r"^(?P<path>.+?)\s{2,}\S.*$")


class JujutsuRepository:
    """VCS capability backed by the ``jj`` executable.

    Usage:
        repo = JujutsuRepository(Path("~/notes").expanduser())
        if repo.has_uncommitted_changes():
            repo.commit("Auto-sync: 2024-01-31 09:15")
            repo.push()
    """

    def __init__(
        self,
        workspace: Path,
        timeout: float = COMMAND_TIMEOUT,
        bookmark: str = "main",
        remote: str = "origin",
        executable: str = "jj",
    ) -> None:
        """Initialize the capability.

        Args:
            workspace: Repository root; every command runs here.
            timeout: Seconds before a command is abandoned.
            bookmark: Bookmark that is pushed and tracked.
            remote: Git remote name.
            executable: Name or path of the jj binary.
        """
        self._workspace = Path(workspace)
        self._timeout = timeout
        self._bookmark = bookmark
        self._remote = remote
        self._executable = executable

    @property
    def workspace(self) -> Path:
        return self._workspace

    @property
    def remote_bookmark(self) -> str:
        """Revision of the tracked bookmark on the remote, e.g. ``main@origin``."""
        return f"{self._bookmark}@{self._remote}"

    # -- Detection --------------------------------------------------------

    def is_available(self) -> bool:
        """Check that the jj executable runs."""
        try:
            version = self._run("--version")
        except VcsCommandError as e:
            logger.error("jj command not found: %s", e.message)
            return False
        logger.info("jj command is available (%s)", version)
        return True

    def has_local_repository(self, path: Path) -> bool:
        """Check for a Git or jj repository at ``path``."""
        path = Path(path)
        exists = (path / ".git").exists() or (path / ".jj").exists()
        logger.info("Repository %s at %s", "detected" if exists else "not found", path)
        return exists

    def is_initialized(self) -> bool:
        """Check that jj metadata exists in the workspace."""
        return (self._workspace / ".jj").is_dir()

    def initialize_repository(self) -> None:
        """Initialize jj colocated with the existing Git repository."""
        self._run("git", "init", "--colocate")
        logger.info("jj initialized successfully")

    def has_remote(self) -> bool:
        """Check that at least one Git remote is configured."""
        return bool(self._run("git", "remote", "list"))

    # -- Local changes ----------------------------------------------------

    def has_uncommitted_changes(self) -> bool:
        """Check whether the working-copy commit has any changes."""
        changed = bool(self._run("diff", "--summary"))
        logger.debug("Uncommitted changes: %s", changed)
        return changed

    def commit(self, message: str) -> None:
        """Commit the working copy with ``message``."""
        self._run("commit", "-m", message)
        logger.info("Committed: %s", message)

    # -- Remote -----------------------------------------------------------

    def push(self) -> None:
        """Move the bookmark to the last commit and push it."""
        self._run("bookmark", "set", self._bookmark, "-r", "@-")
        self._run("git", "push", "--remote", self._remote, "--bookmark", self._bookmark)
        logger.info("Pushed %s to %s", self._bookmark, self._remote)

    def fetch(self) -> None:
        """Fetch from the remote."""
        self._run("git", "fetch", "--remote", self._remote)
        logger.info("Fetched from %s", self._remote)

    def is_behind_remote(self) -> bool:
        """Check for remote commits not yet in the working copy's ancestry."""
        output = self._run(
            "log",
            "-r",
            f"::present({self.remote_bookmark}) ~ ::@",
            "--no-graph",
            "-T",
            'commit_id ++ "\\n"',
        )
        behind = bool(output)
        logger.debug("Behind remote: %s", behind)
        return behind

    def reconcile_with_remote(self) -> None:
        """Rebase local work onto the remote bookmark."""
        self._run("rebase", "-d", self.remote_bookmark)
        logger.info("Rebased onto %s", self.remote_bookmark)

    # -- Inspection -------------------------------------------------------

    def list_conflicted_files(self) -> list[str]:
        """List workspace-relative paths with unresolved conflicts."""
        try:
            output = self._run("resolve", "--list")
        except VcsCommandError as e:
            if "no conflicts" in f"{e.message}\n{e.stderr}".lower():
                return []
            raise

        files = []
        for line in output.splitlines():
            line = line.rstrip()
            if not line:
                continue
            match = _RESOLVE_LINE.match(line)
            files.append(match.group("path") if match else line)
        return files

    def commit_history(self, limit: int, offset: int = 0) -> list[CommitRecord]:
        """Return described commits, newest first.

        Args:
            limit: Maximum number of commits to return.
            offset: Number of newest commits to skip.
        """
        output = self._run(
            "log",
            "-r",
            "::@-",
            "--no-graph",
            "--limit",
            str(limit + offset),
            "-T",
            _HISTORY_TEMPLATE,
        )

        records: list[CommitRecord] = []
        for line in output.splitlines():
            fields = line.split("\t", 3)
            if len(fields) != 4:
                continue
            commit_id, author, stamp, description = fields
            if not description or description == _NO_DESCRIPTION:
                continue
            try:
                timestamp = datetime.fromisoformat(stamp)
            except ValueError:
                logger.debug("Unparseable commit timestamp: %r", stamp)
                continue
            records.append(
                CommitRecord(
                    commit_id=commit_id,
                    author=author,
                    timestamp=timestamp,
                    description=description,
                )
            )
        return records[offset : offset + limit]

    def changed_files(self, revision: str) -> list[str]:
        """List paths touched by ``revision``."""
        output = self._run("diff", "--summary", "-r", revision)
        files = []
        for line in output.splitlines():
            # "M path/to/file"
            status, _, path = line.partition(" ")
            if status and path:
                files.append(path.strip())
        return files

    # -- Internals --------------------------------------------------------

    def _run(self, *args: str) -> str:
        command = [self._executable, *args]
        logger.debug("Running command: %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self._workspace,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise VcsCommandError(f"jj {args[0]} timed out after {self._timeout:g}s") from e
        except FileNotFoundError as e:
            raise VcsCommandError(f"{self._executable}: command not found") from e

        stderr = result.stderr.strip()
        if result.returncode != 0:
            raise VcsCommandError(
                stderr or f"jj {args[0]} exited with status {result.returncode}",
                stderr=stderr,
                returncode=result.returncode,
            )
        if stderr:
            logger.debug("jj stderr: %s", stderr)
        return result.stdout.strip()
