"""Narrow interfaces between the sync engine and its collaborators."""

from __future__ import annotations

from contextlib import AbstractContextManager
from enum import Enum
from pathlib import Path
from typing import Protocol

from docsync.core.types import CommitRecord, SyncStatus


class VcsCapability(Protocol):
    """Semantic version-control operations.

    Failing operations raise ``VcsCommandError``. The engine never sees
    the concrete command line.
    """

    def is_available(self) -> bool: ...

    def has_local_repository(self, path: Path) -> bool: ...

    def is_initialized(self) -> bool: ...

    def initialize_repository(self) -> None: ...

    def has_remote(self) -> bool: ...

    def has_uncommitted_changes(self) -> bool: ...

    def commit(self, message: str) -> None: ...

    def push(self) -> None: ...

    def fetch(self) -> None: ...

    def is_behind_remote(self) -> bool: ...

    def reconcile_with_remote(self) -> None: ...

    def list_conflicted_files(self) -> list[str]: ...

    def commit_history(self, limit: int, offset: int = 0) -> list[CommitRecord]: ...

    def changed_files(self, revision: str) -> list[str]: ...


class StatusSink(Protocol):
    """Receives the engine status for display."""

    def set_status(self, status: SyncStatus) -> None: ...

    def set_auto_sync(self, enabled: bool) -> None: ...

    def show_transient(self, text: str) -> None: ...


class Notifier(Protocol):
    """User-facing notifications."""

    def tool_not_found(self) -> None: ...

    def no_remote(self) -> None: ...

    def network_retry(self, attempt: int, limit: int) -> None: ...

    def network_error(self) -> None: ...

    def error(self, message: str) -> None: ...

    def auth_error(self) -> None: ...

    def conflicts_detected(self, count: int) -> None: ...

    def sync_complete(self) -> None: ...


class PullResult(Enum):
    """Terminal outcome of a pull."""

    UP_TO_DATE = "up_to_date"
    UPDATED = "updated"
    CONFLICTED = "conflicted"
    FAILED = "failed"


class Puller(Protocol):
    """Anything that can fetch and reconcile remote changes."""

    def pull(self) -> PullResult: ...


class SyncHost(Protocol):
    """What the debouncer and poller need from the orchestrator.

    The host owns the status and the single sync lock.
    """

    @property
    def has_remote(self) -> bool: ...

    def exclusive(self) -> AbstractContextManager[None]: ...

    def transition(self, status: SyncStatus) -> None: ...

    def flash(self, text: str) -> None: ...

    def report_conflicts(self) -> None: ...
