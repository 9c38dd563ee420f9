"""Shared fixtures: virtual time, a scripted VCS and recording sinks.

The engine never sees wall-clock time directly; ``VirtualClock`` stands in
for the APScheduler backend so timing properties are tested without sleeps.
"""

from __future__ import annotations

import itertools
import random
from collections import defaultdict
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from docsync.core.config import MemorySettingsStore
from docsync.core.errors import VcsCommandError
from docsync.core.types import CommitRecord, SyncStatus
from docsync.sync.orchestrator import SyncOrchestrator
from docsync.sync.scheduler import TimerScheduler


class VirtualClock:
    """Timer backend driven by ``advance()``.

    Due timers fire in time order; timers armed while firing are picked
    up in the same ``advance()`` call if they fall inside the window.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.shut_down = False
        self._jobs: dict[int, tuple[float, int, Callable[[], None]]] = {}
        self._ids = itertools.count()

    def arm(self, delay: float, fire: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._jobs[handle] = (self.now + delay, handle, fire)
        return handle

    def disarm(self, handle: Any) -> None:
        self._jobs.pop(handle, None)

    def shutdown(self) -> None:
        self._jobs.clear()
        self.shut_down = True

    @property
    def pending(self) -> int:
        return len(self._jobs)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [job for job in self._jobs.values() if job[0] <= target]
            if not due:
                break
            when, handle, fire = min(due, key=lambda job: (job[0], job[1]))
            del self._jobs[handle]
            self.now = when
            fire()
        self.now = target


class FakeVcs:
    """Scripted VCS capability that records every call."""

    def __init__(self) -> None:
        self.available = True
        self.repository = True
        self.initialized = True
        self.remote = True
        self.changes = False
        self.behind = False
        self.conflicted: list[str] = []
        self.history: list[CommitRecord] = []
        self.changed: dict[str, list[str]] = {}

        self.calls: list[str] = []
        self.commit_messages: list[str] = []
        self._failures: dict[str, list[Exception]] = defaultdict(list)

    def fail(self, operation: str, *messages: str) -> None:
        """Make the next calls of ``operation`` raise, one message each."""
        for message in messages:
            self._failures[operation].append(VcsCommandError(message))

    def raise_on(self, operation: str, error: Exception) -> None:
        """Make the next call of ``operation`` raise ``error``."""
        self._failures[operation].append(error)

    def count(self, operation: str) -> int:
        return self.calls.count(operation)

    def _call(self, operation: str) -> None:
        self.calls.append(operation)
        if self._failures[operation]:
            raise self._failures[operation].pop(0)

    def is_available(self) -> bool:
        self._call("is_available")
        return self.available

    def has_local_repository(self, path: Path) -> bool:
        self._call("has_local_repository")
        return self.repository

    def is_initialized(self) -> bool:
        self._call("is_initialized")
        return self.initialized

    def initialize_repository(self) -> None:
        self._call("initialize_repository")
        self.initialized = True

    def has_remote(self) -> bool:
        self._call("has_remote")
        return self.remote

    def has_uncommitted_changes(self) -> bool:
        self._call("has_uncommitted_changes")
        return self.changes

    def commit(self, message: str) -> None:
        self._call("commit")
        self.commit_messages.append(message)
        self.changes = False

    def push(self) -> None:
        self._call("push")

    def fetch(self) -> None:
        self._call("fetch")

    def is_behind_remote(self) -> bool:
        self._call("is_behind_remote")
        return self.behind

    def reconcile_with_remote(self) -> None:
        self._call("reconcile_with_remote")
        self.behind = False

    def list_conflicted_files(self) -> list[str]:
        self._call("list_conflicted_files")
        return list(self.conflicted)

    def commit_history(self, limit: int, offset: int = 0) -> list[CommitRecord]:
        self._call("commit_history")
        return self.history[offset : offset + limit]

    def changed_files(self, revision: str) -> list[str]:
        self._call("changed_files")
        return list(self.changed.get(revision, []))


class RecordingStatusSink:
    """Status sink that keeps every update."""

    def __init__(self) -> None:
        self.statuses: list[SyncStatus] = []
        self.auto_sync: list[bool] = []
        self.transients: list[str] = []

    @property
    def last(self) -> SyncStatus | None:
        return self.statuses[-1] if self.statuses else None

    def set_status(self, status: SyncStatus) -> None:
        self.statuses.append(status)

    def set_auto_sync(self, enabled: bool) -> None:
        self.auto_sync.append(enabled)

    def show_transient(self, text: str) -> None:
        self.transients.append(text)


class RecordingNotifier:
    """Notifier that keeps every notification as ``(name, *args)``."""

    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []

    def names(self) -> list[str]:
        return [event[0] for event in self.events]

    def tool_not_found(self) -> None:
        self.events.append(("tool_not_found",))

    def no_remote(self) -> None:
        self.events.append(("no_remote",))

    def network_retry(self, attempt: int, limit: int) -> None:
        self.events.append(("network_retry", attempt, limit))

    def network_error(self) -> None:
        self.events.append(("network_error",))

    def error(self, message: str) -> None:
        self.events.append(("error", message))

    def auth_error(self) -> None:
        self.events.append(("auth_error",))

    def conflicts_detected(self, count: int) -> None:
        self.events.append(("conflicts_detected", count))

    def sync_complete(self) -> None:
        self.events.append(("sync_complete",))


@pytest.fixture
def clock() -> VirtualClock:
    """Virtual timer backend starting at t=0."""
    return VirtualClock()


@pytest.fixture
def scheduler(clock: VirtualClock) -> TimerScheduler:
    """Timer scheduler on virtual time with a seeded random source."""
    return TimerScheduler(backend=clock, rng=random.Random(0))


@pytest.fixture
def vcs() -> FakeVcs:
    """Scripted VCS with a remote and a clean working copy."""
    return FakeVcs()


@pytest.fixture
def sink() -> RecordingStatusSink:
    return RecordingStatusSink()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def settings() -> MemorySettingsStore:
    """Default settings: auto-sync on, pull every 30-90s."""
    return MemorySettingsStore()


@pytest.fixture
def orchestrator(
    tmp_path: Path,
    vcs: FakeVcs,
    sink: RecordingStatusSink,
    notifier: RecordingNotifier,
    settings: MemorySettingsStore,
    scheduler: TimerScheduler,
) -> SyncOrchestrator:
    """Engine wired to the fakes, not yet initialized."""
    return SyncOrchestrator(
        workspace=tmp_path,
        vcs=vcs,
        status_sink=sink,
        notifier=notifier,
        settings=settings,
        scheduler=scheduler,
    )
