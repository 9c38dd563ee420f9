"""Sync engine.

Architecture:
    SaveWatcher -> ChangeDebouncer -> commit/push
    TimerScheduler -> RemotePoller -> fetch/rebase
    SyncOrchestrator owns the status and the sync lock for both paths

All public symbols are re-exported here.
"""

from docsync.sync.debouncer import (
    AUTO_COMMIT_PREFIX,
    COMMIT_TIMER_KEY,
    CONFLICT_SUFFIX,
    DEBOUNCE_DELAY,
    MAX_RETRY_COUNT,
    RETRY_DELAY,
    RETRY_TIMER_KEY,
    ChangeDebouncer,
    generate_commit_message,
)
from docsync.sync.ignore import DEFAULT_IGNORE_PATTERNS, IgnorePatterns
from docsync.sync.orchestrator import SyncOrchestrator
from docsync.sync.poller import PULL_TIMER_KEY, RemotePoller
from docsync.sync.protocols import (
    Notifier,
    Puller,
    PullResult,
    StatusSink,
    SyncHost,
    VcsCapability,
)
from docsync.sync.scheduler import ApschedulerBackend, TimerBackend, TimerScheduler
from docsync.sync.watcher import SaveHandler, SaveWatcher

__all__ = [
    # Constants
    "AUTO_COMMIT_PREFIX",
    "COMMIT_TIMER_KEY",
    "CONFLICT_SUFFIX",
    "DEBOUNCE_DELAY",
    "DEFAULT_IGNORE_PATTERNS",
    "MAX_RETRY_COUNT",
    "PULL_TIMER_KEY",
    "RETRY_DELAY",
    "RETRY_TIMER_KEY",
    # Interfaces
    "Notifier",
    "Puller",
    "PullResult",
    "StatusSink",
    "SyncHost",
    "VcsCapability",
    # Timers
    "ApschedulerBackend",
    "TimerBackend",
    "TimerScheduler",
    # Engine
    "ChangeDebouncer",
    "RemotePoller",
    "SyncOrchestrator",
    "generate_commit_message",
    # Watcher
    "IgnorePatterns",
    "SaveHandler",
    "SaveWatcher",
]
