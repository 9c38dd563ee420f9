"""Sync orchestrator: status owner and single point of mutual exclusion.

States:
    INAPPLICABLE -> ENABLED | LOCAL_ONLY -> SYNCING
        -> ENABLED | OFFLINE | SYNC_COMPLETE_WITH_CONFLICTS -> ...

Entry points:
- ChangeDebouncer.on_quiet (auto-commit timer)
- RemotePoller.pull (auto-pull timer)
- SyncOrchestrator.full_sync (manual trigger)

All three take the same lock before touching the VCS capability.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from docsync.core.config import SettingsStore, SyncSettings
from docsync.core.errors import attempt
from docsync.core.types import Outcome, SyncStatus
from docsync.sync.debouncer import (
    DEBOUNCE_DELAY,
    MAX_RETRY_COUNT,
    RETRY_DELAY,
    ChangeDebouncer,
    generate_commit_message,
)
from docsync.sync.poller import PULL_TIMER_KEY, RemotePoller
from docsync.sync.protocols import Notifier, StatusSink, VcsCapability
from docsync.sync.scheduler import TimerScheduler

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Owns the sync status and serializes every VCS sequence.

    Usage:
        orchestrator = SyncOrchestrator(workspace, vcs, status_line, notifier, settings)
        orchestrator.initialize()
        watcher = SaveWatcher(workspace, orchestrator.queue_change)
        ...
        orchestrator.full_sync()
        orchestrator.dispose()
    """

    def __init__(
        self,
        workspace: Path,
        vcs: VcsCapability,
        status_sink: StatusSink,
        notifier: Notifier,
        settings: SettingsStore,
        scheduler: TimerScheduler | None = None,
        quiet_period: float = DEBOUNCE_DELAY,
        retry_delay: float = RETRY_DELAY,
        max_retries: int = MAX_RETRY_COUNT,
    ) -> None:
        """Initialize the orchestrator and its auto-commit/auto-pull paths.

        Args:
            workspace: Directory kept in sync.
            vcs: Version-control capability.
            status_sink: Receives every status transition.
            notifier: User notifications.
            settings: Administrative settings, re-read on every cycle.
            scheduler: Timer registry (default: APScheduler-backed).
            quiet_period: Seconds without saves before auto-committing.
            retry_delay: Seconds between network retries.
            max_retries: Network retries before going offline.
        """
        self._workspace = Path(workspace)
        self._vcs = vcs
        self._sink = status_sink
        self._notifier = notifier
        self._settings = settings
        self._scheduler = scheduler or TimerScheduler()

        self._lock = threading.RLock()
        self._status = SyncStatus.INAPPLICABLE
        self._has_remote = False

        self.poller = RemotePoller(self, vcs)
        self.debouncer = ChangeDebouncer(
            self,
            vcs,
            self._scheduler,
            self.poller,
            notifier,
            settings,
            quiet_period=quiet_period,
            retry_delay=retry_delay,
            max_retries=max_retries,
        )

    @property
    def status(self) -> SyncStatus:
        """Current sync status."""
        return self._status

    @property
    def scheduler(self) -> TimerScheduler:
        """Timer registry shared by the auto-commit and auto-pull paths."""
        return self._scheduler

    @property
    def workspace(self) -> Path:
        """Directory kept in sync."""
        return self._workspace

    @property
    def has_remote(self) -> bool:
        """Whether the last initialization found a remote."""
        return self._has_remote

    # -- SyncHost -------------------------------------------------------

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold the sync lock; blocks until it is free."""
        if not self._lock.acquire(blocking=False):
            logger.debug("Sync in progress, waiting for lock")
            self._lock.acquire()
        try:
            yield
        finally:
            self._lock.release()

    def transition(self, status: SyncStatus) -> None:
        """Move to ``status`` and publish it."""
        previous, self._status = self._status, status
        if previous is not status:
            logger.info("Sync status: %s -> %s", previous.value, status.value)
        self._sink.set_status(status)

    def flash(self, text: str) -> None:
        """Show a short-lived status message."""
        self._sink.show_transient(text)

    def report_conflicts(self) -> None:
        """Notify about conflicted files, if the capability lists any."""
        conflicted = attempt(self._vcs.list_conflicted_files)
        if conflicted.ok and conflicted.value:
            self._notifier.conflicts_detected(len(conflicted.value))

    # -- Lifecycle --------------------------------------------------------

    def initialize(self) -> SyncStatus:
        """Check prerequisites and arm the auto-pull timer.

        Never raises: a missing tool or repository ends in INAPPLICABLE,
        a repository without remote ends in LOCAL_ONLY.
        """
        logger.info("Initializing docsync for workspace: %s", self._workspace)

        if not self._probe(attempt(self._vcs.is_available)):
            logger.error("jj command not found")
            self.transition(SyncStatus.INAPPLICABLE)
            self._notifier.tool_not_found()
            return self._status

        if not self._probe(attempt(self._vcs.has_local_repository, self._workspace)):
            logger.info("No repository detected at %s", self._workspace)
            self.transition(SyncStatus.INAPPLICABLE)
            return self._status

        if not self._probe(attempt(self._vcs.is_initialized)):
            logger.info("jj not initialized, initializing...")
            initialized = attempt(self._vcs.initialize_repository)
            if not initialized.ok:
                logger.error("Failed to initialize repository: %s", initialized.error)
                self.transition(SyncStatus.INAPPLICABLE)
                self._notifier.error(f"Initialization failed: {initialized.error.message}")
                return self._status

        self._has_remote = self._probe(attempt(self._vcs.has_remote))
        if self._has_remote:
            self.transition(SyncStatus.ENABLED)
        else:
            logger.warning("No remote repository configured")
            self.transition(SyncStatus.LOCAL_ONLY)
            self._notifier.no_remote()

        settings = self._settings.load()
        self._sink.set_auto_sync(settings.auto_sync_enabled)
        if settings.auto_sync_enabled:
            self._arm_poller(settings)
        else:
            logger.info("Auto sync is disabled in config")

        logger.info("docsync initialization completed (%s)", self._status.value)
        return self._status

    def start_auto_sync(self) -> None:
        """Enable auto-sync and arm the auto-pull timer."""
        logger.info("Starting auto sync")
        self._settings.set_auto_sync(True)
        self._sink.set_auto_sync(True)
        self._arm_poller(self._settings.load())

    def stop_auto_sync(self) -> None:
        """Disable auto-sync and disarm the auto-pull timer.

        A pending auto-commit re-checks the flag when it fires.
        """
        logger.info("Stopping auto sync")
        self._settings.set_auto_sync(False)
        self._scheduler.cancel(PULL_TIMER_KEY)
        self._sink.set_auto_sync(False)

    def queue_change(self, file_id: str) -> None:
        """Forward a saved file to the auto-commit path."""
        if self._status is SyncStatus.INAPPLICABLE:
            return
        self.debouncer.queue_change(file_id)

    def full_sync(self) -> SyncStatus:
        """Commit, fetch, rebase if behind, and push, right now.

        Timers are paused for the whole call. Failures are reported once
        without scheduling retries.

        Returns:
            The status the sync ended in.
        """
        if self._status is SyncStatus.INAPPLICABLE:
            logger.warning("Workspace is not synchronizable, skipping manual sync")
            return self._status

        logger.info("Manual sync triggered")
        self._scheduler.pause()
        try:
            with self.exclusive():
                return self._full_sync_locked()
        finally:
            self._scheduler.resume()
            # Saves made meanwhile may have lost their timer to the pause
            self.debouncer.reschedule()

    def dispose(self) -> None:
        """Cancel all timers and stop the scheduler backend."""
        self._scheduler.cancel(PULL_TIMER_KEY)
        self.debouncer.dispose()
        self._scheduler.shutdown()

    # -- Internals --------------------------------------------------------

    def _full_sync_locked(self) -> SyncStatus:
        self.debouncer.claim_pending()
        changes = attempt(self._vcs.has_uncommitted_changes)
        if not changes.ok:
            return self.debouncer.recover(changes.error, retry=False)
        if not changes.value:
            logger.info("No uncommitted changes found. Skipping manual sync")
            self.flash("No Changes")
            return self._status

        self.transition(SyncStatus.SYNCING)

        result: Outcome[object] = attempt(self._vcs.commit, generate_commit_message())
        if result.ok and self._has_remote:
            result = attempt(self._vcs.fetch)
            if result.ok:
                result = attempt(self._vcs.is_behind_remote)
                if result.ok and result.value:
                    result = attempt(self._vcs.reconcile_with_remote)
            if result.ok:
                result = attempt(self._vcs.push)

        if not result.ok:
            logger.error("Full sync failed: %s", result.error)
            return self.debouncer.recover(result.error, retry=False)

        self.debouncer.reset()
        self.flash("Sync Complete")
        self._notifier.sync_complete()
        final = SyncStatus.ENABLED if self._has_remote else SyncStatus.LOCAL_ONLY
        self.transition(final)
        return final

    def _arm_poller(self, settings: SyncSettings) -> None:
        if not self._has_remote:
            logger.debug("No remote, auto-pull not armed")
            return
        self._scheduler.schedule_recurring(
            PULL_TIMER_KEY,
            self._scheduled_pull,
            settings.sync_interval_min,
            settings.sync_interval_max,
        )

    def _scheduled_pull(self) -> None:
        if not self._settings.load().auto_sync_enabled:
            logger.debug("Auto-sync disabled, skipping scheduled pull")
            return
        self.poller.pull()

    @staticmethod
    def _probe(outcome: Outcome[bool]) -> bool:
        return outcome.ok and bool(outcome.value)
