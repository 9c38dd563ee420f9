"""Auto-commit path: debounce file saves into one commit-and-push.

This module provides:
- ChangeDebouncer: Accumulates saved files and commits after a quiet period
- Recovery policy for failed commit/push cycles

Recovery branches by error kind:
    | Kind           | Action                                            |
    |----------------|---------------------------------------------------|
    | NETWORK        | Retry after RETRY_DELAY, at most MAX_RETRY_COUNT  |
    | REMOTE_CHANGED | Pull, then push once more                         |
    | CONFLICT       | Commit with conflict suffix and push through      |
    | other          | Abandon the cycle and report                      |
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime

from docsync.core.config import SettingsStore
from docsync.core.errors import attempt
from docsync.core.types import ErrorKind, Outcome, SemanticError, SyncStatus
from docsync.sync.protocols import Notifier, Puller, SyncHost, VcsCapability
from docsync.sync.scheduler import TimerScheduler

logger = logging.getLogger(__name__)

COMMIT_TIMER_KEY = "auto-commit"
RETRY_TIMER_KEY = "auto-commit-retry"

DEBOUNCE_DELAY = 60.0  # seconds of quiet before committing
RETRY_DELAY = 30.0  # seconds between network retries
MAX_RETRY_COUNT = 3

AUTO_COMMIT_PREFIX = "Auto-sync:"
CONFLICT_SUFFIX = "(conflict)"


def generate_commit_message(now: datetime | None = None) -> str:
    """Build an auto-commit message such as ``Auto-sync: 2024-01-31 09:15``."""
    now = now or datetime.now()
    return f"{AUTO_COMMIT_PREFIX} {now.strftime('%Y-%m-%d %H:%M')}"


class ChangeDebouncer:
    """Collects saved files and commits them once edits go quiet.

    Every ``queue_change`` pushes the deadline back by the quiet period.
    When it expires, ``on_quiet`` commits and pushes under the host's
    sync lock and applies the recovery policy on failure.
    """

    def __init__(
        self,
        host: SyncHost,
        vcs: VcsCapability,
        scheduler: TimerScheduler,
        puller: Puller,
        notifier: Notifier,
        settings: SettingsStore,
        quiet_period: float = DEBOUNCE_DELAY,
        retry_delay: float = RETRY_DELAY,
        max_retries: int = MAX_RETRY_COUNT,
    ) -> None:
        """Initialize the debouncer.

        Args:
            host: Owner of the sync lock and status.
            vcs: Version-control capability.
            scheduler: Timer registry used for the debounce and retry timers.
            puller: Used to integrate remote changes before re-pushing.
            notifier: User notifications.
            settings: Administrative settings, re-read on every cycle.
            quiet_period: Seconds without saves before committing.
            retry_delay: Seconds before retrying after a network failure.
            max_retries: Network retries before going offline.
        """
        self._host = host
        self._vcs = vcs
        self._scheduler = scheduler
        self._puller = puller
        self._notifier = notifier
        self._settings = settings
        self._quiet_period = quiet_period
        self._retry_delay = retry_delay
        self._max_retries = max_retries

        self._pending: set[str] = set()
        self._claimed: frozenset[str] = frozenset()
        self._pending_lock = threading.Lock()
        self._retry_count = 0
        self._awaiting_push = False

    @property
    def pending(self) -> frozenset[str]:
        """Files saved since the last completed cycle."""
        with self._pending_lock:
            return frozenset(self._pending)

    @property
    def retry_count(self) -> int:
        """Network retries spent on the current cycle."""
        return self._retry_count

    def queue_change(self, file_id: str) -> None:
        """Record a saved file and restart the quiet period."""
        if not self._settings.load().auto_sync_enabled:
            logger.debug("Auto-sync is disabled, skipping file: %s", file_id)
            return

        with self._pending_lock:
            self._pending.add(file_id)
            size = len(self._pending)
        logger.debug("File queued for commit: %s (queue size: %d)", file_id, size)

        self._scheduler.schedule_once(COMMIT_TIMER_KEY, self.on_quiet, self._quiet_period)

    def on_quiet(self) -> None:
        """Commit and push the pending changes."""
        with self._host.exclusive():
            if not self.pending:
                return

            if not self._settings.load().auto_sync_enabled:
                logger.info("Auto-sync is disabled, clearing queue without processing")
                self._clear_pending()
                self.reset()
                return

            self.claim_pending()
            changes = attempt(self._vcs.has_uncommitted_changes)
            if not changes.ok:
                self.recover(changes.error)
                return
            if not changes.value and not self._awaiting_push:
                logger.info(
                    "No uncommitted changes found. Skipping auto-commit (queue had %d files)",
                    len(self.pending),
                )
                self.reset()
                return

            self._host.transition(SyncStatus.SYNCING)

            # A retry after a failed push only has to push
            result: Outcome[None] = Outcome()
            if changes.value:
                result = attempt(self._vcs.commit, generate_commit_message())
                if result.ok:
                    self._awaiting_push = True
                    logger.info("Auto-committed changes (%d files)", len(self.pending))
            if result.ok and self._host.has_remote:
                result = attempt(self._vcs.push)
                if result.ok:
                    logger.info("Auto-pushed successfully")

            if result.ok:
                self._complete(self._idle_status())
            else:
                logger.error("Auto-commit/push failed: %s", result.error)
                self.recover(result.error)

    def recover(self, error: SemanticError, retry: bool = True) -> SyncStatus:
        """Drive a failed cycle to a terminal status.

        Must be called while holding the host's sync lock.

        Args:
            error: The classified failure.
            retry: Whether network failures may be retried later. Manual
                syncs pass False and fail fast.

        Returns:
            The status the cycle ended in.
        """
        if error.kind is ErrorKind.NETWORK:
            return self._recover_network(retry)
        if error.kind is ErrorKind.REMOTE_CHANGED:
            return self._recover_remote_changed()
        if error.kind is ErrorKind.CONFLICT:
            return self._recover_conflict()

        if error.kind is ErrorKind.AUTH:
            self._notifier.auth_error()
        else:
            self._notifier.error(f"Sync failed: {error.message}")
        self.reset()
        status = self._idle_status()
        self._host.transition(status)
        return status

    def claim_pending(self) -> frozenset[str]:
        """Mark the files pending now as belonging to the cycle about to run.

        Must be called while holding the host's sync lock. Saves queued
        after this call stay pending for the next cycle.
        """
        with self._pending_lock:
            self._claimed = frozenset(self._pending)
        return self._claimed

    def reschedule(self) -> None:
        """Arm the quiet-period timer again if saves are still pending."""
        if self.pending and self._settings.load().auto_sync_enabled:
            self._scheduler.schedule_once(COMMIT_TIMER_KEY, self.on_quiet, self._quiet_period)

    def reset(self) -> None:
        """Forget the claimed files and spent retries."""
        with self._pending_lock:
            self._pending -= self._claimed
        self._claimed = frozenset()
        self._retry_count = 0
        self._awaiting_push = False

    def dispose(self) -> None:
        """Cancel timers and drop pending work."""
        self._scheduler.cancel(COMMIT_TIMER_KEY)
        self._scheduler.cancel(RETRY_TIMER_KEY)
        self._clear_pending()
        self.reset()

    def _recover_network(self, retry: bool) -> SyncStatus:
        self._retry_count += 1
        if retry and self._retry_count <= self._max_retries:
            logger.warning(
                "Network error, retrying auto-commit (%d/%d)",
                self._retry_count,
                self._max_retries,
            )
            self._notifier.network_retry(self._retry_count, self._max_retries)
            self._scheduler.schedule_once(RETRY_TIMER_KEY, self.on_quiet, self._retry_delay)
            return SyncStatus.SYNCING

        logger.error("Giving up after network errors (%d attempts)", self._retry_count)
        self._notifier.network_error()
        self.reset()
        self._host.transition(SyncStatus.OFFLINE)
        return SyncStatus.OFFLINE

    def _recover_remote_changed(self) -> SyncStatus:
        logger.info("Remote has new commits, pulling first")
        self._puller.pull()
        result = attempt(self._vcs.push)
        if not result.ok:
            logger.error("Failed to push after pulling: %s", result.error)
            self._host.transition(SyncStatus.OFFLINE)
            return SyncStatus.OFFLINE
        return self._complete(SyncStatus.ENABLED)

    def _recover_conflict(self) -> SyncStatus:
        logger.warning("Conflict detected during auto-commit, committing through it")
        message = f"{generate_commit_message()} {CONFLICT_SUFFIX}"
        result = attempt(self._vcs.commit, message)
        if result.ok:
            result = attempt(self._vcs.push)
        if not result.ok:
            logger.error("Failed to commit with conflict: %s", result.error)
            self._host.transition(SyncStatus.OFFLINE)
            return SyncStatus.OFFLINE

        self.reset()
        self._host.transition(SyncStatus.SYNC_COMPLETE_WITH_CONFLICTS)
        self._host.report_conflicts()
        return SyncStatus.SYNC_COMPLETE_WITH_CONFLICTS

    def _idle_status(self) -> SyncStatus:
        return SyncStatus.ENABLED if self._host.has_remote else SyncStatus.LOCAL_ONLY

    def _complete(self, status: SyncStatus) -> SyncStatus:
        self.reset()
        self._host.flash("Sync Complete")
        self._host.transition(status)
        return status

    def _clear_pending(self) -> None:
        with self._pending_lock:
            self._pending.clear()
