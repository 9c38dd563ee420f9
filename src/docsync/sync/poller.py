"""Auto-pull path: fetch and integrate remote changes."""

from __future__ import annotations

import logging

from docsync.core.errors import attempt
from docsync.core.types import ErrorKind, SemanticError, SyncStatus
from docsync.sync.protocols import PullResult, SyncHost, VcsCapability

logger = logging.getLogger(__name__)

PULL_TIMER_KEY = "auto-pull"


class RemotePoller:
    """Fetches from the remote and rebases onto it when behind.

    Holds no state of its own; every call takes the host's sync lock, so
    it is safe to call repeatedly and from any timer thread.
    """

    def __init__(self, host: SyncHost, vcs: VcsCapability) -> None:
        self._host = host
        self._vcs = vcs

    def pull(self) -> PullResult:
        """Fetch and reconcile.

        Returns:
            UP_TO_DATE when nothing had to be integrated, UPDATED after a
            clean rebase, CONFLICTED when the rebase left conflicts and
            FAILED otherwise (status is then OFFLINE).
        """
        with self._host.exclusive():
            logger.debug("Starting auto-pull")

            fetched = attempt(self._vcs.fetch)
            if not fetched.ok:
                return self._fail("fetch", fetched.error)

            behind = attempt(self._vcs.is_behind_remote)
            if not behind.ok:
                return self._fail("remote comparison", behind.error)
            if not behind.value:
                logger.debug("No remote changes")
                return PullResult.UP_TO_DATE

            logger.info("Remote changes detected, rebasing")
            rebased = attempt(self._vcs.reconcile_with_remote)
            if rebased.ok:
                self._host.transition(SyncStatus.ENABLED)
                logger.info("Auto-pull completed successfully")
                return PullResult.UPDATED

            if rebased.error.kind is ErrorKind.CONFLICT:
                logger.warning("Conflict detected during auto-pull")
                self._host.transition(SyncStatus.SYNC_COMPLETE_WITH_CONFLICTS)
                self._host.report_conflicts()
                return PullResult.CONFLICTED

            return self._fail("rebase", rebased.error)

    def _fail(self, step: str, error: SemanticError) -> PullResult:
        if error.kind is ErrorKind.NETWORK:
            logger.warning("Network error during auto-pull %s: %s", step, error.message)
        else:
            logger.error("Unexpected error during auto-pull %s: %s", step, error)
        self._host.transition(SyncStatus.OFFLINE)
        return PullResult.FAILED
