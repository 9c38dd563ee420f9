"""Console status line for the sync engine."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

import click

from docsync.core.types import SyncStatus

logger = logging.getLogger(__name__)

STATUS_DISPLAY_DURATION = 3.0  # seconds a transient message stays visible

STATUS_LABELS: dict[SyncStatus, str] = {
    SyncStatus.INAPPLICABLE: "Sync: not applicable",
    SyncStatus.ENABLED: "Sync: enabled",
    SyncStatus.LOCAL_ONLY: "Sync: local only",
    SyncStatus.OFFLINE: "Sync: offline",
    SyncStatus.SYNCING: "Syncing...",
    SyncStatus.SYNC_COMPLETE: "Sync complete",
    SyncStatus.SYNC_COMPLETE_WITH_CONFLICTS: "Sync complete (conflicts)",
}


class StatusLine:
    """Status sink that renders one line per visible change.

    A transient message stays on screen for ``display_duration`` seconds,
    then the line reverts to the current status label. Status changes made
    meanwhile are recorded and shown on revert.
    """

    def __init__(
        self,
        writer: Callable[[str], None] | None = None,
        display_duration: float = STATUS_DISPLAY_DURATION,
    ) -> None:
        self._writer = writer or click.echo
        self._display_duration = display_duration
        self._lock = threading.Lock()
        self._status = SyncStatus.INAPPLICABLE
        self._auto_sync = False
        self._transient: str | None = None
        self._timer: threading.Timer | None = None
        self._last_line: str | None = None

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def auto_sync_enabled(self) -> bool:
        return self._auto_sync

    @property
    def text(self) -> str:
        """What the line currently shows."""
        with self._lock:
            return self._text()

    def set_status(self, status: SyncStatus) -> None:
        with self._lock:
            self._status = status
            self._render()

    def set_auto_sync(self, enabled: bool) -> None:
        with self._lock:
            self._auto_sync = enabled
            self._render()

    def show_transient(self, text: str) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._transient = text
            self._render()
            self._timer = threading.Timer(self._display_duration, self._revert)
            self._timer.daemon = True
            self._timer.start()

    def dispose(self) -> None:
        """Cancel a pending revert."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _revert(self) -> None:
        with self._lock:
            self._transient = None
            self._timer = None
            self._render()

    def _text(self) -> str:
        if self._transient is not None:
            return self._transient
        label = STATUS_LABELS[self._status]
        if self._status in (SyncStatus.ENABLED, SyncStatus.LOCAL_ONLY) and not self._auto_sync:
            label += " (auto-sync off)"
        return label

    def _render(self) -> None:
        line = self._text()
        if line == self._last_line:
            return
        self._last_line = line
        logger.debug("Status line: %s", line)
        self._writer(line)
