"""File-save observer for the auto-commit path.

This module provides:
- SaveHandler: watchdog handler that reports saved files
- SaveWatcher: Watches the workspace and calls ``on_save`` per file event

Every created, modified or moved-to file outside the ignore list is
reported once per event. Coalescing is left to the debouncer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import (
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from docsync.sync.ignore import IgnorePatterns

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".docsyncignore"


def _decode(path: str | bytes) -> str:
    if isinstance(path, bytes):
        return path.decode("utf-8", errors="replace")
    return path


class SaveHandler(FileSystemEventHandler):
    """Translates watchdog file events into ``on_save`` calls."""

    def __init__(
        self,
        base_path: Path,
        on_save: Callable[[str], None],
        ignore_patterns: IgnorePatterns | None = None,
    ) -> None:
        super().__init__()
        self._base_path = base_path
        self._on_save = on_save
        self._ignore = ignore_patterns or IgnorePatterns()

    def on_created(self, event: FileSystemEvent) -> None:
        if isinstance(event, FileCreatedEvent):
            self._report(Path(_decode(event.src_path)))

    def on_modified(self, event: FileSystemEvent) -> None:
        if isinstance(event, FileModifiedEvent):
            self._report(Path(_decode(event.src_path)))

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors save by writing a temp file and renaming it over the original
        if isinstance(event, FileMovedEvent):
            self._report(Path(_decode(event.dest_path)))

    def _report(self, path: Path) -> None:
        if self._ignore.should_ignore(path, self._base_path):
            return
        logger.debug("File saved: %s", path)
        try:
            self._on_save(str(path))
        except Exception:
            logger.exception("Save callback failed for %s", path)


class SaveWatcher:
    """Watches a workspace for saved files.

    Usage:
        with SaveWatcher(workspace, orchestrator.queue_change):
            ...
    """

    def __init__(
        self,
        watch_path: Path,
        on_save: Callable[[str], None],
        ignore_patterns: list[str] | None = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            watch_path: Workspace directory.
            on_save: Called with the absolute path of each saved file.
            ignore_patterns: Additional patterns to ignore.

        Raises:
            ValueError: If watch_path is not a directory.
        """
        self._watch_path = Path(watch_path).resolve()
        if not self._watch_path.is_dir():
            raise ValueError(f"Watch path must be a directory: {watch_path}")

        self._ignore = IgnorePatterns(ignore_patterns)
        self._ignore.load_from_file(self._watch_path / IGNORE_FILE_NAME)

        self._handler = SaveHandler(self._watch_path, on_save, self._ignore)
        self._observer: BaseObserver = Observer()
        self._running = False

    @property
    def watch_path(self) -> Path:
        """Get the watched directory path."""
        return self._watch_path

    @property
    def handler(self) -> SaveHandler:
        """Get the watchdog event handler."""
        return self._handler

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    def start(self) -> None:
        """Start watching for saves."""
        if self._running:
            return
        self._observer.schedule(self._handler, str(self._watch_path), recursive=True)
        self._observer.start()
        self._running = True
        logger.info("Watching %s", self._watch_path)

    def stop(self) -> None:
        """Stop watching for saves."""
        if not self._running:
            return
        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._running = False

    def __enter__(self) -> SaveWatcher:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()
