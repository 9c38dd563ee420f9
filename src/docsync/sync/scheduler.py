"""Pause-aware registry of named timers.

This module provides:
- TimerScheduler: Named one-shot and recurring timers with pause/resume
- TimerBackend: Protocol for the wall-clock source
- ApschedulerBackend: Default backend on APScheduler's BackgroundScheduler

Registering a key that already has a timer replaces it (debounce). While
paused, firing one-shot timers are dropped and recurring timers skip their
callback but keep re-arming.
"""

from __future__ import annotations

import logging
import random
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], Any]


class TimerBackend(Protocol):
    """Source of delayed calls."""

    def arm(self, delay: float, fire: Callable[[], None]) -> Any:
        """Call ``fire`` once after ``delay`` seconds. Returns a handle."""
        ...

    def disarm(self, handle: Any) -> None:
        """Cancel a pending call. Unknown handles are ignored."""
        ...

    def shutdown(self) -> None: ...


class ApschedulerBackend:
    """Timer backend running each delay as an APScheduler date job.

    The underlying BackgroundScheduler is started on first use, so a
    process that never arms a timer never starts its thread.
    """

    def __init__(self) -> None:
        self._scheduler: BackgroundScheduler | None = None
        self._lock = threading.Lock()

    def _ensure_started(self) -> BackgroundScheduler:
        with self._lock:
            if self._scheduler is None:
                self._scheduler = BackgroundScheduler()
                self._scheduler.start()
                logger.debug("Timer backend started")
            return self._scheduler

    def arm(self, delay: float, fire: Callable[[], None]) -> str:
        """Schedule ``fire`` as a one-off job."""
        scheduler = self._ensure_started()
        job_id = uuid.uuid4().hex
        run_date = datetime.now(timezone.utc) + timedelta(seconds=delay)
        scheduler.add_job(
            fire,
            trigger=DateTrigger(run_date=run_date),
            id=job_id,
            misfire_grace_time=None,
        )
        return job_id

    def disarm(self, handle: Any) -> None:
        """Remove a job if it has not run yet."""
        with self._lock:
            scheduler = self._scheduler
        if scheduler is None:
            return
        try:
            scheduler.remove_job(handle)
        except JobLookupError:
            pass

    def shutdown(self) -> None:
        """Stop the scheduler thread."""
        with self._lock:
            scheduler, self._scheduler = self._scheduler, None
        if scheduler is not None:
            scheduler.shutdown(wait=False)
            logger.debug("Timer backend stopped")


@dataclass
class _Timer:
    key: str
    callback: TimerCallback
    min_delay: float
    max_delay: float
    recurring: bool
    handle: Any = None


class TimerScheduler:
    """Named, cancellable timers with a global pause switch.

    Usage:
        scheduler = TimerScheduler()
        scheduler.schedule_once("auto-commit", process_queue, 60.0)
        scheduler.schedule_recurring("auto-pull", pull, 30.0, 90.0)
        scheduler.pause()   # fires are skipped until resume()
        scheduler.resume()
        scheduler.shutdown()
    """

    def __init__(
        self,
        backend: TimerBackend | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            backend: Wall-clock source (default: ApschedulerBackend).
            rng: Random source for recurring delays.
        """
        self._backend = backend or ApschedulerBackend()
        self._rng = rng or random.Random()
        self._timers: dict[str, _Timer] = {}
        self._lock = threading.RLock()
        self._pause_depth = 0

    def schedule_once(self, key: str, callback: TimerCallback, delay: float) -> None:
        """Run ``callback`` once after ``delay`` seconds, replacing ``key``."""
        timer = _Timer(key, callback, delay, delay, recurring=False)
        with self._lock:
            self._cancel_locked(key)
            self._timers[key] = timer
            self._arm_locked(timer, delay)
        logger.debug("Scheduled one-shot timer '%s' in %.1fs", key, delay)

    def schedule_recurring(
        self,
        key: str,
        callback: TimerCallback,
        min_delay: float,
        max_delay: float,
    ) -> None:
        """Run ``callback`` repeatedly, each time after a random delay.

        Each delay is drawn uniformly from ``[min_delay, max_delay]``.

        Raises:
            ValueError: If min_delay > max_delay or a delay is negative.
        """
        if min_delay < 0 or min_delay > max_delay:
            raise ValueError(f"Invalid delay range [{min_delay}, {max_delay}]")

        timer = _Timer(key, callback, min_delay, max_delay, recurring=True)
        with self._lock:
            self._cancel_locked(key)
            self._timers[key] = timer
            self._arm_locked(timer, self._next_delay(timer))
        logger.debug(
            "Scheduled recurring timer '%s' every %.1f-%.1fs", key, min_delay, max_delay
        )

    def cancel(self, key: str) -> None:
        """Cancel the timer registered under ``key``, if any."""
        with self._lock:
            self._cancel_locked(key)

    def cancel_all(self) -> None:
        """Cancel every timer."""
        with self._lock:
            for key in list(self._timers):
                self._cancel_locked(key)
        logger.info("All timers cleared")

    def pause(self) -> None:
        """Stop timers from invoking their callbacks.

        Pauses nest: callbacks run again only after a matching number of
        ``resume()`` calls.
        """
        with self._lock:
            self._pause_depth += 1
            depth = self._pause_depth
        logger.info("Timer scheduler paused (depth %d)", depth)

    def resume(self) -> None:
        """Undo one ``pause()``. Extra calls are ignored."""
        with self._lock:
            self._pause_depth = max(0, self._pause_depth - 1)
            depth = self._pause_depth
        if depth == 0:
            logger.info("Timer scheduler resumed")

    def is_paused(self) -> bool:
        """Check if the scheduler is paused."""
        return self._pause_depth > 0

    def active_count(self) -> int:
        """Number of registered timers."""
        with self._lock:
            return len(self._timers)

    def active_keys(self) -> list[str]:
        """Keys of registered timers."""
        with self._lock:
            return list(self._timers)

    def shutdown(self) -> None:
        """Cancel every timer and stop the backend."""
        self.cancel_all()
        self._backend.shutdown()

    def _next_delay(self, timer: _Timer) -> float:
        return self._rng.uniform(timer.min_delay, timer.max_delay)

    def _arm_locked(self, timer: _Timer, delay: float) -> None:
        timer.handle = self._backend.arm(delay, lambda: self._fire(timer))

    def _cancel_locked(self, key: str) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            self._backend.disarm(timer.handle)
            logger.debug("Timer '%s' cleared", key)

    def _fire(self, timer: _Timer) -> None:
        with self._lock:
            if self._timers.get(timer.key) is not timer:
                # Replaced or cancelled after the backend dispatched it
                return
            if not timer.recurring:
                del self._timers[timer.key]
            paused = self._pause_depth > 0

        if paused:
            logger.debug("Timer '%s' fired while paused, skipping", timer.key)
        else:
            logger.debug("Timer '%s' fired, executing callback", timer.key)
            try:
                timer.callback()
            except Exception:
                logger.exception("Error in timer callback '%s'", timer.key)

        if timer.recurring:
            with self._lock:
                if self._timers.get(timer.key) is timer:
                    self._arm_locked(timer, self._next_delay(timer))
