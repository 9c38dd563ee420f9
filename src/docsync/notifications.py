"""Desktop notifications for docsync.

This module provides:
- Native OS notifications (macOS notification center, Linux notify-send)
- DesktopNotifier: The sync engine's notification sink
"""

from __future__ import annotations

import logging
import platform
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

logger = logging.getLogger(__name__)

APP_NAME = "DocSync"
INSTALL_URL = "https://github.com/jj-vcs/jj#installation"


class NotificationType(Enum):
    """Type of notification."""

    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    CONFLICT = auto()


@dataclass
class Notification:
    """Represents a notification to display."""

    title: str
    message: str
    type: NotificationType = NotificationType.INFO


def _notify_macos(notification: Notification) -> bool:
    """Send notification on macOS using osascript.

    Args:
        notification: The notification to send.

    Returns:
        True if notification was sent successfully.
    """
    try:
        title = notification.title.replace('"', '\\"')
        message = notification.message.replace('"', '\\"')

        script = f'display notification "{message}" with title "{title}"'
        subprocess.run(
            ["osascript", "-e", script],
            capture_output=True,
            check=True,
        )
        return True
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("macOS notification failed: %s", e)
        return False


def _notify_linux(notification: Notification) -> bool:
    """Send notification on Linux using notify-send.

    Args:
        notification: The notification to send.

    Returns:
        True if notification was sent successfully.
    """
    urgency_map = {
        NotificationType.INFO: "normal",
        NotificationType.WARNING: "normal",
        NotificationType.ERROR: "critical",
        NotificationType.CONFLICT: "critical",
    }
    urgency = urgency_map.get(notification.type, "normal")

    try:
        subprocess.run(
            [
                "notify-send",
                "--urgency", urgency,
                "--app-name", APP_NAME,
                notification.title,
                notification.message,
            ],
            capture_output=True,
            check=True,
        )
        return True
    except FileNotFoundError:
        logger.debug("notify-send not found")
        return False
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Linux notification failed: %s", e)
        return False


def send_notification(notification: Notification) -> bool:
    """Send a system notification.

    Uses native OS notification system:
    - macOS: Notification Center via osascript
    - Linux: notify-send

    Args:
        notification: The notification to send.

    Returns:
        True if notification was sent, False if failed or unavailable.
    """
    system = platform.system()

    if system == "Darwin":
        return _notify_macos(notification)
    if system == "Linux":
        return _notify_linux(notification)
    logger.debug("Desktop notifications not supported on %s", system)
    return False


class DesktopNotifier:
    """Notification sink for the sync engine.

    Every notification is logged; delivery to the desktop is best effort.
    """

    def __init__(
        self,
        send: Callable[[Notification], bool] = send_notification,
        enabled: bool = True,
    ) -> None:
        """Initialize the notifier.

        Args:
            send: Delivery function.
            enabled: When False, notifications are only logged.
        """
        self._send = send
        self._enabled = enabled

    def tool_not_found(self) -> None:
        self._error(f"jujutsu (jj) is not installed. See {INSTALL_URL} for installation.")

    def no_remote(self) -> None:
        self._warn("No remote repository is configured. Only local change tracking is active.")

    def network_retry(self, attempt: int, limit: int) -> None:
        self._warn(f"A network error occurred. Retrying... ({attempt}/{limit})")

    def network_error(self) -> None:
        self._error("A network error occurred. Check your connection.")

    def error(self, message: str) -> None:
        self._error(message)

    def auth_error(self) -> None:
        self._error("Authentication failed. Check your credentials for the remote repository.")

    def conflicts_detected(self, count: int) -> None:
        noun = "conflict" if count == 1 else "conflicts"
        self._deliver(
            Notification(f"{APP_NAME} - Conflict", f"{count} {noun} to resolve", NotificationType.CONFLICT),
            logging.WARNING,
        )

    def sync_complete(self) -> None:
        # The status line already shows completion
        logger.info("Sync completed successfully")

    def _warn(self, message: str) -> None:
        self._deliver(Notification(APP_NAME, message, NotificationType.WARNING), logging.WARNING)

    def _error(self, message: str) -> None:
        self._deliver(Notification(f"{APP_NAME} - Error", message, NotificationType.ERROR), logging.ERROR)

    def _deliver(self, notification: Notification, level: int) -> None:
        logger.log(level, "%s", notification.message)
        if not self._enabled:
            return
        try:
            self._send(notification)
        except Exception:
            logger.exception("Failed to deliver notification")
