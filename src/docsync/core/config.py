"""Administrative settings for docsync.

This module provides:
- SyncSettings: Auto-sync flag and periodic-pull cadence
- JsonSettingsStore: Settings persisted in ~/.docsync/config.json
- MemorySettingsStore: In-process settings (embedding, tests)

Stores are re-read on every ``load()``; the engine never caches settings.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DEFAULT_SYNC_INTERVAL_MIN = 30.0  # seconds
DEFAULT_SYNC_INTERVAL_MAX = 90.0  # seconds


class ConfigError(Exception):
    """Invalid or unreadable configuration."""


@dataclass(frozen=True)
class SyncSettings:
    """Administrative configuration.

    Attributes:
        auto_sync_enabled: Whether automatic commit/push/pull is active.
        sync_interval_min: Minimum seconds between automatic pulls.
        sync_interval_max: Maximum seconds between automatic pulls.
    """

    auto_sync_enabled: bool = True
    sync_interval_min: float = DEFAULT_SYNC_INTERVAL_MIN
    sync_interval_max: float = DEFAULT_SYNC_INTERVAL_MAX

    def __post_init__(self) -> None:
        """Validate the pull cadence."""
        if self.sync_interval_min < 0 or self.sync_interval_max < 0:
            raise ConfigError("Sync intervals must not be negative")
        if self.sync_interval_min > self.sync_interval_max:
            raise ConfigError(
                f"sync_interval_min ({self.sync_interval_min}) is greater than "
                f"sync_interval_max ({self.sync_interval_max})"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SyncSettings:
        """Build settings from a config mapping, ignoring unknown keys."""
        try:
            return cls(
                auto_sync_enabled=bool(data.get("auto_sync_enabled", True)),
                sync_interval_min=float(data.get("sync_interval_min", DEFAULT_SYNC_INTERVAL_MIN)),
                sync_interval_max=float(data.get("sync_interval_max", DEFAULT_SYNC_INTERVAL_MAX)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid settings: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable mapping."""
        return asdict(self)


class SettingsStore(Protocol):
    """Read/write access to the administrative settings."""

    def load(self) -> SyncSettings: ...

    def set_auto_sync(self, enabled: bool) -> None: ...

    def set_interval(self, minimum: float, maximum: float) -> None: ...


def get_config_dir() -> Path:
    """Get the configuration directory for docsync.

    Returns:
        Path to ~/.docsync.
    """
    return Path.home() / ".docsync"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


class JsonSettingsStore:
    """Settings stored as JSON on disk.

    A missing file means default settings.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or get_config_file()
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        """Location of the config file."""
        return self._path

    def load(self) -> SyncSettings:
        """Read settings from disk."""
        return SyncSettings.from_dict(self._read())

    def set_auto_sync(self, enabled: bool) -> None:
        """Persist the auto-sync flag."""
        self._update(auto_sync_enabled=enabled)

    def set_interval(self, minimum: float, maximum: float) -> None:
        """Persist the pull cadence."""
        # Validate before writing anything
        SyncSettings(sync_interval_min=minimum, sync_interval_max=maximum)
        self._update(sync_interval_min=minimum, sync_interval_max=maximum)

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{self._path} must contain a JSON object")
        return data

    def _update(self, **changes: Any) -> None:
        with self._lock:
            data = self._read()
            data.update(changes)
            SyncSettings.from_dict(data)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        logger.debug("Saved settings to %s: %s", self._path, changes)


class MemorySettingsStore:
    """Settings held in memory."""

    def __init__(self, settings: SyncSettings | None = None) -> None:
        self._settings = settings or SyncSettings()
        self._lock = threading.Lock()

    def load(self) -> SyncSettings:
        """Return the current settings."""
        with self._lock:
            return self._settings

    def set_auto_sync(self, enabled: bool) -> None:
        """Change the auto-sync flag."""
        with self._lock:
            self._settings = replace(self._settings, auto_sync_enabled=enabled)

    def set_interval(self, minimum: float, maximum: float) -> None:
        """Change the pull cadence."""
        with self._lock:
            self._settings = replace(
                self._settings, sync_interval_min=minimum, sync_interval_max=maximum
            )
