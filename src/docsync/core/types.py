"""Shared types for docsync.

This module provides:
- SyncStatus: Status of the synchronization engine
- ErrorKind, SemanticError: Classified VCS failures
- Outcome: Result of a guarded VCS call (value or classified error)
- ConflictRegion, ConflictFile: Conflict marker locations
- CommitRecord: One entry of the commit history
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class SyncStatus(str, Enum):
    """Status of the synchronization engine.

    Owned by the SyncOrchestrator and read by the status sink.
    """

    INAPPLICABLE = "inapplicable"
    ENABLED = "enabled"
    LOCAL_ONLY = "local_only"
    OFFLINE = "offline"
    SYNCING = "syncing"
    # Display only. The engine flashes completion instead of entering it
    SYNC_COMPLETE = "sync_complete"
    SYNC_COMPLETE_WITH_CONFLICTS = "sync_complete_with_conflicts"


class ErrorKind(str, Enum):
    """Semantic category of a VCS failure."""

    NOT_FOUND = "not_found"
    NETWORK = "network"
    REMOTE_CHANGED = "remote_changed"
    CONFLICT = "conflict"
    AUTH = "auth"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SemanticError:
    """A classified failure.

    Attributes:
        kind: Error category used to select a recovery branch.
        message: Human readable message (the raw message for UNKNOWN).
    """

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass
class Outcome(Generic[T]):
    """Result of a VCS capability call.

    Exactly one of ``value`` / ``error`` is meaningful: a call that
    succeeded has ``error is None``.
    """

    value: T | None = None
    error: SemanticError | None = None

    @property
    def ok(self) -> bool:
        """Check if the call succeeded."""
        return self.error is None


@dataclass(frozen=True)
class ConflictRegion:
    """A conflict marker block inside a file (1-based, inclusive lines)."""

    file_path: str
    start_line: int
    end_line: int


@dataclass
class ConflictFile:
    """All conflict regions of one file, for display."""

    file_path: str
    relative_path: str
    regions: list[ConflictRegion] = field(default_factory=list)

    @property
    def count(self) -> int:
        """Number of conflict regions in the file."""
        return len(self.regions)


@dataclass
class CommitRecord:
    """One commit of the repository history."""

    commit_id: str
    author: str
    timestamp: datetime
    description: str
    changed_files: list[str] = field(default_factory=list)

    @property
    def short_id(self) -> str:
        """First 8 characters of the commit id."""
        return self.commit_id[:8]
