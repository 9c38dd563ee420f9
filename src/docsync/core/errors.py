"""VCS failure classification.

This module provides:
- VcsCommandError: Raw failure raised by a VCS capability
- classify: Map any failure to a SemanticError (pure, total)
- attempt: Run a capability call and return an Outcome

Classification happens once, here, at the VCS boundary. Callers branch on
``Outcome.error.kind`` instead of catching exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from docsync.core.types import ErrorKind, Outcome, SemanticError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class VcsCommandError(Exception):
    """A VCS command failed.

    Attributes:
        message: Primary failure message.
        stderr: Captured secondary output, if any.
        returncode: Process exit status, if the command ran.
    """

    def __init__(self, message: str, stderr: str = "", returncode: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stderr = stderr
        self.returncode = returncode


# Patterns are matched against the lower-cased message + stderr.
# Order matters: the first matching category wins.
_PATTERNS: list[tuple[ErrorKind, tuple[str, ...], str]] = [
    (
        ErrorKind.NOT_FOUND,
        ("command not found", "not recognized"),
        "jj command not found. Check that jujutsu is installed.",
    ),
    (
        ErrorKind.NETWORK,
        ("connection refused", "timeout", "timed out", "network", "could not resolve host"),
        "A network error occurred. Check your connection.",
    ),
    (
        ErrorKind.REMOTE_CHANGED,
        ("remote has new commits", "rejected", "non-fast-forward"),
        "The remote has new changes.",
    ),
    (
        ErrorKind.CONFLICT,
        ("conflict",),
        "A conflict occurred.",
    ),
    (
        ErrorKind.AUTH,
        ("authentication failed", "permission denied", "fatal: could not read"),
        "Authentication failed. Check your credentials for the remote.",
    ),
]


def _message(failure: BaseException | str) -> str:
    if isinstance(failure, str):
        return failure
    return getattr(failure, "message", None) or str(failure)


def _raw_text(failure: BaseException | str) -> str:
    message = _message(failure)
    stderr = getattr(failure, "stderr", None) or ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    if stderr and stderr not in message:
        return f"{message}\n{stderr}"
    return message


def classify(failure: BaseException | str) -> SemanticError:
    """Classify a raw failure.

    Args:
        failure: Exception (message and optional ``stderr`` attribute) or text.

    Returns:
        SemanticError. Unmatched failures are UNKNOWN and keep the original
        message verbatim.
    """
    haystack = _raw_text(failure).lower()
    for kind, needles, message in _PATTERNS:
        if any(needle in haystack for needle in needles):
            return SemanticError(kind, message)
    return SemanticError(ErrorKind.UNKNOWN, _message(failure) or "Unknown error occurred")


def attempt(func: Callable[..., T], *args: Any) -> Outcome[T]:
    """Run a VCS capability call at the classification boundary.

    Args:
        func: Capability operation.
        *args: Arguments for the operation.

    Returns:
        Outcome with the call's value, or with the classified error.
    """
    try:
        return Outcome(value=func(*args))
    except VcsCommandError as e:
        error = classify(e)
        logger.debug("%s failed: %s", getattr(func, "__name__", func), error)
        return Outcome(error=error)
    except Exception as e:
        logger.exception("Unexpected failure in %s", getattr(func, "__name__", func))
        return Outcome(error=classify(e))
