"""Concrete version-control capabilities."""

from docsync.vcs.jujutsu import COMMAND_TIMEOUT, JujutsuRepository

__all__ = ["COMMAND_TIMEOUT", "JujutsuRepository"]
