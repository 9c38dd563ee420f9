"""Conflict report and resolution prompt text.

This module provides:
- collect_conflict_files: Conflicted files with their marker regions
- resolution_prompt: Prompt asking to resolve one file
- combined_resolution_prompt: Prompt covering several files
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from docsync.core.conflicts import ConflictScanner
from docsync.core.errors import attempt
from docsync.core.types import ConflictFile
from docsync.sync.protocols import VcsCapability

logger = logging.getLogger(__name__)

NO_CONFLICTS = "No conflicts."


def collect_conflict_files(
    vcs: VcsCapability,
    scanner: ConflictScanner,
    workspace: Path,
) -> list[ConflictFile]:
    """Scan every file the capability reports as conflicted.

    Files whose markers are already gone are left out. A capability
    failure yields an empty list.
    """
    listed = attempt(vcs.list_conflicted_files)
    if not listed.ok:
        logger.error("Failed to list conflicted files: %s", listed.error)
        return []

    workspace = Path(workspace)
    files: list[ConflictFile] = []
    for name in listed.value or []:
        path = Path(name)
        if not path.is_absolute():
            path = workspace / path
        regions = scanner.scan_file(path)
        if not regions:
            continue
        files.append(
            ConflictFile(
                file_path=str(path),
                relative_path=Path(os.path.relpath(path, workspace)).as_posix(),
                regions=regions,
            )
        )

    logger.info("Found %d file(s) with conflicts", len(files))
    return files


def resolution_prompt(conflict_file: ConflictFile) -> str:
    """Build a prompt asking to resolve the conflicts of one file."""
    locations = "\n".join(
        f"  {index}. lines {region.start_line}-{region.end_line}"
        for index, region in enumerate(conflict_file.regions, start=1)
    )
    return (
        "The following file has conflicts. Please resolve them.\n"
        "\n"
        f"File: {conflict_file.relative_path}\n"
        f"Conflicts: {conflict_file.count}\n"
        "\n"
        "Locations:\n"
        f"{locations}\n"
        "\n"
        "Review both sides of each change and propose a resolution.\n"
        "Keep both changes where they are compatible; where they contradict,\n"
        "explain why and recommend one."
    )


def combined_resolution_prompt(conflict_files: list[ConflictFile]) -> str:
    """Build a prompt covering every conflicted file."""
    if not conflict_files:
        return NO_CONFLICTS
    if len(conflict_files) == 1:
        return resolution_prompt(conflict_files[0])

    total = sum(f.count for f in conflict_files)
    listing = "\n".join(f"- {f.relative_path} ({f.count})" for f in conflict_files)
    return (
        "Several files have conflicts.\n"
        "\n"
        f"Total: {len(conflict_files)} files, {total} conflicts\n"
        "\n"
        "Files:\n"
        f"{listing}\n"
        "\n"
        "Go through the files one by one and propose a resolution for each."
    )
