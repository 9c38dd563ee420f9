"""Conflict inspection command for the docsync CLI."""

from __future__ import annotations

from pathlib import Path

import click

from docsync.conflict_report import collect_conflict_files, combined_resolution_prompt
from docsync.core.conflicts import ConflictScanner
from docsync.vcs.jujutsu import JujutsuRepository


@click.command()
@click.argument(
    "path",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("--prompt", is_flag=True, help="Print a resolution prompt instead of the list.")
def conflicts(path: Path, prompt: bool) -> None:
    """List files in PATH with unresolved conflicts."""
    workspace = path.resolve()
    files = collect_conflict_files(JujutsuRepository(workspace), ConflictScanner(), workspace)

    if prompt:
        click.echo(combined_resolution_prompt(files))
        return

    if not files:
        click.echo("No conflicts.")
        return

    for conflict_file in files:
        click.echo(f"{conflict_file.relative_path} ({conflict_file.count})")
        for region in conflict_file.regions:
            click.echo(f"  lines {region.start_line}-{region.end_line}")
