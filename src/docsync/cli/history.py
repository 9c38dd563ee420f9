"""History command for the docsync CLI."""

from __future__ import annotations

from pathlib import Path

import click

from docsync.core.errors import attempt
from docsync.history import format_commit_details
from docsync.vcs.jujutsu import JujutsuRepository


@click.command()
@click.argument(
    "path",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("--limit", "-n", default=20, show_default=True, type=click.IntRange(min=1))
@click.option("--offset", default=0, show_default=True, type=click.IntRange(min=0))
@click.option("--files", "show_files", is_flag=True, help="Show each commit's changed files.")
def history(path: Path, limit: int, offset: int, show_files: bool) -> None:
    """Show recent commits of PATH, newest first."""
    repo = JujutsuRepository(path.resolve())

    page = attempt(repo.commit_history, limit, offset)
    if not page.ok:
        raise click.ClickException(page.error.message)

    commits = page.value or []
    if not commits:
        click.echo("No commits.")
        return

    for index, commit in enumerate(commits):
        if show_files:
            changed = attempt(repo.changed_files, commit.commit_id)
            commit.changed_files = changed.value if changed.ok and changed.value else []
            if index:
                click.echo()
            click.echo(format_commit_details(commit))
        else:
            click.echo(
                f"{commit.short_id}  {commit.timestamp:%Y-%m-%d %H:%M}  "
                f"{commit.author}  {commit.description}"
            )
