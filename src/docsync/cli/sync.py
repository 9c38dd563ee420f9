"""Sync commands for the docsync CLI.

Commands:
- watch: Auto-commit saves and pull periodically until interrupted
- sync: Run one manual sync and exit
"""

from __future__ import annotations

import sys
import time
from pathlib import Path

import click

from docsync.cli.config import get_settings_store
from docsync.core.config import ConfigError
from docsync.core.types import SyncStatus
from docsync.notifications import DesktopNotifier
from docsync.status import StatusLine
from docsync.sync.orchestrator import SyncOrchestrator
from docsync.sync.watcher import SaveWatcher
from docsync.vcs.jujutsu import JujutsuRepository

workspace_argument = click.argument(
    "path",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
notify_option = click.option(
    "--no-notify", is_flag=True, help="Log notifications instead of showing them."
)


def build_orchestrator(
    ctx: click.Context, workspace: Path, notify: bool
) -> tuple[SyncOrchestrator, StatusLine]:
    """Wire the engine with the jj capability and console/desktop sinks."""
    status_line = StatusLine(writer=lambda line: click.echo(f"[{line}]"))
    orchestrator = SyncOrchestrator(
        workspace=workspace,
        vcs=JujutsuRepository(workspace),
        status_sink=status_line,
        notifier=DesktopNotifier(enabled=notify),
        settings=get_settings_store(ctx),
    )
    return orchestrator, status_line


@click.command()
@workspace_argument
@notify_option
@click.pass_context
def watch(ctx: click.Context, path: Path, no_notify: bool) -> None:
    """Keep PATH in sync until interrupted.

    Saved files are committed and pushed after a quiet period, and remote
    changes are pulled at random intervals.
    """
    workspace = path.resolve()
    orchestrator, status_line = build_orchestrator(ctx, workspace, not no_notify)

    try:
        status = orchestrator.initialize()
        if status is SyncStatus.INAPPLICABLE:
            click.echo(f"Error: {workspace} cannot be synchronized.", err=True)
            sys.exit(1)

        with SaveWatcher(workspace, orchestrator.queue_change):
            click.echo(f"Watching {workspace}. Press Ctrl+C to stop.")
            try:
                while True:
                    time.sleep(1)
            except KeyboardInterrupt:
                click.echo("\nStopping...")
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    finally:
        orchestrator.dispose()
        status_line.dispose()


@click.command()
@workspace_argument
@notify_option
@click.pass_context
def sync(ctx: click.Context, path: Path, no_notify: bool) -> None:
    """Commit, pull and push PATH once.

    Exits with status 1 when PATH cannot be synchronized or the remote
    is unreachable.
    """
    workspace = path.resolve()
    orchestrator, status_line = build_orchestrator(ctx, workspace, not no_notify)

    try:
        status = orchestrator.initialize()
        if status is SyncStatus.INAPPLICABLE:
            click.echo(f"Error: {workspace} cannot be synchronized.", err=True)
            sys.exit(1)
        status = orchestrator.full_sync()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    finally:
        orchestrator.dispose()
        status_line.dispose()

    if status is SyncStatus.OFFLINE:
        click.echo("Error: sync failed, remote unreachable.", err=True)
        sys.exit(1)
