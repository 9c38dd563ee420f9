"""Command-line interface for docsync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- watch: Keep a workspace in sync until interrupted
- sync: Run one manual sync
- conflicts: List conflicted files or print a resolution prompt
- history: Show recent commits
- config: Show or change the administrative settings
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from docsync import __version__
from docsync.cli.config import config
from docsync.cli.conflicts import conflicts
from docsync.cli.history import history
from docsync.cli.sync import sync, watch

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool) -> None:
    """Route ``docsync`` log records to stderr.

    Replaces handlers from a previous call so repeated invocations in one
    process write to the current stderr.
    """
    package_logger = logging.getLogger("docsync")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)


@click.group()
@click.version_option(__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option(
    "--config-file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="DOCSYNC_CONFIG",
    help="Settings file (default: ~/.docsync/config.json).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_file: Path | None) -> None:
    """docsync - Automatic document sync over jujutsu."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file


# Sync commands
cli.add_command(watch)
cli.add_command(sync)

# Inspection commands
cli.add_command(conflicts)
cli.add_command(history)

# Settings
cli.add_command(config)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = ["cli", "configure_logging", "main"]
