"""Settings commands for the docsync CLI.

Commands:
- config show: Print the current settings
- config enable / disable: Toggle auto-sync
- config interval MIN MAX: Set the periodic pull cadence in seconds
"""

from __future__ import annotations

import click

from docsync.core.config import ConfigError, JsonSettingsStore


def get_settings_store(ctx: click.Context) -> JsonSettingsStore:
    """Settings store selected by the top-level ``--config-file`` option."""
    obj = ctx.find_root().obj or {}
    return JsonSettingsStore(obj.get("config_file"))


@click.group()
def config() -> None:
    """Show or change the administrative settings."""


@config.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Print the current settings."""
    store = get_settings_store(ctx)
    try:
        settings = store.load()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Config file: {store.path}")
    click.echo(f"Auto-sync: {'enabled' if settings.auto_sync_enabled else 'disabled'}")
    click.echo(
        f"Pull interval: {settings.sync_interval_min:g}-{settings.sync_interval_max:g} seconds"
    )


@config.command()
@click.pass_context
def enable(ctx: click.Context) -> None:
    """Enable auto-sync."""
    try:
        get_settings_store(ctx).set_auto_sync(True)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    click.echo("Auto-sync enabled.")


@config.command()
@click.pass_context
def disable(ctx: click.Context) -> None:
    """Disable auto-sync."""
    try:
        get_settings_store(ctx).set_auto_sync(False)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    click.echo("Auto-sync disabled.")


@config.command()
@click.argument("minimum", type=float)
@click.argument("maximum", type=float)
@click.pass_context
def interval(ctx: click.Context, minimum: float, maximum: float) -> None:
    """Set the pull interval to a random delay between MINIMUM and MAXIMUM seconds."""
    try:
        get_settings_store(ctx).set_interval(minimum, maximum)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Pull interval set to {minimum:g}-{maximum:g} seconds.")
