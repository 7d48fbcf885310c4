"""Shared CLI helpers."""

from pathlib import Path

import click

from mutepuck.exceptions import format_error_for_display
from mutepuck.models import AppConfig


def show_error(error: Exception, log_path: Path | None = None) -> None:
    """Print an error as user message plus recovery hint, without a traceback."""
    user_message, recovery_hint = format_error_for_display(error)

    click.echo("\n" + "=" * 70, err=True)
    click.echo(f"ERROR: {user_message}", err=True)
    click.echo("=" * 70, err=True)

    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)

    if log_path is not None:
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)
        click.echo("For logging options, run: mutepuck --help", err=True)


def load_config(ctx: click.Context) -> AppConfig:
    """Load the config selected by the top-level --config option."""
    obj = ctx.find_root().obj or {}
    return AppConfig.load_or_default(obj.get("config_path"))
