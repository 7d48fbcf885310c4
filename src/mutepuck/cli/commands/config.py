"""
Config commands.

Commands:
    - config show            # Display configuration and where it is loaded from
    - config init [--force]  # Write a default config file
"""

import sys

import click

from mutepuck.exceptions import MutePuckError
from mutepuck.models import AppConfig
from mutepuck.models.config import DEFAULT_CONFIG_PATH

from ..output import load_config, show_error


@click.group(name="config")
def config_group():
    """Configure mutepuck settings."""
    pass


@config_group.command(name="show")
@click.pass_context
def show_config(ctx):
    """Display the current configuration."""
    path = (ctx.find_root().obj or {}).get("config_path") or DEFAULT_CONFIG_PATH
    try:
        config = load_config(ctx)
    except MutePuckError as e:
        show_error(e)
        sys.exit(1)

    source = path if path.exists() else f"{path} (not found, using defaults)"
    click.echo(f"Config file: {source}\n")
    for name, field in AppConfig.model_fields.items():
        value = getattr(config, name)
        click.echo(f"  {name:<24} {value}")
        if field.description:
            click.echo(f"  {'':<24} {click.style(field.description, dim=True)}")


@config_group.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def init_config(ctx, force: bool):
    """Write a config file with default values."""
    path = (ctx.find_root().obj or {}).get("config_path") or DEFAULT_CONFIG_PATH
    if path.exists() and not force:
        click.echo(f"Config file already exists: {path} (use --force to overwrite)", err=True)
        sys.exit(1)

    AppConfig().save(path)
    click.echo(f"Wrote default config to {path}")
