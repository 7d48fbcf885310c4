"""Capture stream commands."""

import sys

import click

from mutepuck.core import reduce_state
from mutepuck.exceptions import MutePuckError
from mutepuck.session import PulseAudioSession

from ..output import load_config, show_error


@click.group(name="streams")
def streams_group():
    """Audio capture stream commands."""
    pass


@streams_group.command(name="list")
@click.pass_context
def list_streams(ctx):
    """List capture streams and the indicator state they reduce to."""
    try:
        config = load_config(ctx)
        session = PulseAudioSession(
            client_name=config.client_name,
            ignore_applications=config.ignore_applications,
            ignore_media_categories=config.ignore_media_categories,
        )
        streams = session.list_streams()
    except MutePuckError as e:
        show_error(e)
        sys.exit(1)

    click.echo("Capture streams:\n")
    if not streams:
        click.echo("  No application is recording.")
    for stream in streams:
        flag = "muted" if stream.muted else "unmuted"
        click.echo(f"  [{stream.stream_id}] {stream.application or 'unknown':<30} {flag}")

    click.echo(f"\nIndicator state: {reduce_state(streams).value}")
