"""Watch command - follow the indicator state without hardware."""

import sys
from datetime import datetime

import click

from mutepuck.exceptions import MutePuckError
from mutepuck.models import IndicatorState
from mutepuck.protocols import IndicatorEvent

from ..output import load_config, show_error


class StatePrinter:
    """IndicatorObserver that echoes state changes."""

    def on_indicator_event(self, event: IndicatorEvent, state: IndicatorState) -> None:
        if event is not IndicatorEvent.STATE_CHANGED:
            return
        timestamp = datetime.now().strftime("%H:%M:%S")
        click.echo(f"[{timestamp}] {state.value}")


@click.command()
@click.pass_context
def watch(ctx):
    """
    Print indicator state changes as they happen.

    Runs the audio session side of the daemon only; no mute device is
    opened. Press Ctrl+C to stop.
    """
    from mutepuck.app import MutePuckApp

    app = None
    try:
        config = load_config(ctx)
        app = MutePuckApp(config, hardware=False)
        app.dispatcher.register_observer(StatePrinter())
        click.echo("Watching capture streams (Ctrl+C to stop)\n")
        app.run()
    except KeyboardInterrupt:
        click.echo("\nStopped", err=True)
    except MutePuckError as e:
        show_error(e)
        sys.exit(1)
    finally:
        if app is not None:
            app.shutdown()
