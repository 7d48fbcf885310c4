"""Device command implementations."""

import sys
import time

import click

from mutepuck.devices import DeviceCatalog, HidTransport
from mutepuck.exceptions import MutePuckError
from mutepuck.models import IndicatorState

from ..output import load_config, show_error


@click.group(name="devices")
def devices_group():
    """Mute device commands."""
    pass


@devices_group.command(name="list")
@click.pass_context
def list_devices(ctx):
    """List connected mute devices and supported families."""
    try:
        config = load_config(ctx)
        catalog = DeviceCatalog(config.devices_file)
        found = HidTransport().enumerate(catalog.known_ids())
    except (MutePuckError, OSError) as e:
        show_error(e)
        sys.exit(1)

    click.echo("Connected mute devices:\n")
    if not found:
        click.echo("  No mute devices found.")
    else:
        for i, info in enumerate(found):
            device_config = catalog.detect(info.vendor_id, info.product_id)
            model = device_config.model if device_config else "unknown"
            family = device_config.family if device_config else "-"
            click.echo(f"  [{i}] {info.describe()}")
            click.echo(f"      Model: {model} (family: {family})")
            if info.serial:
                click.echo(f"      Serial: {info.serial}")

    click.echo("\nSupported families:\n")
    for device_config in catalog.devices:
        ids = ", ".join(str(ident) for ident in device_config.identifiers)
        click.echo(f"  {device_config.family:<10} {device_config.model} [{ids}]")


@devices_group.command(name="test")
@click.option(
    "--delay",
    type=click.FloatRange(min=0),
    default=1.5,
    show_default=True,
    help="Seconds to show each state",
)
@click.pass_context
def test_device(ctx, delay: float):
    """
    Cycle the LED through every indicator state.

    Uses the first connected mute device. The LED is switched off
    afterwards.
    """
    try:
        config = load_config(ctx)
        catalog = DeviceCatalog(config.devices_file)
        transport = HidTransport()
        found = transport.enumerate(catalog.known_ids())
        if not found:
            click.echo("No mute devices found.")
            sys.exit(1)

        info = found[0]
        device_config = catalog.resolve(info.vendor_id, info.product_id, config.device_family)
        driver = catalog.create_driver(device_config)
        handle = transport.open(info)
    except (MutePuckError, OSError, ValueError) as e:
        show_error(e)
        sys.exit(1)

    click.echo(f"Testing {device_config.model}: {info.describe()}\n")
    presentation = device_config.presentation
    try:
        for state in IndicatorState:
            for held in (False, True):
                command = presentation.command_for(state, held)
                label = f"{state.value}{' (held)' if held else ''}"
                click.echo(f"  {label:<28} {command.describe()}")
                handle.write(driver.encode(command))
                time.sleep(delay)
        handle.write(driver.encode(presentation.command_for(IndicatorState.OFF)))
    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)
    except MutePuckError as e:
        show_error(e)
        sys.exit(1)
    finally:
        handle.close()

    click.echo("\nDone.")
