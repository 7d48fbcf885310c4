"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path

import click

from mutepuck import __version__
from mutepuck.models.config import DEFAULT_CONFIG_DIR, DEFAULT_CONFIG_PATH

from .commands import config_group, devices_group, streams_group, watch
from .output import show_error

logger = logging.getLogger(__name__)


def resolve_log_path(debug: bool, log_file: Path | None) -> Path:
    """Where setup_logging() writes the log file."""
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / "mutepuck-debug.log"
    return DEFAULT_CONFIG_DIR / "logs" / "mutepuck.log"


def setup_logging(verbose: int, debug: bool, log_file: Path | None, log_level: str | None) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode with file logging in the current directory
        log_file: Custom log file path (optional)
        log_level: Explicit level (DEBUG/INFO/WARNING/ERROR), overrides verbosity
    """
    if debug or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    if log_level:
        level = getattr(logging, log_level.upper())

    log_path = resolve_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Create rotating file handler (keeps last 5 files, max 10MB each)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    # Mirror the log on stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")


@click.group(invoke_without_command=True)
@click.pass_context
@click.version_option(version=__version__, prog_name="mutepuck")
@click.option(
    '--config', 'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Config file (default: ~/.mutepuck/config.json)'
)
@click.option(
    '--family',
    type=str,
    default=None,
    help='Force a device family from the catalog (e.g. original, mini)'
)
@click.option(
    '--poll-interval',
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help='Device polling interval in seconds when udev is unavailable'
)
@click.option(
    '--no-udev',
    is_flag=True,
    help='Poll for devices instead of using udev notifications'
)
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./mutepuck-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Custom log file path'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default=None,
    help='Explicit log level (overrides -v/--debug)'
)
def cli(
    ctx,
    config_path: Path | None,
    family: str | None,
    poll_interval: float | None,
    no_udev: bool,
    verbose: int,
    debug: bool,
    log_file: Path | None,
    log_level: str | None,
):
    """
    mutepuck - show your microphone mute state on a USB mute button.

    Without a command, runs the daemon: the button LED follows the mute
    state of every application recording from a microphone, and pressing
    the button mutes or unmutes them all.

    \b
    LED states (MuteMe defaults):
      off                  no application is recording
      green                all streams unmuted
      red, slow pulse      all streams muted
      green, fast pulse    some streams unmuted

    \b
    Examples:
      # Run the daemon
      mutepuck

      # Run with info logging on stderr
      mutepuck -v

      # Force the Mini family and poll for the device
      mutepuck --family mini --no-udev

      # List connected mute buttons
      mutepuck devices list

      # Show current capture streams
      mutepuck streams list
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    # If a subcommand was invoked, don't run the daemon
    if ctx.invoked_subcommand is not None:
        if verbose or debug or log_file or log_level:
            setup_logging(verbose, debug, log_file, log_level)
        return

    from mutepuck.app import MutePuckApp
    from mutepuck.models import AppConfig

    setup_logging(verbose, debug, log_file, log_level)
    log_path = resolve_log_path(debug, log_file)

    logger.info("Starting mutepuck")

    app = None
    try:
        config_obj = AppConfig.load_or_default(config_path)
        if not (config_path or DEFAULT_CONFIG_PATH).exists():
            config_obj.save(config_path)

        overrides = {}
        if family is not None:
            overrides["device_family"] = family
        if poll_interval is not None:
            overrides["poll_interval"] = poll_interval
        if no_udev:
            overrides["use_udev"] = False
        if overrides:
            config_obj = config_obj.model_copy(update=overrides)

        app = MutePuckApp(config_obj)
        app.run()

    except KeyboardInterrupt:
        # Clean exit on Ctrl+C
        logger.info("Interrupted by user")
        click.echo("\nShutting down...", err=True)
    except click.Abort:
        raise
    except Exception as e:
        logger.exception("Error running mutepuck")
        show_error(e, log_path)
        sys.exit(1)
    finally:
        if app is not None:
            app.shutdown()


# Register utility commands
cli.add_command(devices_group)
cli.add_command(streams_group)
cli.add_command(config_group)
cli.add_command(watch)

if __name__ == "__main__":
    cli()
