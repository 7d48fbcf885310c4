"""Allow running with ``python -m mutepuck``."""

from mutepuck.cli.main import cli

if __name__ == "__main__":
    cli()
