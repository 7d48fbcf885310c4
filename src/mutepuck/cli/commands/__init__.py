"""CLI commands for mutepuck."""

from .config import config_group
from .devices import devices_group
from .streams import streams_group
from .watch import watch

__all__ = ["config_group", "devices_group", "streams_group", "watch"]
