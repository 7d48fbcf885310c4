"""Device driver protocol and raw input signals."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from mutepuck.models import DeviceCommand

REPORT_SIZE = 8


class RawButtonSignal(Enum):
    """Transition flag decoded from one input report."""

    DOWN = "down"  # released -> pressed
    UP = "up"  # pressed -> released


class DeviceDriver(Protocol):
    """
    Capability set for one hardware family.

    Drivers translate between semantic values and the fixed-size HID
    reports of their family. They hold no device state, so one instance
    can serve any number of connections.
    """

    name: str

    def encode(self, command: DeviceCommand) -> bytes:
        """
        Encode an LED command into an output report.

        Must be total over valid commands and must never produce a report
        that triggers a hardware side effect (raises
        ProtocolInvariantViolation instead).
        """
        ...

    def decode(self, report: bytes) -> RawButtonSignal | None:
        """
        Decode an input report.

        Returns:
            The transition it carries, or None for reports without one

        Raises:
            MalformedEventError: If the report cannot be interpreted
        """
        ...
