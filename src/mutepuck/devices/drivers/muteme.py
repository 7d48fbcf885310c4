"""
MuteMe report codec.

Output report (8 bytes, LED value in byte 0, remaining bytes zero)
------------------------------------------------------------------

::

    bit   7   6      5   4      3   2     1      0
        ┌───┬──────┬──────────┬───┬─────┬──────┬─────┐
        │ - │timer │   mode   │ - │blue │green │ red │
        └───┴──────┴──────────┴───┴─────┴──────┴─────┘

    mode: 00 high brightness, 01 low brightness, 10 fast pulse, 11 slow pulse

Hardware quirks:

- The timer bit is sticky. Once set the LED switches itself off after a
  fixed interval, and sending a report without the bit does not cancel
  it; only a device reset does.
- A report whose low nibble is ``1001`` reboots the firmware into its
  bootloader. Bit 3 is never used by this codec, and encode() refuses to
  return such a report.

Input report (8 bytes)
----------------------

Byte 3 carries the touch transitions: bit 4 is released -> pressed and
bit 2 is pressed -> released. Bits 0 and 1 repeat the touch level and are
ignored.
"""

import logging

from mutepuck.devices.protocols import REPORT_SIZE, RawButtonSignal
from mutepuck.exceptions import MalformedEventError, ProtocolInvariantViolation
from mutepuck.models import BrightnessMode, DeviceCommand, LedColor

logger = logging.getLogger(__name__)

RED = 0x01
GREEN = 0x02
BLUE = 0x04

COLOR_BITS: dict[LedColor, int] = {
    LedColor.OFF: 0,
    LedColor.RED: RED,
    LedColor.GREEN: GREEN,
    LedColor.YELLOW: RED | GREEN,
    LedColor.BLUE: BLUE,
    LedColor.PURPLE: RED | BLUE,
    LedColor.CYAN: GREEN | BLUE,
    LedColor.WHITE: RED | GREEN | BLUE,
}

MODE_BITS: dict[BrightnessMode, int] = {
    BrightnessMode.HIGH: 0x00,
    BrightnessMode.LOW: 0x10,
    BrightnessMode.FAST_PULSE: 0x20,
    BrightnessMode.SLOW_PULSE: 0x30,
}

TIMER_BIT = 0x40

# Low nibble that reboots the device into its bootloader
BOOTLOADER_NIBBLE = 0b1001

INPUT_EVENT_BYTE = 3
PRESS_EDGE_BIT = 0x10
RELEASE_EDGE_BIT = 0x04


def check_report(report: bytes) -> None:
    """
    Refuse reports that would trigger a firmware side effect.

    Raises:
        ProtocolInvariantViolation: If the LED byte has the bootloader nibble
    """
    if len(report) != REPORT_SIZE:
        raise ProtocolInvariantViolation(report, f"report must be {REPORT_SIZE} bytes")
    if report[0] & 0x0F == BOOTLOADER_NIBBLE:
        raise ProtocolInvariantViolation(report, "bootloader trigger pattern")


class MuteMeDriver:
    """Codec for MuteMe Original and Mini buttons."""

    name = "MuteMe"

    def encode(self, command: DeviceCommand) -> bytes:
        """
        Encode an LED command into an 8-byte output report.

        Args:
            command: LED command

        Returns:
            The report to write

        Raises:
            ProtocolInvariantViolation: If the report would be unsafe to send
        """
        value = COLOR_BITS[command.color] | MODE_BITS[command.brightness]
        if command.timer_enabled:
            value |= TIMER_BIT

        report = bytes([value]) + bytes(REPORT_SIZE - 1)
        check_report(report)
        return report

    def decode(self, report: bytes) -> RawButtonSignal | None:
        """
        Decode an input report into a touch transition.

        Args:
            report: Raw input report

        Returns:
            DOWN or UP, or None when the report carries no transition

        Raises:
            MalformedEventError: Short report, or both transitions at once
        """
        if len(report) <= INPUT_EVENT_BYTE:
            raise MalformedEventError("input report", f"too short ({len(report)} bytes): {report.hex()}")

        flags = report[INPUT_EVENT_BYTE]
        pressed = bool(flags & PRESS_EDGE_BIT)
        released = bool(flags & RELEASE_EDGE_BIT)

        if pressed and released:
            raise MalformedEventError("input report", f"both edges set: {report.hex()}")
        if pressed:
            return RawButtonSignal.DOWN
        if released:
            return RawButtonSignal.UP
        return None
