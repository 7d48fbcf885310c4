"""Enumerations for the mute indicator."""

from enum import Enum


class IndicatorState(str, Enum):
    """Aggregate mute state of all capture streams."""

    OFF = "off"  # No capture streams
    UNMUTED = "unmuted"  # Every stream unmuted
    MUTED = "muted"  # Every stream muted
    PARTIALLY_UNMUTED = "partially_unmuted"  # Mixed flags


class LedColor(str, Enum):
    """LED colors the indicator hardware can mix from its red/green/blue dies."""

    OFF = "off"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    PURPLE = "purple"
    CYAN = "cyan"
    WHITE = "white"


class BrightnessMode(str, Enum):
    """LED brightness and animation modes."""

    HIGH = "high"
    LOW = "low"
    FAST_PULSE = "fast_pulse"
    SLOW_PULSE = "slow_pulse"


class ButtonAction(str, Enum):
    """Button edge reported by the hardware channel."""

    PRESSED = "pressed"
    RELEASED = "released"
