"""Events flowing into the dispatcher, and indicator events flowing out.

Inbound events come from three sources and are serialized by the
dispatcher's inbox:

- Audio session: StreamAdded, StreamRemoved, StreamMuteChanged
- Hardware channel: ButtonEvent, DeviceLost
- Hotplug monitor: DeviceAttached, DeviceDetached
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from mutepuck.models import ButtonAction, StreamId

if TYPE_CHECKING:
    from mutepuck.devices.transport import HidDeviceInfo


class IndicatorEvent(Enum):
    """Events published by the dispatcher to indicator observers."""

    STATE_CHANGED = "state_changed"  # Aggregate mute state changed
    DEVICE_CONNECTED = "device_connected"  # Indicator device opened
    DEVICE_DISCONNECTED = "device_disconnected"  # Indicator device closed or lost


# ================================================================
# AUDIO SESSION
# ================================================================


@dataclass(frozen=True)
class SessionEvent:
    """Base class for audio-session events."""

    stream_id: StreamId


@dataclass(frozen=True)
class StreamAdded(SessionEvent):
    """A capture stream appeared."""

    muted: bool = False
    application: str | None = None


@dataclass(frozen=True)
class StreamRemoved(SessionEvent):
    """A capture stream went away."""


@dataclass(frozen=True)
class StreamMuteChanged(SessionEvent):
    """A capture stream's mute flag changed."""

    muted: bool = False


# ================================================================
# HARDWARE
# ================================================================


@dataclass(frozen=True)
class ButtonEvent:
    """Button edge from the hardware channel."""

    action: ButtonAction

    @property
    def pressed(self) -> bool:
        return self.action is ButtonAction.PRESSED


@dataclass(frozen=True)
class DeviceLost:
    """The reader hit an I/O error; the handle is no longer usable."""

    device: HidDeviceInfo
    reason: str


# ================================================================
# HOTPLUG
# ================================================================


@dataclass(frozen=True)
class DeviceAttached:
    """A supported device appeared."""

    device: HidDeviceInfo


@dataclass(frozen=True)
class DeviceDetached:
    """The connected device disappeared."""

    device: HidDeviceInfo
