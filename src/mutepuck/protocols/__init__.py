"""Event types and observer protocols."""

from .events import (
    ButtonEvent,
    DeviceAttached,
    DeviceDetached,
    DeviceLost,
    IndicatorEvent,
    SessionEvent,
    StreamAdded,
    StreamMuteChanged,
    StreamRemoved,
)
from .observers import IndicatorObserver

__all__ = [
    # Events
    "ButtonEvent",
    "DeviceAttached",
    "DeviceDetached",
    "DeviceLost",
    "IndicatorEvent",
    "SessionEvent",
    "StreamAdded",
    "StreamMuteChanged",
    "StreamRemoved",
    # Observers
    "IndicatorObserver",
]
