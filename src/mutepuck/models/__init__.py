"""Data models for the mute indicator."""

from .command import DeviceCommand
from .config import AppConfig
from .enums import BrightnessMode, ButtonAction, IndicatorState, LedColor
from .presentation import HeldPresentation, PresentationPolicy, StatePresentation
from .stream import CaptureStream, StreamId

__all__ = [
    "AppConfig",
    # Models
    "CaptureStream",
    "DeviceCommand",
    "HeldPresentation",
    "PresentationPolicy",
    "StatePresentation",
    "StreamId",
    # Enums
    "BrightnessMode",
    "ButtonAction",
    "IndicatorState",
    "LedColor",
]
