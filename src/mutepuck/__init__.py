"""mutepuck - microphone mute indicator for USB HID mute buttons."""

__version__ = "0.1.0"
