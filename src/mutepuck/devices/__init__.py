"""Mute device support: catalog, drivers, HID transport, channel and hotplug."""

from .catalog import DeviceCatalog
from .channel import HardwareChannel
from .config import DeviceConfig
from .drivers import get_driver, register_driver
from .hotplug import HotplugMonitor, HotplugState, UdevHotplugSource
from .protocols import REPORT_SIZE, DeviceDriver, RawButtonSignal
from .transport import HidDeviceInfo, HidHandle, HidTransport

__all__ = [
    # Catalog
    "DeviceCatalog",
    "DeviceConfig",
    # Drivers
    "DeviceDriver",
    "RawButtonSignal",
    "REPORT_SIZE",
    "get_driver",
    "register_driver",
    # Runtime
    "HardwareChannel",
    "HidDeviceInfo",
    "HidHandle",
    "HidTransport",
    "HotplugMonitor",
    "HotplugState",
    "UdevHotplugSource",
]
