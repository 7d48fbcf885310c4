"""HID transport on top of hidapi.

Thin wrapper that turns hidapi's device objects into handles with a
narrow read/write/close surface and converts hidapi failures into the
mutepuck exception taxonomy. Everything above this module is
hardware-agnostic and is tested against fakes.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import hid

from mutepuck.exceptions import DeviceIOError, wrap_hid_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HidDeviceInfo:
    """One enumerated HID interface."""

    vendor_id: int
    product_id: int
    path: bytes
    product: str = ""
    serial: str = ""

    @classmethod
    def from_enumeration(cls, entry: dict) -> "HidDeviceInfo":
        """Build from one ``hid.enumerate()`` entry."""
        return cls(
            vendor_id=entry["vendor_id"],
            product_id=entry["product_id"],
            path=entry["path"],
            product=entry.get("product_string") or "",
            serial=entry.get("serial_number") or "",
        )

    @property
    def usb_id(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x}"

    def describe(self) -> str:
        name = self.product or "HID device"
        return f"{name} ({self.usb_id})"


class HidHandle:
    """An open HID device. Owned by exactly one HardwareChannel."""

    def __init__(self, device: "hid.device", info: HidDeviceInfo):
        self._device = device
        self.info = info

    def write(self, report: bytes) -> None:
        """
        Write one output report.

        Raises:
            DeviceIOError: If hidapi reports a failure
        """
        try:
            written = self._device.write(list(report))
        except (OSError, ValueError) as e:
            raise wrap_hid_error(e, "write", self.info.describe()) from e

        if written < 0:
            raise DeviceIOError("write", self.info.describe(), "hidapi returned an error")

    def read(self, size: int, timeout_ms: int) -> bytes:
        """
        Read one input report.

        Returns:
            The report, or empty bytes if nothing arrived within timeout_ms

        Raises:
            DeviceIOError: If the device is gone
        """
        try:
            data = self._device.read(size, timeout_ms=timeout_ms)
        except (OSError, ValueError) as e:
            raise wrap_hid_error(e, "read", self.info.describe()) from e
        return bytes(data)

    def close(self) -> None:
        try:
            self._device.close()
        except (OSError, ValueError) as e:
            # The handle is unusable either way
            logger.debug(f"Error closing {self.info.describe()}: {e}")


class HidTransport:
    """Enumerates and opens HID devices through hidapi."""

    def enumerate(self, identifiers: Iterable[tuple[int, int]]) -> list[HidDeviceInfo]:
        """
        List connected devices matching any of the given USB ids.

        Args:
            identifiers: (vendor_id, product_id) pairs

        Returns:
            Matching devices, one entry per HID path
        """
        wanted = set(identifiers)
        found: dict[bytes, HidDeviceInfo] = {}
        for entry in hid.enumerate():
            if (entry["vendor_id"], entry["product_id"]) not in wanted:
                continue
            info = HidDeviceInfo.from_enumeration(entry)
            found.setdefault(info.path, info)
        return list(found.values())

    def open(self, info: HidDeviceInfo) -> HidHandle:
        """
        Open a device by path.

        Raises:
            DeviceUnavailableError: If the device cannot be opened
        """
        device = hid.device()
        try:
            device.open_path(info.path)
        except (OSError, ValueError) as e:
            raise wrap_hid_error(e, "open", info.describe()) from e

        logger.debug(f"Opened {info.describe()} at {info.path!r}")
        return HidHandle(device, info)
