"""Hardware-related exceptions.

This module defines exceptions for the indicator device:
- DeviceError: Base class for device errors
- DeviceUnavailableError: No device handle is open
- DeviceIOError: A read or write on an open handle failed
- UnsupportedDeviceError: Identifiers do not match any catalog family
"""

from .base import MutePuckError


class DeviceError(MutePuckError):
    """Indicator device operation failed."""

    def __init__(self, user_message: str, device: str | None = None, **kwargs):
        """
        Initialize device error.

        Args:
            user_message: User-friendly error message
            device: Human-readable device description (if applicable)
        """
        super().__init__(user_message, **kwargs)
        self.device = device


class DeviceUnavailableError(DeviceError):
    """No device is connected, so output is suspended until the next connect."""

    def __init__(self, reason: str = "No mute device connected", device: str | None = None):
        super().__init__(
            user_message=reason,
            device=device,
            recoverable=True,
            recovery_hint="Plug in the mute button. Run 'mutepuck devices list' to check detection.",
        )


class DeviceIOError(DeviceError):
    """A read or write on an open handle failed (treated as a disconnect)."""

    def __init__(self, operation: str, device: str | None = None, original_error: str | None = None):
        """
        Initialize device I/O error.

        Args:
            operation: "read" or "write"
            device: Device description
            original_error: The error reported by the HID library
        """
        user_msg = f"Mute device {operation} failed"
        tech_msg = f"HID {operation} failed on {device or 'device'}"
        if original_error:
            tech_msg += f": {original_error}"

        super().__init__(
            user_message=user_msg,
            technical_message=tech_msg,
            device=device,
            recoverable=True,
            recovery_hint=(
                "The device was probably unplugged. It will be picked up again "
                "automatically once it reappears."
            ),
        )
        self.operation = operation
        self.original_error = original_error


class UnsupportedDeviceError(DeviceError):
    """Vendor/product identifiers are not in the device catalog."""

    def __init__(self, vendor_id: int, product_id: int):
        super().__init__(
            user_message=f"Unsupported device {vendor_id:04x}:{product_id:04x}",
            recoverable=True,
            recovery_hint="Add the device to a custom catalog and pass it with 'devices_file'.",
        )
        self.vendor_id = vendor_id
        self.product_id = product_id
