"""
Custom exception hierarchy for mutepuck.

## Exception Hierarchy

```
MutePuckError (base)
├── DeviceError
│   ├── DeviceUnavailableError   no handle open, output suspended
│   ├── DeviceIOError            read/write failed, treated as disconnect
│   └── UnsupportedDeviceError
├── ProtocolInvariantViolation   forbidden report, fatal
├── MalformedEventError          logged and dropped
├── AudioSessionError
└── ConfigurationError
    ├── ConfigFileInvalidError
    └── ConfigValidationError
```

All custom exceptions carry `user_message`, `technical_message`,
`recoverable` and `recovery_hint`. Only `ProtocolInvariantViolation` is
allowed to end the daemon; everything else is recovered through the
hotplug/reconnect state machine.
"""

from .base import MutePuckError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .device import DeviceError, DeviceIOError, DeviceUnavailableError, UnsupportedDeviceError
from .handlers import ErrorContext, format_error_for_display, wrap_hid_error, wrap_pydantic_error
from .protocol import AudioSessionError, MalformedEventError, ProtocolInvariantViolation

__all__ = [
    # Base
    "MutePuckError",
    # Device
    "DeviceError",
    "DeviceIOError",
    "DeviceUnavailableError",
    "UnsupportedDeviceError",
    # Protocol / events
    "AudioSessionError",
    "MalformedEventError",
    "ProtocolInvariantViolation",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # Handlers
    "ErrorContext",
    "format_error_for_display",
    "wrap_hid_error",
    "wrap_pydantic_error",
]
