"""
Centralized error handling utilities.

Each layer translates errors to be more useful at the next level up:

```
┌─────────────────────────────────────┐
│  USER LAYER (CLI)                   │
│  - Formats error.user_message       │
│  - Shows error.recovery_hint        │
└─────────────────────────────────────┘
                  ↑  MutePuckError
┌─────────────────────────────────────┐
│  APPLICATION LAYER (core, session)  │
│  - Catches low-level exceptions     │
│  - Converts to MutePuckError        │
└─────────────────────────────────────┘
                  ↑  OSError, ValueError, PulseError, ...
┌─────────────────────────────────────┐
│  LOW LEVEL (hidapi, pulsectl, udev) │
└─────────────────────────────────────┘
```

## Handling Patterns

| Pattern | Code |
|---------|------|
| Convert HID failure | `raise wrap_hid_error(e, "write", device) from e` |
| Convert config failure | `raise wrap_pydantic_error(e, str(path)) from e` |
| Critical section with auto-logging | `with ErrorContext("start audio session"): ...` |
| Show error in the CLI | `message, hint = format_error_for_display(e)` |
"""

import logging
from typing import Optional

from .base import MutePuckError
from .config import ConfigFileInvalidError, ConfigValidationError
from .device import DeviceIOError, DeviceUnavailableError

logger = logging.getLogger(__name__)


class ErrorContext:
    """
    Context manager for error handling with automatic logging.

    Example:
        ```python
        with ErrorContext("start hotplug monitor", logger_instance=logger):
            monitor.start()
        ```
    """

    def __init__(
        self,
        operation: str,
        logger_instance: Optional[logging.Logger] = None,
        re_raise: bool = True
    ):
        """
        Initialize error context.

        Args:
            operation: Description of the operation
            logger_instance: Logger to use (defaults to module logger)
            re_raise: Whether to re-raise exceptions
        """
        self.operation = operation
        self.logger = logger_instance or logger
        self.re_raise = re_raise
        self.error: Optional[Exception] = None

    def __enter__(self):
        self.logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """
        Exit the context and handle any exceptions.

        Returns:
            True if exception should be suppressed, False otherwise
        """
        if exc_type is None:
            self.logger.debug(f"Completed: {self.operation}")
            return False

        self.error = exc_val
        if isinstance(exc_val, MutePuckError):
            self.logger.error(f"Failed to {self.operation}: {exc_val.technical_message}")
        else:
            self.logger.error(f"Failed to {self.operation}: {exc_val}", exc_info=True)

        return not self.re_raise


def wrap_hid_error(error: Exception, operation: str, device: Optional[str] = None) -> MutePuckError:
    """
    Convert low-level hidapi errors to mutepuck exceptions.

    hidapi raises OSError for failed opens/reads/writes and ValueError
    when the handle was already closed underneath us.

    Args:
        error: The original exception from the HID library
        operation: "open", "read" or "write"
        device: Device description for the message

    Returns:
        DeviceUnavailableError for failed opens, DeviceIOError otherwise
    """
    error_msg = str(error) or type(error).__name__

    if operation == "open":
        return DeviceUnavailableError(
            reason=f"Could not open mute device: {error_msg}",
            device=device,
        )

    return DeviceIOError(operation, device=device, original_error=error_msg)


def wrap_pydantic_error(error: Exception, file_path: str) -> MutePuckError:
    """
    Convert Pydantic validation errors to mutepuck exceptions.

    Args:
        error: The Pydantic ValidationError
        file_path: Path to the config file that failed validation

    Returns:
        A ConfigurationError with appropriate type and message
    """
    from pydantic import ValidationError

    error_msg = str(error)

    # Format: "Invalid JSON: <actual error> [type=json_invalid, ..."
    if "Invalid JSON" in error_msg or "json_invalid" in error_msg:
        if "Invalid JSON:" in error_msg:
            parse_error = error_msg.split("Invalid JSON:")[1].split("[type=")[0].strip()
        else:
            parse_error = error_msg
        return ConfigFileInvalidError(file_path, parse_error)

    if isinstance(error, ValidationError):
        errors = error.errors()
        if len(errors) == 1:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get('loc', ('unknown',)))
            return ConfigValidationError(
                field=field,
                value=first_error.get('input', None),
                error_msg=first_error.get('msg', 'validation failed'),
                file_path=file_path
            )
        if errors:
            error_lines = []
            for err in errors:
                field = ".".join(str(loc) for loc in err.get('loc', ('unknown',)))
                error_lines.append(f"  - {field}: {err.get('msg', 'validation failed')}")

            combined_msg = f"{len(errors)} validation errors:\n" + "\n".join(error_lines)
            return ConfigValidationError(
                field="multiple fields",
                value=None,
                error_msg=combined_msg,
                file_path=file_path
            )

    return ConfigValidationError(
        field="unknown",
        value=None,
        error_msg=error_msg,
        file_path=file_path
    )


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """
    Format an exception for user display.

    Returns:
        Tuple of (user_message, recovery_hint or None)
    """
    if isinstance(error, MutePuckError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None
