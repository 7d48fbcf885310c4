"""Device driver registry.

Maps driver names (the "driver" field of a catalog family) to driver
factories. A family selects its codec by name at connect time.
"""

from collections.abc import Callable

from mutepuck.devices.protocols import DeviceDriver

DriverFactory = Callable[[], DeviceDriver]

# Format: "DriverName": factory
DRIVERS: dict[str, DriverFactory] = {}


def register_driver(name: str, factory: DriverFactory) -> None:
    """
    Register a device driver.

    Args:
        name: Driver name (matches "driver" field in the catalog)
        factory: Zero-argument callable returning a DeviceDriver
    """
    DRIVERS[name] = factory


def get_driver(name: str) -> DeviceDriver | None:
    """
    Create a driver by name.

    Returns:
        Driver instance or None if not registered
    """
    factory = DRIVERS.get(name)
    return factory() if factory else None


def _register_builtin_drivers() -> None:
    """Register built-in drivers. Called on module import."""
    from .muteme import MuteMeDriver

    register_driver(MuteMeDriver.name, MuteMeDriver)


_register_builtin_drivers()

__all__ = [
    "DRIVERS",
    "DriverFactory",
    "get_driver",
    "register_driver",
]
