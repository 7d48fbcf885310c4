"""
Device catalog: which USB ids are mute buttons, and how to talk to them.

::

    hidapi enumerates 20a0:42da
                 ↓
    DeviceCatalog.detect(0x20a0, 0x42da)
                 ↓  devices.json: family "mini", driver "MuteMe"
    DeviceConfig(model="MuteMe Mini", presentation=...)
                 ↓
    DeviceCatalog.create_driver(config) → get_driver("MuteMe")
                 ↓
    MuteMeDriver()

New hardware needs a catalog entry and, when its reports differ, a driver
registered with ``register_driver``. Nothing else changes.
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from mutepuck.exceptions import UnsupportedDeviceError, wrap_pydantic_error

from .config import DeviceConfig
from .drivers import get_driver
from .protocols import DeviceDriver
from .schema import Device, DeviceCatalogSchema, DeviceFamily

logger = logging.getLogger(__name__)

BUILTIN_CATALOG = Path(__file__).parent / "devices.json"


class DeviceCatalog:
    """
    Catalog of supported mute devices.

    Loads device configurations from JSON using Pydantic validation and
    provides detection and driver instantiation.
    """

    def __init__(self, path: Path | None = None):
        """
        Initialize device catalog.

        Args:
            path: Path to a devices.json catalog. If None, uses the built-in one.

        Raises:
            ConfigurationError: If the catalog is not valid
        """
        self.path = path or BUILTIN_CATALOG
        self.schema = self._load_schema()
        self.devices: list[DeviceConfig] = self._flatten_configs()

    def _load_schema(self) -> DeviceCatalogSchema:
        try:
            schema = DeviceCatalogSchema.from_json_file(self.path)
        except ValidationError as e:
            logger.error(f"Failed to load device catalog from {self.path}: {e}")
            raise wrap_pydantic_error(e, str(self.path)) from e
        logger.debug(f"Validated device catalog from {self.path}")
        return schema

    def _flatten_configs(self) -> list[DeviceConfig]:
        configs = [
            self._merge_family_and_device(family, device)
            for family in self.schema.families
            for device in family.devices
        ]
        logger.debug(f"Loaded {len(configs)} device configurations")
        return configs

    def _merge_family_and_device(self, family: DeviceFamily, device: Device) -> DeviceConfig:
        return DeviceConfig(
            family=family.family,
            model=device.model,
            manufacturer=family.manufacturer,
            driver=family.driver,
            identifiers=device.identifiers,
            presentation=family.presentation,
        )

    def known_ids(self) -> set[tuple[int, int]]:
        """All (vendor_id, product_id) pairs in the catalog."""
        return {ident.as_tuple() for config in self.devices for ident in config.identifiers}

    def families(self) -> list[str]:
        return [family.family for family in self.schema.families]

    def detect(self, vendor_id: int, product_id: int) -> DeviceConfig | None:
        """
        Find the configuration for a USB id pair.

        Returns:
            Matching DeviceConfig or None if the ids are unknown
        """
        for config in self.devices:
            if config.matches(vendor_id, product_id):
                logger.debug(f"Detected {config.model} from {vendor_id:04x}:{product_id:04x}")
                return config
        return None

    def get_family(self, family: str) -> DeviceConfig | None:
        """First configuration of a family, or None if the family is unknown."""
        for config in self.devices:
            if config.family == family:
                return config
        return None

    def resolve(self, vendor_id: int, product_id: int, family: str | None = None) -> DeviceConfig:
        """
        Select the configuration for a connected device.

        Args:
            vendor_id: USB vendor id
            product_id: USB product id
            family: Forced family name, overriding id detection

        Raises:
            UnsupportedDeviceError: If no configuration applies
        """
        if family is not None:
            config = self.get_family(family)
            if config is None:
                logger.warning(f"Unknown device family '{family}', falling back to id detection")
            else:
                return config

        config = self.detect(vendor_id, product_id)
        if config is None:
            raise UnsupportedDeviceError(vendor_id, product_id)
        return config

    def create_driver(self, config: DeviceConfig) -> DeviceDriver:
        """
        Create the codec for a device configuration.

        Raises:
            ValueError: If the driver is not registered
        """
        driver = get_driver(config.driver)
        if driver is None:
            raise ValueError(f"Unknown driver: {config.driver}")
        return driver
