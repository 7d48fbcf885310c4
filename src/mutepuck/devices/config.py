"""Pydantic-based device configuration for runtime use.

DeviceConfig is the flattened runtime representation of one device model,
created by merging family defaults with the model entry.
"""

from pydantic import BaseModel, Field

from mutepuck.models import PresentationPolicy

from .schema import DeviceIdentifier


class DeviceConfig(BaseModel):
    """
    Flattened device configuration (family + model merged).

    This is the runtime representation used by the hardware channel and
    the dispatcher.
    """

    # Identity
    family: str = Field(description="Device family identifier")
    model: str = Field(description="Device model name")
    manufacturer: str = Field(description="Manufacturer name")
    driver: str = Field(description="Driver name for codec lookup")

    # Detection
    identifiers: list[DeviceIdentifier] = Field(
        default_factory=list, description="USB ids that select this configuration"
    )

    # Presentation
    presentation: PresentationPolicy = Field(default_factory=PresentationPolicy)

    def matches(self, vendor_id: int, product_id: int) -> bool:
        """Check if a USB id pair belongs to this device."""
        return (vendor_id, product_id) in {ident.as_tuple() for ident in self.identifiers}
