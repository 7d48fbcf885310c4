"""Pydantic models for the device catalog schema.

This module defines the structure of the devices.json catalog using
Pydantic v2 for type safety and validation.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from mutepuck.models import PresentationPolicy


class DeviceIdentifier(BaseModel):
    """USB vendor/product id pair."""

    vendor_id: int = Field(ge=0, le=0xFFFF, description="USB vendor id")
    product_id: int = Field(ge=0, le=0xFFFF, description="USB product id")

    def as_tuple(self) -> tuple[int, int]:
        return (self.vendor_id, self.product_id)

    def __str__(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x}"


class Device(BaseModel):
    """Individual device model within a family."""

    model: str = Field(min_length=1, description="Device model name (e.g., 'MuteMe Mini')")
    identifiers: list[DeviceIdentifier] = Field(
        min_length=1, description="USB ids this model enumerates with"
    )


class DeviceFamily(BaseModel):
    """Device family configuration (e.g., MuteMe Original)."""

    family: str = Field(min_length=1, description="Family identifier (e.g., 'original')")
    manufacturer: str = Field(min_length=1, description="Manufacturer name")
    driver: str = Field(min_length=1, description="Driver name mapping to a registered codec")
    presentation: PresentationPolicy = Field(
        default_factory=PresentationPolicy,
        description="LED command per indicator state for this family",
    )
    devices: list[Device] = Field(default_factory=list, description="Models in this family")

    @field_validator("family")
    @classmethod
    def validate_family(cls, v: str) -> str:
        """Family names are used on the command line, so keep them simple."""
        if not v.replace("_", "").replace("-", "").isalnum():
            raise ValueError(f"Family name '{v}' must be alphanumeric (with '-' or '_')")
        return v


class DeviceCatalogSchema(BaseModel):
    """Root schema for the devices.json catalog."""

    families: list[DeviceFamily] = Field(default_factory=list, description="List of device families")

    @classmethod
    def from_json_file(cls, path: Path) -> "DeviceCatalogSchema":
        """Load catalog from JSON file with validation."""
        with open(path) as f:
            return cls.model_validate_json(f.read())
