"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field, field_serializer

from mutepuck.utils.persistence import PydanticPersistence

DEFAULT_CONFIG_DIR = Path.home() / ".mutepuck"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.json"


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Hotplug
    poll_interval: float = Field(
        default=5.0,
        gt=0,
        description="How often to rescan for the mute device when no live hotplug source exists (seconds)",
    )
    use_udev: bool = Field(
        default=True,
        description="Use udev notifications for hotplug; polling is used when udev is unavailable",
    )

    # Hardware
    read_timeout_ms: int = Field(
        default=100,
        gt=0,
        description="Reader wake-up interval used to notice shutdown (milliseconds)",
    )
    device_family: str | None = Field(
        default=None,
        description=(
            "Force a device family from the catalog (e.g. 'original', 'mini'). "
            "None = select by USB vendor/product id."
        ),
    )
    devices_file: Path | None = Field(
        default=None,
        description="Alternate device catalog JSON (None = built-in catalog)",
    )
    clear_on_exit: bool = Field(default=True, description="Turn the LED off on shutdown")

    # Audio session
    client_name: str = Field(default="mutepuck", description="Client name shown by the audio server")
    ignore_applications: list[str] = Field(
        default_factory=lambda: ["GNOME Settings", "PulseAudio Volume Control"],
        description="Applications whose capture streams are not tracked (level meters, settings panels)",
    )
    ignore_media_categories: list[str] = Field(
        default_factory=lambda: ["Manager"],
        description="media.category values whose capture streams are not tracked",
    )

    @field_serializer("devices_file")
    def serialize_path(self, path: Path | None) -> str | None:
        """Serialize Path to string."""
        return str(path) if path is not None else None

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses ~/.mutepuck/config.json.

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        if path is None:
            path = DEFAULT_CONFIG_PATH

        return PydanticPersistence.load_json_or_default(path, cls)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        if path is None:
            path = DEFAULT_CONFIG_PATH

        PydanticPersistence.save_json(self, path)
