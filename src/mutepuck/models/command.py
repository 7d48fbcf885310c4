"""Device command model for LED control."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import BrightnessMode, LedColor


class DeviceCommand(BaseModel):
    """Semantic output request for the indicator LED.

    Drivers encode this into the hardware report. The model is frozen so
    commands can be compared for change detection and used as dict keys.

    Note:
        `timer_enabled` maps onto a hardware timer that switches the LED
        off after a fixed interval. Once set it cannot be cleared by
        sending a report with the flag unset; only a device reset clears
        it. The built-in presentations never set it.
    """

    model_config = ConfigDict(frozen=True)

    color: LedColor = Field(default=LedColor.OFF, description="LED color")
    brightness: BrightnessMode = Field(
        default=BrightnessMode.HIGH, description="Brightness or pulse mode"
    )
    timer_enabled: bool = Field(default=False, description="Enable the sticky auto-off timer")

    @classmethod
    def off(cls) -> "DeviceCommand":
        """LED off."""
        return cls()

    @property
    def is_off(self) -> bool:
        return self.color is LedColor.OFF

    def describe(self) -> str:
        """Short human-readable description, e.g. 'red slow_pulse'."""
        if self.is_off:
            return "off"
        text = f"{self.color.value} {self.brightness.value}"
        if self.timer_enabled:
            text += " (timer)"
        return text
