"""Presentation policy: how each indicator state looks on the LED."""

from pydantic import BaseModel, ConfigDict, Field

from .command import DeviceCommand
from .enums import BrightnessMode, IndicatorState, LedColor


class StatePresentation(BaseModel):
    """One LED command per indicator state."""

    model_config = ConfigDict(frozen=True)

    off: DeviceCommand = Field(default_factory=DeviceCommand.off)
    unmuted: DeviceCommand = Field(
        default_factory=lambda: DeviceCommand(color=LedColor.GREEN, brightness=BrightnessMode.HIGH)
    )
    muted: DeviceCommand = Field(
        default_factory=lambda: DeviceCommand(color=LedColor.RED, brightness=BrightnessMode.SLOW_PULSE)
    )
    partially_unmuted: DeviceCommand = Field(
        default_factory=lambda: DeviceCommand(color=LedColor.GREEN, brightness=BrightnessMode.FAST_PULSE)
    )

    def for_state(self, state: IndicatorState) -> DeviceCommand:
        return getattr(self, state.value)


class HeldPresentation(BaseModel):
    """Overrides shown while the button is held down.

    States left as None show their normal presentation.
    """

    model_config = ConfigDict(frozen=True)

    off: DeviceCommand | None = Field(
        default_factory=lambda: DeviceCommand(color=LedColor.BLUE, brightness=BrightnessMode.LOW)
    )
    unmuted: DeviceCommand | None = Field(
        default_factory=lambda: DeviceCommand(color=LedColor.GREEN, brightness=BrightnessMode.LOW)
    )
    muted: DeviceCommand | None = Field(
        default_factory=lambda: DeviceCommand(color=LedColor.RED, brightness=BrightnessMode.HIGH)
    )
    partially_unmuted: DeviceCommand | None = None

    def for_state(self, state: IndicatorState) -> DeviceCommand | None:
        return getattr(self, state.value)


class PresentationPolicy(BaseModel):
    """Per-family mapping from indicator state to LED command.

    The defaults are the "Original" family table:

    ==================  =======================  ====================
    State               Normal                   Held
    ==================  =======================  ====================
    off                 LED off                  blue, low
    unmuted             green, high              green, low
    muted               red, slow pulse          red, high
    partially_unmuted   green, fast pulse        (unchanged)
    ==================  =======================  ====================
    """

    model_config = ConfigDict(frozen=True)

    normal: StatePresentation = Field(default_factory=StatePresentation)
    held: HeldPresentation = Field(default_factory=HeldPresentation)

    def command_for(self, state: IndicatorState, held: bool = False) -> DeviceCommand:
        """
        Look up the LED command for a state.

        Args:
            state: Aggregate indicator state
            held: Whether the button is currently held down

        Returns:
            The command to write
        """
        if held:
            override = self.held.for_state(state)
            if override is not None:
                return override
        return self.normal.for_state(state)
