"""Observer protocols."""

from typing import Protocol, runtime_checkable

from mutepuck.models import IndicatorState

from .events import IndicatorEvent


@runtime_checkable
class IndicatorObserver(Protocol):
    """Receives indicator events from the dispatcher.

    Called on the dispatcher thread - keep it fast!
    """

    def on_indicator_event(self, event: IndicatorEvent, state: IndicatorState) -> None:
        """
        Handle an indicator event.

        Args:
            event: What happened
            state: Aggregate mute state at the time of the event
        """
        ...
