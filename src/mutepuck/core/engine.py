"""Mute state engine: reduction, toggle policy and presentation lookup.

Everything here is a pure function of its inputs. The dispatcher feeds
it registry snapshots and acts on the results.

Reduction
---------

::

    streams                          state
    ───────────────────────────────  ─────────────────
    (none)                           OFF
    all muted = False                UNMUTED
    all muted = True                 MUTED
    mixed                            PARTIALLY_UNMUTED

Toggle policy
-------------

A button press computes one target flag and applies it to every stream:
UNMUTED mutes everything, MUTED and PARTIALLY_UNMUTED unmute everything,
OFF does nothing.
"""

from collections.abc import Iterable

from mutepuck.models import CaptureStream, DeviceCommand, IndicatorState, PresentationPolicy, StreamId


def reduce_state(streams: Iterable[CaptureStream]) -> IndicatorState:
    """
    Reduce a set of capture streams to one indicator state.

    Args:
        streams: Registry snapshot

    Returns:
        The aggregate indicator state
    """
    state = IndicatorState.OFF
    for stream in streams:
        if state is IndicatorState.OFF:
            state = IndicatorState.MUTED if stream.muted else IndicatorState.UNMUTED
        elif state is IndicatorState.MUTED and not stream.muted:
            return IndicatorState.PARTIALLY_UNMUTED
        elif state is IndicatorState.UNMUTED and stream.muted:
            return IndicatorState.PARTIALLY_UNMUTED
    return state


def toggle_target(state: IndicatorState) -> bool | None:
    """
    Mute flag a button press should apply for the given state.

    Returns:
        True to mute everything, False to unmute everything,
        None when there is nothing to toggle
    """
    if state is IndicatorState.OFF:
        return None
    return state is IndicatorState.UNMUTED


class MuteStateEngine:
    """Binds the pure policies to one device family's presentation."""

    def __init__(self, presentation: PresentationPolicy | None = None):
        self.presentation = presentation or PresentationPolicy()

    def reduce(self, streams: Iterable[CaptureStream]) -> IndicatorState:
        return reduce_state(streams)

    def plan_toggle(self, streams: Iterable[CaptureStream]) -> list[tuple[StreamId, bool]]:
        """
        Mute commands for a button press.

        Args:
            streams: Registry snapshot at the time of the press

        Returns:
            One (stream_id, muted) pair per stream; empty when OFF
        """
        streams = tuple(streams)
        target = toggle_target(reduce_state(streams))
        if target is None:
            return []
        return [(stream.stream_id, target) for stream in streams]

    def command_for(self, state: IndicatorState, held: bool = False) -> DeviceCommand:
        return self.presentation.command_for(state, held)
