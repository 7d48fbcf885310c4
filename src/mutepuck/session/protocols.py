"""Audio session protocol."""

from collections.abc import Callable
from typing import Protocol

from mutepuck.models import StreamId
from mutepuck.protocols.events import SessionEvent

SessionCallback = Callable[[SessionEvent], None]


class AudioSession(Protocol):
    """
    The audio session manager, seen from the dispatcher.

    Implementations deliver StreamAdded, StreamRemoved and
    StreamMuteChanged through the subscribed callback, from their own
    thread. Existing streams are reported as StreamAdded right after
    subscribing.
    """

    def subscribe(self, callback: SessionCallback) -> None:
        """Start delivering session events. Called once."""
        ...

    def set_mute(self, stream_id: StreamId, muted: bool) -> None:
        """
        Request a mute change. Fire-and-forget.

        The change is confirmed, if at all, by a later StreamMuteChanged.
        Failures are logged, never raised.
        """
        ...

    def close(self) -> None:
        """Stop delivering events and release connections."""
        ...
