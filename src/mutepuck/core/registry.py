"""Registry of active capture streams."""

import logging

from mutepuck.models import CaptureStream, StreamId

logger = logging.getLogger(__name__)


class StreamRegistry:
    """
    Authoritative table of active capture streams and their mute flags.

    The registry is owned by the dispatcher and mutated only from the
    dispatch loop in response to audio-session events, so it carries no
    lock. Both mutations are idempotent and never raise:

    - upsert() on an unknown id creates the entry (session events are
      not guaranteed to arrive in order at the boundary)
    - remove() on an unknown id is logged and dropped
    """

    def __init__(self) -> None:
        self._streams: dict[StreamId, CaptureStream] = {}

    def upsert(self, stream_id: StreamId, muted: bool, application: str | None = None) -> bool:
        """
        Create or update a stream.

        Args:
            stream_id: Session-assigned stream id
            muted: Current mute flag
            application: Owning application name; kept from the existing
                entry when None

        Returns:
            True if the registry changed
        """
        existing = self._streams.get(stream_id)
        if existing is None:
            self._streams[stream_id] = CaptureStream(
                stream_id=stream_id, muted=muted, application=application
            )
            logger.info(
                f"Tracking capture stream {stream_id} ({application or 'unknown'}): "
                f"{'muted' if muted else 'unmuted'}"
            )
            return True

        if existing.muted == muted and (application is None or existing.application == application):
            return False

        self._streams[stream_id] = existing.model_copy(
            update={
                "muted": muted,
                "application": application if application is not None else existing.application,
            }
        )
        logger.info(f"Capture stream {stream_id} is now {'muted' if muted else 'unmuted'}")
        return True

    def remove(self, stream_id: StreamId) -> bool:
        """
        Forget a stream.

        Returns:
            True if the stream was present
        """
        if self._streams.pop(stream_id, None) is None:
            logger.debug(f"Ignoring removal of unknown capture stream {stream_id}")
            return False

        logger.info(f"Capture stream {stream_id} removed")
        return True

    def snapshot(self) -> tuple[CaptureStream, ...]:
        """Immutable view of the current streams, ordered by id."""
        return tuple(self._streams[key] for key in sorted(self._streams))

    def stream_ids(self) -> list[StreamId]:
        """Ids of all tracked streams, ordered."""
        return sorted(self._streams)

    def __contains__(self, stream_id: object) -> bool:
        return stream_id in self._streams

    def __len__(self) -> int:
        return len(self._streams)
