"""
PulseAudio session (also PipeWire through pipewire-pulse).

Capture streams are PulseAudio *source outputs*: one per application
recording from a microphone. Their ``mute`` flag is what the mute button
toggles.

Two connections are used because pulsectl does not allow calls on a
connection from inside its event callback:

- the listener connection (own thread) subscribes to ``source_output``
  events and resolves each one with a ``source_output_info`` query
- the command connection (caller's thread) issues ``source_output_mute``

Streams created by volume-control and settings applications (level
meters) are filtered out by application name and ``media.category``.
"""

import logging
import threading
from collections.abc import Callable, Iterable

import pulsectl

from mutepuck.exceptions import AudioSessionError
from mutepuck.models import CaptureStream, StreamId
from mutepuck.protocols.events import SessionEvent, StreamAdded, StreamMuteChanged, StreamRemoved

from .protocols import SessionCallback

logger = logging.getLogger(__name__)

# event_listen() timeout; bounds how long close() waits for the listener
LISTEN_TIMEOUT = 0.5


class PulseAudioSession:
    """AudioSession backed by pulsectl."""

    def __init__(
        self,
        client_name: str = "mutepuck",
        ignore_applications: Iterable[str] = (),
        ignore_media_categories: Iterable[str] = (),
        reconnect_delay: float = 2.0,
        pulse_factory: Callable[[str], pulsectl.Pulse] = pulsectl.Pulse,
    ):
        """
        Initialize the session. No connection is made until subscribe().

        Args:
            client_name: Client name shown by the audio server
            ignore_applications: application.name values to ignore
            ignore_media_categories: media.category values to ignore
            reconnect_delay: Wait between reconnect attempts (seconds)
            pulse_factory: Creates connections (takes the client name)
        """
        self.client_name = client_name
        self.ignore_applications = set(ignore_applications)
        self.ignore_media_categories = set(ignore_media_categories)
        self._reconnect_delay = reconnect_delay
        self._pulse_factory = pulse_factory

        self._callback: SessionCallback | None = None
        self._tracked: set[StreamId] = set()
        self._pending: list[tuple[object, int]] = []
        self._stop_event = threading.Event()
        self._listener: threading.Thread | None = None

        self._command_lock = threading.Lock()
        self._command_pulse: pulsectl.Pulse | None = None

    # ================================================================
    # PUBLIC API
    # ================================================================

    def subscribe(self, callback: SessionCallback) -> None:
        """Start the listener thread. Existing streams are reported first."""
        if self._listener is not None:
            logger.warning("PulseAudioSession is already subscribed")
            return

        self._callback = callback
        self._stop_event.clear()
        self._listener = threading.Thread(target=self._listen, name="mutepuck-pulse", daemon=True)
        self._listener.start()

    def set_mute(self, stream_id: StreamId, muted: bool) -> None:
        """Mute or unmute one source output. Failures are logged."""
        with self._command_lock:
            try:
                if self._command_pulse is None:
                    self._command_pulse = self._pulse_factory(f"{self.client_name}-commands")
                self._command_pulse.source_output_mute(stream_id, muted)
                logger.debug(f"Requested {'mute' if muted else 'unmute'} of capture stream {stream_id}")
            except pulsectl.PulseIndexError:
                logger.debug(f"Capture stream {stream_id} disappeared before {'mute' if muted else 'unmute'}")
            except pulsectl.PulseError as e:
                logger.warning(f"Could not {'mute' if muted else 'unmute'} capture stream {stream_id}: {e}")
                self._close_command_connection()

    def list_streams(self) -> list[CaptureStream]:
        """
        One-shot listing of capture streams (ignore filters applied).

        Raises:
            AudioSessionError: If the audio server cannot be reached
        """
        try:
            with self._pulse_factory(f"{self.client_name}-list") as pulse:
                return [
                    self._to_stream(info)
                    for info in pulse.source_output_list()
                    if not self._is_ignored(info)
                ]
        except pulsectl.PulseError as e:
            raise AudioSessionError(str(e)) from e

    def close(self) -> None:
        """Stop the listener and close both connections."""
        self._stop_event.set()
        if self._listener and self._listener.is_alive():
            self._listener.join(timeout=LISTEN_TIMEOUT * 4)
        self._listener = None

        with self._command_lock:
            self._close_command_connection()

    # ================================================================
    # FILTERING
    # ================================================================

    def _is_ignored(self, info) -> bool:
        proplist = getattr(info, "proplist", None) or {}
        application = proplist.get("application.name")
        category = proplist.get("media.category")
        if application in self.ignore_applications or category in self.ignore_media_categories:
            logger.debug(f"Ignoring capture stream {info.index} ({application}, {category})")
            return True
        return False

    @staticmethod
    def _to_stream(info) -> CaptureStream:
        proplist = getattr(info, "proplist", None) or {}
        return CaptureStream(
            stream_id=info.index,
            muted=bool(info.mute),
            application=proplist.get("application.name"),
        )

    # ================================================================
    # LISTENER THREAD
    # ================================================================

    def _emit(self, event: SessionEvent) -> None:
        if self._callback is not None:
            self._callback(event)

    def _listen(self) -> None:
        logger.debug("Audio session listener started")

        while not self._stop_event.is_set():
            try:
                with self._pulse_factory(f"{self.client_name}-events") as pulse:
                    logger.info("Connected to the audio server")
                    # Subscribe before listing so no change between the two is missed
                    self._pending.clear()
                    pulse.event_mask_set("source_output")
                    pulse.event_callback_set(self._on_pulse_event)
                    self._sync(pulse)
                    self._drain(pulse)

                    while not self._stop_event.is_set():
                        pulse.event_listen(timeout=LISTEN_TIMEOUT)
                        self._drain(pulse)

            except pulsectl.PulseError as e:
                if self._stop_event.is_set():
                    break
                logger.warning(f"Audio server connection lost: {e}")
                self._forget_all()
                self._stop_event.wait(self._reconnect_delay)

        logger.debug("Audio session listener stopped")

    def _on_pulse_event(self, ev) -> None:
        # Runs inside event_listen(); no pulse calls allowed here
        self._pending.append((ev.t, ev.index))
        raise pulsectl.PulseLoopStop

    def _drain(self, pulse: pulsectl.Pulse) -> None:
        pending, self._pending = self._pending, []
        for kind, index in pending:
            self._resolve(pulse, kind, index)

    def _sync(self, pulse: pulsectl.Pulse) -> None:
        """Report existing source outputs and drop tracked ones that are gone."""
        current = {info.index: info for info in pulse.source_output_list() if not self._is_ignored(info)}

        for stream_id in sorted(self._tracked - current.keys()):
            self._tracked.discard(stream_id)
            self._emit(StreamRemoved(stream_id))

        for index, info in sorted(current.items()):
            stream = self._to_stream(info)
            self._tracked.add(index)
            self._emit(StreamAdded(index, muted=stream.muted, application=stream.application))

        if not current:
            logger.info("No capture streams active")

    def _resolve(self, pulse: pulsectl.Pulse, kind, index: int) -> None:
        if kind == "remove":
            self._drop(index)
            return

        try:
            info = pulse.source_output_info(index)
        except pulsectl.PulseIndexError:
            # Gone before we could look at it
            self._drop(index)
            return

        if self._is_ignored(info):
            return

        stream = self._to_stream(info)
        if index in self._tracked:
            self._emit(StreamMuteChanged(index, muted=stream.muted))
        else:
            self._tracked.add(index)
            self._emit(StreamAdded(index, muted=stream.muted, application=stream.application))

    def _drop(self, index: int) -> None:
        if index not in self._tracked:
            logger.debug(f"Ignoring removal of untracked source output {index}")
            return
        self._tracked.discard(index)
        self._emit(StreamRemoved(index))

    def _forget_all(self) -> None:
        for stream_id in sorted(self._tracked):
            self._emit(StreamRemoved(stream_id))
        self._tracked.clear()
        self._pending.clear()

    def _close_command_connection(self) -> None:
        if self._command_pulse is not None:
            self._command_pulse.close()
            self._command_pulse = None
