"""
Event dispatcher: the single loop that owns the indicator.

::

    PulseAudioSession ──StreamAdded/Removed/MuteChanged──┐
    HardwareChannel ────ButtonEvent/DeviceLost───────────┤
    HotplugMonitor ─────DeviceAttached/Detached──────────┤
                                                         ↓
                                                ┌─────────────────┐
                                                │  inbox (Queue)  │
                                                └────────┬────────┘
                                                         ↓
                                                ┌─────────────────┐
                                                │ EventDispatcher │
                                                │  StreamRegistry │
                                                │  MuteStateEngine│
                                                └──┬───────────┬──┘
                                  set_mute(id, m)  │           │  write_command(cmd)
                                                   ↓           ↓
                                        PulseAudioSession   HardwareChannel

Producers only ever call post(). Everything else (registry mutation,
state reduction, the last written command, opening and closing the
channel) happens on the thread running run(), one event at a time.

Output is change-detected on the full command, so a refresh that lands
on the same LED command writes nothing. After a reconnect the last
written command is forgotten and the current state is written at once.
"""

import logging
import queue

from mutepuck.core.engine import MuteStateEngine
from mutepuck.core.registry import StreamRegistry
from mutepuck.devices.channel import HardwareChannel
from mutepuck.devices.hotplug import HotplugMonitor
from mutepuck.devices.transport import HidDeviceInfo
from mutepuck.exceptions import DeviceError, DeviceIOError, DeviceUnavailableError
from mutepuck.models import DeviceCommand, IndicatorState
from mutepuck.protocols import (
    ButtonEvent,
    DeviceAttached,
    DeviceDetached,
    DeviceLost,
    IndicatorEvent,
    IndicatorObserver,
    StreamAdded,
    StreamMuteChanged,
    StreamRemoved,
)
from mutepuck.session import AudioSession
from mutepuck.utils import ObserverManager

logger = logging.getLogger(__name__)

_STOP = object()


class EventDispatcher:
    """Serializes session, button and hotplug events into one ordered stream."""

    def __init__(
        self,
        session: AudioSession,
        channel: HardwareChannel,
        engine: MuteStateEngine | None = None,
        registry: StreamRegistry | None = None,
        monitor: HotplugMonitor | None = None,
        clear_on_exit: bool = True,
    ):
        """
        Initialize dispatcher.

        Args:
            session: Audio session receiving mute commands
            channel: Hardware channel for LED output
            engine: State engine (a default one is created if None)
            registry: Stream registry (a fresh one is created if None)
            monitor: Hotplug monitor to notify about unusable connections
            clear_on_exit: Write the OFF presentation on shutdown
        """
        self.session = session
        self.channel = channel
        self.engine = engine or MuteStateEngine()
        self.monitor = monitor
        self.clear_on_exit = clear_on_exit
        self._registry = registry or StreamRegistry()

        self._inbox: queue.Queue = queue.Queue()
        self._state = IndicatorState.OFF
        self._held = False
        self._last_written: DeviceCommand | None = None

        self._observers = ObserverManager[IndicatorObserver](observer_type_name="indicator")

    # =================================================================
    # Producers
    # =================================================================

    def post(self, event: object) -> None:
        """Queue an event. Safe to call from any thread."""
        self._inbox.put(event)

    def stop(self) -> None:
        """Ask run() to finish after the events already queued."""
        self._inbox.put(_STOP)

    # =================================================================
    # Loop
    # =================================================================

    def run(self) -> None:
        """
        Process events until stop() is called.

        Raises:
            ProtocolInvariantViolation: An unsafe report was about to be written
        """
        logger.debug("Dispatcher started")
        try:
            while True:
                event = self._inbox.get()
                if event is _STOP:
                    break
                self.handle(event)
        finally:
            self._shutdown()
        logger.debug("Dispatcher stopped")

    def process_pending(self) -> int:
        """
        Handle every event already queued, without blocking.

        Returns:
            Number of events handled
        """
        handled = 0
        while True:
            try:
                event = self._inbox.get_nowait()
            except queue.Empty:
                return handled
            if event is _STOP:
                return handled
            self.handle(event)
            handled += 1

    def handle(self, event: object) -> None:
        """Handle one event on the calling thread."""
        logger.debug(f"Handling {event!r}")

        if isinstance(event, StreamAdded):
            self._registry.upsert(event.stream_id, event.muted, event.application)
            self.refresh()
        elif isinstance(event, StreamMuteChanged):
            self._registry.upsert(event.stream_id, event.muted)
            self.refresh()
        elif isinstance(event, StreamRemoved):
            self._registry.remove(event.stream_id)
            self.refresh()
        elif isinstance(event, ButtonEvent):
            self._on_button(event)
        elif isinstance(event, DeviceAttached):
            self._on_attached(event.device)
        elif isinstance(event, DeviceDetached):
            self._on_detached(event.device)
        elif isinstance(event, DeviceLost):
            self._on_lost(event.device, event.reason)
        else:
            logger.warning(f"Dropping unknown event {event!r}")

    # =================================================================
    # State and output
    # =================================================================

    @property
    def state(self) -> IndicatorState:
        return self._state

    @property
    def registry(self) -> StreamRegistry:
        return self._registry

    @property
    def held(self) -> bool:
        return self._held

    @property
    def last_written(self) -> DeviceCommand | None:
        return self._last_written

    def refresh(self) -> None:
        """Reduce the registry and write the resulting command if it changed."""
        state = self.engine.reduce(self._registry.snapshot())
        if state is not self._state:
            logger.info(f"Indicator state: {self._state.value} -> {state.value}")
            self._state = state
            self._observers.notify("on_indicator_event", IndicatorEvent.STATE_CHANGED, state)

        self._write(self.engine.command_for(state, self._held))

    def _write(self, command: DeviceCommand) -> None:
        if command == self._last_written:
            return

        try:
            self.channel.write_command(command)
        except DeviceUnavailableError as e:
            logger.debug(f"Output suspended: {e.user_message}")
            return
        except DeviceIOError as e:
            logger.warning(f"Write failed: {e.technical_message}")
            info = self.channel.device_info
            self._disconnected(info, mark=True)
            return

        logger.debug(f"LED: {command.describe()}")
        self._last_written = command

    # =================================================================
    # Button
    # =================================================================

    def _on_button(self, event: ButtonEvent) -> None:
        try:
            if event.pressed:
                self._held = True
                plan = self.engine.plan_toggle(self._registry.snapshot())
                if not plan:
                    logger.info("Button pressed with no streams")
                else:
                    target = plan[0][1]
                    logger.info(f"Button pressed: {'muting' if target else 'unmuting'} {len(plan)} stream(s)")
                for stream_id, muted in plan:
                    self.session.set_mute(stream_id, muted)
            else:
                self._held = False
            self.refresh()
        finally:
            self.channel.acknowledge()

    # =================================================================
    # Connection
    # =================================================================

    def _on_attached(self, info: HidDeviceInfo) -> None:
        try:
            config = self.channel.open(info)
        except (DeviceError, ValueError) as e:
            message = e.user_message if isinstance(e, DeviceError) else str(e)
            logger.error(f"Could not use {info.describe()}: {message}")
            if self.monitor is not None:
                self.monitor.mark_disconnected(info)
            return

        self.engine.presentation = config.presentation
        self._held = False
        self._last_written = None
        self._observers.notify("on_indicator_event", IndicatorEvent.DEVICE_CONNECTED, self._state)
        self.refresh()

    def _on_detached(self, info: HidDeviceInfo) -> None:
        current = self.channel.device_info
        if current is None or current.path != info.path:
            logger.debug(f"Ignoring detach of {info.describe()}, not in use")
            return
        self._disconnected(current, mark=False)

    def _on_lost(self, info: HidDeviceInfo, reason: str) -> None:
        current = self.channel.device_info
        if current is None or current.path != info.path:
            logger.debug(f"Ignoring stale loss of {info.describe()}")
            return
        logger.warning(f"Mute device lost: {reason}")
        self._disconnected(current, mark=True)

    def _disconnected(self, info: HidDeviceInfo | None, mark: bool) -> None:
        self.channel.close()
        self._held = False
        self._last_written = None
        self._observers.notify("on_indicator_event", IndicatorEvent.DEVICE_DISCONNECTED, self._state)
        if mark and info is not None and self.monitor is not None:
            self.monitor.mark_disconnected(info)

    def _shutdown(self) -> None:
        if self.clear_on_exit and self.channel.is_open:
            try:
                self.channel.write_command(self.engine.command_for(IndicatorState.OFF))
            except DeviceError as e:
                logger.debug(f"Could not clear LED on exit: {e.user_message}")
        self.channel.close()

    # =================================================================
    # Observers
    # =================================================================

    def register_observer(self, observer: IndicatorObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: IndicatorObserver) -> None:
        self._observers.unregister(observer)
