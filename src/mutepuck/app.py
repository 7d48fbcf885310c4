"""
Top-level mutepuck application.

Wires the audio session, the device catalog, the HID transport, the
hardware channel and the hotplug monitor to one EventDispatcher.

Architecture:
    MutePuckApp (this class)
    ├── session: PulseAudioSession ──────┐
    ├── monitor: HotplugMonitor ─────────┤  post()
    ├── channel: HardwareChannel ────────┤
    │                                    ↓
    └── dispatcher: EventDispatcher (runs on the calling thread)

With ``hardware=False`` no hotplug monitor is started, so the channel is
never opened and LED output stays suspended. The ``watch`` command uses
this to follow the indicator state without a device.
"""

import logging

from mutepuck.core import EventDispatcher
from mutepuck.devices import DeviceCatalog, HardwareChannel, HidTransport, HotplugMonitor
from mutepuck.exceptions import ErrorContext
from mutepuck.models import AppConfig
from mutepuck.session import AudioSession, PulseAudioSession

logger = logging.getLogger(__name__)


class MutePuckApp:
    """Owns every long-lived component of the daemon."""

    def __init__(
        self,
        config: AppConfig,
        hardware: bool = True,
        session: AudioSession | None = None,
        transport: HidTransport | None = None,
    ):
        """
        Initialize the application. Nothing is started yet.

        Args:
            config: Application configuration
            hardware: Watch for and drive the mute device
            session: Audio session (a PulseAudioSession is created if None)
            transport: HID transport (an HidTransport is created if None)

        Raises:
            ConfigurationError: If the device catalog is invalid
        """
        self.config = config
        self.hardware = hardware

        self.session = session or PulseAudioSession(
            client_name=config.client_name,
            ignore_applications=config.ignore_applications,
            ignore_media_categories=config.ignore_media_categories,
        )
        self.catalog = DeviceCatalog(config.devices_file)
        self.transport = transport or HidTransport()

        self.channel = HardwareChannel(
            self.transport,
            self.catalog,
            on_event=self._post,
            read_timeout_ms=config.read_timeout_ms,
            device_family=config.device_family,
        )
        self.monitor: HotplugMonitor | None = None
        if hardware:
            self.monitor = HotplugMonitor(
                self.transport,
                self.catalog,
                on_event=self._post,
                poll_interval=config.poll_interval,
                use_udev=config.use_udev,
            )

        self.dispatcher = EventDispatcher(
            session=self.session,
            channel=self.channel,
            monitor=self.monitor,
            clear_on_exit=config.clear_on_exit,
        )
        self._started = False

    def _post(self, event: object) -> None:
        self.dispatcher.post(event)

    def run(self) -> None:
        """
        Start all sources and run the dispatcher until stop().

        Blocks the calling thread.
        """
        if self._started:
            logger.warning("MutePuckApp already running")
            return
        self._started = True

        logger.info("Starting mutepuck")
        with ErrorContext("start audio session", logger_instance=logger):
            self.session.subscribe(self._post)
        if self.monitor is not None:
            with ErrorContext("start hotplug monitor", logger_instance=logger):
                self.monitor.start()

        self.dispatcher.run()

    def stop(self) -> None:
        """Ask the dispatcher to finish. Safe to call from any thread."""
        self.dispatcher.stop()

    def shutdown(self) -> None:
        """Stop the event sources. The dispatcher closes the channel itself."""
        if self.monitor is not None:
            self.monitor.stop()
        self.session.close()
        logger.info("mutepuck stopped")
