"""
Hotplug monitor: decides when the hardware channel exists.

::

                   DeviceAttached
    ┌──────────────┐ ─────────────→ ┌───────────┐
    │ DISCONNECTED │                │ CONNECTED │
    └──────────────┘ ←───────────── └───────────┘
                   DeviceDetached
                   mark_disconnected()

Detection is always an enumeration of HID devices filtered by the USB
ids in the device catalog. What triggers an enumeration depends on the
platform:

- udev available: every ``hidraw`` add/remove notification, plus a
  delayed retry after the dispatcher reports a connection it could not
  use.
- udev unavailable (non-Linux, no libudev, or ``use_udev=False``): a scan
  every ``poll_interval`` seconds.
"""

import logging
import threading
import time
from collections.abc import Callable
from enum import Enum

import pyudev

from mutepuck.devices.catalog import DeviceCatalog
from mutepuck.devices.transport import HidDeviceInfo, HidTransport
from mutepuck.protocols.events import DeviceAttached, DeviceDetached

logger = logging.getLogger(__name__)

# How often a live-mode monitor wakes up to check for stop() and retries
SOURCE_WAKEUP = 1.0


class HotplugState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class UdevHotplugSource:
    """Live hidraw add/remove notifications from udev."""

    def __init__(self, monitor: pyudev.Monitor):
        self._monitor = monitor

    @classmethod
    def create(cls) -> "UdevHotplugSource | None":
        """
        Open a udev netlink monitor.

        Returns:
            The source, or None when udev is not available on this platform
        """
        try:
            context = pyudev.Context()
            monitor = pyudev.Monitor.from_netlink(context)
            monitor.filter_by(subsystem="hidraw")
            monitor.start()
        except (ImportError, OSError) as e:
            # pyudev raises ImportError when libudev cannot be loaded
            logger.info(f"udev not available ({e})")
            return None
        return cls(monitor)

    def wait(self, timeout: float) -> bool:
        """
        Block until a hidraw device is added or removed.

        Returns:
            True if a notification arrived, False on timeout
        """
        device = self._monitor.poll(timeout=timeout)
        if device is None:
            return False
        logger.debug(f"udev: {device.action} {device.sys_name}")
        return True


class HotplugMonitor:
    """
    Watches for supported devices and emits attach/detach transitions.

    Events are delivered to ``on_event`` from the monitor thread.
    """

    def __init__(
        self,
        transport: HidTransport,
        catalog: DeviceCatalog,
        on_event: Callable[[object], None],
        poll_interval: float = 5.0,
        use_udev: bool = True,
        source_factory: Callable[[], UdevHotplugSource | None] = UdevHotplugSource.create,
    ):
        """
        Initialize hotplug monitor.

        Args:
            transport: HID transport used to enumerate devices
            catalog: Device catalog providing the known USB ids
            on_event: Receives DeviceAttached and DeviceDetached
            poll_interval: Scan interval without udev, and retry delay with it (seconds)
            use_udev: Try live udev notifications before falling back to polling
            source_factory: Creates the live notification source
        """
        self._transport = transport
        self._catalog = catalog
        self._on_event = on_event
        self._poll_interval = poll_interval
        self._use_udev = use_udev
        self._source_factory = source_factory

        self._lock = threading.Lock()
        self._state = HotplugState.DISCONNECTED
        self._device: HidDeviceInfo | None = None
        self._retry_at: float | None = None
        self._no_device_warned = False

        self._source: UdevHotplugSource | None = None
        self._stop_event = threading.Event()
        self._monitor_thread: threading.Thread | None = None

    def start(self) -> None:
        """Start monitoring for devices."""
        if self._monitor_thread and self._monitor_thread.is_alive():
            logger.warning("HotplugMonitor is already running")
            return

        self._stop_event.clear()
        self._source = self._source_factory() if self._use_udev else None
        if self._source is None:
            logger.info(f"Polling for mute devices every {self._poll_interval:g}s")
        else:
            logger.debug("Using udev hotplug notifications")

        self._monitor_thread = threading.Thread(
            target=self._monitor_devices, name="mutepuck-hotplug", daemon=True
        )
        self._monitor_thread.start()

    def stop(self) -> None:
        """Stop monitoring."""
        self._stop_event.set()
        if self._monitor_thread and self._monitor_thread.is_alive():
            self._monitor_thread.join(timeout=SOURCE_WAKEUP + 1.0)
        self._monitor_thread = None
        logger.debug("HotplugMonitor stopped")

    @property
    def state(self) -> HotplugState:
        with self._lock:
            return self._state

    @property
    def current_device(self) -> HidDeviceInfo | None:
        with self._lock:
            return self._device

    @property
    def is_polling(self) -> bool:
        return self._source is None

    def mark_disconnected(self, info: HidDeviceInfo) -> None:
        """
        Return to DISCONNECTED after the dispatcher lost or could not open a device.

        The device is picked up again by a later scan: the next poll, the
        next udev notification, or a retry after ``poll_interval``.
        """
        with self._lock:
            if self._device is not None and self._device.path != info.path:
                return
            self._state = HotplugState.DISCONNECTED
            self._device = None
            self._retry_at = time.monotonic() + self._poll_interval
            self._no_device_warned = False
        logger.debug(f"Marked {info.describe()} disconnected, retrying in {self._poll_interval:g}s")

    def scan(self) -> None:
        """Enumerate devices once and emit any transition."""
        available = self._transport.enumerate(self._catalog.known_ids())
        event: DeviceAttached | DeviceDetached | None = None

        with self._lock:
            if self._state is HotplugState.CONNECTED and self._device is not None:
                if not any(info.path == self._device.path for info in available):
                    logger.info(f"Mute device disconnected: {self._device.describe()}")
                    event = DeviceDetached(self._device)
                    self._state = HotplugState.DISCONNECTED
                    self._device = None
                    self._no_device_warned = False

            if self._state is HotplugState.DISCONNECTED and event is None:
                if available:
                    device = available[0]
                    logger.info(f"Mute device detected: {device.describe()}")
                    event = DeviceAttached(device)
                    self._state = HotplugState.CONNECTED
                    self._device = device
                    self._retry_at = None
                elif not self._no_device_warned:
                    logger.info("No mute device found")
                    self._no_device_warned = True

        if event is not None:
            self._on_event(event)

    def _retry_due(self) -> bool:
        with self._lock:
            if self._retry_at is None or time.monotonic() < self._retry_at:
                return False
            self._retry_at = None
            return True

    def _monitor_devices(self) -> None:
        """Monitor for device connection/disconnection."""
        logger.debug("Starting mute device monitoring")

        while not self._stop_event.is_set():
            try:
                self.scan()
            except (OSError, ValueError) as e:
                logger.error(f"Error in mute device monitoring: {e}")

            if self._source is None:
                self._stop_event.wait(self._poll_interval)
            else:
                self._wait_for_change()

    def _wait_for_change(self) -> None:
        """Live mode: return on a udev notification, a due retry, or stop()."""
        while not self._stop_event.is_set():
            try:
                if self._source.wait(SOURCE_WAKEUP):
                    return
            except OSError as e:
                logger.warning(f"udev monitor failed ({e}), falling back to polling")
                self._source = None
                return
            if self._retry_due():
                return
