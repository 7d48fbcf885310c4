"""
Hardware channel: the single owner of the open device handle.

::

    ┌──────────────────────────────────────────────────────────────┐
    │ HardwareChannel                                              │
    │                                                              │
    │   write_command(cmd) ──→ driver.encode ──→ handle.write      │
    │                                                              │
    │   reader thread:                                             │
    │     handle.read ──→ driver.decode ──→ edge ──→ slot ──→ post │
    │                                         (capacity 1)         │
    └──────────────────────────────────────────────────────────────┘

The reader delivers ButtonEvents through a one-slot credit: it takes the
slot before posting and the dispatcher gives it back with acknowledge()
once the event is handled. While the slot is taken, further reports are
still read and edge-detected, and only the newest pending edge is kept.

A read error posts DeviceLost (outside the slot) and ends the reader.
A write error makes every further write fail with DeviceUnavailableError
until the next open(); the dispatcher tears the channel down when it
sees either.
"""

import logging
import threading
from collections.abc import Callable

from mutepuck.exceptions import DeviceIOError, DeviceUnavailableError, MalformedEventError
from mutepuck.models import ButtonAction, DeviceCommand
from mutepuck.protocols.events import ButtonEvent, DeviceLost

from .catalog import DeviceCatalog
from .config import DeviceConfig
from .protocols import REPORT_SIZE, DeviceDriver, RawButtonSignal
from .transport import HidDeviceInfo, HidHandle, HidTransport

logger = logging.getLogger(__name__)

SIGNAL_ACTIONS = {
    RawButtonSignal.DOWN: ButtonAction.PRESSED,
    RawButtonSignal.UP: ButtonAction.RELEASED,
}


class HardwareChannel:
    """Owns at most one open device handle and its reader thread."""

    def __init__(
        self,
        transport: HidTransport,
        catalog: DeviceCatalog,
        on_event: Callable[[object], None],
        read_timeout_ms: int = 100,
        device_family: str | None = None,
    ):
        """
        Initialize the channel.

        Args:
            transport: HID transport used to open devices
            catalog: Device catalog for driver and presentation lookup
            on_event: Receives ButtonEvent and DeviceLost (called from the reader thread)
            read_timeout_ms: Reader wake-up interval, bounds how long close() waits
            device_family: Forced catalog family (None = detect by USB id)
        """
        self._transport = transport
        self._catalog = catalog
        self._on_event = on_event
        self._read_timeout_ms = read_timeout_ms
        self._device_family = device_family

        self._lock = threading.RLock()
        self._handle: HidHandle | None = None
        self._info: HidDeviceInfo | None = None
        self._config: DeviceConfig | None = None
        self._driver: DeviceDriver | None = None
        self._write_failed = False

        self._reader: threading.Thread | None = None
        self._reader_stop: threading.Event | None = None
        self._slot_free = threading.Event()
        self._slot_free.set()

    # ================================================================
    # LIFECYCLE
    # ================================================================

    def open(self, info: HidDeviceInfo) -> DeviceConfig:
        """
        Open a device and start its reader.

        Any previously open device is closed first.

        Returns:
            The catalog configuration selected for the device

        Raises:
            UnsupportedDeviceError: If the catalog has no configuration for it
            DeviceUnavailableError: If the device cannot be opened
        """
        self.close()

        config = self._catalog.resolve(info.vendor_id, info.product_id, self._device_family)
        driver = self._catalog.create_driver(config)
        handle = self._transport.open(info)

        with self._lock:
            self._handle = handle
            self._info = info
            self._config = config
            self._driver = driver
            self._write_failed = False
            self._slot_free.set()

            stop = threading.Event()
            self._reader_stop = stop
            self._reader = threading.Thread(
                target=self._read_loop,
                args=(handle, driver, info, stop),
                name="mutepuck-hid-reader",
                daemon=True,
            )
            self._reader.start()

        logger.info(f"Connected to {config.model}: {info.describe()}")
        return config

    def close(self) -> None:
        """Stop the reader and release the handle. Safe to call when closed."""
        with self._lock:
            handle = self._handle
            reader = self._reader
            stop = self._reader_stop
            info = self._info

            self._handle = None
            self._info = None
            self._config = None
            self._driver = None
            self._reader = None
            self._reader_stop = None

        if stop is not None:
            stop.set()

        if reader is not None and reader is not threading.current_thread() and reader.is_alive():
            reader.join(timeout=max(1.0, 3 * self._read_timeout_ms / 1000))
            if reader.is_alive():
                logger.warning("HID reader did not stop in time")

        if handle is not None:
            handle.close()
            logger.info(f"Closed {info.describe() if info else 'device'}")

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._handle is not None

    @property
    def device_config(self) -> DeviceConfig | None:
        with self._lock:
            return self._config

    @property
    def device_info(self) -> HidDeviceInfo | None:
        with self._lock:
            return self._info

    # ================================================================
    # OUTPUT
    # ================================================================

    def write(self, report: bytes) -> None:
        """
        Write one raw output report.

        Raises:
            DeviceUnavailableError: If no device is open, or a previous write failed
            DeviceIOError: If this write failed
        """
        with self._lock:
            if self._handle is None:
                raise DeviceUnavailableError()
            if self._write_failed:
                raise DeviceUnavailableError("Mute device output suspended after a write error")

            try:
                self._handle.write(report)
            except DeviceIOError:
                self._write_failed = True
                raise

        logger.debug(f"Wrote report {report.hex()}")

    def write_command(self, command: DeviceCommand) -> None:
        """
        Encode and write an LED command.

        Raises:
            DeviceUnavailableError: If no device is open, or a previous write failed
            DeviceIOError: If the write failed
            ProtocolInvariantViolation: If the encoded report is unsafe (nothing is written)
        """
        with self._lock:
            if self._driver is None:
                raise DeviceUnavailableError()
            report = self._driver.encode(command)
            self.write(report)

    # ================================================================
    # INPUT
    # ================================================================

    def acknowledge(self) -> None:
        """Free the delivery slot after a ButtonEvent has been handled."""
        self._slot_free.set()

    def _read_loop(
        self,
        handle: HidHandle,
        driver: DeviceDriver,
        info: HidDeviceInfo,
        stop: threading.Event,
    ) -> None:
        logger.debug(f"HID reader started for {info.describe()}")
        last = RawButtonSignal.UP
        pending: ButtonEvent | None = None

        while not stop.is_set():
            if pending is not None and self._take_slot(stop):
                self._on_event(pending)
                pending = None

            try:
                report = handle.read(REPORT_SIZE, self._read_timeout_ms)
            except DeviceIOError as e:
                if not stop.is_set():
                    logger.warning(f"Lost {info.describe()}: {e.technical_message}")
                    self._on_event(DeviceLost(info, e.technical_message or e.user_message))
                break

            if not report:
                continue

            try:
                signal = driver.decode(report)
            except MalformedEventError as e:
                logger.warning(e.technical_message)
                continue

            if signal is None or signal is last:
                continue
            last = signal

            event = ButtonEvent(SIGNAL_ACTIONS[signal])
            logger.debug(f"Button {event.action.value}")
            if self._take_slot(stop):
                self._on_event(event)
            else:
                # Slot still taken: keep only the newest edge
                pending = event

        logger.debug(f"HID reader stopped for {info.describe()}")

    def _take_slot(self, stop: threading.Event) -> bool:
        # Only the reader clears the slot, so check-then-clear is safe
        if stop.is_set() or not self._slot_free.is_set():
            return False
        self._slot_free.clear()
        return True
