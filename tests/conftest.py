"""Pytest fixtures and fakes for tests.

No test touches real hardware or a real audio server: the HID transport
and the audio session are replaced by the fakes below.
"""

import queue
import time
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from mutepuck.core import EventDispatcher
from mutepuck.devices import DeviceCatalog, HardwareChannel, HidDeviceInfo, HotplugMonitor
from mutepuck.exceptions import DeviceIOError, DeviceUnavailableError

MINI_VID = 0x20A0
MINI_PID = 0x42DA
ORIGINAL_VID = 0x16C0
ORIGINAL_PID = 0x27DB


def input_report(flags: int) -> bytes:
    """8-byte input report with the given touch flags in byte 3."""
    return bytes([0, 0, 0, flags, 0, 0, 0, 0])


def wait_for(predicate, timeout: float = 2.0) -> bool:
    """Poll until predicate() is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


# =================================================================
# Fakes
# =================================================================


class FakeHandle:
    """Open HID handle backed by a queue of input reports."""

    def __init__(self, info: HidDeviceInfo):
        self.info = info
        self.writes: list[bytes] = []
        self.fail_writes = False
        self.closed = False
        self._reports: queue.Queue = queue.Queue()

    def feed(self, item) -> None:
        """Queue an input report, or an exception for read() to raise."""
        self._reports.put(item)

    def write(self, report: bytes) -> None:
        if self.fail_writes:
            raise DeviceIOError("write", self.info.describe(), "device gone")
        self.writes.append(bytes(report))

    def read(self, size: int, timeout_ms: int) -> bytes:
        try:
            item = self._reports.get(timeout=timeout_ms / 1000)
        except queue.Empty:
            return b""
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


class FakeTransport:
    """HID transport with a configurable list of connected devices."""

    def __init__(self, devices: list[HidDeviceInfo] | None = None):
        self.devices = list(devices or [])
        self.handles: list[FakeHandle] = []
        self.open_error: Exception | None = None

    @property
    def handle(self) -> FakeHandle:
        """Most recently opened handle."""
        return self.handles[-1]

    def enumerate(self, identifiers):
        wanted = set(identifiers)
        return [d for d in self.devices if (d.vendor_id, d.product_id) in wanted]

    def open(self, info: HidDeviceInfo) -> FakeHandle:
        if self.open_error is not None:
            raise self.open_error
        handle = FakeHandle(info)
        self.handles.append(handle)
        return handle


class FakeSession:
    """Audio session that records mute commands."""

    def __init__(self):
        self.callback = None
        self.mute_calls: list[tuple[int, bool]] = []
        self.closed = False

    def subscribe(self, callback) -> None:
        self.callback = callback

    def set_mute(self, stream_id: int, muted: bool) -> None:
        self.mute_calls.append((stream_id, muted))

    def close(self) -> None:
        self.closed = True


# =================================================================
# Fixtures
# =================================================================


@pytest.fixture
def catalog():
    """Built-in device catalog."""
    return DeviceCatalog()


@pytest.fixture
def mini_info():
    return HidDeviceInfo(MINI_VID, MINI_PID, b"/dev/hidraw3", product="MuteMe Mini", serial="A1")


@pytest.fixture
def original_info():
    return HidDeviceInfo(ORIGINAL_VID, ORIGINAL_PID, b"/dev/hidraw5", product="MuteMe")


@pytest.fixture
def transport(mini_info):
    return FakeTransport([mini_info])


@pytest.fixture
def rig(catalog, transport):
    """Dispatcher wired to a real HardwareChannel over the fake transport."""
    events: list = []
    session = FakeSession()
    monitor = Mock(spec=HotplugMonitor)
    holder = SimpleNamespace(dispatcher=None)

    def post(event):
        events.append(event)
        holder.dispatcher.post(event)

    channel = HardwareChannel(transport, catalog, on_event=post, read_timeout_ms=10)
    dispatcher = EventDispatcher(session, channel, monitor=monitor)
    holder.dispatcher = dispatcher

    yield SimpleNamespace(
        dispatcher=dispatcher,
        channel=channel,
        session=session,
        monitor=monitor,
        transport=transport,
        events=events,
    )

    channel.close()


@pytest.fixture
def unavailable_channel():
    """Channel mock whose writes are always suspended."""
    channel = Mock(spec=HardwareChannel)
    channel.write_command.side_effect = DeviceUnavailableError()
    channel.is_open = False
    channel.device_info = None
    return channel
