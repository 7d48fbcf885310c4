"""Tests for the hardware channel (reader thread, delivery slot, write failures)."""

import pytest

from mutepuck.devices import HardwareChannel
from mutepuck.exceptions import (
    DeviceIOError,
    DeviceUnavailableError,
    UnsupportedDeviceError,
)
from mutepuck.models import ButtonAction, DeviceCommand, LedColor
from mutepuck.protocols import ButtonEvent, DeviceLost

from conftest import FakeTransport, input_report, wait_for

PRESS = input_report(0x10)
RELEASE = input_report(0x04)


@pytest.fixture
def events():
    return []


@pytest.fixture
def channel(catalog, transport, events):
    channel = HardwareChannel(transport, catalog, on_event=events.append, read_timeout_ms=10)
    yield channel
    channel.close()


class TestLifecycle:
    """Test open/close."""

    @pytest.mark.unit
    def test_starts_closed(self, channel):
        assert channel.is_open is False
        assert channel.device_config is None
        with pytest.raises(DeviceUnavailableError):
            channel.write_command(DeviceCommand.off())

    @pytest.mark.integration
    def test_open_selects_family(self, channel, mini_info):
        config = channel.open(mini_info)
        assert channel.is_open
        assert config.family == "mini"
        assert channel.device_info == mini_info

    @pytest.mark.integration
    def test_forced_family(self, catalog, transport, mini_info):
        channel = HardwareChannel(transport, catalog, on_event=lambda e: None, device_family="original")
        try:
            assert channel.open(mini_info).family == "original"
        finally:
            channel.close()

    @pytest.mark.unit
    def test_open_unsupported_device(self, catalog, events):
        from mutepuck.devices import HidDeviceInfo

        info = HidDeviceInfo(0x1234, 0x5678, b"/dev/hidraw9")
        channel = HardwareChannel(FakeTransport([info]), catalog, on_event=events.append)
        with pytest.raises(UnsupportedDeviceError):
            channel.open(info)
        assert channel.is_open is False

    @pytest.mark.unit
    def test_open_failure(self, channel, transport, mini_info):
        transport.open_error = DeviceUnavailableError("permission denied")
        with pytest.raises(DeviceUnavailableError):
            channel.open(mini_info)
        assert channel.is_open is False

    @pytest.mark.integration
    def test_close_releases_handle(self, channel, transport, mini_info):
        channel.open(mini_info)
        handle = transport.handle
        channel.close()

        assert handle.closed
        assert channel.is_open is False
        # Closing twice is harmless
        channel.close()


class TestOutput:
    """Test writes."""

    @pytest.mark.integration
    def test_write_command_encodes(self, channel, transport, mini_info):
        channel.open(mini_info)
        channel.write_command(DeviceCommand(color=LedColor.GREEN))
        assert transport.handle.writes == [bytes([0x02, 0, 0, 0, 0, 0, 0, 0])]

    @pytest.mark.integration
    def test_write_failure_suspends_output(self, channel, transport, mini_info):
        channel.open(mini_info)
        transport.handle.fail_writes = True

        with pytest.raises(DeviceIOError):
            channel.write_command(DeviceCommand(color=LedColor.RED))

        # Even if the device recovers, nothing more is written until reopened
        transport.handle.fail_writes = False
        with pytest.raises(DeviceUnavailableError):
            channel.write_command(DeviceCommand(color=LedColor.RED))
        assert transport.handle.writes == []

    @pytest.mark.integration
    def test_reopen_clears_write_failure(self, channel, transport, mini_info):
        channel.open(mini_info)
        transport.handle.fail_writes = True
        with pytest.raises(DeviceIOError):
            channel.write_command(DeviceCommand(color=LedColor.RED))

        channel.open(mini_info)
        channel.write_command(DeviceCommand(color=LedColor.RED))
        assert transport.handle.writes == [bytes([0x01, 0, 0, 0, 0, 0, 0, 0])]


class TestInput:
    """Test the reader thread."""

    @pytest.mark.integration
    def test_press_and_release(self, channel, transport, mini_info, events):
        channel.open(mini_info)

        transport.handle.feed(PRESS)
        assert wait_for(lambda: len(events) == 1)
        assert events[0] == ButtonEvent(ButtonAction.PRESSED)
        channel.acknowledge()

        transport.handle.feed(RELEASE)
        assert wait_for(lambda: len(events) == 2)
        assert events[1] == ButtonEvent(ButtonAction.RELEASED)

    @pytest.mark.integration
    def test_repeated_signal_is_not_an_edge(self, channel, transport, mini_info, events):
        channel.open(mini_info)
        for report in (PRESS, PRESS, input_report(0x01), PRESS):
            transport.handle.feed(report)
            channel.acknowledge()

        assert wait_for(lambda: len(events) >= 1)
        assert not wait_for(lambda: len(events) > 1, timeout=0.1)

    @pytest.mark.integration
    def test_release_without_press_is_ignored(self, channel, transport, mini_info, events):
        """The reader starts in the released state."""
        channel.open(mini_info)
        transport.handle.feed(RELEASE)
        assert not wait_for(lambda: events, timeout=0.1)

    @pytest.mark.integration
    def test_slot_holds_back_until_acknowledged(self, channel, transport, mini_info, events):
        channel.open(mini_info)
        transport.handle.feed(PRESS)
        transport.handle.feed(RELEASE)

        assert wait_for(lambda: len(events) == 1)
        assert not wait_for(lambda: len(events) > 1, timeout=0.1)

        channel.acknowledge()
        assert wait_for(lambda: len(events) == 2)
        assert events[1].action is ButtonAction.RELEASED

    @pytest.mark.integration
    def test_only_newest_pending_edge_is_kept(self, channel, transport, mini_info, events):
        channel.open(mini_info)
        for report in (PRESS, RELEASE, PRESS):
            transport.handle.feed(report)

        assert wait_for(lambda: len(events) == 1)
        # RELEASE then PRESS arrive while the slot is taken; PRESS replaces RELEASE
        assert not wait_for(lambda: len(events) > 1, timeout=0.1)
        channel.acknowledge()
        assert wait_for(lambda: len(events) == 2)
        assert events[1].action is ButtonAction.PRESSED

    @pytest.mark.integration
    def test_malformed_report_is_dropped(self, channel, transport, mini_info, events):
        channel.open(mini_info)
        transport.handle.feed(input_report(0x14))
        transport.handle.feed(PRESS)

        assert wait_for(lambda: len(events) == 1)
        assert events[0].action is ButtonAction.PRESSED

    @pytest.mark.integration
    def test_read_error_reports_device_lost(self, channel, transport, mini_info, events):
        channel.open(mini_info)
        transport.handle.feed(DeviceIOError("read", mini_info.describe(), "No such device"))

        assert wait_for(lambda: len(events) == 1)
        assert isinstance(events[0], DeviceLost)
        assert events[0].device == mini_info
        assert "No such device" in events[0].reason

    @pytest.mark.integration
    def test_close_stops_reader_quietly(self, channel, transport, mini_info, events):
        channel.open(mini_info)
        channel.close()
        assert events == []
