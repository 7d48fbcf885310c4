"""Tests for the MuteMe report codec."""

import itertools

import pytest

from mutepuck.devices import REPORT_SIZE, RawButtonSignal, get_driver
from mutepuck.devices.drivers.muteme import MuteMeDriver, check_report
from mutepuck.exceptions import MalformedEventError, ProtocolInvariantViolation
from mutepuck.models import BrightnessMode, DeviceCommand, LedColor

from conftest import input_report


@pytest.fixture
def driver():
    return MuteMeDriver()


class TestEncode:
    """Test LED command encoding."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "color,brightness,expected",
        [
            (LedColor.OFF, BrightnessMode.HIGH, 0x00),
            (LedColor.RED, BrightnessMode.HIGH, 0x01),
            (LedColor.GREEN, BrightnessMode.HIGH, 0x02),
            (LedColor.BLUE, BrightnessMode.HIGH, 0x04),
            (LedColor.WHITE, BrightnessMode.HIGH, 0x07),
            (LedColor.GREEN, BrightnessMode.LOW, 0x12),
            (LedColor.GREEN, BrightnessMode.FAST_PULSE, 0x22),
            (LedColor.RED, BrightnessMode.SLOW_PULSE, 0x31),
        ],
    )
    def test_layout(self, driver, color, brightness, expected):
        report = driver.encode(DeviceCommand(color=color, brightness=brightness))
        assert len(report) == REPORT_SIZE
        assert report[0] == expected
        assert report[1:] == bytes(REPORT_SIZE - 1)

    @pytest.mark.unit
    def test_timer_bit(self, driver):
        report = driver.encode(DeviceCommand(color=LedColor.RED, timer_enabled=True))
        assert report[0] == 0x41

    @pytest.mark.unit
    def test_mixed_colors(self, driver):
        assert driver.encode(DeviceCommand(color=LedColor.YELLOW))[0] == 0x03
        assert driver.encode(DeviceCommand(color=LedColor.PURPLE))[0] == 0x05
        assert driver.encode(DeviceCommand(color=LedColor.CYAN))[0] == 0x06

    @pytest.mark.unit
    def test_no_command_produces_bootloader_pattern(self, driver):
        """Every valid command encodes, and none has the low nibble 1001."""
        for color, brightness, timer in itertools.product(LedColor, BrightnessMode, (False, True)):
            report = driver.encode(DeviceCommand(color=color, brightness=brightness, timer_enabled=timer))
            assert report[0] & 0x0F != 0b1001, (color, brightness, timer)


class TestReportCheck:
    """Test the bootloader guard."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [0x09, 0x19, 0x29, 0x39, 0x49, 0x79])
    def test_rejects_bootloader_nibble(self, value):
        with pytest.raises(ProtocolInvariantViolation) as exc_info:
            check_report(bytes([value]) + bytes(REPORT_SIZE - 1))
        assert exc_info.value.recoverable is False

    @pytest.mark.unit
    def test_rejects_wrong_size(self):
        with pytest.raises(ProtocolInvariantViolation):
            check_report(bytes(3))

    @pytest.mark.unit
    def test_accepts_normal_report(self):
        check_report(bytes([0x31]) + bytes(REPORT_SIZE - 1))


class TestDecode:
    """Test input report decoding."""

    @pytest.mark.unit
    def test_press_edge(self, driver):
        assert driver.decode(input_report(0x10)) is RawButtonSignal.DOWN

    @pytest.mark.unit
    def test_release_edge(self, driver):
        assert driver.decode(input_report(0x04)) is RawButtonSignal.UP

    @pytest.mark.unit
    @pytest.mark.parametrize("flags", [0x00, 0x01, 0x02, 0x03])
    def test_level_bits_are_ignored(self, driver, flags):
        assert driver.decode(input_report(flags)) is None

    @pytest.mark.unit
    def test_edge_with_level_bits(self, driver):
        assert driver.decode(input_report(0x11)) is RawButtonSignal.DOWN
        assert driver.decode(input_report(0x06)) is RawButtonSignal.UP

    @pytest.mark.unit
    def test_both_edges_is_malformed(self, driver):
        with pytest.raises(MalformedEventError):
            driver.decode(input_report(0x14))

    @pytest.mark.unit
    def test_short_report_is_malformed(self, driver):
        with pytest.raises(MalformedEventError):
            driver.decode(bytes([0, 0, 0]))


class TestDriverRegistry:
    """Test driver lookup by name."""

    @pytest.mark.unit
    def test_builtin_driver_registered(self):
        assert isinstance(get_driver("MuteMe"), MuteMeDriver)

    @pytest.mark.unit
    def test_unknown_driver(self):
        assert get_driver("NoSuchDriver") is None
