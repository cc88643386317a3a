"""Tests for host integration."""

import plistlib
from unittest.mock import patch

import pytest

from reclaimer.host import (
    detect_platform,
    parse_simulator_runtime,
    resolve_display_name,
    resolve_simulator_name,
    select_path_opener,
)


class TestDetectPlatform:
    @pytest.mark.parametrize(
        "system, expected",
        [
            ("darwin", "macos"),
            ("linux", "linux"),
            ("win32", "windows"),
            ("cygwin", "windows"),
            ("freebsd13", "linux"),
            ("ios", "ios"),
            ("android", "android"),
            ("emscripten", ""),
        ],
    )
    def test_maps_system(self, system, expected):
        assert detect_platform(system) == expected

    def test_defaults_to_running_host(self):
        with patch("reclaimer.host.sys.platform", "darwin"):
            assert detect_platform() == "macos"


class TestSelectPathOpener:
    @pytest.mark.parametrize(
        "platform_key, command",
        [("macos", "open"), ("windows", "explorer.exe"), ("linux", "xdg-open")],
    )
    def test_launches_file_manager(self, platform_key, command, tmp_path):
        with patch("reclaimer.host.subprocess.Popen") as popen:
            assert select_path_opener(platform_key)(str(tmp_path)) is True
        popen.assert_called_once_with([command, str(tmp_path)])

    def test_unsupported_platform(self):
        with patch("reclaimer.host.subprocess.Popen") as popen:
            assert select_path_opener("ios")("/tmp") is False
        popen.assert_not_called()

    def test_missing_command(self, tmp_path):
        with patch("reclaimer.host.subprocess.Popen", side_effect=FileNotFoundError("xdg-open")):
            assert select_path_opener("linux")(str(tmp_path)) is False


class TestParseSimulatorRuntime:
    def test_ios_runtime(self):
        assert parse_simulator_runtime("com.apple.CoreSimulator.SimRuntime.iOS-17-0") == (
            "iOS",
            "17.0",
        )

    def test_vision_os_is_renamed(self):
        assert parse_simulator_runtime("com.apple.CoreSimulator.SimRuntime.xrOS-1-2") == (
            "visionOS",
            "1.2",
        )

    def test_unparseable(self):
        assert parse_simulator_runtime("garbage") == (None, None)
        assert parse_simulator_runtime(None) == (None, None)


@pytest.fixture
def simulator_device(tmp_path):
    device = tmp_path / "Library" / "Developer" / "CoreSimulator" / "Devices" / "ABCD-1234"
    device.mkdir(parents=True)
    with open(device / "device.plist", "wb") as f:
        plistlib.dump(
            {"name": "iPhone 15", "runtime": "com.apple.CoreSimulator.SimRuntime.iOS-17-2"}, f
        )
    return device


class TestResolveSimulatorName:
    def test_reads_plist(self, simulator_device):
        assert resolve_simulator_name(simulator_device) == "iPhone 15 (iOS 17.2)"

    def test_name_without_runtime(self, tmp_path):
        with open(tmp_path / "device.plist", "wb") as f:
            plistlib.dump({"name": "iPad"}, f)
        assert resolve_simulator_name(tmp_path) == "iPad"

    def test_missing_plist(self, tmp_path):
        assert resolve_simulator_name(tmp_path) is None

    def test_corrupt_plist(self, tmp_path):
        (tmp_path / "device.plist").write_bytes(b"not a plist")
        assert resolve_simulator_name(tmp_path) is None


class TestResolveDisplayName:
    def test_simulator_on_macos(self, simulator_device):
        name = resolve_display_name(str(simulator_device), "ABCD-1234", "macos")
        assert name == "iPhone 15 (iOS 17.2)"

    def test_other_platforms_keep_default(self, simulator_device):
        assert resolve_display_name(str(simulator_device), "ABCD-1234", "linux") == "ABCD-1234"

    def test_regular_folder_keeps_default(self, tmp_path):
        assert resolve_display_name(str(tmp_path), "tmp", "macos") == "tmp"
