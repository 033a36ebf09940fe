"""Tests for device.py - adb/fastboot invocation and output parsing."""

import subprocess
from unittest.mock import patch

from ota_flasher.device import (
    BridgeState,
    DeviceControl,
    FastbootDevice,
    parse_bridge_state,
    parse_getvar,
)
from ota_flasher.session import DeviceMode


def completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess([], returncode, stdout, stderr)


class TestParseBridgeState:
    """Tests for parse_bridge_state."""

    def test_device(self):
        assert parse_bridge_state(completed("device\n")) is BridgeState.DEVICE

    def test_recovery(self):
        assert parse_bridge_state(completed("recovery\n")) is BridgeState.RECOVERY

    def test_unauthorized_on_stderr(self):
        ret = completed(stderr="error: device unauthorized.\n", returncode=1)
        assert parse_bridge_state(ret) is BridgeState.UNAUTHORIZED

    def test_no_device(self):
        ret = completed(stderr="error: no devices/emulators found\n", returncode=1)
        assert parse_bridge_state(ret) is BridgeState.ABSENT

    def test_offline_on_stderr(self):
        ret = completed(stderr="error: device offline\n", returncode=1)
        assert parse_bridge_state(ret) is BridgeState.OFFLINE

    def test_unexpected_stdout(self):
        assert parse_bridge_state(completed("sideload\n")) is BridgeState.ABSENT

    def test_missing_device_is_not_running_os(self):
        ret = completed(stderr="error: no devices/emulators found\n", returncode=1)
        with patch("ota_flasher.device.subprocess.run", return_value=ret):
            assert DeviceControl().bridge_get_state().running_os is False

    def test_running_os(self):
        assert BridgeState.DEVICE.running_os
        assert BridgeState.RECOVERY.running_os
        assert not BridgeState.OFFLINE.running_os


class TestParseGetvar:
    """Tests for parse_getvar."""

    def test_plain(self):
        assert parse_getvar("current-slot", "current-slot: b\nFinished. Total time: 0.001s\n") == "b"

    def test_bootloader_prefix(self):
        assert parse_getvar("is-userspace", "(bootloader) is-userspace: yes\n") == "yes"

    def test_missing(self):
        assert parse_getvar("current-slot", "FAILED (remote: 'unknown variable')\n") == ""


class TestDeviceControl:
    """Tests for DeviceControl with subprocess.run patched."""

    def test_flash_command(self):
        dc = DeviceControl(adb="adb", fastboot="fastboot")
        with patch("ota_flasher.device.subprocess.run", return_value=completed()) as run:
            ret = dc.bootctl_flash("boot_a", "image_files/boot.img")
        assert ret.returncode == 0
        assert run.call_args[0][0] == ["fastboot", "flash", "boot_a", "image_files/boot.img"]

    def test_missing_binary_is_127(self):
        dc = DeviceControl(fastboot="/nonexistent/fastboot")
        with patch("ota_flasher.device.subprocess.run", side_effect=FileNotFoundError):
            ret = dc.bootctl_erase("boot")
        assert ret.returncode == 127

    def test_timeout_is_124(self):
        dc = DeviceControl()
        with patch("ota_flasher.device.subprocess.run",
                   side_effect=subprocess.TimeoutExpired("fastboot", 30)):
            ret = dc.bootctl_erase("boot")
        assert ret.returncode == 124

    def test_list_devices_explicit_modes(self):
        dc = DeviceControl()
        out = "ABC123\tfastbootd\nDEF456\tbootloader\n"
        with patch("ota_flasher.device.subprocess.run", return_value=completed(out)):
            devices = dc.bootctl_list_devices()
        assert devices == [
            FastbootDevice("ABC123", DeviceMode.FASTBOOTD),
            FastbootDevice("DEF456", DeviceMode.BOOTLOADER),
        ]

    def test_list_devices_asks_is_userspace(self):
        dc = DeviceControl()
        responses = [
            completed("ABC123\tfastboot\n"),
            completed(stderr="is-userspace: yes\nFinished.\n"),
        ]
        with patch("ota_flasher.device.subprocess.run", side_effect=responses) as run:
            devices = dc.bootctl_list_devices()
        assert devices == [FastbootDevice("ABC123", DeviceMode.FASTBOOTD)]
        assert run.call_args[0][0] == ["fastboot", "-s", "ABC123", "getvar", "is-userspace"]

    def test_list_devices_userspace_no_means_bootloader(self):
        dc = DeviceControl()
        responses = [
            completed("ABC123\tfastboot\n"),
            completed(stderr="is-userspace: no\n"),
        ]
        with patch("ota_flasher.device.subprocess.run", side_effect=responses):
            devices = dc.bootctl_list_devices()
        assert devices == [FastbootDevice("ABC123", DeviceMode.BOOTLOADER)]

    def test_list_devices_empty(self):
        dc = DeviceControl()
        with patch("ota_flasher.device.subprocess.run", return_value=completed("")):
            assert dc.bootctl_list_devices() == []

    def test_get_var_reads_stderr(self):
        dc = DeviceControl()
        ret = completed(stderr="current-slot: a\nFinished. Total time: 0.001s\n")
        with patch("ota_flasher.device.subprocess.run", return_value=ret):
            assert dc.bootctl_get_var("current-slot") == "a"

    def test_bridge_get_property(self):
        dc = DeviceControl()
        with patch("ota_flasher.device.subprocess.run", return_value=completed("_b\r\n")) as run:
            assert dc.bridge_get_property("ro.boot.slot_suffix") == "_b"
        assert run.call_args[0][0] == ["adb", "shell", "getprop", "ro.boot.slot_suffix"]
