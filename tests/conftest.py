"""Shared fixtures: a scripted stand-in for adb/fastboot and a fast session."""

import subprocess

import pytest

from ota_flasher.device import BridgeState, FastbootDevice
from ota_flasher.session import DeviceMode, ImageEntry, RetryPolicy, Session


def _result(returncode=0, stderr=""):
    return subprocess.CompletedProcess([], returncode, "", stderr)


class FakeDeviceControl:
    """Behaves like a single device that moves between modes on reboot.

    `reaches` lists the modes a reboot command is able to bring the device
    into; a reboot into any other mode leaves it where it was.
    """

    def __init__(self, mode=None, bridge_state=BridgeState.DEVICE,
                 slot_prop="_a", current_slot="a", reaches=(DeviceMode.FASTBOOTD, DeviceMode.BOOTLOADER)):
        self.mode = mode
        self.bridge_state = bridge_state
        self.slot_prop = slot_prop
        self.current_slot = current_slot
        self.reaches = set(reaches)
        self.fail_flash = set()
        self.fail_erase = set()
        self.calls = []
        self.list_calls = 0

    def bridge_get_state(self):
        self.calls.append(("get-state",))
        return self.bridge_state if self.mode is None else BridgeState.ABSENT

    def bridge_reboot_to_fastboot(self):
        self.calls.append(("adb-reboot-fastboot",))
        if self.mode is None and DeviceMode.FASTBOOTD in self.reaches:
            self.mode = DeviceMode.FASTBOOTD
        return _result()

    def bridge_get_property(self, name):
        self.calls.append(("getprop", name))
        return self.slot_prop

    def bootctl_list_devices(self):
        self.list_calls += 1
        if self.mode is None:
            return []
        return [FastbootDevice("SERIAL", self.mode)]

    def bootctl_get_var(self, name):
        self.calls.append(("getvar", name))
        return self.current_slot if self.mode is not None else ""

    def bootctl_erase(self, partition):
        self.calls.append(("erase", partition))
        return _result(1, "FAILED") if partition in self.fail_erase else _result()

    def bootctl_flash(self, partition, image_path):
        self.calls.append(("flash", partition, image_path))
        return _result(1, "FAILED (remote: 'Partition not found')") if partition in self.fail_flash else _result()

    def bootctl_reboot_bootloader(self):
        self.calls.append(("reboot-bootloader",))
        if DeviceMode.BOOTLOADER in self.reaches:
            self.mode = DeviceMode.BOOTLOADER
        return _result()

    def bootctl_reboot_os(self):
        self.calls.append(("reboot",))
        self.mode = None
        return _result()

    def commands(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def images():
    return [
        ImageEntry("boot", "image_files/boot.img"),
        ImageEntry("vendor", "image_files/vendor.img"),
    ]


@pytest.fixture
def session(images, tmp_path):
    return Session(
        images=images,
        retry=RetryPolicy(max_attempts=3, interval=0),
        failure_log_path=str(tmp_path / "flash_failures.txt"))


@pytest.fixture
def device():
    return FakeDeviceControl(mode=DeviceMode.FASTBOOTD)
