#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import subprocess
from collections import namedtuple
from enum import Enum

from ota_flasher import config
from ota_flasher import logger
from ota_flasher.session import DeviceMode

TAG = "device"

FastbootDevice = namedtuple("FastbootDevice", ["serial", "mode"])


class BridgeState(Enum):
    DEVICE = "device"
    RECOVERY = "recovery"
    UNAUTHORIZED = "unauthorized"
    OFFLINE = "offline"
    ABSENT = "absent"

    @property
    def running_os(self):
        return self in (BridgeState.DEVICE, BridgeState.RECOVERY)


def parse_bridge_state(ret):
    if ret.returncode == 0:
        try:
            return BridgeState(ret.stdout.strip())
        except ValueError:
            return BridgeState.ABSENT
    # adb errors mention "device" too, e.g. "error: device unauthorized."
    text = ret.stderr.strip()
    if BridgeState.UNAUTHORIZED.value in text:
        return BridgeState.UNAUTHORIZED
    if BridgeState.OFFLINE.value in text:
        return BridgeState.OFFLINE
    return BridgeState.ABSENT


def parse_getvar(name, output):
    """Pulls the value out of `fastboot getvar` output.

    fastboot prints `name: value` followed by a `Finished.` line, usually on
    stderr, so both streams are passed in joined together.
    """
    for line in output.splitlines():
        line = line.strip()
        if line.startswith("(bootloader)"):
            line = line[len("(bootloader)"):].strip()
        if line.startswith(f"{name}:"):
            return line.split(":", 1)[1].strip()
    return ""


class DeviceControl:
    """Runs adb (the bridge) and fastboot (boot control) for a single device.

    Every call hands back its result instead of raising, a missing binary
    comes back as exit status 127 and a timeout as 124.
    """

    def __init__(self, adb="adb", fastboot="fastboot"):
        self.adb_path = adb
        self.fastboot_path = fastboot

    def _run(self, cmd, timeout=config.QUERY_TIMEOUT):
        logger.debug(" ".join(cmd), tag=TAG)
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except FileNotFoundError:
            return subprocess.CompletedProcess(cmd, 127, "", f"{cmd[0]} not found")
        except subprocess.TimeoutExpired:
            return subprocess.CompletedProcess(cmd, 124, "", f"{' '.join(cmd)} timed out after {timeout}s")

    def adb(self, cmd, *args, timeout=config.QUERY_TIMEOUT):
        return self._run([self.adb_path, cmd] + list(args), timeout=timeout)

    def fastboot(self, cmd, *args, timeout=config.QUERY_TIMEOUT):
        return self._run([self.fastboot_path, cmd] + list(args), timeout=timeout)

    # bridge

    def bridge_get_state(self):
        return parse_bridge_state(self.adb("get-state"))

    def bridge_reboot_to_fastboot(self):
        return self.adb("reboot", "fastboot")

    def bridge_get_property(self, name):
        ret = self.adb("shell", "getprop", name)
        if ret.returncode != 0:
            return ""
        return ret.stdout.strip()

    # boot control

    def bootctl_list_devices(self):
        ret = self.fastboot("devices")
        if ret.returncode != 0:
            return []
        devices = []
        for line in ret.stdout.splitlines():
            parts = line.split()
            if len(parts) < 2:
                continue
            serial, column = parts[0], parts[1]
            devices.append(FastbootDevice(serial, self._mode_from_column(serial, column)))
        return devices

    def _mode_from_column(self, serial, column):
        if column == DeviceMode.FASTBOOTD.value:
            return DeviceMode.FASTBOOTD
        if column == DeviceMode.BOOTLOADER.value:
            return DeviceMode.BOOTLOADER
        if column == "fastboot":
            # recent fastboot prints "fastboot" for both, ask the device
            ret = self.fastboot("-s", serial, "getvar", "is-userspace")
            if parse_getvar("is-userspace", ret.stdout + ret.stderr) == "yes":
                return DeviceMode.FASTBOOTD
            return DeviceMode.BOOTLOADER
        return DeviceMode.UNKNOWN

    def bootctl_get_var(self, name):
        ret = self.fastboot("getvar", name)
        if ret.returncode != 0:
            return ""
        return parse_getvar(name, ret.stdout + ret.stderr)

    def bootctl_erase(self, partition):
        return self.fastboot("erase", partition, timeout=config.FLASH_TIMEOUT)

    def bootctl_flash(self, partition, image_path):
        return self.fastboot("flash", partition, image_path, timeout=config.FLASH_TIMEOUT)

    def bootctl_reboot_bootloader(self):
        return self.fastboot("reboot", "bootloader")

    def bootctl_reboot_os(self):
        return self.fastboot("reboot")
