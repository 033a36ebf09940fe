#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import alive_progress as alive

from ota_flasher import logger
from ota_flasher.errors import DeviceWaitTimeout
from ota_flasher.session import DeviceMode

TAG = "mode"


class ModeController:
    """Brings the device into fastbootd or bootloader mode.

    Modes are only reachable in the order OS -> fastbootd -> bootloader, so
    asking for bootloader from a running OS goes through fastbootd first.
    Each call issues at most one reboot for the requested mode and then polls
    until the device shows up or the session's retry budget runs out.
    """

    def __init__(self, device, session):
        self.device = device
        self.session = session

    def devices_in(self, mode):
        return [d for d in self.device.bootctl_list_devices() if d.mode is mode]

    def in_mode(self, mode):
        return len(self.devices_in(mode)) > 0

    def _reboot_into(self, target):
        if target is DeviceMode.FASTBOOTD:
            return self.device.bridge_reboot_to_fastboot()
        return self.device.bootctl_reboot_bootloader()

    def wait_for_mode(self, target, cancel=None):
        """Polls until a device is visible in `target` mode.

        Returns the attempt number on which the device appeared. Raises
        DeviceWaitTimeout when the retry budget is spent and
        OperationCancelled when `cancel` fires.
        """
        cancel = cancel or self.session.cancel
        retry = self.session.retry
        logger.info(f"Waiting for device to boot into {target.label} ...", tag=TAG)
        with alive.alive_bar(title=f"Waiting for {target.label}") as bar:
            for attempt in range(1, retry.max_attempts + 1):
                cancel.raise_if_cancelled()
                if self.in_mode(target):
                    return attempt
                bar()
                if attempt < retry.max_attempts:
                    cancel.wait(retry.interval)
        raise DeviceWaitTimeout(target, retry.max_attempts)

    def ensure_mode(self, target, cancel=None) -> bool:
        cancel = cancel or self.session.cancel
        logger.info(f"Checking for a connected device in {target.label} mode...", tag=TAG)
        if self.in_mode(target):
            logger.info(f"Device found in {target.label} mode.", tag=TAG)
            return True

        if target is DeviceMode.BOOTLOADER and not self.in_mode(DeviceMode.FASTBOOTD):
            logger.warn("Device is not in fastbootd mode. Switching to fastbootd mode first.", tag=TAG)
            if not self.ensure_mode(DeviceMode.FASTBOOTD, cancel):
                logger.error("Bootloader mode is only reachable through fastbootd.", tag=TAG)
                return False

        logger.warn(f"Device not found in {target.label} mode.", tag=TAG)
        logger.info(f"Attempting to reboot into {target.label} mode...", tag=TAG)
        ret = self._reboot_into(target)
        if ret.returncode != 0:
            logger.warn(f"Reboot command failed : {ret.stderr.strip()}", tag=TAG)

        try:
            self.wait_for_mode(target, cancel)
        except DeviceWaitTimeout as e:
            logger.warn(str(e), tag=TAG)

        if not self.in_mode(target):
            logger.error(f"Device failed to reboot into {target.label} mode.", tag=TAG)
            return False
        logger.info(f"Device found in {target.label} mode.", tag=TAG)
        return True
