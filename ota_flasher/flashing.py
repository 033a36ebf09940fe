#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import alive_progress as alive

from ota_flasher import logger
from ota_flasher.errors import ModeUnreachable
from ota_flasher.session import ActiveSlot, DeviceMode, FlashFailureLog

TAG = "flash"


class FlashOrchestrator:
    """Flashes the session's images in two passes.

    Phase one runs in fastbootd against the slotted partition names and
    remembers whatever failed. Phase two reboots to the bootloader and retries
    only those images against their unsuffixed names, since the partitions
    fastbootd refuses are the non-dynamic ones which carry no slot.
    """

    def __init__(self, device, modes, slots, session):
        self.device = device
        self.modes = modes
        self.slots = slots
        self.session = session

    def flash_image(self, partition_name, image):
        logger.info(f"Flashing {partition_name} with {image.path}...", tag=TAG)
        ret = self.device.bootctl_flash(partition_name, image.path)
        if ret.returncode != 0:
            logger.error(f"Flashing {partition_name} failed! {ret.stderr.strip()}", tag=TAG)
        else:
            logger.info(f"{partition_name} flashed successfully!", tag=TAG)
        return ret

    def _flash_batch(self, images, slot, title):
        failed = {}
        with alive.alive_bar(len(images) or None, title=title) as bar:
            for image in images:
                ret = self.flash_image(image.partition_name(slot), image)
                if ret.returncode != 0:
                    failed.setdefault(image, ret.stderr.strip())
                bar()
        return failed

    def flash_phase_one(self):
        if not self.modes.ensure_mode(DeviceMode.FASTBOOTD):
            raise ModeUnreachable(DeviceMode.FASTBOOTD)

        if self.session.selected_slot is ActiveSlot.NONE:
            # the device may have changed since the last lookup
            self.slots.detect_active_slot()

        logger.info("Begin flashing dynamic partitions...", tag=TAG)
        failed = self._flash_batch(self.session.images, self.session.slot, "fastbootd")

        self.session.failed.clear()
        for image, error in failed.items():
            self.session.record_failure(image, error)

        if failed:
            logger.warn(f"{len(failed)} images failed in fastbootd, finish them in bootloader mode (2/2).", tag=TAG)
        else:
            logger.info("All images flashed in fastbootd mode.", tag=TAG)
        return set(self.session.failed.values())

    def flash_phase_two(self):
        """Retries phase-one failures in bootloader mode.

        Returns the FlashFailureLog when some images still fail (the log has
        been written to disk by then), None otherwise.
        """
        if not self.session.failed:
            logger.info("No files to flash in fastbootd. Nothing to do.", tag=TAG)
            return None

        if not self.modes.ensure_mode(DeviceMode.BOOTLOADER):
            raise ModeUnreachable(DeviceMode.BOOTLOADER)

        logger.info("Flashing system partitions...", tag=TAG)
        still_failing = self._flash_batch(self.session.failed_images, ActiveSlot.NONE, "bootloader")
        self.session.failed.clear()

        if not still_failing:
            logger.info("All failed flashes succeeded after retry. No failure log needed.", tag=TAG)
            return None

        failure_log = FlashFailureLog(self.session.failure_log_path, list(still_failing))
        failure_log.write()
        logger.error(f"Some files failed to flash after retrying. Logged to {failure_log.path}", tag=TAG)
        logger.warn(f"Please check {failure_log.path} for the failed files.", tag=TAG)
        return failure_log
