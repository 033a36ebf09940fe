#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

from dataclasses import dataclass, field

import click

from ota_flasher import logger
from ota_flasher.session import ActiveSlot, DeviceMode

TAG = "erase"


@dataclass
class EraseReport:
    erased: list = field(default_factory=list)
    failures: list = field(default_factory=list)
    aborted: bool = False

    @property
    def failed_count(self):
        return len(self.failures)


def confirm_erase(slot):
    if slot is ActiveSlot.NONE:
        click.echo("This will erase the device's currently in use slot")
    else:
        click.echo(f"This will erase slot {slot.suffix}")
    return click.prompt("Do you want to continue? (y/n)", default="", show_default=False)


class PartitionEraser:
    def __init__(self, device, modes, session):
        self.device = device
        self.modes = modes
        self.session = session

    def erase_active_partitions(self, answer) -> EraseReport:
        """Erases the partition behind every discovered image.

        `answer` is the operator's reply to the confirmation prompt, only
        y/Y goes ahead. A failed erase is recorded and the rest still run.
        """
        answer = (answer or "").strip()
        if answer in ("n", "N"):
            return EraseReport(aborted=True)
        if answer not in ("y", "Y"):
            logger.warn("Invalid choice. Exiting.", tag=TAG)
            return EraseReport(aborted=True)

        if not self.modes.ensure_mode(DeviceMode.FASTBOOTD):
            logger.error("Device is not in fastbootd mode. Nothing was erased.", tag=TAG)
            return EraseReport(aborted=True)

        slot = self.session.slot
        if self.session.selected_slot is not ActiveSlot.NONE:
            logger.info(f"Erasing all partitions on slot {slot.suffix}:", tag=TAG)
        else:
            logger.info("Erasing all partitions on the active slot:", tag=TAG)

        report = EraseReport()
        for image in self.session.images:
            partition_name = image.partition_name(self.session.slot)
            logger.info(f"Erasing {partition_name}...", tag=TAG)
            ret = self.device.bootctl_erase(partition_name)
            if ret.returncode != 0:
                logger.error(f"Failed to erase {partition_name} : {ret.stderr.strip()}", tag=TAG)
                report.failures.append((image, ret.stderr.strip()))
            else:
                report.erased.append(image)

        if report.failures:
            logger.warn(f"{report.failed_count} of {len(self.session.images)} partitions failed to erase.", tag=TAG)
        else:
            logger.info(f"All {len(report.erased)} partitions erased successfully.", tag=TAG)
        return report
