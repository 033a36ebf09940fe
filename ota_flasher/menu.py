#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import click
from simple_term_menu import TerminalMenu

from ota_flasher import logger
from ota_flasher.erase import PartitionEraser, confirm_erase
from ota_flasher.errors import OperationCancelled
from ota_flasher.flashing import FlashOrchestrator
from ota_flasher.modes import ModeController
from ota_flasher.session import ActiveSlot, CancelToken, DeviceMode
from ota_flasher.slots import SlotManager, prompt_slot_choice

TAG = "menu"
EXIT = "9"


class Menu:
    def __init__(self, device, session, tui=False):
        self.device = device
        self.session = session
        self.tui = tui
        self.modes = ModeController(device, session)
        self.slots = SlotManager(device, session)
        self.eraser = PartitionEraser(device, self.modes, session)
        self.flasher = FlashOrchestrator(device, self.modes, self.slots, session)
        self.actions = {
            "1": self.enter_fastbootd,
            "2": self.enter_bootloader,
            "3": self.slots.detect_active_slot,
            "4": self.select_slot,
            "5": self.erase,
            "6": self.flasher.flash_phase_one,
            "7": self.flasher.flash_phase_two,
            "8": self.reboot_os,
        }

    def entries(self):
        if self.session.selected_slot is ActiveSlot.NONE:
            erase_label = "Erase active partitions"
        else:
            erase_label = f"Erase slot {self.session.selected_slot.suffix} partitions"
        return [
            "1. Enter fastbootd mode",
            "2. Enter bootloader mode",
            "3. Find device's active slot",
            "4. Select an active slot",
            f"5. {erase_label}",
            "6. Begin flashing in fastbootd mode (1/2)",
            "7. Finish flashing in bootloader mode (2/2)",
            "8. Reboot to device's OS",
            "9. Exit",
        ]

    def enter_fastbootd(self):
        if not self.modes.ensure_mode(DeviceMode.FASTBOOTD):
            logger.error("Device is not in fastbootd mode.", tag=TAG)

    def enter_bootloader(self):
        if not self.modes.ensure_mode(DeviceMode.BOOTLOADER):
            logger.error("Device is not in bootloader mode.", tag=TAG)

    def select_slot(self):
        self.slots.select_active_slot(prompt_slot_choice(self.tui))

    def erase(self):
        self.eraser.erase_active_partitions(confirm_erase(self.session.selected_slot))

    def reboot_os(self):
        logger.info("Rebooting to device's OS...", tag=TAG)
        ret = self.device.bootctl_reboot_os()
        if ret.returncode != 0:
            logger.error(f"Reboot failed : {ret.stderr.strip()}", tag=TAG)

    def read_choice(self):
        if self.tui:
            index = TerminalMenu(menu_entries=self.entries(), title="Flashing Menu").show()
            return EXIT if index is None else str(index + 1)
        click.echo("Flashing Menu")
        click.echo("-----------")
        for entry in self.entries():
            click.echo(entry)
        return click.prompt("Enter your choice", default="", show_default=False).strip()

    def handle(self, choice):
        """Runs one menu action. Returns False once the operator asks to exit.

        ModeUnreachable raised while flashing is left to propagate.
        """
        if choice == EXIT:
            return False
        action = self.actions.get(choice)
        if action is None:
            logger.warn("Invalid choice. Please try again.", tag=TAG)
            return True
        try:
            action()
        except KeyboardInterrupt:
            logger.warn("Operation cancelled.", tag=TAG)
        except OperationCancelled as e:
            logger.warn(str(e), tag=TAG)
            self.session.cancel = CancelToken()
        return True

    def run(self):
        while True:
            try:
                choice = self.read_choice()
            except (click.Abort, EOFError):
                break
            if not self.handle(choice):
                break
            logger.spacer()
