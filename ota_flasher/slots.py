#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import click
from simple_term_menu import TerminalMenu

from ota_flasher import logger
from ota_flasher.session import ActiveSlot

TAG = "slot"

SLOT_CHOICES = {
    "1": ActiveSlot.A,
    "2": ActiveSlot.B,
    "3": ActiveSlot.NONE,
}
SLOT_MENU_ENTRIES = ["1. _a", "2. _b", "3. Clear active slot"]


class SlotManager:
    def __init__(self, device, session):
        self.device = device
        self.session = session

    def _slot_from_bridge(self):
        state = self.device.bridge_get_state()
        if not state.running_os:
            logger.info(f"ADB not available. Device state: {state.value}", tag=TAG)
            return None
        logger.info(f"ADB mode detected: {state.value}", tag=TAG)
        return ActiveSlot.parse(self.device.bridge_get_property("ro.boot.slot_suffix"))

    def _slot_from_bootctl(self):
        devices = self.device.bootctl_list_devices()
        if not devices:
            return None
        logger.info(f"{devices[0].mode.label.capitalize()} mode detected.", tag=TAG)
        return ActiveSlot.parse(self.device.bootctl_get_var("current-slot"))

    def detect_active_slot(self):
        """Queries the device for its active slot and stores it on the session.

        Both sources are consulted. When fastboot answers, its value replaces
        whatever adb reported.
        """
        logger.info("Checking for an active slot (_a or _b)...", tag=TAG)
        slot = ActiveSlot.NONE
        from_bridge = self._slot_from_bridge()
        if from_bridge is not None:
            slot = from_bridge
        from_bootctl = self._slot_from_bootctl()
        if from_bootctl is not None:
            slot = from_bootctl

        self.session.detected_slot = slot
        if slot is ActiveSlot.NONE:
            logger.warn("No active A/B slot detected.", tag=TAG)
        else:
            logger.info(f"Active suffix: {slot.suffix}", tag=TAG)
        return slot

    def select_active_slot(self, choice):
        choice = (choice or "").strip()
        if choice in SLOT_CHOICES:
            slot = SLOT_CHOICES[choice]
        else:
            logger.warn("Invalid choice. Defaulting to _a.", tag=TAG)
            slot = ActiveSlot.A

        self.session.selected_slot = slot
        if slot is ActiveSlot.NONE:
            logger.info("Active slot cleared.", tag=TAG)
        else:
            logger.info(f"Active slot set to: {slot.suffix}", tag=TAG)
        return slot


def prompt_slot_choice(tui=False):
    if tui:
        index = TerminalMenu(
            menu_entries=SLOT_MENU_ENTRIES,
            title="Select the active slot:").show()
        # escape falls through to the unrecognized-input default
        return "" if index is None else str(index + 1)
    click.echo("Select the active slot:")
    for entry in SLOT_MENU_ENTRIES:
        click.echo(entry)
    return click.prompt("Enter your choice (1/2/3)", default="", show_default=False)
