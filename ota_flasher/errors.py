#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#


class FlasherError(Exception):
    """Base class for every error raised by ota_flasher."""


class ModeUnreachable(FlasherError):
    """Device did not reach the required mode after one reboot-and-poll cycle."""

    def __init__(self, mode):
        super().__init__(f"Device is not in {mode.label} mode.")
        self.mode = mode


class DeviceWaitTimeout(FlasherError):
    def __init__(self, mode, attempts):
        super().__init__(f"Gave up waiting for {mode.label} mode after {attempts} attempts.")
        self.mode = mode
        self.attempts = attempts


class OperationCancelled(FlasherError):
    def __init__(self, msg="Operation cancelled."):
        super().__init__(msg)


class ToolNotFound(FlasherError):
    def __init__(self, name):
        super().__init__(f"Could not find '{name}'. Install platform tools or run `ota-flasher fetch-tools`.")
        self.name = name
