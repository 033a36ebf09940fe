#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import threading
from dataclasses import dataclass, field
from enum import Enum

from ota_flasher import config
from ota_flasher.errors import OperationCancelled


class DeviceMode(Enum):
    UNKNOWN = "unknown"
    FASTBOOTD = "fastbootd"
    BOOTLOADER = "bootloader"

    @property
    def label(self):
        return self.value


class ActiveSlot(Enum):
    NONE = ""
    A = "a"
    B = "b"

    @property
    def suffix(self):
        return f"_{self.value}" if self.value else ""

    @classmethod
    def parse(cls, text):
        """Maps raw slot text ("a", "_b", "b\\r") to a slot, anything else to NONE."""
        value = (text or "").strip().strip("_").lower()
        if value == "a":
            return cls.A
        if value == "b":
            return cls.B
        return cls.NONE


@dataclass(frozen=True)
class ImageEntry:
    partition: str
    path: str

    def partition_name(self, slot=ActiveSlot.NONE):
        return f"{self.partition}{slot.suffix}"


@dataclass(frozen=True)
class FailedFlash:
    image: ImageEntry
    error: str = ""


@dataclass
class FlashFailureLog:
    path: str
    images: list

    def write(self):
        with open(self.path, "w") as f:
            f.write(f"{config.FAILURE_LOG_HEADER}\n")
            for image in self.images:
                f.write(f"{image.path}\n")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = config.POLL_ATTEMPTS
    interval: float = config.POLL_INTERVAL


class CancelToken:
    """Lets a caller abort a poll loop from outside it."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self.cancelled:
            raise OperationCancelled()

    def wait(self, interval):
        # Event.wait doubles as an interruptible sleep
        if self._event.wait(interval):
            raise OperationCancelled()


@dataclass
class Session:
    """State shared by the menu actions for one run of the tool."""

    images: list = field(default_factory=list)
    detected_slot: ActiveSlot = ActiveSlot.NONE
    selected_slot: ActiveSlot = ActiveSlot.NONE
    failed: dict = field(default_factory=dict)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    cancel: CancelToken = field(default_factory=CancelToken)
    failure_log_path: str = config.FAILURE_LOG

    @property
    def slot(self):
        if self.selected_slot is not ActiveSlot.NONE:
            return self.selected_slot
        return self.detected_slot

    def record_failure(self, image, error=""):
        # keyed by image so a retried image is listed once
        self.failed.setdefault(image, FailedFlash(image, error))

    @property
    def failed_images(self):
        return list(self.failed)
