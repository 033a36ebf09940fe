#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import os
import platform

PLATFORM = platform.uname().system.lower()

IMAGE_DIR = os.getenv("OTA_FLASHER_IMAGE_DIR", "./image_files")
IMAGE_EXTENSIONS = (".img", ".bin")

FAILURE_LOG = os.getenv("OTA_FLASHER_FAILURE_LOG", "flash_failures.txt")
FAILURE_LOG_HEADER = "Failed to flash the following files:"

# one reboot-and-poll cycle is POLL_ATTEMPTS * POLL_INTERVAL seconds at most
POLL_INTERVAL = float(os.getenv("OTA_FLASHER_POLL_INTERVAL", "1.0"))
POLL_ATTEMPTS = int(os.getenv("OTA_FLASHER_POLL_ATTEMPTS", "60"))

QUERY_TIMEOUT = 30
FLASH_TIMEOUT = 600

PLATFORM_TOOLS_VERSION = "r34.0.0"
PLATFORM_TOOLS_URL = f"https://dl.google.com/android/repository/platform-tools_{PLATFORM_TOOLS_VERSION}-{PLATFORM}.zip"
PLATFORM_TOOLS_DIR = "platform-tools"
