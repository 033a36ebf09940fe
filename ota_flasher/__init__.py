#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

VERSION = "v0.1.0"
