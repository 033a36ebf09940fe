#!/usr/bin/env python3

#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

from ota_flasher.cli import cli

if __name__ == '__main__':
    cli()
