#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import os
import shutil
import sys

import click

from ota_flasher import VERSION
from ota_flasher import config
from ota_flasher import logger
from ota_flasher.device import DeviceControl
from ota_flasher.errors import ModeUnreachable, ToolNotFound
from ota_flasher.images import scan_images
from ota_flasher.menu import Menu
from ota_flasher.session import RetryPolicy, Session
from ota_flasher.tools import check_platform_tools, resolve_tool


@click.command(name="menu")
@click.option('--image-dir', '-d', default=config.IMAGE_DIR, show_default=True,
              help='Directory holding the extracted .img/.bin files.')
@click.option('--poll-interval', default=config.POLL_INTERVAL, show_default=True, type=float,
              help='Seconds between checks while waiting for the device to change mode.')
@click.option('--poll-attempts', default=config.POLL_ATTEMPTS, show_default=True, type=click.IntRange(min=1),
              help='Checks before giving up on a mode change.')
@click.option('--tui', is_flag=True, help='Use an arrow-key menu instead of typed choices.')
@click.option('--log-level', type=click.Choice(list(logger.LEVELS)), default=None,
              help='Overrides OTA_FLASHER_LOG_LEVEL.')
def flash_menu(image_dir, poll_interval, poll_attempts, tui, log_level):
    """Interactive erase and flash menu.

    Flashing is done in two steps:

    6. flashes every image in fastbootd mode on the active slot

    7. retries whatever failed in bootloader mode and writes the leftovers to the failure log
    """
    if log_level:
        logger.set_level(log_level)
    try:
        device = DeviceControl(adb=resolve_tool("adb"), fastboot=resolve_tool("fastboot"))
    except ToolNotFound as e:
        logger.error(str(e))
        sys.exit(1)

    session = Session(
        images=scan_images(image_dir),
        retry=RetryPolicy(max_attempts=poll_attempts, interval=poll_interval))
    logger.spacer()
    try:
        Menu(device, session, tui=tui).run()
    except ModeUnreachable as e:
        logger.error(f"{e} Exiting.")
        sys.exit(1)


@click.command(name="fetch-tools")
def fetch_tools():
    """Downloads Google's platform tools (adb, fastboot) into ./platform-tools"""
    if not check_platform_tools():
        sys.exit(1)


@click.command(name="clean")
def cleanup():
    """Removes the failure log and downloaded platform tools"""
    if os.path.exists(config.FAILURE_LOG):
        logger.info(f"Deleting {config.FAILURE_LOG} ...")
        os.remove(config.FAILURE_LOG)
    if os.path.exists(config.PLATFORM_TOOLS_DIR):
        logger.info(f"Deleting {config.PLATFORM_TOOLS_DIR} ...")
        shutil.rmtree(config.PLATFORM_TOOLS_DIR)
    logger.info("Done.")


@click.group()
@click.version_option(version="", message=f"OTA flash utility : {VERSION}")
def cli():
    """OTA flash utility

    Erases and flashes extracted OTA images through fastbootd and the bootloader.

    Important points:

    1. This script assumes only a single device is connected to the host PC.

    2. Image files are named after their partition (boot.img flashes boot).

    3. adb and fastboot are taken from ./platform-tools when present, otherwise from PATH.
    """
    pass


cli.add_command(flash_menu)
cli.add_command(fetch_tools)
cli.add_command(cleanup)

if __name__ == '__main__':
    cli()
