#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import os
import shutil
import subprocess
import urllib.request as request

import alive_progress as alive

from ota_flasher import config
from ota_flasher import logger
from ota_flasher.errors import ToolNotFound

TAG = "tools"


def local_tool_path(name):
    exe = f"{name}.exe" if config.PLATFORM == "windows" else name
    return os.path.join(os.getcwd(), config.PLATFORM_TOOLS_DIR, exe)


def resolve_tool(name):
    """Prefers the downloaded platform-tools copy over the one on PATH."""
    local = local_tool_path(name)
    if os.path.isfile(local):
        return local
    found = shutil.which(name)
    if found is None:
        raise ToolNotFound(name)
    return found


def download_file(url, filename):
    with alive.alive_bar() as bar:
        def progress(count, block_size, total_size):
            bar()
        request.urlretrieve(url, filename, progress)


def unzip_platform_tools(archive):
    logger.info("Unzipping platform tools...", tag=TAG)
    if config.PLATFORM == "windows":
        ret = subprocess.run(['powershell.exe', '-Command',
                              f'Expand-Archive -Path {archive} -DestinationPath .'])
    else:
        ret = subprocess.run(['unzip', '-o', archive])
    os.remove(archive)
    return ret.returncode == 0


def check_platform_tools():
    if os.path.exists(config.PLATFORM_TOOLS_DIR):
        logger.info("Platform tools already exists, skipping...", tag=TAG)
        return True
    logger.info("Downloading platform tools...", tag=TAG)
    archive = f"{config.PLATFORM_TOOLS_DIR}.zip"
    download_file(config.PLATFORM_TOOLS_URL, archive)
    if not unzip_platform_tools(archive):
        logger.error(f"Error in unzipping {archive}", tag=TAG)
        return False
    logger.info("Done.", tag=TAG)
    return True
