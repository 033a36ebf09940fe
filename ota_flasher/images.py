#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import os

from ota_flasher import config
from ota_flasher import logger
from ota_flasher.session import ImageEntry

TAG = "images"


def scan_images(directory=config.IMAGE_DIR):
    """Collects the flashable images sitting directly in `directory`.

    Arguments:
        directory -- folder holding the extracted OTA images, created when missing

    Returns:
        list of ImageEntry sorted by file name, one per .img/.bin file
    """
    if not os.path.isdir(directory):
        os.makedirs(directory)

    images = []
    for file in sorted(os.listdir(directory)):
        path = os.path.join(directory, file)
        if not os.path.isfile(path) or not file.endswith(config.IMAGE_EXTENSIONS):
            continue
        partition = os.path.splitext(file)[0]
        images.append(ImageEntry(partition, path))

    if not images:
        logger.warn(f"No .bin or .img files found in {directory}.", tag=TAG)
        logger.warn("Please add files to use the Erase & Flash functions.", tag=TAG)
    else:
        logger.info(f"Found {len(images)} image files in {directory}.", tag=TAG)
    return images
