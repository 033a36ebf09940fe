#
# Copyright (C) 2023 The OTA Flasher Authors.
# All rights reserved.
#
# Part of ota-flasher, the OTA image erase and flash utility.
#

import os
import time

from termcolor import colored

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
COLORS = {"debug": "white", "info": "green", "warn": "yellow", "error": "red"}

_threshold = LEVELS.get(os.getenv("OTA_FLASHER_LOG_LEVEL", "info").lower(), 20)


def current_milli_time():
    return round(time.time() * 1000)


def set_level(level):
    global _threshold
    if level.lower() not in LEVELS:
        raise ValueError(f"Unknown log level : {level}")
    _threshold = LEVELS[level.lower()]


def _emit(level, msg, tag):
    if LEVELS[level] < _threshold:
        return
    print(colored(f"[{current_milli_time()}] [{tag}] {msg}", COLORS[level]))


def debug(msg, tag="-"):
    _emit("debug", msg, tag)

def info(msg, tag="-"):
    _emit("info", msg, tag)

def warn(msg, tag="-"):
    _emit("warn", msg, tag)

def error(msg, tag="-"):
    _emit("error", msg, tag)


def spacer():
    print("")
