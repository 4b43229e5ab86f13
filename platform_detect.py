#!/usr/bin/env python3
"""
Host platform detection for Siope

Classifies the running operating system into one of the platform tags
used by the opt-out catalog. The result is cached for the lifetime of
the process.
"""

import sys
from enum import Enum
from functools import lru_cache
from typing import Optional


class Platform(Enum):
    """Operating system class an opt-out action can be gated on"""

    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"
    UNKNOWN = "unknown"


PLATFORM_ALIASES = {
    "windows": Platform.WINDOWS,
    "win32": Platform.WINDOWS,
    "linux": Platform.LINUX,
    "macos": Platform.MACOS,
    "darwin": Platform.MACOS,
    "osx": Platform.MACOS,
}


def platform_from_tag(tag: str) -> Optional[Platform]:
    """Look up a catalog platform tag, returning None if it is not known"""
    return PLATFORM_ALIASES.get(tag.strip().lower())


def classify(sys_platform: str) -> Platform:
    """Classify a ``sys.platform`` string"""
    if sys_platform in ("win32", "cygwin", "msys"):
        return Platform.WINDOWS
    if sys_platform.startswith("linux"):
        return Platform.LINUX
    if sys_platform == "darwin":
        return Platform.MACOS
    return Platform.UNKNOWN


@lru_cache(maxsize=None)
def detect_platform() -> Platform:
    """Detect the host platform once per process"""
    return classify(sys.platform)
