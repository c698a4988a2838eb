"""Operating system and CPU architecture selectors used for release assets."""

from __future__ import annotations

import platform as _platform
import sys
from enum import Enum


class Platform(str, Enum):
    """Operating systems that releases publish binaries for."""

    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"
    FREEBSD = "freebsd"

    @property
    def title_case(self) -> str:
        """Natural-language casing used in asset names (``Darwin``)."""

        return self.value.title()

    @classmethod
    def current(cls) -> "Platform":
        if sys.platform.startswith("win"):
            return cls.WINDOWS
        if sys.platform == "darwin":
            return cls.DARWIN
        if sys.platform.startswith("freebsd"):
            return cls.FREEBSD
        return cls.LINUX


_MACHINE_ALIASES: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
}


class Architecture(str, Enum):
    """CPU architectures that releases publish binaries for."""

    AMD64 = "amd64"
    I386 = "386"
    ARM64 = "arm64"
    ARM = "arm"

    @classmethod
    def current(cls) -> "Architecture":
        machine = _platform.machine().strip().lower()
        return cls(_MACHINE_ALIASES.get(machine, "amd64"))


__all__ = ["Architecture", "Platform"]
