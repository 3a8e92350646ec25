"""
Platform detection for zvm.

This module detects the current operating system and CPU architecture and
renders them in the naming used by the Zig download index, where platform
keys read "<arch>-<os>" (e.g. 'x86_64-linux', 'aarch64-macos').

Usage:
    from zvm.core.platform import detect_platform

    info = detect_platform()
    print(info.catalog_key())   # x86_64-linux
    print(info.binary_name())   # zig
"""

import functools
import platform
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform information.

    Attributes:
        os: Operating system ('linux', 'macos', 'windows', 'freebsd')
        arch: CPU architecture ('x86_64', 'aarch64', 'x86', 'armv7a', ...)
    """

    os: str
    arch: str

    def catalog_key(self) -> str:
        """
        Platform key used by the Zig and ZLS indexes.

        Example:
            >>> PlatformInfo('linux', 'x86_64').catalog_key()
            'x86_64-linux'
        """
        return f"{self.arch}-{self.os}"

    def binary_name(self, name: str = "zig") -> str:
        """Executable file name for this platform."""
        return f"{name}.exe" if self.os == "windows" else name

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    Raises:
        RuntimeError: If OS is not supported
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "linux":
        return "linux"
    elif system == "darwin":
        return "macos"
    elif system == "freebsd":
        return "freebsd"
    else:
        raise RuntimeError(f"Unsupported operating system: {system}")


def _detect_architecture() -> str:
    """Detect CPU architecture using Zig's architecture names."""
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x86_64"
    elif machine in ("aarch64", "arm64"):
        return "aarch64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("armv7") or machine == "arm":
        return "armv7a"
    elif machine in ("ppc64le", "powerpc64le"):
        return "powerpc64le"
    else:
        # riscv64 and friends already match
        return machine


def clear_platform_cache() -> None:
    """Clear the detection cache (used by tests)."""
    detect_platform.cache_clear()
