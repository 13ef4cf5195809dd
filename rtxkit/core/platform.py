"""
Platform detection for rtxkit.

This module normalizes the running operating system and CPU architecture into
the names used by rtx release assets, cache keys and download URLs.

Usage:
    from rtxkit.core.platform import detect_platform

    platform_info = detect_platform()
    print(f"OS: {platform_info.os}")
    print(f"Architecture: {platform_info.arch}")
    print(f"Platform string: {platform_info.platform_string()}")
"""

import functools
import platform
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform identity used for cache keys and binary downloads.

    Attributes:
        os: Operating system ('linux', 'macos', 'windows', or whatever the host reports)
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm', or the raw machine name)
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-arm64').

        Example:
            >>> PlatformInfo('linux', 'x64').platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo instance with detected platform information

    Example:
        >>> platform_info = detect_platform()
        >>> print(f"Running on {platform_info.platform_string()}")
        Running on linux-x64
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    The Darwin kernel name maps to 'macos'. Every other system name is
    returned lowercased and otherwise unchanged, unknown ones included.
    """
    system = platform.system().lower()

    if system == "darwin":
        return "macos"
    return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm', or the
        raw machine name for anything else
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        # Return original for unknown architectures
        return machine


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    Useful for testing.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
]
