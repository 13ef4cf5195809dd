"""
Cache key derivation for the rtx tool cache.

The key fingerprints the platform and the content of every tool-version file
in the working directory tree:

    rtx-tools-{os}-{arch}-{sha256 of tool-version files}

Identical file contents on the same platform always give the same key.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from rtxkit.core.context import PRIMARY_KEY_STATE, RunContext
from rtxkit.core.filesystem import hash_files
from rtxkit.core.platform import PlatformInfo, detect_platform

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "rtx-tools"

TOOL_VERSION_PATTERNS = ("**/.tool-versions", "**/.rtx.toml")


@dataclass(frozen=True)
class CacheKey:
    """Composite cache key."""

    prefix: str
    os: str
    arch: str
    content_hash: str

    @property
    def platform_prefix(self) -> str:
        """Key prefix shared by every key of this platform (fallback lookup)."""
        return f"{self.prefix}-{self.os}-{self.arch}-"

    def __str__(self) -> str:
        return f"{self.platform_prefix}{self.content_hash}"


def derive_cache_key(
    context: RunContext,
    root: Optional[Union[str, Path]] = None,
    platform_info: Optional[PlatformInfo] = None,
) -> CacheKey:
    """
    Derive the cache key for the tool-version files under root.

    Having no tool-version files at all is not an error; the hash part is
    then the fixed empty-set hash.

    Args:
        context: Run context; the key is saved as PRIMARY_KEY state
        root: Directory to scan (default: current working directory)
        platform_info: Platform identity (auto-detected if None)

    Returns:
        The derived CacheKey
    """
    root = Path(root) if root is not None else Path.cwd()
    platform_info = platform_info or detect_platform()

    content_hash = hash_files(TOOL_VERSION_PATTERNS, root)
    key = CacheKey(
        prefix=CACHE_KEY_PREFIX,
        os=platform_info.os,
        arch=platform_info.arch,
        content_hash=content_hash,
    )

    context.save_state(PRIMARY_KEY_STATE, str(key))
    logger.debug(f"Derived cache key {key}")
    return key
