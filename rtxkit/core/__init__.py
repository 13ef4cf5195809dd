"""
Core functionality for rtxkit.

This package contains the foundational modules that other components depend on.
"""

from .context import RunContext, SecretMaskingFilter

from .directory import (
    get_rtx_dir,
    get_cache_store_dir,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .exceptions import (
    RtxKitError,
    ConfigurationError,
    ToolVersionsWriteError,
    CacheStoreError,
    CacheLockTimeout,
    BinaryAcquisitionError,
    ReleaseAssetNotFoundError,
    DownloadError,
    ToolManagerCommandError,
)

__all__ = [
    "RunContext",
    "SecretMaskingFilter",
    "get_rtx_dir",
    "get_cache_store_dir",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "RtxKitError",
    "ConfigurationError",
    "ToolVersionsWriteError",
    "CacheStoreError",
    "CacheLockTimeout",
    "BinaryAcquisitionError",
    "ReleaseAssetNotFoundError",
    "DownloadError",
    "ToolManagerCommandError",
]
