"""
Centralized exception hierarchy for rtxkit.

Every error raised on purpose by rtxkit derives from RtxKitError so the
setup orchestrator can turn it into a single failure message.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class RtxKitError(Exception):
    """Base exception for all rtxkit errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(RtxKitError):
    """Raised when action inputs or configuration files are invalid."""

    pass


class ToolVersionsWriteError(ConfigurationError):
    """Raised when the .tool-versions manifest cannot be written."""

    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Failed to write {path}: {reason}")


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheStoreError(RtxKitError):
    """Raised when the cache store is unreachable or holds a corrupt entry."""

    pass


class CacheLockTimeout(CacheStoreError):
    """Raised when the cache store lock cannot be acquired within timeout."""

    pass


# ============================================================================
# Binary Acquisition Exceptions
# ============================================================================


class BinaryAcquisitionError(RtxKitError):
    """Base exception when the rtx binary cannot be installed."""

    pass


class ReleaseAssetNotFoundError(BinaryAcquisitionError):
    """Raised when a release has no asset for the current platform."""

    def __init__(self, version: str, pattern: str):
        self.version = version
        self.pattern = pattern
        super().__init__(f"No release asset matching '{pattern}' found for rtx {version}")


class DownloadError(BinaryAcquisitionError):
    """Raised when a download fails after all retries."""

    pass


# ============================================================================
# Tool Manager Exceptions
# ============================================================================


class ToolManagerCommandError(RtxKitError):
    """Raised when an rtx subcommand exits with a non-zero status."""

    def __init__(self, command: list, returncode: int):
        self.command = list(command)
        self.returncode = returncode
        super().__init__(
            f"Command '{' '.join(self.command)}' failed with exit code {returncode}"
        )
