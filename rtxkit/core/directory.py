"""
Directory resolution for rtxkit.

Directory Structure:
    rtx data directory ($RTX_DATA_DIR, $XDG_DATA_HOME/rtx or ~/.local/share/rtx):
        - bin/rtx     : The rtx binary installed by the setup step
        - installs/   : Tools installed by rtx (the cached part)

    Cache store (RTXKIT_CACHE_DIR or ~/.cache/rtxkit):
        - index.json  : Saved cache keys and their archives
        - *.tar.gz    : One archive per saved key
"""

import os
from pathlib import Path


def get_rtx_dir() -> Path:
    """
    Get the rtx data directory that holds the binary and installed tools.

    Returns:
        Path: The rtx data directory path.

    Example:
        >>> get_rtx_dir()
        PosixPath('/home/user/.local/share/rtx')  # on Linux
    """
    data_dir = os.environ.get("RTX_DATA_DIR")
    if data_dir:
        return Path(data_dir)

    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home) / "rtx"

    return Path.home() / ".local" / "share" / "rtx"


def get_cache_store_dir() -> Path:
    """
    Get the root directory of the local cache store.

    Returns:
        Path: RTXKIT_CACHE_DIR if set, otherwise ~/.cache/rtxkit
    """
    cache_dir = os.environ.get("RTXKIT_CACHE_DIR")
    if cache_dir:
        return Path(cache_dir)
    return Path.home() / ".cache" / "rtxkit"
