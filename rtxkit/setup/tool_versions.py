"""
Materialize the declared .tool-versions manifest.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rtxkit.core.exceptions import ToolVersionsWriteError
from rtxkit.core.filesystem import atomic_write

logger = logging.getLogger(__name__)

TOOL_VERSIONS_FILE = ".tool-versions"


def write_tool_versions(
    content: Optional[str], directory: Optional[Union[str, Path]] = None
) -> bool:
    """
    Write the manifest verbatim to .tool-versions, overwriting any existing file.

    Args:
        content: Raw manifest text; empty or None means nothing to write
        directory: Target directory (default: current working directory)

    Returns:
        True if the file was written, False if there was nothing to write

    Raises:
        ToolVersionsWriteError: If the file cannot be written
    """
    if not content:
        return False

    path = Path(directory or Path.cwd()) / TOOL_VERSIONS_FILE

    try:
        atomic_write(path, content, encoding="utf-8")
    except OSError as e:
        raise ToolVersionsWriteError(path, str(e)) from e

    logger.info(f"Wrote {path}")
    return True
