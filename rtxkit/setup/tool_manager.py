"""
Adapter around the rtx executable.

Only three subcommands are used: '--version', 'install' and 'bin-paths'.
rtx's own output is the diagnostic surface, so version and install stream
straight to the console; bin-paths is captured and parsed.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple, Union

from rtxkit.core.exceptions import ToolManagerCommandError

logger = logging.getLogger(__name__)

BinPaths = Tuple[str, ...]


def parse_bin_paths(output: str) -> BinPaths:
    """
    Parse newline-delimited bin-paths output.

    Order is preserved. Empty lines, including the one after a trailing
    newline, are dropped and Windows line endings are tolerated.

    Example:
        >>> parse_bin_paths("/a/bin\\n/b/bin\\n")
        ('/a/bin', '/b/bin')
    """
    return tuple(line.rstrip("\r") for line in output.split("\n") if line.strip())


class ToolManager:
    """Run rtx subcommands."""

    def __init__(
        self,
        executable: str = "rtx",
        cwd: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize the adapter.

        Args:
            executable: rtx executable name or path (resolved on PATH by name)
            cwd: Directory holding the tool-version files (default: cwd)
        """
        self.executable = executable
        self.cwd = cwd

    def _environment(self) -> dict:
        # Read PATH at call time so directories added during the run are seen
        return dict(os.environ)

    def _run(self, args: List[str], capture: bool = False) -> subprocess.CompletedProcess:
        command = [self.executable, *args]
        logger.info(f"Running: {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                cwd=self.cwd,
                env=self._environment(),
                capture_output=capture,
                text=True,
            )
        except OSError as e:
            # Exit code 127 mirrors the shell's "command not found"
            logger.error(f"Failed to start {self.executable}: {e}")
            raise ToolManagerCommandError(command, 127) from e

        if result.returncode != 0:
            if capture and result.stderr:
                logger.error(result.stderr.strip())
            raise ToolManagerCommandError(command, result.returncode)

        return result

    def version(self) -> None:
        """Run 'rtx --version'."""
        self._run(["--version"])

    def install(self) -> None:
        """Run 'rtx install' for every tool declared in the tool-version files."""
        self._run(["install"])

    def bin_paths(self) -> BinPaths:
        """Run 'rtx bin-paths' and parse its output."""
        result = self._run(["bin-paths"], capture=True)
        paths = parse_bin_paths(result.stdout or "")
        logger.debug(f"rtx reported {len(paths)} bin path(s)")
        return paths
