"""
Setup step: manifest, rtx binary, tool install and orchestration.
"""

from .binary import BinarySource, acquire_binary, resolve_binary_source
from .orchestrator import SetupOrchestrator, SetupResult, SetupStage
from .tool_manager import ToolManager, parse_bin_paths
from .tool_versions import TOOL_VERSIONS_FILE, write_tool_versions

__all__ = [
    "BinarySource",
    "acquire_binary",
    "resolve_binary_source",
    "SetupOrchestrator",
    "SetupResult",
    "SetupStage",
    "ToolManager",
    "parse_bin_paths",
    "TOOL_VERSIONS_FILE",
    "write_tool_versions",
]
