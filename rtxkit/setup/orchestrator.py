"""
Setup orchestration.

Runs the setup step as a linear state machine:

    CONFIG_LOADED -> MANIFEST_WRITTEN -> CACHE_CHECKED -> BINARY_INSTALLED
        -> TOOLS_INSTALLED -> PATHS_PUBLISHED -> DONE

Any error on the way moves the run to FAILED with the error's message.
There is no retry; re-running the whole step is the caller's business.

Example:
    >>> from rtxkit.config.inputs import ActionInputs
    >>> from rtxkit.core.context import RunContext
    >>> orchestrator = SetupOrchestrator(ActionInputs(), RunContext())
    >>> result = orchestrator.run()
    >>> result.succeeded
    True
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import requests

from rtxkit.caching.cache_key import CacheKey, derive_cache_key
from rtxkit.caching.restore import CacheOutcome, restore_tool_cache
from rtxkit.caching.store import CacheStore, LocalCacheStore
from rtxkit.config.inputs import ActionInputs
from rtxkit.core.context import RunContext
from rtxkit.core.directory import get_rtx_dir
from rtxkit.core.exceptions import RtxKitError
from rtxkit.core.platform import PlatformInfo, detect_platform
from rtxkit.setup.binary import acquire_binary
from rtxkit.setup.tool_manager import BinPaths, ToolManager
from rtxkit.setup.tool_versions import write_tool_versions

logger = logging.getLogger(__name__)


class SetupStage(Enum):
    """States of a setup run."""

    CONFIG_LOADED = "config_loaded"
    MANIFEST_WRITTEN = "manifest_written"
    CACHE_CHECKED = "cache_checked"
    BINARY_INSTALLED = "binary_installed"
    TOOLS_INSTALLED = "tools_installed"
    PATHS_PUBLISHED = "paths_published"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SetupResult:
    """
    Outcome of a setup run.

    Attributes:
        stage: Final stage (DONE or FAILED)
        failed_at: Last stage reached before failing, if failed
        cache_key: Derived cache key, once computed
        cache: Cache restore outcome, once checked
        binary_path: Installed rtx binary, once acquired
        bin_paths: Paths published from 'rtx bin-paths'
        error: Failure reason
    """

    stage: SetupStage = SetupStage.CONFIG_LOADED
    failed_at: Optional[SetupStage] = None
    cache_key: Optional[CacheKey] = None
    cache: CacheOutcome = field(default_factory=CacheOutcome.miss)
    binary_path: Optional[Path] = None
    bin_paths: BinPaths = ()
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.stage is SetupStage.DONE


class SetupOrchestrator:
    """
    Sequence manifest write, cache restore, binary install and tool install.

    Collaborators are injectable so tests can run without network or rtx.
    """

    def __init__(
        self,
        inputs: ActionInputs,
        context: RunContext,
        store: Optional[CacheStore] = None,
        tool_dir: Optional[Path] = None,
        platform_info: Optional[PlatformInfo] = None,
        session: Optional[requests.Session] = None,
        tool_manager_factory: Optional[Callable[[Path], ToolManager]] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            inputs: Resolved action inputs
            context: Run context shared with the save step
            store: Cache store (default: LocalCacheStore)
            tool_dir: rtx data directory (default: get_rtx_dir())
            platform_info: Platform identity (auto-detected if None)
            session: requests session for downloads
            tool_manager_factory: Builds the rtx adapter from the binary path
        """
        self.inputs = inputs
        self.context = context
        self.store = store or LocalCacheStore()
        self.tool_dir = Path(tool_dir) if tool_dir is not None else get_rtx_dir()
        self.platform_info = platform_info or detect_platform()
        self.session = session
        self.tool_manager_factory = tool_manager_factory or (
            lambda binary: ToolManager(binary.name, cwd=inputs.workdir)
        )

    def run(self) -> SetupResult:
        """
        Run every setup step in order.

        Returns:
            SetupResult; never raises for expected failures
        """
        result = SetupResult()
        self.context.set_secret(self.inputs.github_token)

        try:
            self._write_manifest(result)
            self._check_cache(result)
            self._install_binary(result)
            tool_manager = self.tool_manager_factory(result.binary_path)
            self._install_tools(result, tool_manager)
            self._publish_paths(result, tool_manager)
        except (RtxKitError, OSError) as e:
            result.failed_at = result.stage
            result.stage = SetupStage.FAILED
            result.error = self.context.mask(str(e))
            logger.error(f"Setup failed: {result.error}")
            return result

        result.stage = SetupStage.DONE
        logger.info("rtx setup complete")
        return result

    def _write_manifest(self, result: SetupResult) -> None:
        write_tool_versions(self.inputs.tool_versions, self.inputs.workdir)
        result.stage = SetupStage.MANIFEST_WRITTEN

    def _check_cache(self, result: SetupResult) -> None:
        # Attempted even without tool-version files
        result.cache_key = derive_cache_key(
            self.context, self.inputs.workdir, self.platform_info
        )
        result.cache = restore_tool_cache(
            self.context, result.cache_key, self.tool_dir, self.store
        )
        result.stage = SetupStage.CACHE_CHECKED

    def _install_binary(self, result: SetupResult) -> None:
        # The binary itself is never cached, so this runs on hits too
        result.binary_path = acquire_binary(
            self.context,
            self.inputs.rtx_version,
            self.tool_dir,
            token=self.inputs.github_token,
            platform_info=self.platform_info,
            session=self.session,
        )
        result.stage = SetupStage.BINARY_INSTALLED

    def _install_tools(self, result: SetupResult, tool_manager: ToolManager) -> None:
        tool_manager.version()
        tool_manager.install()
        result.stage = SetupStage.TOOLS_INSTALLED

    def _publish_paths(self, result: SetupResult, tool_manager: ToolManager) -> None:
        result.bin_paths = tool_manager.bin_paths()
        for path in result.bin_paths:
            self.context.add_path(path)
        result.stage = SetupStage.PATHS_PUBLISHED
