"""
Run-scoped state for one setup invocation.

RunContext is the explicit key/value context threaded through the setup
steps. It records state for the paired save step (PRIMARY_KEY, CACHE_KEY),
published outputs (cache-hit), search-path additions and secrets.

When running under GitHub Actions, flush() hands everything to the runner
through the files named by GITHUB_STATE, GITHUB_OUTPUT and GITHUB_PATH.
Elsewhere the context lives only in memory.

Example:
    >>> context = RunContext()
    >>> context.set_secret("ghp_abc")
    >>> context.save_state("PRIMARY_KEY", "rtx-tools-linux-x64-abc")
    >>> context.set_output("cache-hit", False)
    >>> context.flush()
"""

import logging
import os
import sys
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

logger = logging.getLogger(__name__)

MASK = "***"

# State keys shared with the save step
PRIMARY_KEY_STATE = "PRIMARY_KEY"
CACHE_KEY_STATE = "CACHE_KEY"


class SecretMaskingFilter(logging.Filter):
    """
    Logging filter replacing registered secrets with '***'.

    The filter formats the record's message itself so secrets passed as
    %-style arguments are masked too.
    """

    def __init__(self, secrets: Set[str]):
        super().__init__()
        self.secrets = secrets

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True

        message = record.getMessage()
        masked = mask_secrets(message, self.secrets)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def mask_secrets(text: str, secrets: Set[str]) -> str:
    """Replace every occurrence of every secret in text, longest first."""
    for secret in sorted(secrets, key=len, reverse=True):
        if secret:
            text = text.replace(secret, MASK)
    return text


def in_github_actions() -> bool:
    """Check whether we are running inside a GitHub Actions job."""
    return os.environ.get("GITHUB_ACTIONS") == "true"


@dataclass
class RunContext:
    """
    Key/value context for one setup run.

    Attributes:
        state: Values for the paired post step (e.g., PRIMARY_KEY)
        outputs: Published step outputs (e.g., cache-hit)
        paths: Directories added to PATH, most recent first
        secrets: Values masked in every log line
    """

    state: Dict[str, str] = field(default_factory=dict)
    outputs: Dict[str, str] = field(default_factory=dict)
    paths: List[str] = field(default_factory=list)
    secrets: Set[str] = field(default_factory=set)
    _filter: Optional[SecretMaskingFilter] = field(
        default=None, init=False, repr=False
    )
    _flushed_paths: int = field(default=0, init=False, repr=False)

    @classmethod
    def from_environment(cls) -> "RunContext":
        """
        Create a context holding the state saved by an earlier step.

        GitHub Actions exposes saved state to later steps as STATE_<name>
        environment variables.
        """
        state = {
            name[len("STATE_"):]: value
            for name, value in os.environ.items()
            if name.startswith("STATE_") and value
        }
        return cls(state=state)

    # ------------------------------------------------------------------
    # State and outputs
    # ------------------------------------------------------------------

    def save_state(self, name: str, value: str) -> None:
        self.state[name] = str(value)
        logger.debug(f"Saved state {name}={value}")

    def get_state(self, name: str, default: str = "") -> str:
        return self.state.get(name, default)

    def set_output(self, name: str, value: Union[str, bool]) -> None:
        """Record a step output. Booleans are published as 'true'/'false'."""
        if isinstance(value, bool):
            value = "true" if value else "false"
        self.outputs[name] = str(value)
        logger.debug(f"Set output {name}={value}")

    # ------------------------------------------------------------------
    # Search path
    # ------------------------------------------------------------------

    def add_path(self, path: Union[str, Path]) -> None:
        """
        Prepend a directory to PATH for this process and later steps.

        Subprocesses started after this call resolve executables in path
        before anything already on PATH.
        """
        path = str(path)
        current = os.environ.get("PATH", "")
        os.environ["PATH"] = f"{path}{os.pathsep}{current}" if current else path
        self.paths.insert(0, path)
        logger.info(f"Added {path} to PATH")

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    def set_secret(self, value: Optional[str]) -> None:
        """
        Register a secret so it is masked in all log output.

        Installs the masking filter on every root handler. Under GitHub
        Actions the runner is also told to mask the value.
        """
        if not value:
            return

        self.secrets.add(value)
        self.install_log_filter()

        if in_github_actions():
            sys.stdout.write(f"::add-mask::{value}\n")
            sys.stdout.flush()

    def install_log_filter(self) -> None:
        """Attach the secret masking filter to the root logger handlers."""
        if self._filter is None:
            self._filter = SecretMaskingFilter(self.secrets)

        root = logging.getLogger()
        if self._filter not in root.filters:
            root.addFilter(self._filter)
        for handler in root.handlers:
            if self._filter not in handler.filters:
                handler.addFilter(self._filter)

    def remove_log_filter(self) -> None:
        """Detach the masking filter (used when the run is over)."""
        if self._filter is None:
            return

        root = logging.getLogger()
        root.removeFilter(self._filter)
        for handler in root.handlers:
            handler.removeFilter(self._filter)

    def mask(self, text: str) -> str:
        return mask_secrets(text, self.secrets)

    # ------------------------------------------------------------------
    # Runner hand-off
    # ------------------------------------------------------------------

    def flush(self) -> None:
        """
        Write state, outputs and paths to the GitHub Actions runner files.

        Each file is only written when its environment variable is set.
        Paths are appended oldest first so the runner ends up with the same
        precedence as this process.
        """
        self._write_key_values(os.environ.get("GITHUB_STATE"), self.state)
        self._write_key_values(os.environ.get("GITHUB_OUTPUT"), self.outputs)

        path_file = os.environ.get("GITHUB_PATH")
        new_paths = self.paths[: len(self.paths) - self._flushed_paths]
        if path_file and new_paths:
            with open(path_file, "a", encoding="utf-8") as f:
                for path in reversed(new_paths):
                    f.write(f"{path}\n")
            self._flushed_paths = len(self.paths)

    @staticmethod
    def _write_key_values(file_name: Optional[str], values: Dict[str, str]) -> None:
        if not file_name or not values:
            return

        with open(file_name, "a", encoding="utf-8") as f:
            for name, value in values.items():
                if "\n" in value:
                    delimiter = f"ghadelimiter_{uuid.uuid4()}"
                    f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
                else:
                    f.write(f"{name}={value}\n")
