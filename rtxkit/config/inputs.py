"""
Action inputs for the setup step.

Inputs are merged from four sources, lowest to highest precedence:

1. Defaults (rtx_version='latest')
2. A YAML file (rtxkit.yaml in the working directory, or --config PATH)
3. GitHub Actions INPUT_* environment variables
4. Command-line flags

Example rtxkit.yaml:
    rtx_version: v1.2.3
    tool_versions: |
      nodejs 18.0.0
      python 3.11.4
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from rtxkit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LATEST = "latest"
DEFAULT_CONFIG_FILE = "rtxkit.yaml"

# Inputs that are trimmed; tool_versions is kept verbatim
_TRIMMED = {"rtx_version", "github_token", "working_directory"}


@dataclass(frozen=True)
class ActionInputs:
    """
    Configuration inputs of the setup step.

    Attributes:
        rtx_version: 'latest' or an explicit rtx release tag (e.g., 'v1.2.3')
        tool_versions: Raw .tool-versions content to write, if any
        github_token: Token for authenticated release downloads (secret)
        working_directory: Directory holding the tool-version files (default: cwd)
    """

    rtx_version: str = LATEST
    tool_versions: Optional[str] = None
    github_token: Optional[str] = None
    working_directory: Optional[str] = None

    def __repr__(self) -> str:
        token = "***" if self.github_token else None
        return (
            f"ActionInputs(rtx_version={self.rtx_version!r}, "
            f"tool_versions={self.tool_versions!r}, github_token={token!r}, "
            f"working_directory={self.working_directory!r})"
        )

    @property
    def is_latest(self) -> bool:
        return self.rtx_version == LATEST

    @property
    def workdir(self) -> Path:
        return Path(self.working_directory) if self.working_directory else Path.cwd()

    def merged(self, overrides: Mapping[str, Any]) -> "ActionInputs":
        """
        Return a copy with non-empty override values applied.

        Unknown keys are ignored. An empty rtx_version falls back to 'latest'.
        """
        known = {f.name for f in fields(self)}
        values: Dict[str, Any] = {}

        for name, value in overrides.items():
            if name not in known:
                logger.debug(f"Ignoring unknown input: {name}")
                continue
            if value is None:
                continue
            if not isinstance(value, str):
                value = str(value)
            if name in _TRIMMED:
                value = value.strip()
            if value == "":
                continue
            values[name] = value

        return replace(self, **values)


def load_yaml_inputs(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load inputs from a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Mapping of input names to values (empty if file doesn't exist and not required)

    Raises:
        ConfigurationError: If the file is required but missing, cannot be
            parsed, or does not hold a mapping
    """
    if not config_file.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Invalid configuration in {config_file}: expected a mapping, "
            f"got {type(config).__name__}"
        )

    return {str(key).replace("-", "_"): value for key, value in config.items()}


def env_inputs(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Read GitHub Actions inputs from INPUT_* environment variables.

    The runner upper-cases input names and keeps dashes, so both
    INPUT_RTX_VERSION and INPUT_RTX-VERSION are accepted.
    """
    environ = os.environ if environ is None else environ
    inputs = {}

    for name, value in environ.items():
        if name.startswith("INPUT_"):
            key = name[len("INPUT_"):].lower().replace("-", "_")
            inputs[key] = value

    return inputs


def load_inputs(
    config_file: Optional[Path] = None,
    cli_overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ActionInputs:
    """
    Build ActionInputs from YAML file, environment and CLI overrides.

    Args:
        config_file: Explicit YAML file (required to exist when given)
        cli_overrides: Values from command-line flags
        environ: Environment mapping (default: os.environ)

    Returns:
        Merged ActionInputs

    Raises:
        ConfigurationError: If the configuration file is invalid
    """
    if config_file is not None:
        file_values = load_yaml_inputs(Path(config_file), required=True)
    else:
        file_values = load_yaml_inputs(Path.cwd() / DEFAULT_CONFIG_FILE)

    inputs = ActionInputs().merged(file_values)
    inputs = inputs.merged(env_inputs(environ))
    inputs = inputs.merged(cli_overrides or {})

    logger.debug(f"Resolved inputs: {inputs!r}")
    return inputs
