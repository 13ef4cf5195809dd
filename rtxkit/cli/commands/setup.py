"""
Setup command implementation.

Installs rtx and the tools declared in the tool-version files.
"""

import logging
import sys

from rtxkit.caching.store import LocalCacheStore
from rtxkit.config.inputs import load_inputs
from rtxkit.core.context import RunContext, in_github_actions
from rtxkit.core.exceptions import ConfigurationError
from rtxkit.setup.orchestrator import SetupOrchestrator

logger = logging.getLogger(__name__)


def report_failure(message: str) -> None:
    """Report the run's failure reason, as a workflow error annotation in CI."""
    if in_github_actions():
        sys.stdout.write(f"::error::{message}\n")
        sys.stdout.flush()
    else:
        logger.error(message)


def run(args) -> int:
    """
    Run the setup command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    context = RunContext()
    context.install_log_filter()

    try:
        return _run_setup(args, context)
    finally:
        context.remove_log_filter()


def _run_setup(args, context: RunContext) -> int:
    # Registered before anything can log it
    context.set_secret(args.github_token)

    try:
        inputs = load_inputs(
            config_file=args.config,
            cli_overrides={
                "rtx_version": args.rtx_version,
                "tool_versions": args.tool_versions,
                "github_token": args.github_token,
                "working_directory": args.working_directory,
            },
        )
    except ConfigurationError as e:
        report_failure(str(e))
        return 1

    store = LocalCacheStore(args.cache_dir) if args.cache_dir else LocalCacheStore()
    orchestrator = SetupOrchestrator(inputs, context, store=store)
    result = orchestrator.run()

    try:
        context.flush()
    except OSError as e:
        result.error = result.error or f"Failed to hand results to the runner: {e}"
        report_failure(result.error)
        return 1

    if not result.succeeded:
        report_failure(result.error)
        return 1

    return 0
