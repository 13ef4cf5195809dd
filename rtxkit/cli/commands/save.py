"""
Save command implementation.

Post step paired with 'setup': saves the rtx data directory under the cache
key that setup derived. Saving is skipped when setup already restored that
exact key, and store failures are only warnings.
"""

import logging

from rtxkit.caching.store import LocalCacheStore
from rtxkit.core.context import CACHE_KEY_STATE, PRIMARY_KEY_STATE, RunContext
from rtxkit.core.directory import get_rtx_dir
from rtxkit.core.exceptions import CacheStoreError

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the save command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (always 0; a failed save must not fail the job)
    """
    context = RunContext.from_environment()
    primary_key = context.get_state(PRIMARY_KEY_STATE)
    restored_key = context.get_state(CACHE_KEY_STATE)

    if not primary_key:
        logger.warning("No cache key from the setup step, not saving rtx cache")
        return 0

    if primary_key == restored_key:
        logger.info(f"Cache hit occurred on the primary key {primary_key}, not saving cache")
        return 0

    tool_dir = get_rtx_dir()
    if not tool_dir.exists():
        logger.warning(f"rtx directory {tool_dir} does not exist, not saving cache")
        return 0

    store = LocalCacheStore(args.cache_dir) if args.cache_dir else LocalCacheStore()

    try:
        store.save([tool_dir], primary_key)
    except (CacheStoreError, OSError) as e:
        logger.warning(f"Failed to save rtx cache: {e}")

    return 0
