"""
Restore the rtx tool cache.

A failed restore never fails the run: an unreachable store or a corrupt
archive is reported as a warning and treated as a cache miss, after which
the tools are simply installed from scratch.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rtxkit.caching.cache_key import CacheKey
from rtxkit.caching.store import CacheStore
from rtxkit.core.context import CACHE_KEY_STATE, RunContext
from rtxkit.core.exceptions import CacheStoreError

logger = logging.getLogger(__name__)

CACHE_HIT_OUTPUT = "cache-hit"


@dataclass(frozen=True)
class CacheOutcome:
    """Result of a cache restore attempt."""

    hit: bool
    matched_key: Optional[str] = None

    @classmethod
    def miss(cls) -> "CacheOutcome":
        return cls(hit=False, matched_key=None)


def restore_tool_cache(
    context: RunContext, key: CacheKey, tool_dir: Path, store: CacheStore
) -> CacheOutcome:
    """
    Restore the tool directory from the cache entry for key.

    Exact and prefix-fallback matches both count as a hit.

    Args:
        context: Run context; receives CACHE_KEY state and the cache-hit output
        key: Derived cache key
        tool_dir: Directory to restore into
        store: Cache store to restore from

    Returns:
        CacheOutcome describing the hit or miss
    """
    try:
        matched = store.restore(
            [tool_dir], str(key), restore_keys=[key.platform_prefix]
        )
    except (CacheStoreError, OSError) as e:
        logger.warning(f"Failed to restore rtx cache: {e}")
        matched = None

    outcome = CacheOutcome(hit=bool(matched), matched_key=matched or None)
    context.set_output(CACHE_HIT_OUTPUT, outcome.hit)

    if not outcome.hit:
        logger.info(f"rtx cache not found for {key.os}-{key.arch} tool versions")
        return outcome

    context.save_state(CACHE_KEY_STATE, matched)
    logger.info(f"rtx cache restored from key: {matched}")
    return outcome
