"""
rtx tool cache: key derivation, restore and the cache store.
"""

from .cache_key import CACHE_KEY_PREFIX, TOOL_VERSION_PATTERNS, CacheKey, derive_cache_key
from .restore import CACHE_HIT_OUTPUT, CacheOutcome, restore_tool_cache
from .store import CacheStore, LocalCacheStore

__all__ = [
    "CACHE_KEY_PREFIX",
    "TOOL_VERSION_PATTERNS",
    "CacheKey",
    "derive_cache_key",
    "CACHE_HIT_OUTPUT",
    "CacheOutcome",
    "restore_tool_cache",
    "CacheStore",
    "LocalCacheStore",
]
