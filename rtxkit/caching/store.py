"""
Cache store backends.

CacheStore is the contract the setup step relies on: restore a set of
directories for a key (or a fallback prefix), and save them under a key.
LocalCacheStore keeps archives in a local directory, which is enough for
self-hosted runners and for tests.

Store Structure:
    <root>/
        index.json            : {"entries": {key: {"archive": ..., "created": ...}}}
        index.lock            : Lock serializing index access
        <sanitized-key>.tar.gz
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from filelock import FileLock, Timeout

from rtxkit.core.directory import get_cache_store_dir
from rtxkit.core.exceptions import CacheLockTimeout, CacheStoreError
from rtxkit.core.filesystem import (
    FilesystemError,
    atomic_write,
    create_tar_gz,
    extract_tar_gz,
)

logger = logging.getLogger(__name__)


class CacheStore(ABC):
    """Key/value store for cached directories."""

    @abstractmethod
    def restore(
        self,
        paths: Sequence[Path],
        key: str,
        restore_keys: Optional[Sequence[str]] = None,
    ) -> Optional[str]:
        """
        Restore paths from the entry matching key.

        The exact key is tried first, then each restore key as a prefix.

        Returns:
            The matched key, or None when nothing matched

        Raises:
            CacheStoreError: If the store is unreachable or the entry is corrupt
        """

    @abstractmethod
    def save(self, paths: Sequence[Path], key: str) -> None:
        """
        Save paths under key.

        Raises:
            CacheStoreError: If the entry cannot be written
        """


class LocalCacheStore(CacheStore):
    """
    Cache store backed by a local directory of tar.gz archives.

    Example:
        >>> store = LocalCacheStore(Path("/tmp/rtx-cache"))
        >>> store.save([Path("~/.local/share/rtx").expanduser()], "rtx-tools-linux-x64-abc")
        >>> store.restore([Path("/tmp/rtx")], "rtx-tools-linux-x64-abc")
        'rtx-tools-linux-x64-abc'
    """

    def __init__(self, root: Optional[Path] = None, lock_timeout: int = 60):
        """
        Initialize local cache store.

        Args:
            root: Store directory (default: get_cache_store_dir())
            lock_timeout: Maximum wait for the index lock in seconds
        """
        self.root = Path(root) if root is not None else get_cache_store_dir()
        self.index_path = self.root / "index.json"
        self.lock_path = self.root / "index.lock"
        self.lock_timeout = lock_timeout

    @contextmanager
    def _lock(self):
        """
        Acquire the store lock.

        Raises:
            CacheLockTimeout: If lock cannot be acquired within timeout
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheStoreError(f"Cache store {self.root} is not writable: {e}") from e

        lock = FileLock(self.lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                logger.debug("Acquired cache store lock")
                yield
            logger.debug("Released cache store lock")
        except Timeout as e:
            raise CacheLockTimeout(
                f"Could not acquire cache store lock within {self.lock_timeout} seconds"
            ) from e

    def _load_index(self) -> dict:
        if not self.index_path.exists():
            return {"entries": {}}

        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CacheStoreError(f"Failed to load cache index: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("entries"), dict):
            raise CacheStoreError(f"Corrupt cache index: {self.index_path}")

        for key, entry in data["entries"].items():
            if not (
                isinstance(entry, dict)
                and isinstance(entry.get("archive"), str)
                and isinstance(entry.get("created"), str)
            ):
                raise CacheStoreError(
                    f"Corrupt cache index: {self.index_path} (entry {key!r})"
                )
        return data

    def _save_index(self, data: dict) -> None:
        try:
            atomic_write(self.index_path, json.dumps(data, indent=2, sort_keys=True))
        except OSError as e:
            raise CacheStoreError(f"Failed to save cache index: {e}") from e

    @staticmethod
    def _archive_name(key: str) -> str:
        return re.sub(r"[^A-Za-z0-9._-]", "_", key) + ".tar.gz"

    @staticmethod
    def _match(entries: dict, key: str, restore_keys: Sequence[str]) -> Optional[str]:
        """Exact key first, then the newest entry for each prefix in order."""
        if key in entries:
            return key

        for prefix in restore_keys:
            candidates = [name for name in entries if name.startswith(prefix)]
            if candidates:
                return max(candidates, key=lambda name: entries[name]["created"])

        return None

    def restore(
        self,
        paths: Sequence[Path],
        key: str,
        restore_keys: Optional[Sequence[str]] = None,
    ) -> Optional[str]:
        with self._lock():
            entries = self._load_index()["entries"]
            matched = self._match(entries, key, restore_keys or [])

            if matched is None:
                logger.debug(f"No cache entry for {key}")
                return None

            archive = self.root / entries[matched]["archive"]
            try:
                extract_tar_gz(archive, [Path(p) for p in paths])
            except FilesystemError as e:
                raise CacheStoreError(f"Failed to restore cache {matched}: {e}") from e

        logger.debug(f"Restored {len(paths)} path(s) from {archive}")
        return matched

    def save(self, paths: Sequence[Path], key: str) -> None:
        with self._lock():
            data = self._load_index()

            if key in data["entries"]:
                logger.info(f"Cache entry {key} already exists, not saving")
                return

            archive_name = self._archive_name(key)
            try:
                create_tar_gz(self.root / archive_name, [Path(p) for p in paths])
            except OSError as e:
                raise CacheStoreError(f"Failed to save cache {key}: {e}") from e

            data["entries"][key] = {
                "archive": archive_name,
                "created": datetime.now().isoformat(),
                "paths": [str(p) for p in paths],
            }
            self._save_index(data)

        logger.info(f"Cache saved with key: {key}")

    def keys(self) -> List[str]:
        """List saved keys."""
        with self._lock():
            return sorted(self._load_index()["entries"])
