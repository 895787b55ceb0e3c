"""Disk-based cache of combined changes, keyed by changelog modification time.

Uses :mod:`diskcache` to persist the output of
:func:`~changelogger.diff.filters.combine_changes` between requests. A cache
key is the SHA-256 of ``repo|mtime_ns|operation|params`` where ``mtime_ns``
is read from ``CHANGELOG.md`` at the moment of the call. Editing the file
therefore changes every key for that repository: old records become
unreachable without an explicit invalidation step and are reclaimed by
:meth:`ChangelogCache.cleanup` once they outlive the TTL.

Every record is tagged with its repository name so that
:meth:`ChangelogCache.invalidate_repo` can evict them in one call.

Storage failures never propagate: they are logged and turn into a miss
(for reads) or a no-op (for writes).

See Also:
    :class:`~changelogger.models.CacheConfig` -- the Pydantic model that
    controls ``enabled`` and ``ttl_hours``.
"""

from __future__ import annotations

import hashlib
import logging
import pickle
import sqlite3
import time
from pathlib import Path
from typing import Any, Callable, Optional

import diskcache

from changelogger.models import (
    COMBINED_CHANGES_ADAPTER,
    CacheConfig,
    CacheStats,
    CombinedChanges,
)
from changelogger.parser.loader import CHANGELOG_FILENAME

logger = logging.getLogger(__name__)

_STORAGE_ERRORS = (
    OSError,
    sqlite3.Error,
    diskcache.Timeout,
    pickle.UnpicklingError,
    ValueError,
    KeyError,
    TypeError,
)
"""Failures treated as cache misses. ``ValueError`` covers pydantic validation."""

_SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_size(num_bytes: int) -> str:
    """Human-readable byte count: ``0 B``, ``512 B``, ``1.5 KB``, ``2 MB``."""
    if num_bytes <= 0:
        return "0 B"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


class ChangelogCache:
    """Disk-backed, mtime-keyed store for combined changelog changes.

    Args:
        cache_dir: Root directory for the cache. A ``changes/``
            subdirectory is created inside it.
        config: Cache configuration (``enabled`` flag and ``ttl_hours``).
        clock: Source of the current time in seconds. Used for record
            ages only; file mtimes always come from the filesystem.

    Example::

        from changelogger.cache import ChangelogCache
        from changelogger.models import CacheConfig

        with ChangelogCache("/tmp/changelogger", CacheConfig(enabled=True)) as cache:
            cache.set("api", "/srv/repos/api", "since", "1.0.0", combined)
            hit = cache.get("api", "/srv/repos/api", "since", "1.0.0")
    """

    def __init__(
        self,
        cache_dir: str | Path,
        config: CacheConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._clock = clock
        self._cache_dir = Path(cache_dir)
        self._cache: Optional[diskcache.Cache] = None
        if config.enabled:
            try:
                self._cache = diskcache.Cache(
                    str(self._cache_dir / "changes"), tag_index=True
                )
            except _STORAGE_ERRORS as exc:
                logger.warning("Failed to initialise changelog cache: %s", exc)
                self._cache = None
            else:
                self.cleanup()

    @property
    def enabled(self) -> bool:
        return self._cache is not None

    @property
    def directory(self) -> Path:
        return self._cache_dir / "changes"

    def get(
        self, repo: str, repo_path: str | Path, operation: str, params: str
    ) -> Optional[CombinedChanges]:
        """Look up combined changes computed against the current file state.

        Args:
            repo: Repository name.
            repo_path: Repository directory holding ``CHANGELOG.md``.
            operation: Operation kind (``since`` or ``diff``).
            params: Operation parameters, already normalised by the caller.

        Returns:
            The stored changes, or ``None`` on a miss, an expired record,
            an unreadable changelog, a disabled cache or a storage error.
        """
        if self._cache is None:
            return None

        file_mtime = self._file_mtime(repo_path)
        if file_mtime is None:
            return None

        key = self._make_key(repo, file_mtime, operation, params)
        try:
            record = self._cache.get(key)
            if record is None:
                return None
            if not self._is_live(record):
                self._cache.delete(key)
                return None
            return COMBINED_CHANGES_ADAPTER.validate_json(record["data"])
        except _STORAGE_ERRORS as exc:
            logger.warning("Cache get error for %s: %s", repo, exc)
            return None

    def set(
        self,
        repo: str,
        repo_path: str | Path,
        operation: str,
        params: str,
        data: CombinedChanges,
    ) -> None:
        """Store *data* under the key for the current file state.

        Does nothing when the cache is disabled or the changelog cannot be
        stat'ed, so nothing is ever cached against an unknown mtime.
        """
        if self._cache is None:
            return

        file_mtime = self._file_mtime(repo_path)
        if file_mtime is None:
            return

        key = self._make_key(repo, file_mtime, operation, params)
        try:
            record: dict[str, Any] = {
                "key": key,
                "repo": repo,
                "file_mtime": file_mtime,
                "data": COMBINED_CHANGES_ADAPTER.dump_json(data).decode("utf-8"),
                "created_at": self._clock(),
            }
            self._cache.set(key, record, tag=repo)
        except _STORAGE_ERRORS as exc:
            logger.warning("Cache set error for %s: %s", repo, exc)

    def invalidate_repo(self, repo: str) -> int:
        """Delete every record owned by *repo*, whatever its key.

        Returns:
            The number of records removed.
        """
        if self._cache is None:
            return 0
        try:
            return self._cache.evict(repo)
        except _STORAGE_ERRORS as exc:
            logger.warning("Cache invalidation error for %s: %s", repo, exc)
            return 0

    def cleanup(self) -> int:
        """Delete every record older than the TTL, and any malformed record.

        Returns:
            The number of records removed.
        """
        if self._cache is None:
            return 0
        removed = 0
        try:
            for key in list(self._cache.iterkeys()):
                if not self._is_live(self._cache.get(key)):
                    if self._cache.delete(key):
                        removed += 1
        except _STORAGE_ERRORS as exc:
            logger.warning("Cache cleanup error: %s", exc)
        if removed:
            logger.info("Cache cleanup: removed %d expired entries", removed)
        return removed

    def clear(self) -> int:
        """Remove all entries from the cache and return how many there were."""
        if self._cache is None:
            return 0
        try:
            return self._cache.clear()
        except _STORAGE_ERRORS as exc:
            logger.warning("Cache clear error: %s", exc)
            return 0

    def stats(self) -> CacheStats:
        """Return the entry count and on-disk size of the cache."""
        if self._cache is None:
            return CacheStats(enabled=False)
        try:
            return CacheStats(
                enabled=True,
                entries=len(self._cache),
                size=format_size(self._cache.volume()),
            )
        except _STORAGE_ERRORS as exc:
            logger.warning("Cache stats error: %s", exc)
            return CacheStats(enabled=True, entries=0, size="unknown")

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        if self._cache is not None:
            self._cache.close()

    def __enter__(self) -> ChangelogCache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _is_live(self, record: Any) -> bool:
        """True for a well-formed record younger than the TTL.

        Anything else, including values this class did not write, counts as
        expired and is deleted by the caller.
        """
        if not isinstance(record, dict):
            return False
        created_at = record.get("created_at")
        if not isinstance(created_at, (int, float)):
            return False
        return self._clock() - created_at <= self._config.ttl_seconds

    def _file_mtime(self, repo_path: str | Path) -> Optional[int]:
        """Modification time of ``CHANGELOG.md`` in nanoseconds, ``None`` if unreadable."""
        try:
            return (Path(repo_path) / CHANGELOG_FILENAME).stat().st_mtime_ns
        except OSError:
            return None

    def _make_key(self, repo: str, file_mtime: int, operation: str, params: str) -> str:
        """Generate a cache key from repo, mtime, operation and params."""
        raw = "|".join([repo, str(file_mtime), operation, params])
        return hashlib.sha256(raw.encode()).hexdigest()
