"""Disk-based caching of combined changelog changes.

This package provides :class:`ChangelogCache`, a diskcache-backed store
keyed by repository, operation, parameters and the modification time of
the repository's ``CHANGELOG.md``. Editing a changelog implicitly
invalidates everything cached for it.

The cache is consumed by :mod:`changelogger.diff.engine` and is controlled
by the ``cache`` section of the configuration
(:class:`~changelogger.models.CacheConfig`).
"""

from changelogger.cache.cache import ChangelogCache, format_size

__all__ = ["ChangelogCache", "format_size"]
