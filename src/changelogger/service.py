"""Request-level operations shared by the HTTP server and the CLI.

:class:`ChangelogService` is the layer in front of the parser and the diff
engine. It checks that a repository is configured and has a changelog,
that requested versions exist and that range bounds differ, and reports
each failure as a distinct
:class:`~changelogger.exceptions.ChangeloggerError` subclass. Nothing below
this layer raises for request-level problems.

Every call parses the changelog afresh; only combined changes are cached.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from changelogger.cache import ChangelogCache
from changelogger.diff import (
    create_range_diff,
    create_since_diff,
    find_version,
    latest_version,
)
from changelogger.exceptions import (
    ChangelogNotFoundError,
    IdenticalVersionsError,
    NoVersionsError,
    RepositoryNotConfiguredError,
    VersionNotFoundError,
)
from changelogger.models import CacheStats, GlobalConfig, MarkdownDiff, Repository, Version
from changelogger.parser import parse_changelog, repository_has_valid_changelog

logger = logging.getLogger(__name__)


class ChangelogService:
    """Validate requests and run them against the configured repositories.

    Args:
        config: Effective configuration (repositories, base path, dates).
        cache: Optional cache handle passed down to the diff engine.
    """

    def __init__(self, config: GlobalConfig, cache: Optional[ChangelogCache] = None) -> None:
        self.config = config
        self.cache = cache

    @property
    def base_path(self) -> str:
        return self.config.repos_base_path

    def is_configured(self, repo_name: str) -> bool:
        return repo_name in self.config.repos

    def list_repositories(self) -> list[str]:
        """Configured repositories whose changelog can be read."""
        return [
            repo
            for repo in self.config.repos
            if repository_has_valid_changelog(repo, self.base_path)
        ]

    def load_repository(self, repo_name: str) -> Repository:
        """Parse the changelog of a configured repository.

        Raises:
            RepositoryNotConfiguredError: *repo_name* is not configured.
            ChangelogNotFoundError: The changelog is missing or unreadable.
        """
        if not self.is_configured(repo_name):
            raise RepositoryNotConfiguredError(
                f"Repository '{repo_name}' not found in configuration"
            )
        if not repository_has_valid_changelog(repo_name, self.base_path):
            raise ChangelogNotFoundError(
                f"Repository '{repo_name}' does not have a valid CHANGELOG.md"
            )
        return parse_changelog(repo_name, self.base_path)

    def get_version(self, repo_name: str, version_name: str) -> Version:
        """Return one release block by exact label."""
        repository = self.load_repository(repo_name)
        version = find_version(repository, version_name)
        if version is None:
            raise VersionNotFoundError(
                f"Version '{version_name}' not found in repository '{repo_name}'"
            )
        return version

    def get_latest(self, repo_name: str) -> Version:
        """Return the first release block of the changelog."""
        repository = self.load_repository(repo_name)
        version = latest_version(repository)
        if version is None:
            raise NoVersionsError(f"No versions found in repository '{repo_name}'")
        return version

    def since(
        self,
        repo_name: str,
        since_version: Optional[str] = None,
        title: Optional[str] = None,
        with_dates: Optional[bool] = None,
    ) -> MarkdownDiff:
        """Changes newer than *since_version* (all changes when blank).

        The boundary version does not have to be in the changelog; changes
        are selected by numeric comparison alone.
        """
        repository = self.load_repository(repo_name)
        logger.debug("Since-diff for %s from %r", repo_name, since_version)
        return create_since_diff(
            repository,
            since_version,
            title,
            self._with_dates(with_dates),
            cache=self.cache,
        )

    def diff(
        self,
        repo_name: str,
        version1: str,
        version2: str,
        with_dates: Optional[bool] = None,
    ) -> MarkdownDiff:
        """Changes between two released versions, both inclusive.

        Raises:
            IdenticalVersionsError: Both bounds are the same label.
            VersionNotFoundError: Either bound is not in the changelog.
        """
        if version1 == version2:
            raise IdenticalVersionsError(
                "Cannot generate diff between identical versions"
            )
        repository = self.load_repository(repo_name)
        for version_name in (version1, version2):
            if find_version(repository, version_name) is None:
                raise VersionNotFoundError(
                    f"Version '{version_name}' not found in repository '{repo_name}'"
                )
        return create_range_diff(
            repository,
            version1,
            version2,
            self._with_dates(with_dates),
            cache=self.cache,
        )

    def health(self) -> dict[str, Any]:
        """Liveness summary: repository counts and cache statistics."""
        stats = self.cache.stats() if self.cache is not None else CacheStats(enabled=False)
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "repos": len(self.config.repos),
            "valid_repos": len(self.list_repositories()),
            "cache": stats.model_dump(),
        }

    def close(self) -> None:
        """Close the cache handle, if any."""
        if self.cache is not None:
            self.cache.close()

    def __enter__(self) -> ChangelogService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _with_dates(self, override: Optional[bool]) -> bool:
        return self.config.with_dates if override is None else override


def create_service(config: GlobalConfig) -> ChangelogService:
    """Build a service with a cache opened according to ``config.cache``."""
    from changelogger.config import resolve_cache_dir

    cache: Optional[ChangelogCache] = None
    if config.cache.enabled:
        cache = ChangelogCache(resolve_cache_dir(config), config.cache)
    return ChangelogService(config, cache)
