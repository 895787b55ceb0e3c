"""Since/range diffs with write-through caching.

Both entry points follow the same pattern: look up the combined changes in
the cache, compute and store them on a miss, then render Markdown. The
rendered title is never part of the cache key because it depends on the
request, not on the changelog.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from changelogger.diff.filters import (
    combine_changes,
    filter_between,
    filter_since,
    is_blank,
)
from changelogger.diff.markdown import has_content, render_markdown, sanitize_title
from changelogger.models import CombinedChanges, MarkdownDiff, Repository
from changelogger.versions import order_pair

if TYPE_CHECKING:
    from changelogger.cache import ChangelogCache

logger = logging.getLogger(__name__)

SINCE_OPERATION = "since"
SINCE_ALL_OPERATION = "since-all"
DIFF_OPERATION = "diff"
COMPLETE_MARKER = "complete"

DEFAULT_SINCE_TITLE = "New updates!"
COMPLETE_TITLE = "Complete Changelog"


def resolve_since_title(since_version: Optional[str], custom_title: Optional[str]) -> str:
    """Pick the heading for a since-diff.

    A custom title wins when something survives sanitising; otherwise the
    whole-changelog request gets :data:`COMPLETE_TITLE` and a real since
    request gets :data:`DEFAULT_SINCE_TITLE`.
    """
    sanitized = sanitize_title(custom_title)
    if sanitized:
        return sanitized
    if is_blank(since_version):
        return COMPLETE_TITLE
    return DEFAULT_SINCE_TITLE


def _cached_combine(
    repository: Repository,
    operation: str,
    params: str,
    compute: Callable[[], CombinedChanges],
    cache: Optional[ChangelogCache],
) -> CombinedChanges:
    if cache is not None:
        cached = cache.get(repository.name, repository.path, operation, params)
        if cached is not None:
            logger.debug("Cache hit: %s %s %s", repository.name, operation, params)
            return cached

    combined = compute()
    if cache is not None:
        cache.set(repository.name, repository.path, operation, params, combined)
    return combined


def create_since_diff(
    repository: Repository,
    since_version: Optional[str],
    custom_title: Optional[str] = None,
    with_dates: bool = False,
    cache: Optional[ChangelogCache] = None,
) -> MarkdownDiff:
    """Render every change newer than *since_version*.

    Args:
        repository: Parsed changelog.
        since_version: Exclusive lower bound. ``None`` or blank means the
            whole changelog. The version does not need to exist.
        custom_title: Optional caller-supplied title, sanitised before use.
        with_dates: Include release dates in the entry lines.
        cache: Optional cache handle; ``None`` computes every time.

    Returns:
        The rendered :class:`~changelogger.models.MarkdownDiff`.
    """
    # Whole-changelog requests get their own operation so no version label
    # can share their key.
    if is_blank(since_version):
        operation, params = SINCE_ALL_OPERATION, COMPLETE_MARKER
    else:
        assert since_version is not None
        operation, params = SINCE_OPERATION, since_version
    combined = _cached_combine(
        repository,
        operation,
        params,
        lambda: combine_changes(filter_since(repository, since_version)),
        cache,
    )
    title = resolve_since_title(since_version, custom_title)
    return MarkdownDiff(
        content=render_markdown(title, combined, with_dates),
        title=title,
        is_empty=not has_content(combined),
    )


def create_range_diff(
    repository: Repository,
    version1: str,
    version2: str,
    with_dates: bool = False,
    cache: Optional[ChangelogCache] = None,
) -> MarkdownDiff:
    """Render every change between two versions, both inclusive.

    The bounds are normalised to ``(older, newer)`` first, so swapping them
    yields the same cache key, the same title and the same content.
    """
    min_version, max_version = order_pair(version1, version2)
    combined = _cached_combine(
        repository,
        DIFF_OPERATION,
        f"{min_version}_{max_version}",
        lambda: combine_changes(filter_between(repository, min_version, max_version)),
        cache,
    )
    title = f"Changelog Diff: {repository.name} ({min_version} to {max_version})"
    return MarkdownDiff(
        content=render_markdown(title, combined, with_dates),
        title=title,
        is_empty=not has_content(combined),
        from_version=min_version,
        to_version=max_version,
    )
