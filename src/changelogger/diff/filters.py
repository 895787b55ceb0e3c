"""Select versions from a repository and merge their changes.

The functions here are pure: they read a :class:`~changelogger.models.Repository`
and return new lists/maps without touching the repository itself.
"""

from __future__ import annotations

from typing import Iterable, Optional

from changelogger.models import (
    CATEGORY_ORDER,
    ChangelogEntryWithVersion,
    CombinedChanges,
    Repository,
    Version,
)
from changelogger.versions import is_in_range, is_newer


def is_blank(version: Optional[str]) -> bool:
    """``True`` for ``None``, ``""`` and whitespace-only labels."""
    return version is None or not version.strip()


def filter_since(repository: Repository, since_version: Optional[str]) -> list[Version]:
    """Versions strictly newer than *since_version*, in stored order.

    A blank *since_version* selects the whole changelog. The boundary does
    not have to exist in the file: ``1.5.1`` selects ``1.5.2`` and above even
    when ``1.5.1`` was never released.
    """
    if is_blank(since_version):
        return list(repository.versions)
    assert since_version is not None
    return [v for v in repository.versions if is_newer(v.version, since_version)]


def filter_between(repository: Repository, version1: str, version2: str) -> list[Version]:
    """Versions within the inclusive range spanned by the two bounds."""
    return [
        v for v in repository.versions if is_in_range(v.version, version1, version2)
    ]


def combine_changes(versions: Iterable[Version]) -> CombinedChanges:
    """Merge the changes of *versions* category by category.

    Categories are visited in :data:`~changelogger.models.CATEGORY_ORDER`
    and, inside each, versions in the order given. Every entry is tagged
    with its version label and date. A category only gets a key when at
    least one entry was found for it.
    """
    versions = list(versions)
    combined: CombinedChanges = {}
    for category in CATEGORY_ORDER:
        entries = [
            ChangelogEntryWithVersion(
                description=entry.description,
                version=version.version,
                date=version.date,
            )
            for version in versions
            for entry in version.changes.get(category) or []
        ]
        if entries:
            combined[category] = entries
    return combined


def find_version(repository: Repository, version_name: str) -> Optional[Version]:
    """Exact-label lookup; ``None`` when the version is not in the changelog."""
    for version in repository.versions:
        if version.version == version_name:
            return version
    return None


def latest_version(repository: Repository) -> Optional[Version]:
    """The first release block in the file, or ``None`` when there is none."""
    return repository.versions[0] if repository.versions else None
