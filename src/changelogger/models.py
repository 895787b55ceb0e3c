"""Canonical Pydantic models shared across all changelogger modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CacheConfig`, :class:`ServerConfig`, :class:`OutputConfig` and
    :class:`GlobalConfig`.

**Changelog models** -- produced by the parser and the diff engine:
    :class:`Category`, :class:`ChangelogEntry`, :class:`Version`,
    :class:`Repository`, :class:`ChangelogEntryWithVersion`,
    :class:`MarkdownDiff` and :class:`CacheStats`.

Change maps are plain ``dict`` objects keyed by :class:`Category` so that a
category missing from the source stays missing (no key) instead of turning
into an empty list. :data:`COMBINED_CHANGES_ADAPTER` serialises the combined
form for the on-disk cache.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


# --- Configuration ---


class CacheConfig(BaseModel):
    """On-disk cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=False, description="Enable the mtime-keyed cache")
    ttl_hours: int = Field(default=168, ge=0, description="Cache TTL in hours")
    directory: Optional[str] = Field(
        default=None, description="Cache directory (defaults to the XDG cache dir)"
    )

    @property
    def ttl_seconds(self) -> int:
        return self.ttl_hours * 60 * 60


class ServerConfig(BaseModel):
    """Bind address for ``changelogger serve``."""

    host: str = Field(default="127.0.0.1", description="Interface to bind")
    port: int = Field(default=3000, ge=0, le=65535, description="TCP port")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/changelogger/config.json``.

    Loaded and saved by :func:`~changelogger.config.load_global_config` and
    :func:`~changelogger.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~changelogger.config.resolve_config`
    for the full precedence chain.
    """

    repos: list[str] = Field(
        default_factory=list, description="Repository directory names to serve"
    )
    repos_base_path: str = Field(
        default=".", description="Directory containing the repositories"
    )
    with_dates: bool = Field(
        default=False, description="Show release dates in rendered diffs"
    )
    server: ServerConfig = Field(default_factory=ServerConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Changelog ---


class Category(str, enum.Enum):
    """The six "Keep a Changelog" change kinds, in rendering order."""

    ADDED = "added"
    CHANGED = "changed"
    DEPRECATED = "deprecated"
    REMOVED = "removed"
    FIXED = "fixed"
    SECURITY = "security"

    @property
    def display_name(self) -> str:
        """Heading text used in rendered Markdown (``Added``, ``Fixed``...)."""
        return self.value.capitalize()


CATEGORY_ORDER: tuple[Category, ...] = tuple(Category)
"""Fixed order used when combining and rendering categories."""


class ChangelogEntry(BaseModel):
    """One bullet from a category section."""

    description: str


VersionChanges = dict[Category, list[ChangelogEntry]]
"""Per-version change map. Absent categories have no key."""


class Version(BaseModel):
    """A release block (``## [1.2.0] - 2024-01-05``) and its changes.

    ``version`` is the raw label between the brackets and is not required
    to be valid semver. ``date`` is the raw text after the dash, or ``None``
    when the header has no date.
    """

    version: str
    date: Optional[str] = None
    changes: VersionChanges = Field(default_factory=dict)


class Repository(BaseModel):
    """A parsed changelog.

    ``versions`` keeps the order in which release headers appear in the
    file (newest first by convention, never re-sorted). The ``Unreleased``
    block, wherever it sits, lives in ``unreleased`` and never in
    ``versions``.
    """

    name: str
    path: str = Field(description="Repository directory containing CHANGELOG.md")
    versions: list[Version] = Field(default_factory=list)
    unreleased: Optional[VersionChanges] = None

    @property
    def changelog_path(self) -> Path:
        return Path(self.path) / "CHANGELOG.md"


class ChangelogEntryWithVersion(BaseModel):
    """An entry projected out of its version, carrying its provenance."""

    model_config = ConfigDict(frozen=True)

    description: str
    version: str
    date: Optional[str] = None


CombinedChanges = dict[Category, list[ChangelogEntryWithVersion]]
"""Category map produced by :func:`~changelogger.diff.filters.combine_changes`."""

COMBINED_CHANGES_ADAPTER: TypeAdapter[CombinedChanges] = TypeAdapter(CombinedChanges)
"""Validates and (de)serialises :data:`CombinedChanges` for the cache."""


class MarkdownDiff(BaseModel):
    """A rendered since/range diff.

    ``from_version`` and ``to_version`` are only set for range diffs and
    always hold the normalised ``(min, max)`` pair.
    """

    content: str
    title: str
    is_empty: bool = False
    from_version: Optional[str] = None
    to_version: Optional[str] = None


class CacheStats(BaseModel):
    """Snapshot returned by :meth:`~changelogger.cache.ChangelogCache.stats`."""

    enabled: bool
    entries: int = 0
    size: str = "0 B"
