"""Tests for changelogger.diff.engine -- since/range diffs and caching."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from changelogger.cache import ChangelogCache
from changelogger.diff.engine import (
    COMPLETE_TITLE,
    DEFAULT_SINCE_TITLE,
    create_range_diff,
    create_since_diff,
    resolve_since_title,
)
from changelogger.diff.markdown import EMPTY_PLACEHOLDER
from changelogger.models import CacheConfig, Category, Repository


@pytest.fixture()
def cache(tmp_path: Path):
    c = ChangelogCache(tmp_path / "cache", CacheConfig(enabled=True))
    yield c
    c.close()


class TestResolveSinceTitle:
    def test_custom_title_wins(self) -> None:
        assert resolve_since_title("1.0.0", "**Release** notes") == "Release notes"

    def test_complete_when_blank_since(self) -> None:
        assert resolve_since_title(None, None) == COMPLETE_TITLE
        assert resolve_since_title("", "") == COMPLETE_TITLE

    def test_default_for_since(self) -> None:
        assert resolve_since_title("1.0.0", None) == DEFAULT_SINCE_TITLE

    def test_title_sanitised_to_nothing_falls_back(self) -> None:
        assert resolve_since_title("1.0.0", "***") == DEFAULT_SINCE_TITLE


class TestCreateSinceDiff:
    def test_since_version(self, sample_repository: Repository) -> None:
        diff = create_since_diff(sample_repository, "2.0.0")
        assert diff.title == DEFAULT_SINCE_TITLE
        assert diff.content.startswith("# New updates!\n")
        assert "- [2.1.0] Real-time notifications" in diff.content
        assert "UI redesign" not in diff.content
        assert not diff.is_empty
        assert diff.from_version is None and diff.to_version is None

    def test_complete_changelog(self, sample_repository: Repository) -> None:
        diff = create_since_diff(sample_repository, None)
        assert diff.title == COMPLETE_TITLE
        assert "- [1.0.0] Initial release" in diff.content
        assert "Dark mode" not in diff.content

    def test_nothing_newer(self, sample_repository: Repository) -> None:
        diff = create_since_diff(sample_repository, "2.1.0")
        assert diff.is_empty
        assert EMPTY_PLACEHOLDER in diff.content

    def test_custom_title(self, sample_repository: Repository) -> None:
        diff = create_since_diff(sample_repository, "2.0.0", custom_title="<b>Hi</b>")
        assert diff.title == "bHi/b"

    def test_with_dates(self, sample_repository: Repository) -> None:
        diff = create_since_diff(sample_repository, "2.0.0", with_dates=True)
        assert "- [2.1.0] (Jan 5, 2024) Real-time notifications" in diff.content


class TestCreateRangeDiff:
    def test_range(self, sample_repository: Repository) -> None:
        diff = create_range_diff(sample_repository, "1.5.2", "2.0.0")
        assert diff.title == "Changelog Diff: api (1.5.2 to 2.0.0)"
        assert diff.from_version == "1.5.2"
        assert diff.to_version == "2.0.0"
        assert "UI redesign" in diff.content
        assert "Login redirect loop" in diff.content
        assert "Real-time notifications" not in diff.content
        assert "Initial release" not in diff.content

    def test_swapped_bounds_give_same_result(self, sample_repository: Repository) -> None:
        forward = create_range_diff(sample_repository, "1.0.0", "2.1.0")
        backward = create_range_diff(sample_repository, "2.1.0", "1.0.0")
        assert forward == backward


class TestCaching:
    def test_since_result_is_cached(self, sample_repository: Repository, cache: ChangelogCache) -> None:
        create_since_diff(sample_repository, "1.0.0", cache=cache)
        cached = cache.get("api", sample_repository.path, "since", "1.0.0")
        assert cached is not None
        assert Category.ADDED in cached

    def test_blank_since_uses_since_all_key(self, sample_repository: Repository, cache: ChangelogCache) -> None:
        create_since_diff(sample_repository, "", cache=cache)
        assert cache.get("api", sample_repository.path, "since-all", "complete") is not None
        assert cache.get("api", sample_repository.path, "since", "complete") is None

    def test_version_named_complete_does_not_poison_whole_changelog(
        self, sample_repository: Repository, cache: ChangelogCache
    ) -> None:
        uncached = create_since_diff(sample_repository, None)
        labelled = create_since_diff(sample_repository, "complete", cache=cache)
        assert labelled.is_empty
        whole = create_since_diff(sample_repository, None, cache=cache)
        assert whole.content == uncached.content
        assert not whole.is_empty

    def test_whole_changelog_does_not_leak_into_version_named_complete(
        self, sample_repository: Repository, cache: ChangelogCache
    ) -> None:
        create_since_diff(sample_repository, None, cache=cache)
        labelled = create_since_diff(sample_repository, "complete", cache=cache)
        assert labelled.is_empty
        assert cache.stats().entries == 2

    def test_range_key_is_normalised(self, sample_repository: Repository, cache: ChangelogCache) -> None:
        create_range_diff(sample_repository, "2.0.0", "1.0.0", cache=cache)
        assert cache.get("api", sample_repository.path, "diff", "1.0.0_2.0.0") is not None

    def test_hit_skips_computation(self, sample_repository: Repository) -> None:
        fake = MagicMock()
        fake.get.return_value = {}
        diff = create_since_diff(sample_repository, "1.0.0", cache=fake)
        assert diff.is_empty
        fake.set.assert_not_called()

    def test_miss_stores_result(self, sample_repository: Repository) -> None:
        fake = MagicMock()
        fake.get.return_value = None
        create_range_diff(sample_repository, "1.0.0", "2.0.0", cache=fake)
        args = fake.set.call_args.args
        assert args[:4] == ("api", sample_repository.path, "diff", "1.0.0_2.0.0")

    def test_title_not_part_of_key(self, sample_repository: Repository, cache: ChangelogCache) -> None:
        first = create_since_diff(sample_repository, "1.0.0", custom_title="One", cache=cache)
        second = create_since_diff(sample_repository, "1.0.0", custom_title="Two", cache=cache)
        assert first.title == "One" and second.title == "Two"
        assert cache.stats().entries == 1
