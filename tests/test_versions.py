"""Tests for changelogger.versions -- parsing and ordering of version labels."""

from __future__ import annotations

import pytest

from changelogger.versions import (
    SemVer,
    compare_versions,
    is_in_range,
    is_newer,
    order_pair,
    parse_version,
)


class TestParseVersion:
    def test_plain_triple(self) -> None:
        assert parse_version("1.2.3") == SemVer(1, 2, 3)

    def test_prerelease_and_build_are_ignored(self) -> None:
        assert parse_version("1.0.0-beta.1+build.123") == SemVer(1, 0, 0)
        assert parse_version("2.0.0-rc.1") == SemVer(2, 0, 0)
        assert parse_version("3.1.4+sha.abcdef") == SemVer(3, 1, 4)

    @pytest.mark.parametrize("label", ["v1.0.0", "1.2", "1.2.3.4", "Unreleased", "", "1.x.0"])
    def test_non_semver_labels(self, label: str) -> None:
        assert parse_version(label) is None

    def test_multi_digit_components(self) -> None:
        assert parse_version("10.20.300") == SemVer(10, 20, 300)


class TestCompareVersions:
    def test_numeric_not_lexicographic(self) -> None:
        assert compare_versions("1.10.0", "1.9.0") > 0
        assert compare_versions("1.9.0", "1.10.0") < 0

    def test_equal(self) -> None:
        assert compare_versions("2.0.0", "2.0.0") == 0

    def test_prerelease_equals_release(self) -> None:
        assert compare_versions("1.0.0-beta", "1.0.0") == 0

    def test_major_dominates(self) -> None:
        assert compare_versions("2.0.0", "1.99.99") > 0

    def test_string_fallback(self) -> None:
        assert compare_versions("v2", "v1") > 0
        assert compare_versions("alpha", "beta") < 0
        assert compare_versions("same", "same") == 0

    def test_mixed_falls_back_to_string_order(self) -> None:
        # "1.0.0" < "v0.1" as strings even though v0.1 would be older
        assert compare_versions("1.0.0", "v0.1") < 0


class TestIsNewer:
    def test_strictly_newer(self) -> None:
        assert is_newer("1.0.1", "1.0.0")
        assert not is_newer("1.0.0", "1.0.0")
        assert not is_newer("0.9.0", "1.0.0")


class TestOrderPair:
    def test_already_ordered(self) -> None:
        assert order_pair("1.0.0", "2.0.0") == ("1.0.0", "2.0.0")

    def test_swapped(self) -> None:
        assert order_pair("2.0.0", "1.0.0") == ("1.0.0", "2.0.0")


class TestIsInRange:
    def test_inclusive_bounds(self) -> None:
        assert is_in_range("1.0.0", "1.0.0", "2.0.0")
        assert is_in_range("2.0.0", "1.0.0", "2.0.0")
        assert is_in_range("1.5.2", "1.0.0", "2.0.0")

    def test_outside(self) -> None:
        assert not is_in_range("2.1.0", "1.0.0", "2.0.0")
        assert not is_in_range("0.9.0", "1.0.0", "2.0.0")

    def test_bounds_order_does_not_matter(self) -> None:
        assert is_in_range("1.5.2", "2.0.0", "1.0.0")
        assert not is_in_range("2.1.0", "2.0.0", "1.0.0")
