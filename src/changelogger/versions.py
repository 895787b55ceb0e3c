"""Parse and order semantic-version-like labels.

Only a leading ``MAJOR.MINOR.PATCH`` triple is understood; pre-release
(``-beta.1``) and build metadata (``+build.5``) suffixes are accepted and
ignored. Labels that are not triples (``v1.2.0``, ``1.2``, ``1.2.3.4``,
``Unreleased``) are still comparable, but only as plain strings, so mixing
the two kinds in one range gives string-order results.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

_SEMVER_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)(?:-.*)?(?:\+.*)?")


class SemVer(NamedTuple):
    major: int
    minor: int
    patch: int


def parse_version(version: str) -> Optional[SemVer]:
    """Extract the numeric triple from *version*.

    Returns:
        A :class:`SemVer`, or ``None`` when *version* does not start with a
        complete ``MAJOR.MINOR.PATCH`` triple followed only by an optional
        ``-pre`` / ``+build`` suffix.

    Example::

        >>> parse_version("1.0.0-beta.1+build.123")
        SemVer(major=1, minor=0, patch=0)
        >>> parse_version("v1.0.0") is None
        True
    """
    match = _SEMVER_RE.fullmatch(version)
    if match is None:
        return None
    return SemVer(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def compare_versions(version1: str, version2: str) -> int:
    """Three-way comparison of two version labels.

    Numeric when both labels parse, plain string comparison otherwise.

    Returns:
        A negative number, zero, or a positive number when *version1* is
        older than, equal to, or newer than *version2*.
    """
    v1 = parse_version(version1)
    v2 = parse_version(version2)
    if v1 is None or v2 is None:
        return (version1 > version2) - (version1 < version2)

    if v1.major != v2.major:
        return v1.major - v2.major
    if v1.minor != v2.minor:
        return v1.minor - v2.minor
    return v1.patch - v2.patch


def is_newer(version: str, base_version: str) -> bool:
    """Return ``True`` when *version* sorts strictly after *base_version*."""
    return compare_versions(version, base_version) > 0


def order_pair(version1: str, version2: str) -> tuple[str, str]:
    """Return ``(older, newer)`` regardless of argument order."""
    if compare_versions(version1, version2) <= 0:
        return version1, version2
    return version2, version1


def is_in_range(version: str, start_version: str, end_version: str) -> bool:
    """Inclusive range check with order-independent bounds."""
    low, high = order_pair(start_version, end_version)
    return compare_versions(version, low) >= 0 and compare_versions(version, high) <= 0
