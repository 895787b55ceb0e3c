"""Read ``CHANGELOG.md`` files from disk.

The changelog of repository ``<name>`` is expected at
``<base_path>/<name>/CHANGELOG.md``. This module holds the only file reads
of the parser sub-package; :mod:`changelogger.parser.extractor` works on
text alone.
"""

from __future__ import annotations

from pathlib import Path

from changelogger.exceptions import ChangelogReadError
from changelogger.models import Repository
from changelogger.parser.extractor import parse_content

CHANGELOG_FILENAME = "CHANGELOG.md"


def repository_path(repo_name: str, base_path: str | Path = ".") -> Path:
    """Return the directory of *repo_name* under *base_path*."""
    return Path(base_path) / repo_name


def changelog_path(repo_name: str, base_path: str | Path = ".") -> Path:
    """Return the expected ``CHANGELOG.md`` location for *repo_name*."""
    return repository_path(repo_name, base_path) / CHANGELOG_FILENAME


def read_changelog(repo_name: str, base_path: str | Path = ".") -> str:
    """Return the raw changelog text.

    Raises:
        ChangelogReadError: If the file is missing or unreadable.
    """
    path = changelog_path(repo_name, base_path)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ChangelogReadError(
            f"Failed to read changelog for {repo_name}: {exc}"
        ) from exc


def parse_changelog(repo_name: str, base_path: str | Path = ".") -> Repository:
    """Read and parse the changelog of *repo_name*.

    Args:
        repo_name: Repository directory name.
        base_path: Directory that contains the repositories.

    Returns:
        The parsed :class:`~changelogger.models.Repository`.

    Raises:
        ChangelogReadError: If the changelog cannot be read.
    """
    content = read_changelog(repo_name, base_path)
    return parse_content(
        repo_name, str(repository_path(repo_name, base_path)), content
    )


def repository_has_valid_changelog(repo_name: str, base_path: str | Path = ".") -> bool:
    """Check that the changelog of *repo_name* exists and can be read."""
    try:
        read_changelog(repo_name, base_path)
    except ChangelogReadError:
        return False
    return True
