"""Changelog parser -- read ``CHANGELOG.md`` and build a repository model.

Typical usage::

    from changelogger.parser import parse_changelog

    repo = parse_changelog("my-service", "/srv/repos")
    for version in repo.versions:
        print(version.version, version.date)

Sub-modules:

* :mod:`~changelogger.parser.loader` -- file I/O and the existence check
  used to pre-validate requests.
* :mod:`~changelogger.parser.extractor` -- the line-classifying fold that
  produces :class:`~changelogger.models.Repository`.
"""

from changelogger.parser.extractor import parse_content
from changelogger.parser.loader import parse_changelog, repository_has_valid_changelog

__all__ = ["parse_changelog", "parse_content", "repository_has_valid_changelog"]
