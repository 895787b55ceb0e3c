"""Version filtering, change combination and Markdown rendering.

Typical usage::

    from changelogger.diff import create_range_diff, create_since_diff

    diff = create_since_diff(repo, "1.4.0", custom_title="Release notes")
    print(diff.content)

Sub-modules:

* :mod:`~changelogger.diff.filters` -- pure version selection and merging.
* :mod:`~changelogger.diff.markdown` -- title sanitising, date formatting
  and the Markdown renderer.
* :mod:`~changelogger.diff.engine` -- since/range diffs through the cache.
"""

from changelogger.diff.engine import create_range_diff, create_since_diff
from changelogger.diff.filters import (
    combine_changes,
    filter_between,
    filter_since,
    find_version,
    latest_version,
)
from changelogger.diff.markdown import format_short_date, render_markdown, sanitize_title

__all__ = [
    "combine_changes",
    "create_range_diff",
    "create_since_diff",
    "filter_between",
    "filter_since",
    "find_version",
    "format_short_date",
    "latest_version",
    "render_markdown",
    "sanitize_title",
]
