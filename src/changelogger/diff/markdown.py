"""Markdown rendering for combined changes.

Output shape::

    # <title>

    ## Added

    - [2.1.0] (Jan 5, 2024) Real-time notifications
    - [2.0.0] UI redesign

    ## Fixed
    ...

The date segment is optional (see :func:`render_markdown`). When nothing
is left to show, a single placeholder line replaces all category sections.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from changelogger.models import CATEGORY_ORDER, CombinedChanges

EMPTY_PLACEHOLDER = "No changes found in the specified version range."
MAX_TITLE_LENGTH = 128

_MARKDOWN_CHARS_RE = re.compile(r"[#*_`~\[\](){}]")
_ANGLE_BRACKETS_RE = re.compile(r"[<>]")
_WHITESPACE_RE = re.compile(r"\s+")

# Non-ISO layouts seen in hand-written changelogs.
_DATE_FORMATS = ("%Y/%m/%d", "%B %d, %Y", "%b %d, %Y", "%d %B %Y", "%d %b %Y")

_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def sanitize_title(title: Optional[str]) -> str:
    """Strip Markdown/HTML-significant characters from a caller-supplied title.

    Removes ``# * _ ` ~ [ ] ( ) { } < >``, collapses whitespace runs to a
    single space, trims, and truncates to 128 characters. An empty result
    means the caller should fall back to a default title.

    Example::

        >>> sanitize_title("**Dangerous** <script>Title</script>")
        'Dangerous scriptTitle/script'
    """
    if not title or not isinstance(title, str):
        return ""
    sanitized = _MARKDOWN_CHARS_RE.sub("", title)
    sanitized = _ANGLE_BRACKETS_RE.sub("", sanitized)
    sanitized = _WHITESPACE_RE.sub(" ", sanitized).strip()
    if len(sanitized) > MAX_TITLE_LENGTH:
        sanitized = sanitized[:MAX_TITLE_LENGTH].strip()
    return sanitized


def _parse_date(value: str) -> Optional[date]:
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_short_date(date_string: Optional[str]) -> str:
    """Format a release date as ``"Jan 5, 2024"``; ``""`` when unparseable."""
    if not date_string:
        return ""
    parsed = _parse_date(date_string)
    if parsed is None:
        return ""
    return f"{_MONTH_ABBREVIATIONS[parsed.month - 1]} {parsed.day}, {parsed.year}"


def has_content(changes: CombinedChanges) -> bool:
    return any(changes.get(category) for category in CATEGORY_ORDER)


def render_markdown(title: str, changes: CombinedChanges, with_dates: bool = False) -> str:
    """Render *changes* as a Markdown document headed by *title*.

    Args:
        title: Level-1 heading text (already sanitised by the caller).
        changes: Combined changes keyed by category.
        with_dates: Add ``(Mon d, yyyy)`` after the version tag for entries
            whose date parses.

    Returns:
        The document, newline separated, ending with a blank line.
    """
    lines = [f"# {title}", ""]

    for category in CATEGORY_ORDER:
        entries = changes.get(category)
        if not entries:
            continue
        lines.append(f"## {category.display_name}")
        lines.append("")
        for entry in entries:
            line = f"- [{entry.version}]"
            if with_dates and entry.date:
                formatted = format_short_date(entry.date)
                if formatted:
                    line += f" ({formatted})"
            lines.append(f"{line} {entry.description}")
        lines.append("")

    if not has_content(changes):
        lines.append(EMPTY_PLACEHOLDER)
        lines.append("")

    return "\n".join(lines)
