"""Turn "Keep a Changelog" text into a :class:`~changelogger.models.Repository`.

Parsing is a single left fold over the file's lines. Each line is first
classified by :func:`classify_line` and then fed to :func:`advance`, which
moves a :class:`ParseState` forward:

* ``## [label] - date`` closes the open version block and opens a new one.
* ``### Name`` selects a category inside the open block. Unknown names
  deselect the current category so that their bullets are dropped.
* ``- text`` / ``* text`` appends an entry to the selected category.
* Everything else (blank lines, prose, link references) is ignored.

Nothing in here raises on malformed input: the format is best effort and
lines that do not fit are skipped.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from functools import reduce
from typing import NamedTuple, Optional

from changelogger.models import (
    Category,
    ChangelogEntry,
    Repository,
    Version,
    VersionChanges,
)

_VERSION_RE = re.compile(r"^##\s*\[([^\]]+)\](?:\s*-\s*(.+))?")
_SECTION_RE = re.compile(r"^###\s+(.+)")
_LIST_ITEM_RE = re.compile(r"^[-*]\s+(.+)")

UNRELEASED_LABEL = "unreleased"


class LineKind(enum.Enum):
    BLANK = "blank"
    VERSION = "version"
    SECTION = "section"
    LIST_ITEM = "list_item"
    OTHER = "other"


class ClassifiedLine(NamedTuple):
    """A line reduced to its kind and the captured values it carries.

    ``value`` is the version label, section name or entry text; ``date`` is
    only set for version headers that carry one.
    """

    kind: LineKind
    value: str = ""
    date: Optional[str] = None


@dataclass
class ParseState:
    """Accumulator threaded through the fold.

    ``current`` is the version block being filled and ``section`` the
    category bullets are appended to. Completed blocks are moved into
    ``versions`` (or ``unreleased``) by :func:`flush`.
    """

    versions: list[Version] = field(default_factory=list)
    unreleased: Optional[VersionChanges] = None
    current: Optional[Version] = None
    section: Optional[Category] = None


def classify_line(line: str) -> ClassifiedLine:
    """Classify a single raw line (surrounding whitespace is ignored)."""
    text = line.strip()
    if not text:
        return ClassifiedLine(LineKind.BLANK)

    version_match = _VERSION_RE.match(text)
    if version_match:
        date = (version_match.group(2) or "").strip()
        return ClassifiedLine(
            LineKind.VERSION, version_match.group(1).strip(), date or None
        )

    section_match = _SECTION_RE.match(text)
    if section_match:
        return ClassifiedLine(LineKind.SECTION, section_match.group(1).strip())

    item_match = _LIST_ITEM_RE.match(text)
    if item_match:
        return ClassifiedLine(LineKind.LIST_ITEM, item_match.group(1).strip())

    return ClassifiedLine(LineKind.OTHER)


def flush(state: ParseState) -> ParseState:
    """Move the open version block into ``versions`` or ``unreleased``."""
    current = state.current
    if current is None:
        return state
    if current.version.lower() == UNRELEASED_LABEL:
        state.unreleased = current.changes
    else:
        state.versions.append(current)
    state.current = None
    state.section = None
    return state


def _lookup_category(name: str) -> Optional[Category]:
    try:
        return Category(name.strip().lower())
    except ValueError:
        return None


def advance(state: ParseState, line: str) -> ParseState:
    """Fold step: apply one line to *state* and return it."""
    classified = classify_line(line)

    if classified.kind is LineKind.VERSION:
        state = flush(state)
        state.current = Version(version=classified.value, date=classified.date)
        return state

    if classified.kind is LineKind.SECTION:
        if state.current is None:
            return state
        state.section = _lookup_category(classified.value)
        if state.section is not None:
            state.current.changes.setdefault(state.section, [])
        return state

    if classified.kind is LineKind.LIST_ITEM:
        if state.current is not None and state.section is not None:
            state.current.changes.setdefault(state.section, []).append(
                ChangelogEntry(description=classified.value)
            )
        return state

    return state


def parse_content(repo_name: str, repo_path: str, content: str) -> Repository:
    """Parse changelog *content* into a :class:`Repository`.

    Args:
        repo_name: Name the repository is served under.
        repo_path: Repository directory (stored on the result, not read).
        content: Full text of ``CHANGELOG.md``.

    Returns:
        The parsed repository. Parsing the same text twice yields equal
        results.
    """
    state = flush(reduce(advance, content.split("\n"), ParseState()))
    return Repository(
        name=repo_name,
        path=repo_path,
        versions=state.versions,
        unreleased=state.unreleased,
    )
