"""Tests for changelogger.parser.extractor -- the line-classifying fold."""

from __future__ import annotations

from textwrap import dedent

from changelogger.models import Category, ChangelogEntry
from changelogger.parser.extractor import (
    LineKind,
    ParseState,
    advance,
    classify_line,
    parse_content,
)


def _parse(text: str):
    return parse_content("demo", "/repos/demo", dedent(text))


def _descriptions(entries: list[ChangelogEntry]) -> list[str]:
    return [e.description for e in entries]


# ---------------------------------------------------------------------------
# classify_line
# ---------------------------------------------------------------------------


class TestClassifyLine:
    def test_version_with_date(self) -> None:
        line = classify_line("## [1.2.0] - 2024-01-05")
        assert line.kind is LineKind.VERSION
        assert line.value == "1.2.0"
        assert line.date == "2024-01-05"

    def test_version_without_date(self) -> None:
        line = classify_line("## [1.2.0]")
        assert line.kind is LineKind.VERSION
        assert line.date is None

    def test_version_without_space_after_hashes(self) -> None:
        assert classify_line("##[0.1.0]").kind is LineKind.VERSION

    def test_unbracketed_version_is_other(self) -> None:
        assert classify_line("## 1.2.0").kind is LineKind.OTHER

    def test_section(self) -> None:
        line = classify_line("### Added")
        assert line.kind is LineKind.SECTION
        assert line.value == "Added"

    def test_list_items(self) -> None:
        assert classify_line("- one").value == "one"
        assert classify_line("* two").value == "two"
        assert classify_line("  - indented  ").value == "indented"

    def test_blank_and_other(self) -> None:
        assert classify_line("   ").kind is LineKind.BLANK
        assert classify_line("Some prose.").kind is LineKind.OTHER
        assert classify_line("-no-space").kind is LineKind.OTHER


# ---------------------------------------------------------------------------
# advance
# ---------------------------------------------------------------------------


class TestAdvance:
    def test_list_item_before_any_version_is_ignored(self) -> None:
        state = advance(ParseState(), "- orphan")
        assert state.current is None
        assert state.versions == []

    def test_section_before_any_version_is_ignored(self) -> None:
        state = advance(ParseState(), "### Added")
        assert state.section is None

    def test_version_line_flushes_previous(self) -> None:
        state = advance(ParseState(), "## [2.0.0]")
        state = advance(state, "## [1.0.0]")
        assert [v.version for v in state.versions] == ["2.0.0"]
        assert state.current is not None and state.current.version == "1.0.0"


# ---------------------------------------------------------------------------
# parse_content
# ---------------------------------------------------------------------------


class TestParseContent:
    def test_sample_changelog(self, sample_changelog: str) -> None:
        repo = parse_content("api", "/repos/api", sample_changelog)
        assert repo.name == "api"
        assert repo.path == "/repos/api"
        assert [v.version for v in repo.versions] == ["2.1.0", "2.0.0", "1.5.2", "1.0.0"]
        assert repo.versions[0].date == "2024-01-05"
        assert _descriptions(repo.versions[0].changes[Category.ADDED]) == [
            "Real-time notifications",
            "Webhook retries",
        ]
        assert repo.unreleased is not None
        assert _descriptions(repo.unreleased[Category.ADDED]) == ["Dark mode"]

    def test_unreleased_never_in_versions(self, sample_changelog: str) -> None:
        repo = parse_content("api", "/repos/api", sample_changelog)
        assert all(v.version.lower() != "unreleased" for v in repo.versions)

    def test_unreleased_case_insensitive_and_anywhere(self) -> None:
        repo = _parse("""\
            ## [1.0.0]
            ### Added
            - First
            ## [UNRELEASED]
            ### Fixed
            - Pending fix
        """)
        assert [v.version for v in repo.versions] == ["1.0.0"]
        assert repo.unreleased is not None
        assert _descriptions(repo.unreleased[Category.FIXED]) == ["Pending fix"]

    def test_no_unreleased_block(self) -> None:
        repo = _parse("## [1.0.0]\n### Added\n- x\n")
        assert repo.unreleased is None

    def test_section_names_are_case_insensitive(self) -> None:
        repo = _parse("## [1.0.0]\n### SECURITY\n- Patched\n### fixed\n- Bug\n")
        changes = repo.versions[0].changes
        assert _descriptions(changes[Category.SECURITY]) == ["Patched"]
        assert _descriptions(changes[Category.FIXED]) == ["Bug"]

    def test_unknown_section_drops_its_items(self) -> None:
        repo = _parse("""\
            ## [1.0.0]
            ### Added
            - Kept
            ### Notes
            - Dropped
            ### Fixed
            - Also kept
        """)
        changes = repo.versions[0].changes
        assert _descriptions(changes[Category.ADDED]) == ["Kept"]
        assert _descriptions(changes[Category.FIXED]) == ["Also kept"]
        all_items = [e.description for entries in changes.values() for e in entries]
        assert "Dropped" not in all_items

    def test_missing_category_has_no_key(self) -> None:
        repo = _parse("## [1.0.0]\n### Added\n- x\n")
        assert Category.FIXED not in repo.versions[0].changes

    def test_empty_section_keeps_empty_key(self) -> None:
        repo = _parse("## [1.0.0]\n### Added\n### Fixed\n- Bug\n")
        assert repo.versions[0].changes[Category.ADDED] == []

    def test_items_after_version_without_section_dropped(self) -> None:
        repo = _parse("## [1.0.0]\n- stray\n### Added\n- real\n")
        assert _descriptions(repo.versions[0].changes[Category.ADDED]) == ["real"]
        assert len(repo.versions[0].changes) == 1

    def test_repeated_section_appends(self) -> None:
        repo = _parse("## [1.0.0]\n### Added\n- a\n### Fixed\n- f\n### Added\n- b\n")
        assert _descriptions(repo.versions[0].changes[Category.ADDED]) == ["a", "b"]

    def test_file_order_is_preserved(self) -> None:
        repo = _parse("## [1.0.0]\n## [3.0.0]\n## [2.0.0]\n")
        assert [v.version for v in repo.versions] == ["1.0.0", "3.0.0", "2.0.0"]

    def test_non_semver_labels_are_kept(self) -> None:
        repo = _parse("## [v2-beta] - soon\n### Added\n- thing\n")
        assert repo.versions[0].version == "v2-beta"
        assert repo.versions[0].date == "soon"

    def test_empty_content(self) -> None:
        repo = _parse("")
        assert repo.versions == []
        assert repo.unreleased is None

    def test_crlf_line_endings(self) -> None:
        repo = _parse("## [1.0.0] - 2024-01-01\r\n### Added\r\n- Windows\r\n")
        assert repo.versions[0].date == "2024-01-01"
        assert _descriptions(repo.versions[0].changes[Category.ADDED]) == ["Windows"]

    def test_only_newline_separates_lines(self) -> None:
        repo = _parse("## [1.0.0]\n### Added\n- Foo\x0cbar\n- Page break\n")
        assert _descriptions(repo.versions[0].changes[Category.ADDED]) == [
            "Foo\x0cbar",
            "Page break",
        ]

    def test_deterministic(self, sample_changelog: str) -> None:
        first = parse_content("api", "/repos/api", sample_changelog)
        second = parse_content("api", "/repos/api", sample_changelog)
        assert first == second
