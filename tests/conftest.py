"""Shared test fixtures for changelogger.

Provides reusable fixtures for sample changelogs, repository directories,
isolated config environments, output state, and CLI runners. These
fixtures are automatically discovered by pytest and available to all test
modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from changelogger.models import CacheConfig, GlobalConfig, Repository
from changelogger.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Changelog fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_changelog() -> str:
    """Raw text of the sample changelog (2.1.0, 2.0.0, 1.5.2, 1.0.0 + Unreleased)."""
    return (FIXTURES_DIR / "sample_changelog.md").read_text(encoding="utf-8")


@pytest.fixture
def repos_dir(tmp_path: Path, sample_changelog: str) -> Path:
    """A base directory holding ``api`` (sample changelog) and ``empty`` (no releases).

    A third directory, ``nochangelog``, exists without a CHANGELOG.md.
    """
    base = tmp_path / "repos"
    api = base / "api"
    api.mkdir(parents=True)
    (api / "CHANGELOG.md").write_text(sample_changelog, encoding="utf-8")

    empty = base / "empty"
    empty.mkdir()
    (empty / "CHANGELOG.md").write_text("# Changelog\n\nNothing yet.\n", encoding="utf-8")

    (base / "nochangelog").mkdir()
    return base


@pytest.fixture
def sample_repository(repos_dir: Path) -> Repository:
    """The parsed ``api`` repository from :func:`repos_dir`."""
    from changelogger.parser import parse_changelog

    return parse_changelog("api", repos_dir)


@pytest.fixture
def app_config(repos_dir: Path) -> GlobalConfig:
    """Config serving ``api``, ``empty``, ``nochangelog`` and a missing ``ghost``."""
    return GlobalConfig(
        repos=["api", "empty", "nochangelog", "ghost"],
        repos_base_path=str(repos_dir),
        cache=CacheConfig(enabled=False),
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all CHANGELOGGER_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("changelogger.config._is_xdg_platform", lambda: True)

    for var in [
        "CHANGELOGGER_REPOS",
        "CHANGELOGGER_REPOS_BASE_PATH",
        "CHANGELOGGER_WITH_DATES",
        "CHANGELOGGER_HOST",
        "CHANGELOGGER_PORT",
        "CHANGELOGGER_CACHE",
        "CHANGELOGGER_CACHE_TTL_HOURS",
        "CHANGELOGGER_CACHE_DIR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
