"""Tests for changelogger.git -- pulling the configured repositories."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from changelogger.git import pull_repositories, pull_repository


@pytest.fixture()
def git_repos(tmp_path: Path) -> Path:
    """``api`` and ``web`` are git checkouts, ``plain`` is not."""
    for name in ("api", "web"):
        (tmp_path / name / ".git").mkdir(parents=True)
    (tmp_path / "plain").mkdir()
    return tmp_path


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    proc = MagicMock()
    proc.returncode = returncode
    proc.stdout = stdout
    proc.stderr = stderr
    return proc


class TestPullRepository:
    def test_success(self, git_repos: Path) -> None:
        with patch("changelogger.git.subprocess.run", return_value=_completed(stdout="Already up to date.\n")) as run:
            result = pull_repository("api", git_repos)
        assert result.ok
        assert result.message == "Already up to date."
        args, kwargs = run.call_args
        assert args[0] == ["git", "pull"]
        assert kwargs["cwd"] == git_repos / "api"

    def test_missing_directory_skips_git(self, git_repos: Path) -> None:
        with patch("changelogger.git.subprocess.run") as run:
            result = pull_repository("ghost", git_repos)
        assert not result.ok
        assert "Directory not found" in result.message
        run.assert_not_called()

    def test_not_a_git_repository(self, git_repos: Path) -> None:
        with patch("changelogger.git.subprocess.run") as run:
            result = pull_repository("plain", git_repos)
        assert not result.ok
        assert "Not a git repository" in result.message
        run.assert_not_called()

    def test_git_failure(self, git_repos: Path) -> None:
        failed = _completed(returncode=1, stderr="fatal: no remote\n")
        with patch("changelogger.git.subprocess.run", return_value=failed):
            result = pull_repository("api", git_repos)
        assert not result.ok
        assert result.message == "fatal: no remote"

    def test_timeout(self, git_repos: Path) -> None:
        with patch(
            "changelogger.git.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd=["git", "pull"], timeout=1),
        ):
            result = pull_repository("api", git_repos, timeout=1)
        assert not result.ok

    def test_git_not_installed(self, git_repos: Path) -> None:
        with patch("changelogger.git.subprocess.run", side_effect=FileNotFoundError("git")):
            result = pull_repository("api", git_repos)
        assert not result.ok


class TestPullRepositories:
    def test_one_failure_does_not_stop_others(self, git_repos: Path) -> None:
        outcomes = [_completed(returncode=1, stderr="boom"), _completed(stdout="Updated")]
        with patch("changelogger.git.subprocess.run", side_effect=outcomes):
            summary = pull_repositories(["api", "plain", "web"], git_repos)
        assert summary.failed == ["api", "plain"]
        assert summary.succeeded == ["web"]
        assert not summary.ok

    def test_all_ok(self, git_repos: Path) -> None:
        with patch("changelogger.git.subprocess.run", return_value=_completed()):
            summary = pull_repositories(["api", "web"], git_repos)
        assert summary.ok
        assert [r.message for r in summary.results] == ["Successfully updated"] * 2

    def test_empty(self, git_repos: Path) -> None:
        assert pull_repositories([], git_repos).ok
