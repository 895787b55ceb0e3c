"""Keep the watched repositories current with ``git pull``.

Run from cron (``changelogger pull``) so that served changelogs follow
their upstream. Each repository is pulled independently; one failure does
not stop the others.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from changelogger.parser.loader import repository_path

logger = logging.getLogger(__name__)


@dataclass
class PullResult:
    repo: str
    ok: bool
    message: str


@dataclass
class PullSummary:
    """Outcome of :func:`pull_repositories`, one result per repository."""

    results: list[PullResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        return [r.repo for r in self.results if r.ok]

    @property
    def failed(self) -> list[str]:
        return [r.repo for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


def pull_repository(repo: str, base_path: str | Path = ".", timeout: float = 300) -> PullResult:
    """Run ``git pull`` inside ``<base_path>/<repo>``.

    Missing directories and directories without ``.git`` are reported as
    failures without running git.
    """
    path = repository_path(repo, base_path)
    if not path.is_dir():
        return PullResult(repo, False, f"Directory not found: {path}")
    if not (path / ".git").is_dir():
        return PullResult(repo, False, f"Not a git repository: {path}")

    try:
        proc = subprocess.run(
            ["git", "pull"],
            cwd=path,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.warning("git pull failed for %s: %s", repo, exc)
        return PullResult(repo, False, str(exc))

    if proc.returncode != 0:
        message = (proc.stderr or proc.stdout).strip() or f"git exited with {proc.returncode}"
        logger.warning("git pull failed for %s: %s", repo, message)
        return PullResult(repo, False, message)
    return PullResult(repo, True, proc.stdout.strip() or "Successfully updated")


def pull_repositories(repos: Iterable[str], base_path: str | Path = ".") -> PullSummary:
    """Pull every repository in *repos* and collect the results."""
    summary = PullSummary()
    for repo in repos:
        logger.debug("Pulling %s", repo)
        summary.results.append(pull_repository(repo, base_path))
    return summary
