"""Pull command -- bring every configured repository up to date."""

from __future__ import annotations

import typer

from changelogger.commands._common import config_from_context, handle_errors
from changelogger.exit_codes import EXIT_GENERIC_FAILURE
from changelogger.output import print_table, success, warning


def pull_command(ctx: typer.Context) -> None:
    """Run ``git pull`` in each configured repository.

    Intended for cron. Missing directories and non-git directories are
    reported and skipped. Exits non-zero if any repository failed.

    Example::

        */15 * * * * changelogger --quiet pull
    """
    from changelogger.git import pull_repositories

    with handle_errors():
        config = config_from_context(ctx)

    summary = pull_repositories(config.repos, config.repos_base_path)
    rows = [[r.repo, "ok" if r.ok else "failed", r.message] for r in summary.results]
    print_table(["Repository", "Status", "Message"], rows, title="git pull")

    if summary.ok:
        success(f"Updated {len(summary.succeeded)} repositories.")
        return
    warning(f"Failed to update: {', '.join(summary.failed)}")
    raise typer.Exit(code=EXIT_GENERIC_FAILURE)
