"""Repository commands -- list repositories and show parsed changelogs.

``changelogger repos`` lists every configured repository together with
whether its changelog can be read. ``show``, ``latest`` and ``version``
print the parsed model (or part of it) as structured output.
"""

from __future__ import annotations

import typer

from changelogger.commands._common import (
    config_from_context,
    handle_errors,
    service_from_context,
)
from changelogger.output import format_response, print_table, suggest


def _dump(model) -> dict:  # noqa: ANN001
    return model.model_dump(mode="json", exclude_none=True)


def repos_command(ctx: typer.Context) -> None:
    """List configured repositories and whether their CHANGELOG.md is readable.

    Example::

        changelogger repos
        changelogger --repos api,web --base-path /srv/repos repos
    """
    from changelogger.parser import repository_has_valid_changelog

    with handle_errors():
        config = config_from_context(ctx)
    if not config.repos:
        suggest("No repositories configured. Set CHANGELOGGER_REPOS or run: "
                "changelogger config set repos api,web")
    rows = [
        [repo, "ok" if repository_has_valid_changelog(repo, config.repos_base_path) else "missing"]
        for repo in config.repos
    ]
    print_table(["Repository", "Changelog"], rows, title="Repositories")


def show_command(
    ctx: typer.Context,
    repo: str = typer.Argument(help="Repository name."),
) -> None:
    """Print the full parsed changelog of REPO."""
    with handle_errors(), service_from_context(ctx) as service:
        format_response(_dump(service.load_repository(repo)))


def latest_command(
    ctx: typer.Context,
    repo: str = typer.Argument(help="Repository name."),
) -> None:
    """Print the newest release of REPO."""
    with handle_errors(), service_from_context(ctx) as service:
        format_response(_dump(service.get_latest(repo)))


def version_command(
    ctx: typer.Context,
    repo: str = typer.Argument(help="Repository name."),
    version: str = typer.Argument(help="Exact version label, e.g. 1.2.0."),
) -> None:
    """Print one release of REPO."""
    with handle_errors(), service_from_context(ctx) as service:
        format_response(_dump(service.get_version(repo, version)))
