"""Diff commands -- render changes since a version or between two versions.

Output is Markdown (rendered in a terminal, raw when piped). With
``--json`` the title, content and range bounds are printed as an object.
"""

from __future__ import annotations

from typing import Optional

import typer

from changelogger.commands._common import handle_errors, service_from_context
from changelogger.models import MarkdownDiff
from changelogger.output import OutputFormat, format_response, get_output, print_markdown


def _emit(diff: MarkdownDiff) -> None:
    if get_output().format == OutputFormat.JSON:
        format_response(diff.model_dump(mode="json", exclude_none=True))
    else:
        print_markdown(diff.content)


def since_command(
    ctx: typer.Context,
    repo: str = typer.Argument(help="Repository name."),
    version: Optional[str] = typer.Argument(
        None, help="Show changes newer than this version (default: everything)."
    ),
    title: Optional[str] = typer.Option(
        None, "--title", "-t", help="Custom document title."
    ),
    dates: Optional[bool] = typer.Option(
        None, "--dates/--no-dates", help="Show release dates (default from config)."
    ),
) -> None:
    """Render every change in REPO newer than VERSION.

    VERSION does not need to exist in the changelog: ``since api 1.5.1``
    shows 1.5.2 and later even if 1.5.1 was never released.

    Example::

        changelogger since api
        changelogger since api 1.4.0 --title "What's new" --dates
    """
    with handle_errors(), service_from_context(ctx) as service:
        _emit(service.since(repo, version, title, dates))


def diff_command(
    ctx: typer.Context,
    repo: str = typer.Argument(help="Repository name."),
    version1: str = typer.Argument(help="One end of the range."),
    version2: str = typer.Argument(help="Other end of the range."),
    dates: Optional[bool] = typer.Option(
        None, "--dates/--no-dates", help="Show release dates (default from config)."
    ),
) -> None:
    """Render every change in REPO between two released versions, inclusive.

    The order of the two versions does not matter.

    Example::

        changelogger diff api 1.0.0 2.0.0
    """
    with handle_errors(), service_from_context(ctx) as service:
        _emit(service.diff(repo, version1, version2, dates))
