"""Helpers shared by the command modules: config resolution and error mapping."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer

from changelogger.exceptions import ChangeloggerError
from changelogger.models import GlobalConfig
from changelogger.output import error
from changelogger.service import ChangelogService

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def config_from_context(ctx: typer.Context) -> GlobalConfig:
    """Resolve the effective config, applying ``--repos``/``--base-path`` from the root callback."""
    from changelogger.config import resolve_config

    obj = ctx.obj or {}
    return resolve_config(
        cli_repos=obj.get("repos"),
        cli_base_path=obj.get("base_path"),
    )


def service_from_context(ctx: typer.Context) -> ChangelogService:
    from changelogger.service import create_service

    return create_service(config_from_context(ctx))


@contextmanager
def handle_errors() -> Iterator[None]:
    """Report :class:`ChangeloggerError` on stderr and exit with its code."""
    try:
        yield
    except ChangeloggerError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
