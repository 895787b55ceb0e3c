"""Serve command -- run the HTTP API in the foreground."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from changelogger.commands._common import LOG_FORMAT, config_from_context, handle_errors
from changelogger.exit_codes import EXIT_GENERIC_FAILURE
from changelogger.output import error, get_output, info, success


def serve_command(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(
        None, "--host", help="Interface to bind (default from config)."
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Port to listen on (default from config, 0 picks one)."
    ),
) -> None:
    """Serve changelogs and diffs over HTTP until interrupted.

    Example::

        changelogger serve
        CHANGELOGGER_REPOS=api,web changelogger serve --port 8080
    """
    from changelogger.parser import repository_has_valid_changelog
    from changelogger.server import create_server
    from changelogger.service import create_service

    with handle_errors():
        config = config_from_context(ctx)
        service = create_service(config)

    if not get_output().is_quiet:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    bind_host = host or config.server.host
    bind_port = config.server.port if port is None else port
    try:
        server = create_server(service, bind_host, bind_port)
    except OSError as exc:
        service.close()
        error(f"Cannot bind {bind_host}:{bind_port}: {exc}")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None

    actual_host, actual_port = server.server_address[:2]
    success(f"Serving on http://{actual_host}:{actual_port}")
    info(f"Repositories base path: {config.repos_base_path}")
    for repo in config.repos:
        mark = "ok" if repository_has_valid_changelog(repo, config.repos_base_path) else "missing"
        info(f"  {repo}: {mark}")
    info(f"Cache: {'enabled' if service.cache is not None and service.cache.enabled else 'disabled'}")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        info("Shutting down.")
    finally:
        server.server_close()
        service.close()
