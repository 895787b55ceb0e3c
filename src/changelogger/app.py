"""Typer application and CLI entry point for changelogger.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``repos``, ``show``, ``latest``, ``version``,
``since``, ``diff``, ``serve``, ``pull``, ``cache``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`changelogger.config`: Configuration resolution.
    :mod:`changelogger.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from changelogger import __version__
from changelogger.commands._common import LOG_FORMAT
from changelogger.commands.cache import cache_app
from changelogger.commands.config import config_app
from changelogger.commands.diff import diff_command, since_command
from changelogger.commands.pull import pull_command
from changelogger.commands.repos import (
    latest_command,
    repos_command,
    show_command,
    version_command,
)
from changelogger.commands.serve import serve_command
from changelogger.exit_codes import EXIT_GENERIC_FAILURE
from changelogger.output import OutputFormat


app = typer.Typer(
    name="changelogger",
    help="Parse Keep a Changelog files and render diffs between versions.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

app.command("repos")(repos_command)
app.command("show")(show_command)
app.command("latest")(latest_command)
app.command("version")(version_command)
app.command("since")(since_command)
app.command("diff")(diff_command)
app.command("serve")(serve_command)
app.command("pull")(pull_command)
app.add_typer(cache_app, name="cache", help="Cache management.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"changelogger {__version__}")
        raise typer.Exit()


def _configured_format() -> OutputFormat:
    """Output format from config files and environment, ``AUTO`` if they cannot be read.

    A broken config is reported by the sub-command that resolves it.
    """
    from changelogger.config import resolve_config
    from changelogger.exceptions import ConfigError

    try:
        return OutputFormat(resolve_config().output.format)
    except ConfigError:
        return OutputFormat.AUTO


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
    repos: Optional[str] = typer.Option(
        None, "--repos", help="Comma-separated repositories (overrides config)."
    ),
    base_path: Optional[str] = typer.Option(
        None, "--base-path", help="Directory containing the repositories."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~changelogger.output.OutputManager` and
    logging from CLI flags, and stores the repository overrides in the
    Typer context so that sub-commands can read them via ``ctx.obj``.
    """
    from changelogger.config import parse_repo_list
    from changelogger.output import OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        output_file=output_file,
    )
    set_output(output)

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)

    ctx.ensure_object(dict)
    ctx.obj["repos"] = parse_repo_list(repos) if repos is not None else None
    ctx.obj["base_path"] = base_path
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from changelogger.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``changelogger`` console script.

    Unhandled :class:`~changelogger.exceptions.ChangeloggerError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from changelogger.exceptions import ChangeloggerError
        from changelogger.output import error

        if isinstance(exc, ChangeloggerError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
