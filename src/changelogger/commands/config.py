"""Config commands -- view and modify global configuration.

Provides the ``changelogger config`` sub-command group for reading and
updating the user's global configuration file
(:class:`~changelogger.models.GlobalConfig`). Settings stored there are
the lowest-precedence layer: ``./changelogger.json``, ``CHANGELOGGER_*``
environment variables and CLI flags all override them.
"""

from __future__ import annotations

from typing import Any

import typer

from changelogger.commands._common import config_from_context, handle_errors
from changelogger.output import error, format_response, info, print_data, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Show the merged configuration after project, env and CLI layers.",
    ),
) -> None:
    """Show current configuration.

    Example::

        changelogger config show
        changelogger --json config show --effective
    """
    from changelogger.config import get_config_dir, load_global_config

    with handle_errors():
        config = config_from_context(ctx) if effective else load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("path")
def config_path() -> None:
    """Print the path of the global config file."""
    from changelogger.config import global_config_path

    print_data(str(global_config_path()))


def _coerce(key: str, current: Any, value: str) -> Any:
    from changelogger.config import parse_repo_list

    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes", "on")
    if isinstance(current, int):
        try:
            return int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    if isinstance(current, list):
        return parse_repo_list(value)
    return value


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'cache.ttl_hours')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to the
    existing field's type: bool, int, or a comma-separated list for
    ``repos``. The updated config is validated against
    :class:`~changelogger.models.GlobalConfig` before saving.

    Raises:
        typer.Exit: With code 2 if the key path is invalid, the value
            cannot be coerced, or validation fails.

    Example::

        changelogger config set repos api,web
        changelogger config set repos_base_path /srv/repos
        changelogger config set cache.enabled true
    """
    from changelogger.config import load_global_config, save_global_config
    from changelogger.models import GlobalConfig

    with handle_errors():
        config = load_global_config()
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    coerced = _coerce(key, target[final_key], value)
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")
