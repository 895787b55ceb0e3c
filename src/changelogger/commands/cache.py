"""Cache commands -- inspect and prune the combined-changes cache.

The cache lives under the XDG cache directory (or ``cache.directory``)
and is only consulted when ``cache.enabled`` is set. These commands open
it regardless of that setting so it can be cleaned up after disabling.
"""

from __future__ import annotations

import typer

from changelogger.commands._common import config_from_context, handle_errors
from changelogger.output import format_response, success

cache_app = typer.Typer(no_args_is_help=True)


def _open_cache(ctx: typer.Context):  # noqa: ANN202
    from changelogger.cache import ChangelogCache
    from changelogger.config import resolve_cache_dir

    with handle_errors():
        config = config_from_context(ctx)
    settings = config.cache.model_copy(update={"enabled": True})
    return ChangelogCache(resolve_cache_dir(config), settings)


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show the number of cached entries and their size on disk."""
    with _open_cache(ctx) as cache:
        format_response(cache.stats().model_dump())


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Remove every cached entry."""
    with _open_cache(ctx) as cache:
        removed = cache.clear()
    success(f"Removed {removed} cache entries.")


@cache_app.command("invalidate")
def cache_invalidate(
    ctx: typer.Context,
    repo: str = typer.Argument(help="Repository whose entries are dropped."),
) -> None:
    """Remove every cached entry for REPO."""
    with _open_cache(ctx) as cache:
        removed = cache.invalidate_repo(repo)
    success(f"Removed {removed} cache entries for {repo}.")


@cache_app.command("cleanup")
def cache_cleanup(ctx: typer.Context) -> None:
    """Remove entries older than the configured TTL."""
    with _open_cache(ctx) as cache:
        removed = cache.cleanup()
    success(f"Removed {removed} expired cache entries.")
