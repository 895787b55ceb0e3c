"""Built-in CLI sub-commands for changelogger.

This package groups the Typer command modules that form the CLI's
command tree:

* :mod:`~changelogger.commands.repos` -- list repositories and show parsed
  changelogs, single versions and the latest release.
* :mod:`~changelogger.commands.diff` -- render since/range diffs as Markdown.
* :mod:`~changelogger.commands.serve` -- run the HTTP API.
* :mod:`~changelogger.commands.pull` -- ``git pull`` every repository.
* :mod:`~changelogger.commands.cache` -- inspect and prune the cache.
* :mod:`~changelogger.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``cache`` and ``config``) or plain callback
functions registered directly on the root app.
"""
