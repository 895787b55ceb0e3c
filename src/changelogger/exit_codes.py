"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~changelogger.exceptions.ChangeloggerError` subclass.
Shell wrappers and cron jobs can inspect the exit code to tell a missing
repository apart from a bad invocation without parsing stderr.

Example::

    $ changelogger diff my-service 1.0.0 9.9.9
    $ echo $?
    4   # EXIT_NOT_FOUND -- version 9.9.9 is not in the changelog
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (e.g. identical diff bounds)."""

EXIT_NOT_FOUND = 4
"""A repository, changelog, or version could not be found."""
