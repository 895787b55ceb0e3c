"""Exception hierarchy for changelogger.

All exceptions inherit from :class:`ChangeloggerError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`changelogger.exit_codes`, plus the ``code`` and ``http_status`` used
by :mod:`changelogger.server` when the error is returned over HTTP.

The top-level error handler in :func:`changelogger.app.main` catches
``ChangeloggerError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ChangeloggerError (exit 1)
    +-- InvalidUsageError              (exit 2)
    |   +-- IdenticalVersionsError     (exit 2)
    +-- NotFoundError                  (exit 4)
    |   +-- RepositoryNotConfiguredError
    |   +-- ChangelogNotFoundError
    |   |   +-- ChangelogReadError
    |   +-- VersionNotFoundError
    |   +-- NoVersionsError
    +-- ConfigError                    (exit 1)
"""

from changelogger.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
)


class ChangeloggerError(Exception):
    """Base exception for all changelogger errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`changelogger.exit_codes`, an API error ``code``
    and the HTTP status the server answers with.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    code: str = "INTERNAL_ERROR"
    http_status: int = 500

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ChangeloggerError):
    """Raised for invalid CLI arguments or request parameters."""

    exit_code = EXIT_INVALID_USAGE
    code = "INVALID_USAGE"
    http_status = 400


class IdenticalVersionsError(InvalidUsageError):
    """Raised when a range diff is requested between a version and itself."""

    code = "IDENTICAL_VERSIONS"


class NotFoundError(ChangeloggerError):
    """Base class for anything the caller asked for that does not exist."""

    exit_code = EXIT_NOT_FOUND
    code = "NOT_FOUND"
    http_status = 404


class RepositoryNotConfiguredError(NotFoundError):
    """Raised when a repository name is not in the configured ``repos`` list."""

    code = "REPO_NOT_CONFIGURED"


class ChangelogNotFoundError(NotFoundError):
    """Raised when a configured repository has no readable ``CHANGELOG.md``."""

    code = "CHANGELOG_NOT_FOUND"


class ChangelogReadError(ChangelogNotFoundError):
    """Raised by the parser when the changelog file cannot be read."""


class VersionNotFoundError(NotFoundError):
    """Raised when a requested version label is absent from the changelog."""

    code = "VERSION_NOT_FOUND"


class NoVersionsError(NotFoundError):
    """Raised when the latest version is requested from a changelog without releases."""

    code = "NO_VERSIONS_FOUND"


class ConfigError(ChangeloggerError):
    """Raised for configuration problems (invalid JSON, bad environment values)."""

    exit_code = EXIT_GENERIC_FAILURE
    code = "CONFIG_ERROR"
