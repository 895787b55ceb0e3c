"""changelogger -- parse Keep a Changelog files and serve version diffs."""

__version__ = "0.1.0"
