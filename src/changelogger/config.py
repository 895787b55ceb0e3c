"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for changelogger:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.changelogger/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- A single :class:`~changelogger.models.GlobalConfig`
  JSON file storing the watched repositories, server and cache settings.
* **Project config** -- An optional ``./changelogger.json`` with the same
  shape, layered over the global config.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from changelogger.exceptions import ConfigError
from changelogger.models import GlobalConfig

_APP_NAME = "changelogger"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "changelogger.json"

_ENV_PREFIX = "CHANGELOGGER_"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/changelogger/`` (default
    ``~/.config/changelogger/``). On macOS/Windows: ``~/.changelogger/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the diskcache store of combined changes. Cached data can be
    safely deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/changelogger/`` (default
    ``~/.cache/changelogger/``). On macOS/Windows: ``~/.changelogger/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/changelogger/`` (default
    ``~/.local/share/changelogger/``). On macOS/Windows: ``~/.changelogger/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_cache_dir(config: GlobalConfig) -> Path:
    """Return the configured cache directory, or the XDG default."""
    if config.cache.directory:
        return Path(config.cache.directory).expanduser()
    return get_cache_dir()


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On any failure the temp file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError, OSError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~changelogger.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./changelogger.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path, "project config")


# --- Environment ---


def parse_repo_list(value: str) -> list[str]:
    """Split a comma-separated repository list, dropping blanks."""
    return [repo.strip() for repo in value.split(",") if repo.strip()]


def _env_bool(name: str) -> Optional[bool]:
    raw = os.environ.get(name)
    if raw is None:
        return None
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got '{raw}'")


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(
            f"Environment variable {name} must be an integer, got '{raw}'"
        ) from exc


def _environment_overrides() -> dict[str, Any]:
    """Collect ``CHANGELOGGER_*`` variables as a partial config dict."""
    overrides: dict[str, Any] = {}

    repos = os.environ.get(f"{_ENV_PREFIX}REPOS")
    if repos is not None:
        overrides["repos"] = parse_repo_list(repos)
    base_path = os.environ.get(f"{_ENV_PREFIX}REPOS_BASE_PATH")
    if base_path:
        overrides["repos_base_path"] = base_path
    with_dates = _env_bool(f"{_ENV_PREFIX}WITH_DATES")
    if with_dates is not None:
        overrides["with_dates"] = with_dates

    server: dict[str, Any] = {}
    host = os.environ.get(f"{_ENV_PREFIX}HOST")
    if host:
        server["host"] = host
    port = _env_int(f"{_ENV_PREFIX}PORT")
    if port is not None:
        server["port"] = port
    if server:
        overrides["server"] = server

    cache: dict[str, Any] = {}
    enabled = _env_bool(f"{_ENV_PREFIX}CACHE")
    if enabled is not None:
        cache["enabled"] = enabled
    ttl_hours = _env_int(f"{_ENV_PREFIX}CACHE_TTL_HOURS")
    if ttl_hours is not None:
        cache["ttl_hours"] = ttl_hours
    cache_dir = os.environ.get(f"{_ENV_PREFIX}CACHE_DIR")
    if cache_dir:
        cache["directory"] = cache_dir
    if cache:
        overrides["cache"] = cache

    return overrides


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_repos: Optional[list[str]] = None,
    cli_base_path: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_repos``, ``cli_base_path``, ``cli_format``)
        2. Environment variables (``CHANGELOGGER_*``)
        3. Project config (``./changelogger.json``)
        4. User config (``~/.config/changelogger/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~changelogger.models.GlobalConfig`.

    Raises:
        ConfigError: If any layer is malformed.
    """
    # 5 + 4. Global config (fills in defaults automatically)
    data = load_global_config().model_dump(mode="json")

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        data = _deep_merge(data, project)

    # 2. Environment variables
    data = _deep_merge(data, _environment_overrides())

    # 1. CLI flags
    if cli_repos is not None:
        data["repos"] = cli_repos
    if cli_base_path is not None:
        data["repos_base_path"] = cli_base_path
    if cli_format is not None:
        data["output"]["format"] = cli_format

    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
