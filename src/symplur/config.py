"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.symplur/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Settings** -- a single :class:`~symplur.models.Settings` JSON file in
  the config directory, optionally overridden by ``./symplur.json`` in the
  working directory.
* **Precedence** -- :func:`load_settings` layers CLI flags over environment
  variables over project config over user config over defaults.
* **Credential resolution** -- :func:`resolve_credential` turns a source
  descriptor such as ``env:SYMPLUR_CLIENT_ID`` into the secret itself.

The :class:`~symplur.client.Client` never reads any of this; it is the
command line's job to turn settings into constructor arguments.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Optional

from symplur.exceptions import ConfigurationError
from symplur.models import Settings

_APP_NAME = "symplur"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "symplur.json"

ENV_BASE_URI = "SYMPLUR_BASE_URI"
ENV_TIMEOUT = "SYMPLUR_TIMEOUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _xdg_dir(env_var: str, default_segments: tuple[str, ...], fallback: str) -> Path:
    """Resolve ``$ENV_VAR/symplur`` on XDG platforms, ``~/.symplur/<fallback>`` elsewhere."""
    if _is_xdg_platform():
        env_value = os.environ.get(env_var, "")
        base = Path(env_value) if env_value else Path.home().joinpath(*default_segments)
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if fallback:
            path = path / fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/symplur/`` (default ``~/.config/symplur/``).
    On macOS/Windows: ``~/.symplur/``.
    """
    return _xdg_dir("XDG_CONFIG_HOME", (".config",), "")


def get_cache_dir() -> Path:
    """Return the cache directory (on-disk token cache), creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/symplur/`` (default ``~/.cache/symplur/``).
    On macOS/Windows: ``~/.symplur/cache/``.
    """
    return _xdg_dir("XDG_CACHE_HOME", (".cache",), "cache")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/symplur/`` (default ``~/.local/share/symplur/``).
    On macOS/Windows: ``~/.symplur/logs/``.
    """
    return _xdg_dir("XDG_DATA_HOME", (".local", "share"), "logs")


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* via a sibling temp file and ``os.replace``.

    Readers see either the old file or the new one, never a partial write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    temp = Path(temp_name)
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as stream:
            stream.write(data)
            stream.flush()
            os.fsync(stream.fileno())
        os.replace(temp, path)
    except BaseException:
        temp.unlink(missing_ok=True)
        raise


# --- Settings ---


def settings_path() -> Path:
    """Path to the user-wide settings file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigurationError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *override* into a copy of *base*."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    cli_base_uri: Optional[str] = None,
    cli_timeout: Optional[float] = None,
) -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_base_uri``, ``cli_timeout``)
        2. Environment variables (``SYMPLUR_BASE_URI``, ``SYMPLUR_TIMEOUT``)
        3. Project config (``./symplur.json``)
        4. User config (``~/.config/symplur/config.json``)
        5. Defaults

    Raises:
        ConfigurationError: If a config file is not valid JSON, fails
            validation, or ``SYMPLUR_TIMEOUT`` is not a number.
    """
    data: dict[str, Any] = {}
    user = _read_json(settings_path(), "config")
    if user is not None:
        data = _merge(data, user)
    project = _read_json(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project config")
    if project is not None:
        data = _merge(data, project)

    options: dict[str, Any] = dict(data.get("options") or {})

    env_base_uri = os.environ.get(ENV_BASE_URI)
    if env_base_uri:
        options["base_uri"] = env_base_uri
    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        try:
            options["timeout"] = float(env_timeout)
        except ValueError as exc:
            raise ConfigurationError(
                f"{ENV_TIMEOUT} must be a number of seconds, got '{env_timeout}'"
            ) from exc

    if cli_base_uri is not None:
        options["base_uri"] = cli_base_uri
    if cli_timeout is not None:
        options["timeout"] = cli_timeout

    data["options"] = options
    try:
        return Settings.model_validate(data)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def load_user_settings() -> Settings:
    """Settings from the user config file alone, ignoring project config and env.

    Used when editing the file so that overrides are not written back.
    """
    data = _read_json(settings_path(), "config") or {}
    try:
        return Settings.model_validate(data)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def save_settings(settings: Settings) -> Path:
    """Persist *settings* atomically to the user config file and return its path."""
    path = settings_path()
    data = settings.model_dump(mode="json")
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


# --- Credential source resolution ---


def _from_env(name: str) -> str:
    value = os.environ.get(name)
    if value is None:
        raise ConfigurationError(f"Environment variable '{name}' is not set (source: env:{name})")
    return value


def _from_file(location: str) -> str:
    path = Path(location).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Credential file not found: {path} (source: file:{location})")
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read credential file {path}: {exc}") from exc


def _from_prompt(label: str) -> str:
    if not sys.stdin.isatty():
        raise ConfigurationError("Cannot prompt for credentials: stdin is not a TTY (source: prompt)")
    return getpass.getpass(f"{label or 'Credential'}: ")


_SOURCES: dict[str, Callable[[str], str]] = {
    "env": _from_env,
    "file": _from_file,
    "value": lambda literal: literal,
}


def resolve_credential(source: str) -> str:
    """Turn a credential source descriptor into the credential itself.

    ``env:NAME`` reads an environment variable, ``file:PATH`` reads a file
    (surrounding whitespace stripped), ``value:TEXT`` is the literal text,
    and ``prompt`` (or ``prompt:Label``) asks on the terminal without echo.

    Raises:
        ConfigurationError: If the descriptor is unknown or cannot be resolved.
    """
    kind, sep, argument = source.partition(":")
    if kind == "prompt":
        return _from_prompt(argument)
    reader = _SOURCES.get(kind)
    if reader is None or not sep:
        raise ConfigurationError(f"Unknown credential source format: {source}")
    return reader(argument)
