"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for svcspec:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.svcspec/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~svcspec.models.ConverterConfig`
  JSON file storing defaults (framework package paths, output format).
* **Project config** -- An optional ``./svcspec.json`` holding a partial
  :class:`~svcspec.models.ConverterConfig` for one repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

The resolved configuration is an ordinary value: it is passed explicitly to
the converter entry points and never stored in module state.

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

from svcspec.exceptions import ConfigError
from svcspec.models import ConverterConfig

_APP_NAME = "svcspec"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "svcspec.json"

ENV_HTTP_PACKAGE = "SVCSPEC_HTTP_PACKAGE"
ENV_SPEC_PACKAGE = "SVCSPEC_SPEC_PACKAGE"
ENV_FORMAT = "SVCSPEC_FORMAT"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/svcspec/`` (default ``~/.config/svcspec/``).
    On macOS/Windows: ``~/.svcspec/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/svcspec/`` (default ``~/.local/share/svcspec/``).
    On macOS/Windows: ``~/.svcspec/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
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


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> ConverterConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~svcspec.models.ConverterConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return ConverterConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return ConverterConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: ConverterConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./svcspec.json``.

    Project-local config sits between global config and environment variables
    in the precedence chain. A repository typically uses it to pin the
    framework package paths its services import.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_format: Optional[str] = None,
    cli_http_package: Optional[str] = None,
    cli_spec_package: Optional[str] = None,
) -> ConverterConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_format``, ``cli_http_package``, ``cli_spec_package``)
        2. Environment variables (``SVCSPEC_FORMAT``, ``SVCSPEC_HTTP_PACKAGE``,
           ``SVCSPEC_SPEC_PACKAGE``)
        3. Project config (``./svcspec.json``)
        4. User config (``~/.config/svcspec/config.json``)
        5. Defaults

    Returns:
        A new :class:`~svcspec.models.ConverterConfig`.

    Raises:
        ConfigError: If any layer supplies an invalid value.
    """
    # 5 + 4. Global config fills in defaults automatically
    data = load_global_config().model_dump(mode="json")

    # 3. Project-local overrides
    project = load_project_config()
    if project is not None:
        unknown = set(project) - set(ConverterConfig.model_fields)
        if unknown:
            raise ConfigError(
                f"Unknown project config keys: {', '.join(sorted(unknown))}"
            )
        data.update(project)

    # 2. Environment variables
    for env_var, key in (
        (ENV_HTTP_PACKAGE, "http_package"),
        (ENV_SPEC_PACKAGE, "spec_package"),
        (ENV_FORMAT, "output_format"),
    ):
        value = os.environ.get(env_var)
        if value:
            data[key] = value

    # 1. CLI flags
    if cli_format is not None:
        data["output_format"] = cli_format
    if cli_http_package is not None:
        data["http_package"] = cli_http_package
    if cli_spec_package is not None:
        data["spec_package"] = cli_spec_package

    try:
        return ConverterConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
