"""
Configuration loader — builds ``Settings`` from file and environment.

Values are layered in precedence order:

    environment variables  >  distropkg.yml  >  built-in defaults

The environment names are the ones the surrounding deployment scripts
already export (``OFFLINE``, ``YUM``, ``http_proxy`` ...), so the
package layer behaves the same whether it is driven from a shell
script or from Python.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError

from distropkg.core.errors import ConfigError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "distropkg.yml"

_TRUE_VALUES = ("true", "1", "yes")

# field name → environment variable
_ENV_MAP: dict[str, str] = {
    "offline": "OFFLINE",
    "no_update_repos": "NO_UPDATE_REPOS",
    "retry_update": "RETRY_UPDATE",
    "repos_updated": "REPOS_UPDATED",
    "http_proxy": "http_proxy",
    "https_proxy": "https_proxy",
    "no_proxy": "no_proxy",
    "yum": "YUM",
    "files_dir": "FILES",
    "log_dir": "LOGDIR",
    "strict_family": "DISTROPKG_STRICT_FAMILY",
}

_BOOL_FIELDS = frozenset({
    "offline", "no_update_repos", "retry_update", "repos_updated", "strict_family",
})


class Settings(BaseModel):
    """Run configuration for detection and package operations."""

    offline: bool = False
    no_update_repos: bool = False
    retry_update: bool = False
    repos_updated: bool = False

    http_proxy: str = ""
    https_proxy: str = ""
    no_proxy: str = ""

    yum: str = "yum"
    files_dir: Path | None = None
    log_dir: Path | None = None

    strict_family: bool = False

    repo_update_timeout: float = Field(default=300.0, gt=0)
    repo_update_interval: float = Field(default=30.0, ge=0)

    def proxy_env(self) -> dict[str, str]:
        """Proxy variables forwarded verbatim to package manager runs."""
        return {
            "http_proxy": self.http_proxy,
            "https_proxy": self.https_proxy,
            "no_proxy": self.no_proxy,
        }


def env_flag(value: str | None) -> bool:
    """Interpret a shell-style boolean (``True``, ``true``, ``1``, ``yes``)."""
    if value is None:
        return False
    return value.strip().lower() in _TRUE_VALUES


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for distropkg.yml starting from the given directory, walking up."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Settings may sit under a "distropkg" key or be flat
    section = data.get("distropkg", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Expected a mapping under 'distropkg' in {path}")
    return dict(section)


def _read_environ(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for field_name, var in _ENV_MAP.items():
        if var not in environ:
            continue
        raw = environ[var]
        if field_name in _BOOL_FIELDS:
            values[field_name] = env_flag(raw)
        elif field_name in ("yum", "files_dir", "log_dir"):
            # Set but empty means unset: YUM falls back to yum, LOGDIR is not the cwd
            if raw:
                values[field_name] = raw
        else:
            values[field_name] = raw
    return values


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit config file. If None, searches upward for
              distropkg.yml; running without one is fine.
        environ: Environment mapping (default: ``os.environ``).

    Returns:
        Validated Settings.

    Raises:
        ConfigError: If the file is unreadable or a value is invalid.
    """
    if environ is None:
        environ = os.environ

    merged: dict[str, Any] = {}
    config_path = path or find_config_file()
    if config_path is not None:
        merged.update(_read_config_file(config_path))

    merged.update(_read_environ(environ))

    try:
        settings = Settings.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug(
        "Settings loaded (offline=%s, yum=%s, files_dir=%s)",
        settings.offline, settings.yum, settings.files_dir,
    )
    return settings
