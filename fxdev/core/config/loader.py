"""
Configuration loader — reads the optional installer config into
an ``InstallerConfig``.

Sources, highest precedence first:

    1. explicit path (``fxd --config PATH``)
    2. ``FXDEV_CONFIG`` environment variable
    3. ``~/.config/fxdev/config.yml`` if it exists

With no file at all the defaults apply.  The Google Cloud credential
variables are read from the environment when the file leaves them unset.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from fxdev.core.models.config import InstallerConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FXDEV_CONFIG"
DEFAULT_CONFIG_FILE = Path("~/.config/fxdev/config.yml")

# env var → config field, applied only when the file does not set the field
_ENV_FIELDS = {
    "GOOGLE_CLOUD_CREDENTIALS": "google_credentials",
    "GOOGLE_CLOUD_PROJECT": "google_project",
}


class ConfigError(Exception):
    """Raised when installer configuration is invalid or missing."""


def find_config_file(
    explicit: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Locate the config file to load.

    Returns:
        The path to load, or None when no config file is in play.

    Raises:
        ConfigError: If an explicitly requested file does not exist.
    """
    env = os.environ if environ is None else environ

    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        return explicit

    from_env = env.get(CONFIG_ENV_VAR)
    if from_env:
        path = Path(from_env).expanduser()
        if not path.is_file():
            raise ConfigError(f"{CONFIG_ENV_VAR} points to a missing file: {path}")
        return path

    default = DEFAULT_CONFIG_FILE.expanduser()
    return default if default.is_file() else None


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> InstallerConfig:
    """Load and validate installer configuration.

    Args:
        path: Explicit config path. If None, searches the usual places.
        environ: Environment mapping (default: ``os.environ``).

    Raises:
        ConfigError: If the file is unreadable or fails validation.
    """
    env = os.environ if environ is None else environ
    config_path = find_config_file(path, env)

    data: dict = {}
    if config_path is not None:
        logger.debug("Loading installer config from %s", config_path)
        data = _read_yaml(config_path)

    for var, field_name in _ENV_FIELDS.items():
        value = env.get(var)
        if value and data.get(field_name) in (None, ""):
            data[field_name] = value

    try:
        config = InstallerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e

    logger.info("Installer config: home=%s cache=%s", config.home, config.cache_path)
    return config


def _read_yaml(path: Path) -> dict:
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

    # Settings may be flat or nested under an "installer" key
    nested = data.get("installer")
    if isinstance(nested, dict):
        return dict(nested)
    return dict(data)
