"""
Configuration loader — reads config.yml into Settings.

This is the primary entry point for loading user configuration.
It reads YAML, validates against Pydantic schemas, and returns
typed domain objects.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from upm.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Environment variable pointing at an explicit config file
CONFIG_ENV_VAR = "UPM_CONFIG"

# Default config filename inside the config directory
CONFIG_FILE = "config.yml"


class ConfigError(Exception):
    """Raised when configuration or backend definitions are invalid."""


def default_config_path() -> Path:
    """Return ``$XDG_CONFIG_HOME/upm/config.yml`` (``~/.config`` fallback)."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "upm" / CONFIG_FILE


def find_config_file(explicit: Path | None = None) -> tuple[Path | None, bool]:
    """Locate the config file to use.

    Precedence: explicit path > UPM_CONFIG env var > default location.

    Returns:
        (path, required). ``required`` is True when the user named the
        file explicitly, so its absence is an error. The default file
        is optional and ``path`` is None when it does not exist.
    """
    if explicit is not None:
        return explicit, True

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path), True

    candidate = default_config_path()
    if candidate.is_file():
        return candidate, False
    return None, False


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate user settings.

    Args:
        path: Explicit path to a config file. If None, uses UPM_CONFIG
            or the default location; a missing default file yields
            default settings.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If a required file is missing or any file is invalid.
    """
    path, required = find_config_file(path)

    if path is None:
        logger.debug("No config file found, using defaults")
        return Settings()

    if not path.is_file():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        return Settings()

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
        return Settings()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    # Relative backend directories are relative to the config file
    if settings.backend_dirs:
        resolved = [
            str((path.parent / d).resolve()) if not Path(d).expanduser().is_absolute()
            else str(Path(d).expanduser())
            for d in settings.backend_dirs
        ]
        settings = settings.model_copy(update={"backend_dirs": resolved})

    logger.info(
        "Loaded config from %s (%d extra backends, %d backend dirs)",
        path, len(settings.backends), len(settings.backend_dirs),
    )
    return settings
