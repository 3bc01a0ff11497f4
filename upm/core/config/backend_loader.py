"""
Backend loader — loads user-supplied backend definitions from YAML files.

Each file describes one package manager; the file stem is its name
unless the file sets ``name`` itself::

    backends.d/
        yay.yml
        pipx.yaml

Directories are read in precedence order. A backend already loaded
from an earlier directory is not replaced by a later one. Unlike the
built-in table, a broken file here is a configuration error: the user
asked for that backend and silently losing it would be worse.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from upm.core.config.loader import ConfigError
from upm.core.models.backend import BackendDescriptor

logger = logging.getLogger(__name__)

_SUFFIXES = (".yml", ".yaml")


def load_backend(path: Path) -> BackendDescriptor:
    """Load a single backend definition from a YAML file.

    Raises:
        ConfigError: If the file cannot be read or does not validate.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot load backend from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Backend file {path} is not a mapping")

    data.setdefault("name", path.stem)

    # "./tool" is relative to the file, so wrappers can live beside it
    executable = data.get("executable")
    if isinstance(executable, str) and executable.startswith("./"):
        data["executable"] = str((path.parent / executable[2:]).resolve())

    try:
        backend = BackendDescriptor.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid backend definition in {path}: {e}") from e

    logger.debug("Loaded backend: %s from %s", backend.name, path)
    return backend


def discover_backends(directories: list[Path]) -> list[BackendDescriptor]:
    """Load every backend file from the given directories.

    Files within a directory are read in name order; missing
    directories are skipped.
    """
    loaded: dict[str, BackendDescriptor] = {}

    for directory in directories:
        if not directory.is_dir():
            logger.debug("Backend directory not found: %s", directory)
            continue

        for child in sorted(directory.iterdir()):
            if not child.is_file() or child.suffix not in _SUFFIXES:
                continue
            backend = load_backend(child)
            if backend.name in loaded:
                logger.info(
                    "Backend '%s' from %s shadowed by an earlier directory",
                    backend.name, child,
                )
                continue
            loaded[backend.name] = backend

    if loaded:
        logger.info("Discovered %d user backends: %s", len(loaded), list(loaded))
    return list(loaded.values())
