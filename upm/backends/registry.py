"""
Backend registry — the fixed set of known package managers.

The registry is built once at startup and is read-only afterwards.
It is the single source of backend order: probing, translation and
reporting all follow registry order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from upm.core.config.backend_loader import discover_backends
from upm.core.config.loader import ConfigError
from upm.core.data.backends import BUILTIN_BACKENDS
from upm.core.models.backend import BackendDescriptor
from upm.core.models.settings import Settings

logger = logging.getLogger(__name__)


class RegistryError(ConfigError):
    """Raised when the backend table itself is inconsistent."""


class BackendRegistry:
    """Ordered, immutable collection of BackendDescriptors.

    Construction fails fast on duplicate names: that is a defect in
    the descriptor data, not something to recover from at runtime.
    """

    def __init__(self, descriptors: Iterable[BackendDescriptor]):
        backends = tuple(descriptors)
        seen: set[str] = set()
        dupes: list[str] = []
        for backend in backends:
            if backend.name in seen and backend.name not in dupes:
                dupes.append(backend.name)
            seen.add(backend.name)
        if dupes:
            raise RegistryError(f"Duplicate backend names: {', '.join(dupes)}")

        self._backends = backends
        self._by_name = {b.name: b for b in backends}
        logger.debug("Registry initialized with %d backends", len(backends))

    @classmethod
    def builtin(cls) -> BackendRegistry:
        """Registry of the built-in backend table."""
        return cls(BUILTIN_BACKENDS)

    def all(self) -> tuple[BackendDescriptor, ...]:
        """All descriptors in registry order."""
        return self._backends

    def get(self, name: str) -> BackendDescriptor | None:
        """Look up a backend by name."""
        return self._by_name.get(name)

    def names(self) -> list[str]:
        """List all backend names in registry order."""
        return [b.name for b in self._backends]

    def __iter__(self) -> Iterator[BackendDescriptor]:
        return iter(self._backends)

    def __len__(self) -> int:
        return len(self._backends)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        return f"<BackendRegistry {self.names()!r}>"


def build_registry(settings: Settings | None = None) -> BackendRegistry:
    """Build the registry for this run: built-ins, then user backends.

    User backends (inline in the config, then from ``backend_dirs``)
    are appended after the built-in table. Per-backend alias tables
    from the config are merged over the descriptors' own aliases.

    Raises:
        ConfigError: On broken backend files, duplicate names, or aliases
            for a backend that does not exist.
    """
    settings = settings or Settings()

    descriptors = list(BUILTIN_BACKENDS)
    descriptors.extend(settings.backends)
    descriptors.extend(discover_backends([Path(d) for d in settings.backend_dirs]))

    known = {d.name for d in descriptors}
    unknown = sorted(set(settings.aliases) - known)
    if unknown:
        raise ConfigError(f"Aliases defined for unknown backends: {', '.join(unknown)}")

    if settings.aliases:
        descriptors = [
            d.with_aliases(settings.aliases[d.name]) if d.name in settings.aliases else d
            for d in descriptors
        ]

    return BackendRegistry(descriptors)
