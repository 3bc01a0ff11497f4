"""
Availability prober — which registered backends can run on this host.

Probing is a dry lookup on the executable search path: the program
must exist and be executable, but it is never started. A backend
that cannot be found is not an error; it just is not active.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from upm.backends.registry import BackendRegistry
from upm.core.models.action import Action
from upm.core.models.backend import BackendDescriptor

logger = logging.getLogger(__name__)


class ActiveBackendSet(BaseModel):
    """Backends whose executables resolved during probing.

    Immutable for the run and safe to share between threads. Order is
    registry order.
    """

    model_config = ConfigDict(frozen=True)

    backends: tuple[BackendDescriptor, ...] = ()
    locations: dict[str, str] = Field(default_factory=dict)  # name → resolved path

    def __len__(self) -> int:
        return len(self.backends)

    def __contains__(self, name: object) -> bool:
        return any(b.name == name for b in self.backends)

    def names(self) -> list[str]:
        return [b.name for b in self.backends]

    def get(self, name: str) -> BackendDescriptor | None:
        for backend in self.backends:
            if backend.name == name:
                return backend
        return None

    def location(self, name: str) -> str | None:
        """Resolved executable path of an active backend."""
        return self.locations.get(name)

    def supporting(self, action: Action) -> list[BackendDescriptor]:
        """Active backends that define the given action."""
        return [b for b in self.backends if b.supports(action)]

    def restrict(
        self,
        include: Iterable[str] = (),
        exclude: Iterable[str] = (),
    ) -> ActiveBackendSet:
        """Return a narrowed set; an empty ``include`` means everything.

        Names that are not active are ignored: asking for a backend
        that is not installed simply yields nothing for it.
        """
        include = set(include)
        exclude = set(exclude)
        kept = tuple(
            b for b in self.backends
            if (not include or b.name in include) and b.name not in exclude
        )
        return ActiveBackendSet(
            backends=kept,
            locations={b.name: self.locations[b.name] for b in kept if b.name in self.locations},
        )

    @classmethod
    def of(cls, *backends: BackendDescriptor) -> ActiveBackendSet:
        """Build a set directly, without touching the host (for tests and tools)."""
        return cls(backends=backends, locations={b.name: b.executable for b in backends})


class AvailabilityProber:
    """Resolves backend executables once per run.

    Args:
        search_path: Override for the PATH-style search string. None
            uses the process environment's PATH.
    """

    def __init__(self, search_path: str | None = None):
        self._search_path = search_path
        self._cache: dict[int, tuple[BackendRegistry, ActiveBackendSet]] = {}

    def probe(self, registry: BackendRegistry) -> ActiveBackendSet:
        """Return the active subset of the registry.

        The first call per registry does the lookups; later calls
        return the cached set, so probing is stable for the run.
        """
        key = id(registry)
        if key in self._cache:
            return self._cache[key][1]

        active: list[BackendDescriptor] = []
        locations: dict[str, str] = {}
        for backend in registry:
            resolved = shutil.which(backend.executable, path=self._search_path)
            if resolved is None:
                logger.debug("Backend %s: '%s' not found", backend.name, backend.executable)
                continue
            logger.debug("Backend %s: %s", backend.name, resolved)
            active.append(backend)
            locations[backend.name] = resolved

        result = ActiveBackendSet(backends=tuple(active), locations=locations)
        logger.info("Active backends: %s", result.names() or "none")
        self._cache[key] = (registry, result)
        return result
