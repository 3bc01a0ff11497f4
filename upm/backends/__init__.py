"""Backends — the registry of known package managers and host probing.

Public re-exports for convenient access.
"""

from upm.backends.prober import ActiveBackendSet, AvailabilityProber
from upm.backends.registry import BackendRegistry, RegistryError, build_registry

__all__ = [
    "ActiveBackendSet",
    "AvailabilityProber",
    "BackendRegistry",
    "RegistryError",
    "build_registry",
]
