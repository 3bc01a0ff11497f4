"""
Managers use case — what backends exist, and which are usable here.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field

from upm.backends.prober import ActiveBackendSet
from upm.backends.registry import BackendRegistry
from upm.core.models.version import Version

logger = logging.getLogger(__name__)

# Seconds a backend gets to print its version
VERSION_TIMEOUT = 10


@dataclass
class ManagerInfo:
    """One row of the managers listing."""

    name: str
    executable: str
    description: str = ""
    active: bool = False
    location: str | None = None
    actions: list[str] = field(default_factory=list)
    privilege: bool = False
    version: Version | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "executable": self.executable,
            "description": self.description,
            "active": self.active,
            "location": self.location,
            "actions": self.actions,
            "privilege": self.privilege,
            "version": str(self.version) if self.version else None,
        }


@dataclass
class ManagersResult:
    managers: list[ManagerInfo] = field(default_factory=list)

    @property
    def active_count(self) -> int:
        return sum(1 for m in self.managers if m.active)

    def to_dict(self) -> dict:
        return {
            "total": len(self.managers),
            "active": self.active_count,
            "managers": [m.to_dict() for m in self.managers],
        }


def query_version(location: str, version_args: tuple[str, ...]) -> Version | None:
    """Run a backend's version command and parse what it prints.

    Informational only: any failure just means "unknown".
    """
    try:
        proc = subprocess.run(
            [location, *version_args],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=VERSION_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Version query failed for %s: %s", location, e)
        return None

    if proc.returncode != 0:
        logger.debug("Version query for %s exited %s", location, proc.returncode)
        return None
    return Version.parse(proc.stdout or proc.stderr)


def list_managers(
    registry: BackendRegistry,
    active: ActiveBackendSet,
    *,
    include_inactive: bool = True,
    versions: bool = False,
) -> ManagersResult:
    """Describe registered backends in registry order.

    Args:
        registry: All known backends.
        active: The probed active subset.
        include_inactive: Also list backends that were not found.
        versions: Ask each active backend for its version (runs it).
    """
    result = ManagersResult()

    for backend in registry:
        location = active.location(backend.name)
        is_active = backend.name in active
        if not is_active and not include_inactive:
            continue

        info = ManagerInfo(
            name=backend.name,
            executable=backend.executable,
            description=backend.description,
            active=is_active,
            location=location,
            actions=backend.action_names,
            privilege=backend.privilege,
        )
        if versions and is_active and location:
            info.version = query_version(location, backend.version_args)
        result.managers.append(info)

    return result
