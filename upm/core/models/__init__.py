"""
Domain models — Pydantic types for the package manager frontend.

All models are re-exported here for convenient access:

    from upm.core.models import Action, Intent, BackendDescriptor, Command, Result
"""

from upm.core.models.action import Action, Intent
from upm.core.models.backend import (
    PLACEHOLDER,
    Arity,
    BackendDescriptor,
    CommandTemplate,
    PackagePolicy,
)
from upm.core.models.command import Command, Result, ResultSet, ResultStatus
from upm.core.models.settings import ManagerFilter, Settings
from upm.core.models.version import Version

__all__ = [
    # action.py
    "Action",
    "Intent",
    # backend.py
    "PLACEHOLDER",
    "Arity",
    "BackendDescriptor",
    "CommandTemplate",
    "PackagePolicy",
    # command.py
    "Command",
    "Result",
    "ResultSet",
    "ResultStatus",
    # settings.py
    "ManagerFilter",
    "Settings",
    # version.py
    "Version",
]
