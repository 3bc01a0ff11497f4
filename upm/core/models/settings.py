"""
Settings model — the user's config.yml.

Every field has a default, so an absent config file is the same as
an empty one.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from upm.core.models.backend import BackendDescriptor


class ManagerFilter(BaseModel):
    """Which active backends a run may use."""

    include: list[str] = Field(default_factory=list)  # empty = all
    exclude: list[str] = Field(default_factory=list)


class Settings(BaseModel):
    """User preferences and extra backend definitions."""

    parallel: bool = True
    max_workers: int | None = None
    timeout: float | None = None        # seconds per command, None = unlimited
    escalation: list[str] = Field(default_factory=lambda: ["sudo"])

    managers: ManagerFilter = Field(default_factory=ManagerFilter)

    # backend name → {generic package name → backend package name}
    aliases: dict[str, dict[str, str]] = Field(default_factory=dict)

    # Extra descriptors, inline or one-per-file in backend_dirs
    backends: list[BackendDescriptor] = Field(default_factory=list)
    backend_dirs: list[str] = Field(default_factory=list)

    @field_validator("max_workers")
    @classmethod
    def _positive_workers(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("max_workers must be at least 1")
        return value

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @field_validator("escalation")
    @classmethod
    def _escalation_not_empty(cls, value: list[str]) -> list[str]:
        if not value or not value[0]:
            raise ValueError("escalation needs at least a program name")
        return value
