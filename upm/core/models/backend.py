"""
Backend model — package manager knowledge.

A BackendDescriptor is a declarative description of one package
manager: which program to look for, and how each Action is spelled
on its command line. Descriptors carry no behavior beyond lookups;
the translator turns them into concrete commands.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from upm.core.models.action import Action

# Substitution point for package names inside a template's args.
PLACEHOLDER = "{packages}"


class Arity(StrEnum):
    """How many package names one substitution point accepts."""

    NONE = "none"
    ONE = "one"
    MANY = "many"


class PackagePolicy(StrEnum):
    """What to do with several packages when a template takes only one."""

    PER_PACKAGE = "per-package"
    ALL_IN_ONE = "all-in-one"


class CommandTemplate(BaseModel):
    """Arguments for one action, following the executable.

    Example: ``CommandTemplate(args=["-S", "--noconfirm", "{packages}"],
    arity="many")`` for ``pacman -S --noconfirm a b c``.
    """

    model_config = ConfigDict(frozen=True)

    args: tuple[str, ...] = ()
    arity: Arity = Arity.MANY
    privileged: bool | None = None  # None = inherit the backend's flag

    @model_validator(mode="after")
    def _check_placeholder(self) -> CommandTemplate:
        count = self.args.count(PLACEHOLDER)
        if self.arity == Arity.NONE and count:
            raise ValueError(f"arity 'none' template must not contain {PLACEHOLDER}")
        if self.arity != Arity.NONE and count != 1:
            raise ValueError(
                f"arity '{self.arity}' template needs exactly one {PLACEHOLDER} "
                f"(found {count})"
            )
        return self


class BackendDescriptor(BaseModel):
    """Everything the core knows about one package manager.

    Actions missing from ``actions`` are unsupported by this backend.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    executable: str = ""            # defaults to name
    description: str = ""
    actions: dict[Action, CommandTemplate] = Field(default_factory=dict)
    privilege: bool = False
    package_policy: PackagePolicy = PackagePolicy.PER_PACKAGE
    aliases: dict[str, str] = Field(default_factory=dict)
    version_args: tuple[str, ...] = ("--version",)

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        if not value or any(ch.isspace() for ch in value):
            raise ValueError(f"invalid backend name: {value!r}")
        return value

    @model_validator(mode="before")
    @classmethod
    def _default_executable(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("executable"):
            data = {**data, "executable": data.get("name", "")}
        return data

    def supports(self, action: Action) -> bool:
        """Check if this backend defines the given action."""
        return action in self.actions

    def template(self, action: Action) -> CommandTemplate | None:
        """Look up the command template for an action."""
        return self.actions.get(action)

    def resolve_name(self, package: str) -> str:
        """Map a package name through this backend's alias table."""
        return self.aliases.get(package, package)

    @property
    def action_names(self) -> list[str]:
        """List supported actions in canonical order."""
        return [a.value for a in Action if a in self.actions]

    def with_aliases(self, extra: dict[str, str]) -> BackendDescriptor:
        """Return a copy whose alias table is extended by ``extra``."""
        return self.model_copy(update={"aliases": {**self.aliases, **extra}})
