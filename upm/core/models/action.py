"""
Action and Intent models — the normalized user request.

Actions are the fixed vocabulary every backend is described in.
An Intent is one Action plus the package names the user typed.
The front door builds Intents; everything downstream trusts them.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class Action(StrEnum):
    """The closed set of operations a backend can be asked to perform."""

    INSTALL = "install"
    REMOVE = "remove"
    UPDATE = "update"
    SEARCH = "search"
    LIST = "list"

    @property
    def requires_packages(self) -> bool:
        """Whether the action is meaningless without package names."""
        return self in (Action.INSTALL, Action.REMOVE, Action.SEARCH)


class Intent(BaseModel):
    """A user request: one action plus zero or more package names.

    Package names are opaque tokens. They are never parsed, only
    checked for being non-empty.
    """

    model_config = ConfigDict(frozen=True)

    action: Action
    packages: tuple[str, ...] = ()

    @field_validator("packages")
    @classmethod
    def _non_empty_tokens(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for token in value:
            if not token.strip():
                raise ValueError("package names must not be empty")
        return value

    @model_validator(mode="after")
    def _packages_present(self) -> Intent:
        if self.action.requires_packages and not self.packages:
            raise ValueError(f"'{self.action}' needs at least one package name")
        return self
