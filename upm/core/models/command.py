"""
Command and Result models — the execution contract.

Commands are concrete argument vectors produced by the translator.
Results are what the dispatcher hands back, one per Command. The
dispatcher never raises for a backend's misfortune: a failed exit,
a missing program or a timeout all end up here.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from upm.core.models.action import Action


class Command(BaseModel):
    """A backend-specific argument vector ready for execution."""

    model_config = ConfigDict(frozen=True)

    backend: str                    # originating backend name
    argv: tuple[str, ...]           # argv[0] is the backend executable
    privilege: bool = False         # wrap with the escalation prefix
    action: Action
    packages: tuple[str, ...] = ()  # names as substituted into argv

    def display(self) -> str:
        """Human-readable rendering of the argument vector."""
        return " ".join(self.argv)


class ResultStatus(StrEnum):
    """Outcome of one Command."""

    OK = "ok"
    FAILED = "failed"                   # ran, exited non-zero
    LAUNCH_FAILED = "launch-failed"     # could not be started at all
    TIMED_OUT = "timed-out"
    NOT_APPLICABLE = "not-applicable"   # backend lacks the action


class Result(BaseModel):
    """Outcome of executing one Command (or of not being able to)."""

    model_config = ConfigDict(frozen=True)

    backend: str
    status: ResultStatus
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    argv: tuple[str, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the backend ran and exited zero."""
        return self.status == ResultStatus.OK

    @property
    def failed(self) -> bool:
        """Whether this result should count as a failure."""
        return self.status in (
            ResultStatus.FAILED,
            ResultStatus.LAUNCH_FAILED,
            ResultStatus.TIMED_OUT,
        )

    @property
    def applicable(self) -> bool:
        return self.status != ResultStatus.NOT_APPLICABLE

    @classmethod
    def completed(
        cls,
        backend: str,
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
        **kwargs: Any,
    ) -> Result:
        """Create a result for a process that ran to completion."""
        return cls(
            backend=backend,
            status=ResultStatus.OK if exit_code == 0 else ResultStatus.FAILED,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            **kwargs,
        )

    @classmethod
    def launch_failure(cls, backend: str, error: str, **kwargs: Any) -> Result:
        """Create a result for a process that could not be started."""
        return cls(
            backend=backend,
            status=ResultStatus.LAUNCH_FAILED,
            error=error,
            **kwargs,
        )

    @classmethod
    def timeout(cls, backend: str, seconds: float, **kwargs: Any) -> Result:
        """Create a result for a process killed after its time budget."""
        return cls(
            backend=backend,
            status=ResultStatus.TIMED_OUT,
            error=f"Command timed out after {seconds:g}s",
            **kwargs,
        )

    @classmethod
    def not_applicable(cls, backend: str, action: Action) -> Result:
        """Create a marker for a backend that does not support the action."""
        return cls(
            backend=backend,
            status=ResultStatus.NOT_APPLICABLE,
            error=f"{backend} does not support '{action}'",
        )


class ResultSet(BaseModel):
    """Aggregated results for one Intent, in deterministic order.

    A cancelled set never carries results: an Intent either completes
    or is abandoned as a whole.
    """

    model_config = ConfigDict(frozen=True)

    action: Action | None = None
    results: tuple[Result, ...] = ()
    cancelled: bool = False

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def applicable(self) -> list[Result]:
        """Results for Commands that were actually dispatched."""
        return [r for r in self.results if r.applicable]

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def no_capable_backend(self) -> bool:
        """True when nothing was dispatched because no backend could."""
        return not self.cancelled and not self.applicable

    @property
    def status(self) -> str:
        if self.cancelled:
            return "cancelled"
        if self.no_capable_backend:
            return "unsupported"
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    def for_backend(self, name: str) -> list[Result]:
        """All results attributed to one backend."""
        return [r for r in self.results if r.backend == name]

    def to_dict(self) -> dict:
        return {
            "action": self.action.value if self.action else None,
            "status": self.status,
            "cancelled": self.cancelled,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "results": [r.model_dump(mode="json") for r in self.results],
        }
