"""
Run intent use case — one user request, end to end.

This is the top-level orchestrator for install/remove/update/search/
list: it translates the Intent against the active backends, dispatches
the Commands, and assembles the final ResultSet in active-backend
order, with a not-applicable marker for every active backend that
lacks the action.

Flow:
    intent → translate → dispatch → order by active backend → report
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from upm.backends.prober import ActiveBackendSet
from upm.core.engine.dispatcher import Dispatcher
from upm.core.engine.translator import translate
from upm.core.models.action import Intent
from upm.core.models.command import Command, Result, ResultSet

logger = logging.getLogger(__name__)


@dataclass
class IntentRunResult:
    """Result of running one Intent."""

    intent: Intent
    active: list[str] = field(default_factory=list)
    commands: list[Command] = field(default_factory=list)
    result_set: ResultSet = field(default_factory=ResultSet)
    dry_run: bool = False

    @property
    def cancelled(self) -> bool:
        return self.result_set.cancelled

    @property
    def exit_code(self) -> int:
        """Process exit status the CLI should use for this outcome."""
        if self.cancelled:
            return 130
        if self.dry_run:
            return 0 if self.commands else 1
        return 0 if self.result_set.status == "ok" else 1

    def to_dict(self) -> dict:
        return {
            "intent": self.intent.model_dump(mode="json"),
            "active_backends": self.active,
            "dry_run": self.dry_run,
            "commands": [c.model_dump(mode="json") for c in self.commands],
            "result": None if self.dry_run else self.result_set.to_dict(),
        }


def _order_results(
    intent: Intent,
    active: ActiveBackendSet,
    dispatched: ResultSet,
) -> ResultSet:
    """Interleave dispatched results with not-applicable markers.

    Dispatched results keep their command order within a backend;
    backends appear in active-set order.
    """
    by_backend: dict[str, list[Result]] = {}
    for result in dispatched.results:
        by_backend.setdefault(result.backend, []).append(result)

    ordered: list[Result] = []
    for backend in active.backends:
        if backend.supports(intent.action):
            ordered.extend(by_backend.get(backend.name, []))
        else:
            ordered.append(Result.not_applicable(backend.name, intent.action))

    return ResultSet(action=intent.action, results=tuple(ordered))


def run_intent(
    intent: Intent,
    *,
    active: ActiveBackendSet,
    dispatcher: Dispatcher,
    dry_run: bool = False,
    cancel_event: threading.Event | None = None,
) -> IntentRunResult:
    """Translate and execute an Intent on the active backends.

    Args:
        intent: The validated user request.
        active: Active backends for this run (already filtered).
        dispatcher: Configured dispatcher.
        dry_run: If True, translate only; nothing is executed.
        cancel_event: Optional event to abandon the run.

    Returns:
        IntentRunResult with the planned Commands and the ResultSet.
    """
    result = IntentRunResult(intent=intent, active=active.names(), dry_run=dry_run)

    commands = translate(intent, active)
    result.commands = commands

    if not commands:
        logger.info("No active backend supports '%s'", intent.action)
        result.result_set = _order_results(intent, active, ResultSet(action=intent.action))
        return result

    if dry_run:
        logger.info("[dry-run] %d commands planned", len(commands))
        result.result_set = ResultSet(action=intent.action)
        return result

    dispatched = dispatcher.execute(commands, cancel_event=cancel_event)
    if dispatched.cancelled:
        result.result_set = dispatched
        return result

    result.result_set = _order_results(intent, active, dispatched)
    logger.info(
        "%s: %d/%d succeeded",
        intent.action, result.result_set.succeeded, len(result.result_set.applicable),
    )
    return result
