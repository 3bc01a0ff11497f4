"""
Intent translator — turns one Intent into concrete Commands.

Pure and data-driven: everything backend-specific lives in the
descriptors (templates, arity, package policy, aliases). The only
host knowledge comes in through the ActiveBackendSet argument.

Flow:
    intent → capable active backends → expand templates → commands
"""

from __future__ import annotations

import logging

from upm.backends.prober import ActiveBackendSet
from upm.core.models.action import Intent
from upm.core.models.backend import (
    PLACEHOLDER,
    Arity,
    BackendDescriptor,
    CommandTemplate,
    PackagePolicy,
)
from upm.core.models.command import Command

logger = logging.getLogger(__name__)


def _expand(template: CommandTemplate, packages: tuple[str, ...]) -> tuple[str, ...]:
    """Replace the placeholder token with zero or more package tokens."""
    args: list[str] = []
    for arg in template.args:
        if arg == PLACEHOLDER:
            args.extend(packages)
        else:
            args.append(arg)
    return tuple(args)


def _package_groups(
    backend: BackendDescriptor,
    template: CommandTemplate,
    packages: tuple[str, ...],
) -> list[tuple[str, ...]]:
    """Split packages into one group per invocation.

    - arity none: a single invocation without packages
    - arity many: a single invocation with every package
    - arity one: one invocation per package, unless the backend's
      policy is all-in-one
    """
    if template.arity == Arity.NONE:
        if packages:
            logger.debug(
                "%s takes no package names here; ignoring %s",
                backend.name, list(packages),
            )
        return [()]

    if (
        template.arity == Arity.ONE
        and len(packages) > 1
        and backend.package_policy == PackagePolicy.PER_PACKAGE
    ):
        return [(p,) for p in packages]

    return [packages]


def translate(intent: Intent, active: ActiveBackendSet) -> list[Command]:
    """Build the Commands that satisfy an Intent on the active backends.

    Commands come out in active-set order, and per backend in the
    order of the Intent's package names.

    Returns:
        The Commands; empty when no active backend supports the action.
    """
    commands: list[Command] = []

    for backend in active.backends:
        template = backend.template(intent.action)
        if template is None:
            logger.debug("%s has no '%s' action, skipping", backend.name, intent.action)
            continue

        names = tuple(backend.resolve_name(p) for p in intent.packages)
        privilege = backend.privilege if template.privileged is None else template.privileged

        for group in _package_groups(backend, template, names):
            commands.append(
                Command(
                    backend=backend.name,
                    argv=(backend.executable, *_expand(template, group)),
                    privilege=privilege,
                    action=intent.action,
                    packages=group,
                )
            )

    logger.debug(
        "Translated %s %s into %d commands",
        intent.action, list(intent.packages), len(commands),
    )
    return commands
