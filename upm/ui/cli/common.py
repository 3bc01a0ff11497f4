"""
Shared CLI plumbing — settings, registry and probing for one invocation.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import click

from upm.backends.prober import ActiveBackendSet, AvailabilityProber
from upm.backends.registry import BackendRegistry, build_registry
from upm.core.config.loader import ConfigError, load_settings
from upm.core.engine.dispatcher import Dispatcher
from upm.core.models.settings import Settings

# Exit status for configuration errors
EXIT_CONFIG = 2


@dataclass
class Runtime:
    """Everything a command needs, computed once per process."""

    settings: Settings
    registry: BackendRegistry
    active: ActiveBackendSet

    def dispatcher(self, sequential: bool = False) -> Dispatcher:
        return Dispatcher(
            parallel=self.settings.parallel and not sequential,
            max_workers=self.settings.max_workers,
            escalation=self.settings.escalation,
            timeout=self.settings.timeout,
        )


def load_runtime(ctx: click.Context) -> Runtime:
    """Load config, build the registry and probe the host (once).

    Configuration errors are fatal: report and exit with status 2.
    """
    obj = ctx.ensure_object(dict)
    runtime: Runtime | None = obj.get("runtime")
    if runtime is not None:
        return runtime

    config_path: Path | None = obj.get("config_path")
    try:
        settings = load_settings(config_path)
        registry = build_registry(settings)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(EXIT_CONFIG)

    active = AvailabilityProber().probe(registry)
    runtime = Runtime(settings=settings, registry=registry, active=active)
    obj["runtime"] = runtime
    return runtime


def select_backends(
    runtime: Runtime,
    managers: tuple[str, ...],
    excluded: tuple[str, ...],
) -> ActiveBackendSet:
    """Apply config and command-line manager filters to the active set.

    Command-line ``--manager`` replaces the configured include list;
    exclusions from both sources add up.
    """
    unknown = sorted((set(managers) | set(excluded)) - set(runtime.registry.names()))
    if unknown:
        raise click.UsageError(f"Unknown package manager: {', '.join(unknown)}")

    for name in managers:
        if name not in runtime.active:
            click.secho(f"⚠️  {name} is not available on this host", fg="yellow", err=True)

    include = managers or tuple(runtime.settings.managers.include)
    exclude = (*runtime.settings.managers.exclude, *excluded)
    return runtime.active.restrict(include=include, exclude=exclude)
