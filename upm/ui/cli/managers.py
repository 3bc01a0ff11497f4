"""
CLI commands for inspecting package managers and configuration.

Thin wrappers over ``upm.core.use_cases.managers`` and the config loader.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from upm.ui.cli.common import EXIT_CONFIG, load_runtime


@click.command()
@click.option("--all", "show_all", is_flag=True, help="Include managers not found on this host.")
@click.option("--versions", is_flag=True, help="Ask each available manager for its version.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def managers(ctx: click.Context, show_all: bool, versions: bool, as_json: bool) -> None:
    """List the package managers available on this system."""
    from upm.core.use_cases.managers import list_managers

    runtime = load_runtime(ctx)
    result = list_managers(
        runtime.registry,
        runtime.active,
        include_inactive=show_all,
        versions=versions,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.active_count == 0 and not show_all:
        click.secho("⚠️  No package managers detected", fg="yellow")
        click.echo(f"   Known: {', '.join(runtime.registry.names())}")
        return

    click.secho(
        f"📦 Package Managers: {result.active_count}/{len(runtime.registry)} available",
        fg="cyan",
        bold=True,
    )
    for info in result.managers:
        icon = "✅" if info.active else "❌"
        version = f" {info.version}" if info.version else ""
        privilege = " 🔒" if info.privilege else ""
        click.echo(f"   {icon} {info.name}{version}{privilege}")
        if info.location:
            click.echo(f"      {info.location}")
        elif info.executable != info.name:
            click.echo(f"      ({info.executable} not found)")
        if ctx.obj.get("verbose") or show_all:
            click.echo(f"      Actions: {', '.join(info.actions) or 'none'}")
    click.echo()


@click.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate the config file and backend definitions."""
    from upm.backends.registry import build_registry
    from upm.core.config.loader import ConfigError, find_config_file, load_settings

    explicit: Path | None = ctx.obj.get("config_path")
    path, _ = find_config_file(explicit)

    error: str | None = None
    registry = None
    try:
        registry = build_registry(load_settings(explicit))
    except ConfigError as e:
        error = str(e)

    if as_json:
        click.echo(json.dumps({
            "valid": error is None,
            "config_path": str(path) if path else None,
            "error": error,
            "backends": registry.names() if registry else [],
        }, indent=2))
        sys.exit(0 if error is None else EXIT_CONFIG)

    if error is not None:
        click.secho("❌ Configuration error:", fg="red", bold=True)
        click.echo(f"   {error}")
        sys.exit(EXIT_CONFIG)

    assert registry is not None
    click.secho("✅ Configuration is valid", fg="green", bold=True)
    click.echo(f"   File: {path if path else '(none, using defaults)'}")
    click.echo(f"   Backends: {len(registry)}")
    click.echo()
