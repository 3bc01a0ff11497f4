"""
CLI commands for the package actions — install, remove, update, search, list.

Thin wrappers over ``upm.core.use_cases.run_intent``. Each command
builds a validated Intent, narrows the active backends, runs it and
renders the ResultSet.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from typing import Any

import click
from pydantic import ValidationError

from upm.core.models.action import Action, Intent
from upm.core.models.command import Result, ResultStatus
from upm.core.use_cases.run_intent import IntentRunResult, run_intent
from upm.ui.cli.common import load_runtime, select_backends

# Lines of backend output shown per result unless --verbose
_OUTPUT_TAIL = 10

# Actions whose output is the answer, shown in full
_FULL_OUTPUT = (Action.SEARCH, Action.LIST)


_ACTION_OPTIONS = (
    click.option(
        "--manager", "-m", "managers", multiple=True,
        help="Only use this package manager (repeatable).",
    ),
    click.option(
        "--exclude-manager", "-x", "excluded", multiple=True,
        help="Never use this package manager (repeatable).",
    ),
    click.option("--dry-run", is_flag=True, help="Show the commands but don't run them."),
    click.option("--sequential", is_flag=True, help="Run backends one after another."),
    click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON."),
)


def _action_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every action command."""
    for option in reversed(_ACTION_OPTIONS):
        fn = option(fn)
    return fn


def _make_intent(action: Action, packages: tuple[str, ...]) -> Intent:
    try:
        return Intent(action=action, packages=packages)
    except ValidationError as e:
        messages = "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())
        raise click.BadParameter(messages, param_hint="PACKAGES") from e


def _run(
    ctx: click.Context,
    action: Action,
    packages: tuple[str, ...],
    managers: tuple[str, ...],
    excluded: tuple[str, ...],
    dry_run: bool,
    sequential: bool,
    as_json: bool,
) -> None:
    intent = _make_intent(action, packages)
    runtime = load_runtime(ctx)
    active = select_backends(runtime, managers, excluded)

    result = run_intent(
        intent,
        active=active,
        dispatcher=runtime.dispatcher(sequential=sequential),
        dry_run=dry_run,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render(ctx, result)

    sys.exit(result.exit_code)


# ── Rendering ───────────────────────────────────────────────────


def _render(ctx: click.Context, result: IntentRunResult) -> None:
    intent = result.intent
    verbose = ctx.obj.get("verbose", False)
    label = " ".join(intent.packages)

    if result.cancelled:
        click.secho(f"\n⛔ {intent.action} cancelled — no results reported", fg="red", bold=True)
        return

    if not result.active:
        click.secho("⚠️  No package managers available on this host", fg="yellow")
        return

    if not result.commands:
        click.secho(f"⚠️  No available package manager supports '{intent.action}'", fg="yellow")
        click.echo(f"   Active: {', '.join(result.active)}")
        return

    mode = "[dry-run] " if result.dry_run else ""
    click.secho(f"\n⚡ {mode}{intent.action} {label}".rstrip(), fg="cyan", bold=True)
    click.echo(f"   Backends: {', '.join(result.active)} | Commands: {len(result.commands)}")
    click.echo()

    if result.dry_run:
        for command in result.commands:
            prefix = "[privileged] " if command.privilege else ""
            click.echo(f"   • {command.backend}: {prefix}{command.display()}")
        click.echo()
        return

    full = intent.action in _FULL_OUTPUT or verbose
    for item in result.result_set.results:
        _render_result(item, full)

    result_set = result.result_set
    applicable = len(result_set.applicable)
    status_color = {"ok": "green", "partial": "yellow"}.get(result_set.status, "red")
    click.echo()
    click.secho(
        f"   Result: {result_set.succeeded}/{applicable} succeeded",
        fg=status_color,
        bold=True,
    )
    click.echo()


def _render_result(item: Result, full: bool) -> None:
    timing = f" ({item.duration_ms}ms)" if item.duration_ms else ""

    if item.status == ResultStatus.NOT_APPLICABLE:
        click.secho(f"   ⊘ {item.backend} ", fg="bright_black", nl=False)
        click.echo("(not supported)")
        return

    if item.ok:
        click.secho(f"   ✓ {item.backend}", fg="green", nl=False)
        click.echo(timing)
        _echo_lines(item.stdout, full)
        return

    if item.status == ResultStatus.FAILED:
        click.secho(f"   ✗ {item.backend}", fg="red", nl=False)
        click.echo(f" exit {item.exit_code}{timing}")
        _echo_lines(item.stdout, full)
        _echo_lines(item.stderr, full)
        return

    # launch failure / timeout: the backend never finished
    click.secho(f"   ⚠ {item.backend} ", fg="yellow", nl=False)
    click.echo(item.error or item.status.value)
    _echo_lines(item.stderr, full)


def _echo_lines(text: str, full: bool) -> None:
    lines = text.rstrip("\n").splitlines()
    if not full and len(lines) > _OUTPUT_TAIL:
        click.echo(f"     │ … {len(lines) - _OUTPUT_TAIL} more lines")
        lines = lines[-_OUTPUT_TAIL:]
    for line in lines:
        click.echo(f"     │ {line}")


# ── Commands ────────────────────────────────────────────────────


@click.command()
@click.argument("packages", nargs=-1, required=True)
@_action_options
@click.pass_context
def install(ctx: click.Context, packages: tuple[str, ...], **options: Any) -> None:
    """Install packages with every available package manager.

    Examples:

        upm install ripgrep

        upm install left-pad -m npm
    """
    _run(ctx, Action.INSTALL, packages, **options)


@click.command()
@click.argument("packages", nargs=-1, required=True)
@_action_options
@click.pass_context
def remove(ctx: click.Context, packages: tuple[str, ...], **options: Any) -> None:
    """Remove packages."""
    _run(ctx, Action.REMOVE, packages, **options)


@click.command()
@click.argument("packages", nargs=-1)
@_action_options
@click.pass_context
def update(ctx: click.Context, packages: tuple[str, ...], **options: Any) -> None:
    """Update installed packages (all of them when none are named)."""
    _run(ctx, Action.UPDATE, packages, **options)


@click.command()
@click.argument("terms", nargs=-1, required=True)
@_action_options
@click.pass_context
def search(ctx: click.Context, terms: tuple[str, ...], **options: Any) -> None:
    """Search every available package manager."""
    _run(ctx, Action.SEARCH, terms, **options)


@click.command("list")
@_action_options
@click.pass_context
def list_(ctx: click.Context, **options: Any) -> None:
    """List installed packages per package manager."""
    _run(ctx, Action.LIST, (), **options)
