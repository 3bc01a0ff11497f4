"""
upm — CLI entrypoint.

Usage:
    upm --help
    upm install ripgrep
    upm search left-pad --manager npm
    upm update
    upm managers --all
"""

from __future__ import annotations

from pathlib import Path

import click

from upm import __version__
from upm.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="upm")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.yml (default: $UPM_CONFIG or ~/.config/upm/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Universal package manager — one interface to every package manager on this host."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


# ── Register commands from upm/ui/cli/ ──────────────────────────

from upm.ui.cli.actions import install, list_, remove, search, update  # noqa: E402
from upm.ui.cli.managers import config, managers  # noqa: E402

cli.add_command(install)
cli.add_command(remove)
cli.add_command(update)
cli.add_command(search)
cli.add_command(list_)
cli.add_command(managers)
cli.add_command(config)


if __name__ == "__main__":
    cli()
