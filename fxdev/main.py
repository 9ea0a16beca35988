"""
fxdev — CLI entrypoint (installed as ``fxd``).

Usage:
    fxd                 # interactive menu
    fxd menu --skip-preflight
    fxd packages
    fxd install redis-server terraform --yes
    fxd cache status
    fxd log -n 50
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from fxdev import __version__
from fxdev.core.observability.logging_config import resolve_level, setup_logging
from fxdev.ui.cli.common import build_installer_context


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="fxd")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to an installer config file (YAML).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """fxdev — install developer packages into this workspace."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(
            debug=debug,
            verbose=verbose,
            quiet=quiet,
            env_level=os.environ.get("FXDEV_LOG_LEVEL"),
        ),
        log_file=os.environ.get("FXDEV_LOG_FILE"),
        log_file_level=os.environ.get("FXDEV_LOG_FILE_LEVEL"),
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


@cli.command()
@click.option("--skip-preflight", is_flag=True, help="Don't update the system first.")
@click.pass_context
def menu(ctx: click.Context, skip_preflight: bool) -> None:
    """Open the interactive installer menu."""
    from fxdev.core.errors import InstallerError
    from fxdev.core.services.preflight import run_preflight
    from fxdev.core.use_cases.menu import run_menu

    installer_ctx = build_installer_context(ctx)

    if not skip_preflight:
        try:
            run_preflight(installer_ctx)
        except InstallerError as e:
            installer_ctx.log(f"Pre-flight failed: {e.message}")
            click.secho(f"❌ Pre-flight failed: {e.message}", fg="red")
            sys.exit(1)

    result = run_menu(installer_ctx)

    if result.eviction and result.eviction.triggered:
        click.echo(f"Cache cleaned: {len(result.eviction.evicted)} artifact(s) removed")
    if result.outcomes:
        ok = len(result.installed)
        click.secho(
            f"\nInstalled {ok}, failed {len(result.failed)}.",
            fg="red" if result.failed else "green",
        )
    sys.exit(result.exit_code)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def packages(as_json: bool) -> None:
    """List supported packages in install order."""
    from fxdev.core.services.installers import INSTALLERS, PACKAGE_ORDER

    if as_json:
        click.echo(json.dumps([
            {
                "name": name,
                "label": INSTALLERS[name].label,
                "repo_marker": INSTALLERS[name].repo_marker,
            }
            for name in PACKAGE_ORDER
        ], indent=2))
        return

    for number, name in enumerate(PACKAGE_ORDER, start=1):
        click.echo(f"  {number}. {name:<14} {INSTALLERS[name].label}")


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--yes", "-y", is_flag=True, help="Don't ask before each package.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(ctx: click.Context, names: tuple[str, ...], yes: bool, as_json: bool) -> None:
    """Install packages by name (``all`` for every package).

    Examples:

        fxd install terraform ansible

        fxd install all --yes
    """
    from fxdev.core.use_cases.install import install_packages

    installer_ctx = build_installer_context(ctx)
    if as_json:
        # keep stdout parseable
        installer_ctx.echo = lambda message: None
    result = install_packages(installer_ctx, list(names), assume_yes=yes)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.echo()
    for outcome in result.outcomes:
        if outcome.ok:
            click.secho(f"   ✓ {outcome.package}", fg="green")
        elif outcome.skipped:
            click.secho(f"   ⊘ {outcome.package} (skipped)", fg="yellow")
        else:
            click.secho(f"   ✗ {outcome.package}: {outcome.message}", fg="red")

    if not result.ok:
        sys.exit(1)


@cli.command("log")
@click.option("-n", "count", default=20, show_default=True, help="Number of entries.")
@click.pass_context
def show_log(ctx: click.Context, count: int) -> None:
    """Show recent installation log entries."""
    installer_ctx = build_installer_context(ctx)
    entries = installer_ctx.install_log.read_recent(count)
    if not entries:
        click.echo(f"No entries in {installer_ctx.install_log.path}")
        return
    for entry in entries:
        click.echo(entry.to_line().rstrip("\n"))


# ── Register sub-command groups from fxdev/ui/cli/ ────────────────

from fxdev.ui.cli.cache import cache  # noqa: E402

cli.add_command(cache)


if __name__ == "__main__":
    cli()
