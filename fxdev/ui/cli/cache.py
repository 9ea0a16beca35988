"""
CLI commands for the download cache.

Thin wrappers over ``fxdev.core.persistence.cache_store.CacheManager``.
"""

from __future__ import annotations

import json

import click

from fxdev.ui.cli.common import build_installer_context


def _mb(size: int) -> str:
    return f"{size / (1024 * 1024):.1f} MB"


@click.group()
def cache() -> None:
    """Download cache — status, evict, clear."""


@cache.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show cached artifacts and total cache size."""
    installer_ctx = build_installer_context(ctx)
    result = installer_ctx.cache.status()

    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    click.secho(f"📦 Cache: {result['cache_dir']}", fg="cyan", bold=True)
    color = "red" if result["over_limit"] else "green"
    click.secho(
        f"   Size: {_mb(result['total_size_bytes'])} / {_mb(result['limit_bytes'])}"
        f" ({result['policy']})",
        fg=color,
    )
    if not result["artifacts"]:
        click.echo("   No cached artifacts")
        return
    for artifact in result["artifacts"]:
        icon = "✅" if artifact["present"] else "❌"
        click.echo(f"   {icon} {artifact['key']:<50} {_mb(artifact['size_bytes'])}")


@cache.command()
@click.pass_context
def evict(ctx: click.Context) -> None:
    """Evict cached artifacts if the cache is over its size limit."""
    installer_ctx = build_installer_context(ctx)
    report = installer_ctx.cache.evict_if_over_limit()

    if not report.triggered:
        click.secho(f"✅ Cache within limit ({_mb(report.size_before)})", fg="green")
        return
    _print_report(report.evicted, report.failed)


@cache.command()
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation.")
@click.pass_context
def clear(ctx: click.Context, yes: bool) -> None:
    """Delete every indexed artifact and empty the index."""
    installer_ctx = build_installer_context(ctx)
    if not yes and not installer_ctx.confirm("Delete all cached installers"):
        click.echo("Cancelled.")
        return
    report = installer_ctx.cache.clear()
    _print_report(report.evicted, report.failed)


def _print_report(evicted: list[str], failed: list[str]) -> None:
    click.secho(f"🧹 Evicted {len(evicted)} artifact(s)", fg="cyan", bold=True)
    for key in evicted:
        click.echo(f"   • {key}")
    if failed:
        click.secho(f"⚠️  Could not delete {len(failed)}:", fg="yellow")
        for key in failed:
            click.echo(f"   • {key}")
