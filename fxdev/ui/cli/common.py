"""
Shared CLI plumbing — turn the click context into an InstallerContext.

Tests inject a fake runner (and scripted answers) through ``obj``:

    runner.invoke(cli, [...], obj={"runner": FakeRunner(), "sleep": lambda s: None})
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from fxdev.core.config.loader import ConfigError, load_config
from fxdev.core.context import InstallerContext


def build_installer_context(ctx: click.Context) -> InstallerContext:
    """Load config and assemble the session context, exiting on bad config."""
    obj = ctx.ensure_object(dict)
    if "installer_context" in obj:
        return obj["installer_context"]

    config_path: Path | None = obj.get("config_path")
    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    installer_ctx = InstallerContext.create(
        config,
        runner=obj.get("runner"),
        confirm=obj.get("confirm"),
        sleep=obj.get("sleep"),
    )
    obj["installer_context"] = installer_ctx
    return installer_ctx
