"""
Pre-flight — bring the base system up to date before the menu opens.

Runs ``apt update`` / ``upgrade``, installs the base build tools and the
everyday terminal apps, then tidies apt's caches.  Any failure here
raises ``InstallFailure`` (or ``TransientNetworkFailure``); the CLI
treats that as fatal for the session.
"""

from __future__ import annotations

import logging

from fxdev.core.context import InstallerContext
from fxdev.core.errors import InstallFailure
from fxdev.core.services import apt

logger = logging.getLogger(__name__)

BASE_PACKAGES = ("net-tools", "htop", "build-essential", "software-properties-common")

TERMINAL_APPS = (
    "curl", "bash", "make", "git", "tmux", "neofetch",
    "vim", "fzf", "ripgrep", "fd-find", "jq",
)


def run_preflight(ctx: InstallerContext) -> None:
    """Update the system and install prerequisites.

    Raises:
        InstallerError: When an update or install step fails.
    """
    ctx.echo("\nInstalling pre-requisites...")
    ctx.log("Running pre-flight system update")

    apt.update(ctx, spinner=True)

    result = ctx.run(["apt-get", "--yes", "upgrade"], sudo=True)
    if not result["ok"]:
        raise InstallFailure(f"System upgrade failed: {result.get('error', '')}")

    apt.install(ctx, BASE_PACKAGES, what="install base packages", recommends=False)
    apt.install(ctx, TERMINAL_APPS, what="install terminal apps")

    ctx.echo("\nRunning cleanups...")
    _tidy(ctx)
    ctx.log("Pre-flight completed")


def _tidy(ctx: InstallerContext) -> None:
    for cmd in (["apt-get", "autoremove", "--yes"], ["apt-get", "clean"]):
        result = ctx.run(cmd, sudo=True)
        if not result["ok"]:
            logger.warning("%s failed: %s", " ".join(cmd), result.get("error", ""))
