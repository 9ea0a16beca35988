"""
PackageInstaller — the lifecycle every package goes through.

    PROMPT ─ declined ─→ SKIPPED
       │
       └→ REPO_CHECK ─ marker found ─┐
              │                      │
              └→ REPO_SETUP ─────────┤
                                     └→ INSTALL → VERIFY → DONE
    any step raising InstallerError ───────────────────→ FAILED

Subclasses describe one package through class attributes and override
``setup_repo``, ``install`` and ``verify``.  ``run`` owns the lifecycle
and always returns an ``InstallOutcome``; nothing in here exits the
process.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, ClassVar

from fxdev.core.context import InstallerContext
from fxdev.core.errors import InstallerError, InstallFailure, TransientNetworkFailure
from fxdev.core.models.outcome import FailureKind, InstallOutcome
from fxdev.core.services import apt

logger = logging.getLogger(__name__)


class PackageInstaller:
    """Base class for one installable package.

    Class attributes:
        name: Menu / CLI identifier (``redis-server``).
        label: Human name used in prompts and log lines (``Redis``).
        menu_label: Text of the menu line.
        repo_marker: String whose presence in the apt sources directory
            means the package repository is already configured.  None for
            packages without a repository step.
        cache_key: ``component:filename`` of the artifact the package
            keeps in the download cache, if any.
    """

    name: ClassVar[str] = ""
    label: ClassVar[str] = ""
    menu_label: ClassVar[str] = ""
    repo_marker: ClassVar[str | None] = None
    cache_key: ClassVar[str | None] = None

    def __init__(self, ctx: InstallerContext):
        self.ctx = ctx
        self._steps: list[str] = []

    @property
    def prompt(self) -> str:
        return f"Install {self.label}?"

    # ── Lifecycle ───────────────────────────────────────────────

    def run(self, *, assume_yes: bool = False) -> InstallOutcome:
        """Prompt, then set up, install and verify the package."""
        self._steps = []

        if not assume_yes and not self.ctx.confirm(self.prompt):
            self.ctx.log(f"Skipping {self.label} installation")
            return InstallOutcome.skip(self.name, reason="declined")

        self.ctx.log(f"Installing {self.label}...", echo=True)
        started_at = datetime.now(UTC).isoformat()
        start = time.monotonic()

        try:
            if self.repo_marker is not None:
                if self.repo_is_configured():
                    self.ctx.log(f"{self.label} repository already configured")
                else:
                    self.ctx.log(f"Adding {self.label} repository...")
                    self.step("repo_setup")
                    self.setup_repo()
            self.step("install")
            self.install()
            self.step("verify")
            self.verify()
        except InstallerError as exc:
            exc.package = exc.package or self.name
            return self._failed(exc.message, exc.kind, started_at, start)
        except OSError as exc:
            # cache or home directory not writable
            return self._failed(str(exc), "install_failure", started_at, start)

        self.ctx.log(f"{self.label} installed successfully", echo=True)
        return InstallOutcome.success(
            self.name,
            steps=list(self._steps),
            started_at=started_at,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    def _failed(
        self, message: str, kind: FailureKind, started_at: str, start: float
    ) -> InstallOutcome:
        self.ctx.log(f"{self.label} installation failed: {message}", echo=True)
        return InstallOutcome.failure(
            self.name,
            message,
            kind=kind,
            steps=list(self._steps),
            started_at=started_at,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    def repo_is_configured(self) -> bool:
        assert self.repo_marker is not None
        return apt.repo_configured(self.ctx.config.apt_sources_dir, self.repo_marker)

    def setup_repo(self) -> None:
        """Add signing key and package source. Only called when missing."""

    def install(self) -> None:
        raise NotImplementedError

    def verify(self) -> None:
        """Optional post-install check."""

    # ── Helpers for subclasses ──────────────────────────────────

    def step(self, name: str) -> None:
        self._steps.append(name)
        logger.debug("%s: %s", self.name, name)

    def command(
        self,
        cmd: Sequence[str] | str,
        *,
        what: str,
        retry: bool = False,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Run a command that must succeed.

        Raises:
            TransientNetworkFailure: When a retried command keeps failing.
            InstallFailure: When a single-shot command fails.
        """
        if retry:
            result = self.ctx.retry(lambda: self.ctx.run(cmd, **kwargs), what=what)
            if not result["ok"]:
                raise TransientNetworkFailure(_failure_text(what, result))
            return result

        result = self.ctx.run(cmd, **kwargs)
        if not result["ok"]:
            raise InstallFailure(_failure_text(what, result))
        return result

    def attempt(self, cmd: Sequence[str] | str, *, what: str, **kwargs: Any) -> bool:
        """Run a command whose failure is only logged."""
        result = self.ctx.run(cmd, **kwargs)
        if not result["ok"]:
            self.ctx.log(_failure_text(what, result))
        return bool(result["ok"])

    def show_version(self, cmd: Sequence[str]) -> None:
        result = self.ctx.run(cmd)
        if result["ok"] and result.get("stdout"):
            self.ctx.echo(result["stdout"].strip().splitlines()[0])


def _failure_text(what: str, result: dict[str, Any]) -> str:
    detail = (result.get("stderr") or result.get("error") or "").strip()
    if detail:
        return f"Failed to {what}: {detail.splitlines()[-1]}"
    return f"Failed to {what}"
