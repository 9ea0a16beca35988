"""
Installer context — everything an installer needs, in one object.

Built once per session by the CLI and passed to every installer, the
pre-flight routine and the menu loop.  Tests build their own with a
temporary home, a recording runner and scripted answers.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import click

from fxdev.core.models.config import InstallerConfig
from fxdev.core.persistence.cache_store import CacheManager
from fxdev.core.persistence.install_log import InstallLog
from fxdev.core.reliability.retry import Operation, RetryPolicy, run_with_retry
from fxdev.core.services.shell import CommandRunner

_YES = ("y", "yes")


def ask_yes_no(question: str) -> bool:
    """Prompt on the terminal; only ``y``/``yes`` count as consent."""
    answer = click.prompt(
        f"{question} (y/n)", default="", show_default=False, prompt_suffix=" "
    )
    return answer.strip().lower() in _YES


@dataclass
class InstallerContext:
    """Shared services for one installer session."""

    config: InstallerConfig
    cache: CacheManager
    install_log: InstallLog
    runner: CommandRunner
    retry_policy: RetryPolicy
    confirm: Callable[[str], bool] = ask_yes_no
    echo: Callable[[str], None] = click.echo

    @classmethod
    def create(
        cls,
        config: InstallerConfig,
        *,
        runner: CommandRunner | None = None,
        confirm: Callable[[str], bool] | None = None,
        echo: Callable[[str], None] | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> InstallerContext:
        install_log = InstallLog(config.log_path)
        cache = CacheManager(
            config.cache_path,
            limit_bytes=config.cache_limit_bytes,
            policy=config.eviction_policy,
            install_log=install_log,
        )
        policy = RetryPolicy(attempts=config.retry_attempts, delay=config.retry_delay)
        if sleep is not None:
            policy.sleep = sleep
        return cls(
            config=config,
            cache=cache,
            install_log=install_log,
            runner=runner or CommandRunner(default_timeout=config.command_timeout),
            retry_policy=policy,
            confirm=confirm or ask_yes_no,
            echo=echo or click.echo,
        )

    def log(self, message: str, *, echo: bool = False) -> None:
        """Record ``message`` in the installation log (and optionally print it)."""
        self.install_log.log(message)
        if echo:
            self.echo(message)

    def run(self, cmd: Sequence[str] | str, **kwargs: Any) -> dict[str, Any]:
        return self.runner.run(cmd, **kwargs)

    def retry(self, operation: Operation, *, what: str) -> dict[str, Any]:
        return run_with_retry(
            operation, self.retry_policy, what=what, install_log=self.install_log
        )
