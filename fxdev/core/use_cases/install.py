"""
Install use case — run named installers without the menu.

Backs ``fxd install NAME...``.  Unknown names are rejected before any
installer runs.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from fxdev.core.context import InstallerContext
from fxdev.core.models.outcome import InstallOutcome
from fxdev.core.services.installers import PACKAGE_ORDER, get_installer

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Outcomes of a non-interactive install run."""

    outcomes: list[InstallOutcome] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not any(o.failed for o in self.outcomes)

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result
        result["ok"] = self.ok
        result["outcomes"] = [o.to_dict() for o in self.outcomes]
        return result


def install_packages(
    ctx: InstallerContext,
    names: Sequence[str],
    *,
    assume_yes: bool = False,
    stop_on_failure: bool | None = None,
) -> InstallResult:
    """Install ``names`` (``all`` expands to every package, in order).

    Args:
        names: Package names as listed by ``fxd packages``.
        assume_yes: Skip the per-package confirmation prompt.
        stop_on_failure: Stop at the first failure (default: the
            ``abort_on_failure`` config setting).
    """
    if stop_on_failure is None:
        stop_on_failure = ctx.config.abort_on_failure

    expanded: list[str] = []
    for name in names:
        if name == "all":
            expanded.extend(PACKAGE_ORDER)
            continue
        try:
            get_installer(name)
        except KeyError as e:
            return InstallResult(error=str(e.args[0]))
        expanded.append(name)

    result = InstallResult()
    for name in dict.fromkeys(expanded):
        outcome = get_installer(name)(ctx).run(assume_yes=assume_yes)
        result.outcomes.append(outcome)
        if outcome.failed and stop_on_failure:
            logger.info("Stopping after %s failure", name)
            break

    ctx.cache.evict_if_over_limit()
    return result
