"""
Menu use case — the interactive installer loop.

    SHOW_MENU → READ_CHOICE → DISPATCH → SHOW_MENU ... → EXIT (choice 0)

Input that is not a number is rejected without dispatching anything.
Choice 9 asks once more before walking every package in declaration
order (each package still asks its own question).

The loop is the only place that decides what a failed package means
for the session: by default it reports and carries on; with
``abort_on_failure`` it stops and returns exit code 1.  The cache size
check runs whenever the loop ends.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import click

from fxdev.core.context import InstallerContext
from fxdev.core.models.outcome import InstallOutcome
from fxdev.core.persistence.cache_store import EvictionReport
from fxdev.core.services.installers import INSTALLERS, PACKAGE_ORDER

logger = logging.getLogger(__name__)

INSTALL_ALL = 9
EXIT = 0

_RULE_TITLE = "-------------------- Installer Menu --------------------"
_RULE = "--------------------------------------------------------"


@dataclass
class MenuResult:
    """What happened during one menu session."""

    outcomes: list[InstallOutcome] = field(default_factory=list)
    exit_code: int = 0
    aborted: bool = False
    eviction: EvictionReport | None = None

    @property
    def installed(self) -> list[str]:
        return [o.package for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[str]:
        return [o.package for o in self.outcomes if o.failed]

    def to_dict(self) -> dict:
        return {
            "exit_code": self.exit_code,
            "aborted": self.aborted,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "eviction": self.eviction.to_dict() if self.eviction else None,
        }


def render_menu() -> str:
    lines = [_RULE_TITLE]
    for number, name in enumerate(PACKAGE_ORDER, start=1):
        lines.append(f"{number}. {INSTALLERS[name].menu_label}")
    lines.append(f"{INSTALL_ALL}. Install All Packages")
    lines.append(f"{EXIT}. Exit")
    lines.append(_RULE)
    return "\n".join(lines)


def _prompt_choice() -> str:
    return click.prompt(
        "Enter your choice (0 to Exit)", default="", show_default=False
    )


def run_menu(
    ctx: InstallerContext,
    read_choice: Callable[[], str] | None = None,
) -> MenuResult:
    """Run the menu until the user exits (or a failure aborts it)."""
    read_choice = read_choice or _prompt_choice
    result = MenuResult()

    while True:
        ctx.echo(render_menu())
        choice = read_choice().strip()

        if not (choice.isascii() and choice.isdigit()):
            ctx.echo("Invalid option. Please enter a number.")
            continue

        number = int(choice)
        if number == EXIT:
            ctx.echo("Exiting installer. Goodbye!")
            break

        if 1 <= number <= len(PACKAGE_ORDER):
            names = [PACKAGE_ORDER[number - 1]]
        elif number == INSTALL_ALL:
            if not ctx.confirm("Install all packages"):
                ctx.echo("Install all cancelled.")
                continue
            names = list(PACKAGE_ORDER)
        else:
            ctx.echo("Invalid option. Please try again.")
            continue

        if not _dispatch(ctx, names, result):
            result.aborted = True
            result.exit_code = 1
            break

    result.eviction = ctx.cache.evict_if_over_limit()
    return result


def _dispatch(ctx: InstallerContext, names: list[str], result: MenuResult) -> bool:
    """Run installers in order. Returns False when the session must stop."""
    for name in names:
        outcome = INSTALLERS[name](ctx).run()
        result.outcomes.append(outcome)

        if outcome.failed:
            logger.warning("%s failed (%s): %s", name, outcome.failure_kind, outcome.message)
            if ctx.config.abort_on_failure:
                ctx.log(f"Aborting session after {name} failure", echo=True)
                return False
    return True
