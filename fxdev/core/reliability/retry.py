"""
Retry helper — fixed-count, fixed-delay retries for network steps.

Every download, ``apt-get update`` and clone goes through
``run_with_retry``.  The delay never grows and errors are not
classified: a permission error and a timeout are retried
the same way.  After the last attempt the failure is handed back to the
caller, which decides what it means for the package being installed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fxdev.core.persistence.install_log import InstallLog

logger = logging.getLogger(__name__)

Operation = Callable[[], dict[str, Any]]


@dataclass
class RetryPolicy:
    """How many times to try, and how long to wait in between.

    Args:
        attempts: Total attempts, including the first one.
        delay: Seconds to wait after each failed attempt.
        sleep: Sleep function (injectable for tests).
    """

    attempts: int = 3
    delay: float = 5.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")


def run_with_retry(
    operation: Operation,
    policy: RetryPolicy,
    *,
    what: str,
    install_log: InstallLog | None = None,
) -> dict[str, Any]:
    """Run ``operation`` until it reports ``ok`` or attempts run out.

    Args:
        operation: Callable returning a result dict with an ``ok`` key
            (the ``CommandRunner.run`` shape).
        policy: Attempt count and delay.
        what: Short description used in log lines ("download Redis keyring").
        install_log: Where retry messages are recorded.

    Returns:
        The last result dict, with ``attempts`` set to the number of tries.
    """
    result: dict[str, Any] = {"ok": False, "error": "not attempted"}

    for attempt in range(1, policy.attempts + 1):
        try:
            result = operation()
        except Exception as e:
            logger.exception("Unexpected error during %s", what)
            result = {"ok": False, "error": str(e)}

        result["attempts"] = attempt
        if result.get("ok"):
            if attempt > 1:
                logger.info("%s succeeded on attempt %d", what, attempt)
            return result

        logger.debug(
            "%s failed (attempt %d/%d): %s",
            what, attempt, policy.attempts, result.get("error", ""),
        )
        if attempt < policy.attempts:
            _record(
                install_log,
                f"Failed to {what}. Retrying in {policy.delay:g} seconds...",
            )
            policy.sleep(policy.delay)

    _record(install_log, f"Failed to {what} after {policy.attempts} attempts.")
    return result


def _record(install_log: InstallLog | None, message: str) -> None:
    if install_log is not None:
        install_log.log(message, level=logging.WARNING)
    else:
        logger.warning(message)
