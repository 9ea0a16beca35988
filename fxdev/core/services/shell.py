"""
Command runner — the single place where installer subprocesses start.

Every apt, curl, git, gpg and make invocation goes through
``CommandRunner.run``.  It never raises for command failures: the
result is a dict, ``{"ok": True, "stdout": ..., "elapsed_ms": N}`` on
success or ``{"ok": False, "error": ..., ...}`` on failure, so callers
(and the retry helper) can treat every command the same way.

Privileged commands are prefixed with ``sudo`` unless the process is
already root.  The development container grants passwordless sudo to
its user, so no password is ever requested here.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from fxdev.core.services.spinner import Spinner

logger = logging.getLogger(__name__)

_OUTPUT_TAIL = 2000

Command = Sequence[str] | str


class CommandRunner:
    """Run external commands and capture their output.

    Args:
        default_timeout: Seconds before a command is killed.
        show_spinner: Allow the console spinner for ``spinner=True`` calls.
    """

    def __init__(self, *, default_timeout: int = 1800, show_spinner: bool = True):
        self._default_timeout = default_timeout
        self._show_spinner = show_spinner

    def which(self, name: str) -> str | None:
        """Locate an executable on PATH."""
        return shutil.which(name)

    def run(
        self,
        cmd: Command,
        *,
        sudo: bool = False,
        timeout: int | None = None,
        cwd: Path | str | None = None,
        env: Mapping[str, str] | None = None,
        input: str | None = None,
        spinner: bool = False,
    ) -> dict[str, Any]:
        """Run ``cmd`` (an argv list, or a string passed to ``sh -c``).

        Args:
            cmd: Argument vector or shell string.
            sudo: Prefix with ``sudo`` when not running as root.
            timeout: Override the default timeout.
            cwd: Working directory.
            env: Extra environment variables merged over ``os.environ``.
            input: Text written to the command's stdin.
            spinner: Show the console spinner while the command runs.
        """
        argv = _build_argv(cmd, sudo=sudo)
        timeout = timeout or self._default_timeout
        printable = shlex.join(argv)

        full_env = os.environ.copy()
        if env:
            full_env.update(env)

        logger.debug("Executing: %s (cwd=%s)", printable, cwd)
        start = time.monotonic()

        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE if input is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                cwd=str(cwd) if cwd else None,
                env=full_env,
            )
        except OSError as e:
            return {"ok": False, "error": f"Cannot run {argv[0]}: {e}", "command": printable}

        spin = Spinner(lambda: proc.poll() is None) if spinner and self._show_spinner else None
        if spin is not None:
            spin.start()
        try:
            stdout, stderr = proc.communicate(input=input, timeout=timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()
            return {
                "ok": False,
                "error": f"Command timed out ({timeout}s)",
                "command": printable,
            }
        finally:
            if spin is not None:
                spin.stop()

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = stdout[-_OUTPUT_TAIL:] if stdout else ""
        stderr = stderr[-_OUTPUT_TAIL:] if stderr else ""

        if proc.returncode == 0:
            return {
                "ok": True,
                "stdout": stdout,
                "elapsed_ms": elapsed_ms,
                "command": printable,
            }

        logger.debug("Command failed (exit %d): %s\n%s", proc.returncode, printable, stderr)
        return {
            "ok": False,
            "error": f"Command failed (exit {proc.returncode})",
            "returncode": proc.returncode,
            "stdout": stdout,
            "stderr": stderr,
            "elapsed_ms": elapsed_ms,
            "command": printable,
        }


def _build_argv(cmd: Command, *, sudo: bool) -> list[str]:
    argv = ["sh", "-c", cmd] if isinstance(cmd, str) else list(cmd)
    if sudo and os.geteuid() != 0:
        argv = ["sudo"] + argv
    return argv
