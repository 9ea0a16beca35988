"""
Writes into root-owned locations (apt sources, keyrings, /usr/local/bin).

When the target is writable by the current user (running as root, or a
redirected test/container layout) the file is written directly.
Otherwise the write goes through ``sudo tee`` / ``sudo install``.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any

from fxdev.core.services.shell import CommandRunner

logger = logging.getLogger(__name__)


def _writable(path: Path) -> bool:
    if path.exists():
        return os.access(path, os.W_OK)
    parent = path.parent
    while not parent.exists() and parent != parent.parent:
        parent = parent.parent
    return os.access(parent, os.W_OK)


def write_text(
    runner: CommandRunner,
    path: Path,
    content: str,
    *,
    append: bool = False,
) -> dict[str, Any]:
    """Write (or append) ``content`` to ``path``."""
    if _writable(path):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a" if append else "w", encoding="utf-8") as f:
                f.write(content)
            return {"ok": True}
        except OSError as e:
            return {"ok": False, "error": f"Cannot write {path}: {e}"}

    mkdir = runner.run(["mkdir", "-p", str(path.parent)], sudo=True)
    if not mkdir["ok"]:
        return mkdir
    cmd = ["tee", "-a", str(path)] if append else ["tee", str(path)]
    return runner.run(cmd, sudo=True, input=content)


def install_file(
    runner: CommandRunner,
    src: Path,
    dest: Path,
    *,
    mode: int = 0o644,
) -> dict[str, Any]:
    """Copy ``src`` to ``dest`` with the given permission bits."""
    if _writable(dest):
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dest)
            os.chmod(dest, mode)
            return {"ok": True}
        except OSError as e:
            return {"ok": False, "error": f"Cannot install {dest}: {e}"}

    return runner.run(
        ["install", "-D", "-m", format(mode, "o"), str(src), str(dest)],
        sudo=True,
    )
