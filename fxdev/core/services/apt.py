"""
apt helpers — package lists, installs, signing keys and source entries.

Repository setup is idempotent at two levels:

    ``repo_configured``    scans the sources directory for a marker
                           string; installers skip setup when it is found
    ``add_source``         never writes a line that is already present

Signing keys are fetched once and kept in the download cache.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from fxdev.core.errors import InstallFailure, TransientNetworkFailure
from fxdev.core.services import root_files

if TYPE_CHECKING:
    from fxdev.core.context import InstallerContext

logger = logging.getLogger(__name__)


# ── Idempotency guard ───────────────────────────────────────────


def repo_configured(sources_dir: Path, marker: str) -> bool:
    """Whether any file in ``sources_dir`` mentions ``marker``."""
    if not sources_dir.is_dir():
        return False
    for path in sorted(sources_dir.iterdir()):
        if not path.is_file():
            continue
        try:
            if marker in path.read_text(encoding="utf-8", errors="replace"):
                logger.debug("Found %r in %s", marker, path)
                return True
        except OSError as e:
            logger.debug("Cannot read %s: %s", path, e)
    return False


def add_source(
    ctx: InstallerContext,
    list_name: str,
    line: str,
    *,
    append: bool = False,
) -> Path:
    """Write a ``deb ...`` line to ``<sources_dir>/<list_name>``.

    Raises:
        InstallFailure: If the file cannot be written.
    """
    path = ctx.config.apt_sources_dir / list_name
    if path.is_file():
        existing = path.read_text(encoding="utf-8", errors="replace").splitlines()
        if line in existing:
            logger.debug("Source entry already present in %s", path)
            return path

    result = root_files.write_text(ctx.runner, path, line + "\n", append=append)
    if not result["ok"]:
        raise InstallFailure(f"Failed to write {path}: {result.get('error', '')}")
    ctx.log(f"Added package source {path}")
    return path


# ── Package manager ─────────────────────────────────────────────


def update(ctx: InstallerContext, *, spinner: bool = False) -> None:
    """``apt-get update`` with retries.

    Raises:
        TransientNetworkFailure: When every attempt fails.
    """
    result = ctx.retry(
        lambda: ctx.run(["apt-get", "update"], sudo=True, spinner=spinner),
        what="update package lists",
    )
    if not result["ok"]:
        raise TransientNetworkFailure(_describe("Failed to update package lists", result))


def install(
    ctx: InstallerContext,
    packages: Sequence[str],
    *,
    what: str = "",
    retry: bool = False,
    recommends: bool = True,
) -> None:
    """``apt-get install -y`` the given packages.

    Args:
        what: Description for log lines (default: the package names).
        retry: Wrap the install in the retry helper.
        recommends: Pass ``--no-install-recommends`` when False.

    Raises:
        InstallFailure: When the install fails.
    """
    cmd = ["apt-get", "install", "-y"]
    if not recommends:
        cmd.append("--no-install-recommends")
    cmd.extend(packages)
    what = what or f"install {' '.join(packages)}"

    if retry:
        result = ctx.retry(lambda: ctx.run(cmd, sudo=True), what=what)
    else:
        result = ctx.run(cmd, sudo=True)
    if not result["ok"]:
        raise InstallFailure(_describe(f"Failed to {what}", result))


def is_installed(ctx: InstallerContext, package: str) -> bool:
    return bool(ctx.run(["dpkg", "-s", package])["ok"])


def release_codename(ctx: InstallerContext) -> str:
    """Distribution codename (``lsb_release -cs``), e.g. ``jammy``."""
    result = ctx.run(["lsb_release", "-cs"])
    codename = result.get("stdout", "").strip() if result["ok"] else ""
    if codename:
        return codename

    os_release = Path("/etc/os-release")
    if os_release.is_file():
        for line in os_release.read_text(encoding="utf-8").splitlines():
            if line.startswith("VERSION_CODENAME="):
                return line.split("=", 1)[1].strip().strip('"')
    raise InstallFailure("Cannot determine the distribution codename")


# ── Downloads & signing keys ────────────────────────────────────


def download(ctx: InstallerContext, url: str, dest: Path, *, what: str) -> Path:
    """Fetch ``url`` to ``dest`` with curl, retried.

    Raises:
        TransientNetworkFailure: When every attempt fails.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    result = ctx.retry(
        lambda: ctx.run(["curl", "-fsSL", url, "-o", str(dest)]),
        what=what,
    )
    if not result["ok"]:
        dest.unlink(missing_ok=True)
        raise TransientNetworkFailure(_describe(f"Failed to {what}", result))
    return dest


def install_keyring(
    ctx: InstallerContext,
    *,
    url: str,
    dest: Path,
    label: str,
    cache_key: str | None = None,
    dearmor: bool = True,
) -> Path:
    """Put a repository signing key at ``dest``.

    With a ``cache_key`` the (dearmored) key is taken from the download
    cache when present, and stored there after a fresh download.

    Raises:
        TransientNetworkFailure: If the download keeps failing.
        InstallFailure: If dearmoring or copying the key fails.
    """
    cached = ctx.cache.get(cache_key) if cache_key else None
    if cached is not None:
        ctx.log(f"Using cached {label} keyring")
        _place_keyring(ctx, cached, dest, label)
        return dest

    with tempfile.TemporaryDirectory(prefix="fxdev-key-") as workdir:
        raw = download(ctx, url, Path(workdir) / "key.download", what=f"download {label} keyring")
        key_file = Path(workdir) / dest.name

        if dearmor:
            result = ctx.run(
                ["gpg", "--batch", "--yes", "--dearmor", "-o", str(key_file), str(raw)]
            )
            if not result["ok"]:
                raise InstallFailure(_describe(f"Failed to dearmor {label} keyring", result))
        else:
            raw.replace(key_file)

        if cache_key:
            key_file = ctx.cache.put(cache_key, key_file)
        _place_keyring(ctx, key_file, dest, label)
    return dest


def _place_keyring(ctx: InstallerContext, key_file: Path, dest: Path, label: str) -> None:
    result = root_files.install_file(ctx.runner, key_file, dest, mode=0o644)
    if not result["ok"]:
        raise InstallFailure(_describe(f"Failed to copy {label} keyring", result))


def _describe(message: str, result: dict[str, Any]) -> str:
    detail = result.get("stderr") or result.get("error") or ""
    detail = detail.strip().splitlines()[-1] if detail.strip() else ""
    return f"{message}: {detail}" if detail else message
