"""Starship prompt binary, cached between sessions."""

from __future__ import annotations

import platform
import tempfile
from pathlib import Path

from fxdev.core.errors import InstallFailure
from fxdev.core.services import apt, root_files
from fxdev.core.services.installers.base import PackageInstaller

INSTALL_SCRIPT_URL = "https://starship.rs/install.sh"


def binary_name(system: str | None = None, machine: str | None = None) -> str:
    """``starship-<os>-<arch>`` for this host, e.g. ``starship-linux-x86-64``."""
    system = (system or platform.system()).lower()
    machine = machine or platform.machine()
    if machine == "x86_64":
        machine = "x86-64"
    return f"starship-{system}-{machine}"


class StarshipInstaller(PackageInstaller):
    name = "starship"
    label = "Starship"
    menu_label = "Install Starship"

    @property
    def cache_key(self) -> str:
        return f"starship:{binary_name()}"

    @property
    def target(self) -> Path:
        return self.ctx.config.bin_dir / "starship"

    def install(self) -> None:
        cached = self.ctx.cache.get(self.cache_key)
        if cached is not None:
            self.ctx.log("Using cached Starship binary")
            result = root_files.install_file(self.ctx.runner, cached, self.target, mode=0o755)
            if not result["ok"]:
                raise InstallFailure(f"Failed to install Starship from cache: {result.get('error', '')}")
            return

        with tempfile.TemporaryDirectory(prefix="fxdev-starship-") as workdir:
            script = apt.download(
                self.ctx,
                INSTALL_SCRIPT_URL,
                Path(workdir) / "install.sh",
                what="download Starship installer",
            )
            self.command(
                ["sh", str(script), "--yes", "--bin-dir", str(self.target.parent)],
                what="run Starship installer",
                retry=True,
                sudo=True,
            )

        if self.target.is_file():
            self.ctx.cache.put(self.cache_key, self.target)
