"""Neovim built from source, plus the LazyVim config."""

from __future__ import annotations

from pathlib import Path

from fxdev.core.errors import DependencyMissing
from fxdev.core.services.installers.base import PackageInstaller

NEOVIM_REPO = "https://github.com/neovim/neovim"
LAZYVIM_REPO = "https://github.com/LazyVim/LazyVim.git"

BUILD_DEPENDENCIES = ("ninja-build", "gettext", "cmake", "unzip", "curl", "ripgrep")

# package name → binary that proves it is installed
_DEPENDENCY_BINARIES = {
    "ninja-build": "ninja",
    "gettext": "msgfmt",
    "ripgrep": "rg",
}


class NeovimInstaller(PackageInstaller):
    name = "nvim"
    label = "Neovim"
    menu_label = "Install Neovim"

    @property
    def prompt(self) -> str:
        return "Install Neovim Latest?"

    @property
    def source_dir(self) -> Path:
        return self.ctx.config.home / "neovim"

    @property
    def config_dir(self) -> Path:
        return self.ctx.config.home / ".config" / "nvim"

    def install(self) -> None:
        self.check_dependencies()

        if (self.source_dir / "build").is_dir():
            self.ctx.log("Neovim already built. Skipping build process.")
        else:
            self.build()

        if self.config_dir.is_dir():
            self.ctx.log("LazyVim already installed.")
        else:
            self.ctx.log("Installing LazyVim...")
            self.config_dir.parent.mkdir(parents=True, exist_ok=True)
            self.command(
                ["git", "clone", "--depth", "1", LAZYVIM_REPO, str(self.config_dir)],
                what="clone LazyVim",
                retry=True,
            )
            self.attempt(["nvim", "--headless", "+Lazy! sync", "+qa"], what="sync LazyVim plugins")

    def check_dependencies(self) -> None:
        missing = [
            dep for dep in BUILD_DEPENDENCIES
            if self.ctx.runner.which(_DEPENDENCY_BINARIES.get(dep, dep)) is None
        ]
        if missing:
            for dep in missing:
                self.ctx.log(f"Missing dependency: {dep}. Please install it first.")
            raise DependencyMissing(f"Missing Neovim dependencies: {', '.join(missing)}")

    def build(self) -> None:
        if not (self.source_dir / ".git").is_dir():
            self.command(
                ["git", "clone", NEOVIM_REPO, str(self.source_dir)],
                what="clone Neovim repository",
                retry=True,
            )
        self.command(
            ["git", "checkout", "stable"], what="check out Neovim stable", cwd=self.source_dir
        )
        self.command(
            ["make", "CMAKE_BUILD_TYPE=RelWithDebInfo"],
            what="build Neovim",
            cwd=self.source_dir,
        )
        self.command(
            ["make", "install"], what="install Neovim", cwd=self.source_dir, sudo=True
        )

    def verify(self) -> None:
        self.show_version(["nvim", "--version"])
