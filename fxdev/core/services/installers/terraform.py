"""Terraform from the HashiCorp apt repository."""

from __future__ import annotations

from fxdev.core.services import apt
from fxdev.core.services.installers.base import PackageInstaller

KEY_URL = "https://apt.releases.hashicorp.com/gpg"
REPO_URL = "https://apt.releases.hashicorp.com"


class TerraformInstaller(PackageInstaller):
    name = "terraform"
    label = "Terraform"
    menu_label = "Install Terraform"
    repo_marker = "apt.releases.hashicorp.com"
    cache_key = "terraform:hashicorp.gpg"

    def setup_repo(self) -> None:
        apt.update(self.ctx)
        apt.install(
            self.ctx, ["gnupg", "software-properties-common"], what="install dependencies"
        )
        keyring = self.ctx.config.apt_keyrings_dir / "hashicorp-archive-keyring.gpg"
        apt.install_keyring(
            self.ctx, url=KEY_URL, dest=keyring, label="HashiCorp", cache_key=self.cache_key
        )
        codename = apt.release_codename(self.ctx)
        apt.add_source(
            self.ctx,
            "hashicorp.list",
            f"deb [signed-by={keyring}] {REPO_URL} {codename} main",
        )
        apt.update(self.ctx)

    def install(self) -> None:
        apt.install(self.ctx, ["terraform"], what="install Terraform")

    def verify(self) -> None:
        self.show_version(["terraform", "--version"])
