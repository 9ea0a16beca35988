"""Ansible from the ansible/ansible PPA."""

from __future__ import annotations

from fxdev.core.services import apt
from fxdev.core.services.installers.base import PackageInstaller

PPA = "ppa:ansible/ansible"


class AnsibleInstaller(PackageInstaller):
    name = "ansible"
    label = "Ansible"
    menu_label = "Install Ansible"
    # apt-add-repository writes the PPA as .../ansible/ansible/ubuntu
    repo_marker = "/ansible/ansible/"

    def setup_repo(self) -> None:
        apt.update(self.ctx)
        if not apt.is_installed(self.ctx, "software-properties-common"):
            apt.install(self.ctx, ["software-properties-common"])
        self.command(
            ["apt-add-repository", "--yes", "--update", PPA],
            what="add Ansible repository",
            retry=True,
            sudo=True,
        )

    def install(self) -> None:
        apt.install(self.ctx, ["ansible"], what="install Ansible")
