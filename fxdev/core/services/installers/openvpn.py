"""OpenVPN 3 from the OpenVPN package repository."""

from __future__ import annotations

from pathlib import Path

from fxdev.core.services import apt
from fxdev.core.services.installers.base import PackageInstaller

RELEASE_URL = "https://swupdate.openvpn.org/repos/openvpn3/{codename}/main/{deb}"
KEY_URL = "https://packages.openvpn.net/packages-repo.gpg"
REPO_URL = "https://packages.openvpn.net/openvpn3/debian"


class OpenVPN3Installer(PackageInstaller):
    name = "openvpn3"
    label = "OpenVPN-3"
    menu_label = "Install OpenVPN-3"
    repo_marker = "packages.openvpn.net"

    @property
    def cache_key(self) -> str:
        return f"openvpn3:{self.ctx.config.openvpn_release_deb}"

    def setup_repo(self) -> None:
        codename = apt.release_codename(self.ctx)
        deb = self._release_deb(codename)
        self.command(["dpkg", "-i", str(deb)], what="install the OpenVPN-3 release package", sudo=True)

        keyring = self.ctx.config.apt_signing_dir / "openvpn.asc"
        apt.install_keyring(
            self.ctx, url=KEY_URL, dest=keyring, label="OpenVPN", dearmor=False
        )
        apt.add_source(
            self.ctx,
            "openvpn-packages.list",
            f"deb [signed-by={keyring}] {REPO_URL} {codename} main",
        )
        apt.update(self.ctx)

    def install(self) -> None:
        apt.install(self.ctx, ["openvpn3"], what="install OpenVPN-3")

    def _release_deb(self, codename: str) -> Path:
        cached = self.ctx.cache.get(self.cache_key)
        if cached is not None:
            self.ctx.log("Using cached OpenVPN-3 installer")
            return cached

        deb_name = self.ctx.config.openvpn_release_deb
        self.ctx.cache.ensure()
        dest = self.ctx.cache.artifact_path(deb_name)
        apt.download(
            self.ctx,
            RELEASE_URL.format(codename=codename, deb=deb_name),
            dest,
            what="download OpenVPN-3 installer",
        )
        return self.ctx.cache.put(self.cache_key, dest)
