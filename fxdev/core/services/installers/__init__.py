"""
Package installers — one ``PackageInstaller`` subclass per package.

``PACKAGE_ORDER`` is the declaration order used by the menu and by
"install all".
"""

from fxdev.core.services.installers.ansible import AnsibleInstaller
from fxdev.core.services.installers.base import PackageInstaller
from fxdev.core.services.installers.gcloud import GcloudInstaller
from fxdev.core.services.installers.neovim import NeovimInstaller
from fxdev.core.services.installers.node import NodeInstaller
from fxdev.core.services.installers.openvpn import OpenVPN3Installer
from fxdev.core.services.installers.redis_server import RedisInstaller
from fxdev.core.services.installers.starship import StarshipInstaller
from fxdev.core.services.installers.terraform import TerraformInstaller

INSTALLERS: dict[str, type[PackageInstaller]] = {
    cls.name: cls
    for cls in (
        NodeInstaller,
        OpenVPN3Installer,
        GcloudInstaller,
        StarshipInstaller,
        RedisInstaller,
        TerraformInstaller,
        AnsibleInstaller,
        NeovimInstaller,
    )
}

PACKAGE_ORDER: tuple[str, ...] = tuple(INSTALLERS)


def get_installer(name: str) -> type[PackageInstaller]:
    """Look up an installer class by package name.

    Raises:
        KeyError: For an unknown package name.
    """
    try:
        return INSTALLERS[name]
    except KeyError:
        raise KeyError(
            f"Unknown package {name!r} (choose from: {', '.join(PACKAGE_ORDER)})"
        ) from None


__all__ = [
    "INSTALLERS",
    "PACKAGE_ORDER",
    "AnsibleInstaller",
    "GcloudInstaller",
    "NeovimInstaller",
    "NodeInstaller",
    "OpenVPN3Installer",
    "PackageInstaller",
    "RedisInstaller",
    "StarshipInstaller",
    "TerraformInstaller",
    "get_installer",
]
