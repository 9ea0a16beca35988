"""Node.js through NVM."""

from __future__ import annotations

from pathlib import Path

from fxdev.core.services.installers.base import PackageInstaller

NVM_INSTALL_URL = "https://raw.githubusercontent.com/nvm-sh/nvm/master/install.sh"


class NodeInstaller(PackageInstaller):
    name = "node"
    label = "Node.js"
    menu_label = "Install Node.js"

    @property
    def nvm_dir(self) -> Path:
        return self.ctx.config.home / ".nvm"

    def install(self) -> None:
        version = self.ctx.config.node_version
        env = {"NVM_DIR": str(self.nvm_dir)}

        if (self.nvm_dir / "nvm.sh").is_file():
            self.ctx.log("NVM already installed.")
        else:
            self.command(
                f"curl -o- {NVM_INSTALL_URL} | bash",
                what="install NVM",
                retry=True,
                env=env,
            )

        nvm = f'. "$NVM_DIR/nvm.sh" && nvm'
        self.command(
            ["bash", "-c", f"{nvm} install {version}"],
            what=f"install Node.js {version}",
            retry=True,
            env=env,
        )
        self.command(
            ["bash", "-c", f"{nvm} alias default {version}"],
            what=f"set Node.js {version} as default",
            env=env,
        )
        self.ctx.log(f"Node.js {version} installed via NVM")
