"""Google Cloud CLI, plus optional service-account activation."""

from __future__ import annotations

from fxdev.core.services import apt
from fxdev.core.services.installers.base import PackageInstaller

KEY_URL = "https://packages.cloud.google.com/apt/doc/apt-key.gpg"
REPO_URL = "https://packages.cloud.google.com/apt"


class GcloudInstaller(PackageInstaller):
    name = "gcloud"
    label = "Google CLI"
    menu_label = "Install Google CLI (gcloud)"
    repo_marker = "packages.cloud.google.com"
    cache_key = "google-cloud-sdk:cloud.google.gpg"

    def setup_repo(self) -> None:
        apt.update(self.ctx)
        apt.install(
            self.ctx,
            ["apt-transport-https", "ca-certificates", "gnupg", "curl", "sudo"],
            what="install dependencies",
            retry=True,
        )
        keyring = self.ctx.config.apt_keyrings_dir / "cloud.google.gpg"
        apt.install_keyring(
            self.ctx, url=KEY_URL, dest=keyring, label="Google Cloud", cache_key=self.cache_key
        )
        apt.add_source(
            self.ctx,
            "google-cloud-sdk.list",
            f"deb [signed-by={keyring}] {REPO_URL} cloud-sdk main",
            append=True,
        )
        apt.update(self.ctx)

    def install(self) -> None:
        apt.install(self.ctx, ["google-cloud-cli"], what="install Google Cloud CLI")

    def verify(self) -> None:
        credentials = self.ctx.config.google_credentials
        if credentials is None or not credentials.is_file():
            return

        activated = self.attempt(
            ["gcloud", "auth", "activate-service-account", "--key-file", str(credentials)],
            what="activate service account",
        )
        if not activated:
            return
        self.ctx.log("Google Cloud credentials loaded.")

        project = self.ctx.config.google_project
        if project and self.attempt(
            ["gcloud", "config", "set", "project", project],
            what="set default project",
        ):
            self.ctx.log(f"Default project set to {project}.")
