"""Redis from packages.redis.io, with a post-install ping."""

from __future__ import annotations

from fxdev.core.services import apt
from fxdev.core.services.installers.base import PackageInstaller

KEY_URL = "https://packages.redis.io/gpg"
REPO_URL = "https://packages.redis.io/deb"


class RedisInstaller(PackageInstaller):
    name = "redis-server"
    label = "Redis"
    menu_label = "Install Redis"
    repo_marker = "packages.redis.io"
    cache_key = "redis:redis-archive-keyring.gpg"

    def setup_repo(self) -> None:
        apt.install(
            self.ctx, ["lsb-release", "curl", "gpg"], what="install dependencies", retry=True
        )
        keyring = self.ctx.config.apt_keyrings_dir / "redis-archive-keyring.gpg"
        apt.install_keyring(
            self.ctx, url=KEY_URL, dest=keyring, label="Redis", cache_key=self.cache_key
        )
        codename = apt.release_codename(self.ctx)
        apt.add_source(
            self.ctx,
            "redis.list",
            f"deb [signed-by={keyring}] {REPO_URL} {codename} main",
        )
        apt.update(self.ctx)

    def install(self) -> None:
        apt.install(self.ctx, ["redis"], what="install Redis")
        # containers usually run without systemd; `service` still works there
        self.attempt(["systemctl", "enable", "redis-server"], what="enable Redis service", sudo=True)
        self.attempt(["service", "redis-server", "start"], what="start Redis service", sudo=True)

    def verify(self) -> None:
        if self.ctx.run(["redis-cli", "ping"])["ok"]:
            self.ctx.log("Redis server is running.")
        else:
            self.ctx.log(
                "Redis server seems to be down or inaccessible. Please check manually.",
                echo=True,
            )
