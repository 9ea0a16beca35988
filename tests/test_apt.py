"""
Tests for apt helpers and root-owned file writes.
"""

from pathlib import Path

import pytest

from fxdev.core.errors import InstallFailure, TransientNetworkFailure
from fxdev.core.services import apt, root_files


class TestRepoConfigured:
    def test_missing_dir(self, tmp_path: Path):
        assert not apt.repo_configured(tmp_path / "absent", "packages.redis.io")

    def test_marker_found(self, tmp_path: Path):
        (tmp_path / "redis.list").write_text("deb https://packages.redis.io/deb jammy main\n")
        assert apt.repo_configured(tmp_path, "packages.redis.io")
        assert not apt.repo_configured(tmp_path, "apt.releases.hashicorp.com")

    def test_ignores_subdirectories(self, tmp_path: Path):
        (tmp_path / "packages.redis.io").mkdir()
        assert not apt.repo_configured(tmp_path, "packages.redis.io")


class TestAddSource:
    def test_twice_yields_one_entry(self, installer_ctx, config):
        line = "deb [signed-by=/k.gpg] https://packages.cloud.google.com/apt cloud-sdk main"

        apt.add_source(installer_ctx, "google-cloud-sdk.list", line, append=True)
        apt.add_source(installer_ctx, "google-cloud-sdk.list", line, append=True)

        content = (config.apt_sources_dir / "google-cloud-sdk.list").read_text()
        assert content.splitlines() == [line]

    def test_append_keeps_other_lines(self, installer_ctx, config):
        path = config.apt_sources_dir / "google-cloud-sdk.list"
        path.parent.mkdir(parents=True)
        path.write_text("deb http://old.example cloud-sdk main\n")

        apt.add_source(installer_ctx, "google-cloud-sdk.list", "deb http://new.example x", append=True)

        assert len(path.read_text().splitlines()) == 2

    def test_logs_added_source(self, installer_ctx, config):
        apt.add_source(installer_ctx, "redis.list", "deb x")
        expected = f"Added package source {config.apt_sources_dir / 'redis.list'}"
        assert expected in installer_ctx.install_log.messages()


class TestCommands:
    def test_update_retries(self, installer_ctx, fake_runner, sleeps):
        fake_runner.fail("apt-get")
        with pytest.raises(TransientNetworkFailure):
            apt.update(installer_ctx)
        assert len(fake_runner.calls) == 3
        assert sleeps == [5.0, 5.0]

    def test_update_recovers(self, installer_ctx, fake_runner, sleeps):
        fake_runner.fail("apt-get", times=1)
        apt.update(installer_ctx)
        assert len(fake_runner.calls) == 2

    def test_install_flags(self, installer_ctx, fake_runner):
        apt.install(installer_ctx, ["htop", "jq"], recommends=False)
        argv, kwargs = fake_runner.calls[0]
        assert argv == ["apt-get", "install", "-y", "--no-install-recommends", "htop", "jq"]
        assert kwargs["sudo"] is True

    def test_install_failure(self, installer_ctx, fake_runner):
        fake_runner.fail("apt-get")
        with pytest.raises(InstallFailure, match="apt-get: simulated failure"):
            apt.install(installer_ctx, ["redis"], what="install Redis")
        # no retry unless asked for
        assert len(fake_runner.calls) == 1

    def test_release_codename(self, installer_ctx, fake_runner):
        fake_runner.outputs["lsb_release"] = "noble\n"
        assert apt.release_codename(installer_ctx) == "noble"

    def test_download_failure_removes_partial_file(self, installer_ctx, fake_runner, tmp_path: Path):
        fake_runner.fail("curl")
        dest = tmp_path / "partial.gpg"
        dest.write_text("half")

        with pytest.raises(TransientNetworkFailure):
            apt.download(installer_ctx, "https://example.invalid/key", dest, what="download key")

        assert not dest.exists()


class TestInstallKeyring:
    def test_fresh_download_is_cached(self, installer_ctx, fake_runner, config):
        dest = config.apt_keyrings_dir / "redis-archive-keyring.gpg"

        apt.install_keyring(
            installer_ctx,
            url="https://packages.redis.io/gpg",
            dest=dest,
            label="Redis",
            cache_key="redis:redis-archive-keyring.gpg",
        )

        assert dest.is_file()
        assert fake_runner.programs() == ["curl", "gpg"]
        assert installer_ctx.cache.get("redis:redis-archive-keyring.gpg") is not None

    def test_uncached_key_leaves_cache_empty(self, installer_ctx, config):
        dest = config.apt_signing_dir / "openvpn.asc"
        apt.install_keyring(
            installer_ctx, url="https://example/key", dest=dest, label="OpenVPN", dearmor=False
        )
        assert dest.is_file()
        assert installer_ctx.cache.entries() == []

    def test_dearmor_failure(self, installer_ctx, fake_runner, config):
        fake_runner.fail("gpg")
        with pytest.raises(InstallFailure, match="dearmor"):
            apt.install_keyring(
                installer_ctx,
                url="https://example/key",
                dest=config.apt_keyrings_dir / "k.gpg",
                label="Example",
            )


class TestRootFiles:
    def test_direct_write(self, fake_runner, tmp_path: Path):
        target = tmp_path / "etc" / "thing.list"
        assert root_files.write_text(fake_runner, target, "one\n")["ok"]
        assert root_files.write_text(fake_runner, target, "two\n", append=True)["ok"]
        assert target.read_text() == "one\ntwo\n"
        assert fake_runner.calls == []

    def test_sudo_tee_when_not_writable(self, fake_runner, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(root_files, "_writable", lambda path: False)
        target = tmp_path / "etc" / "thing.list"

        root_files.write_text(fake_runner, target, "deb x\n", append=True)

        assert fake_runner.calls[0][0] == ["mkdir", "-p", str(target.parent)]
        argv, kwargs = fake_runner.calls[1]
        assert argv == ["tee", "-a", str(target)]
        assert kwargs == {"sudo": True, "input": "deb x\n"}

    def test_install_file_mode(self, fake_runner, tmp_path: Path):
        src = tmp_path / "starship"
        src.write_bytes(b"bin")
        dest = tmp_path / "bin" / "starship"

        assert root_files.install_file(fake_runner, src, dest, mode=0o755)["ok"]
        assert dest.stat().st_mode & 0o777 == 0o755

    def test_install_file_via_sudo(self, fake_runner, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(root_files, "_writable", lambda path: False)
        src = tmp_path / "k.gpg"
        src.write_bytes(b"k")

        root_files.install_file(fake_runner, src, Path("/usr/share/keyrings/k.gpg"))

        argv, kwargs = fake_runner.calls[0]
        assert argv == ["install", "-D", "-m", "644", str(src), "/usr/share/keyrings/k.gpg"]
        assert kwargs["sudo"] is True
