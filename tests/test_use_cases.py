"""
Tests for the menu loop and the non-interactive install use case.
"""

from pathlib import Path

from fxdev.core.services.installers import PACKAGE_ORDER
from fxdev.core.use_cases.install import install_packages
from fxdev.core.use_cases.menu import render_menu, run_menu


def _choices(*values):
    it = iter(values)
    return lambda: next(it)


def _installing_entries(ctx) -> list[str]:
    return [m for m in ctx.install_log.messages() if m.startswith("Installing")]


# ── Menu ────────────────────────────────────────────────────────────


class TestRenderMenu:
    def test_lists_every_package_in_order(self):
        lines = render_menu().splitlines()
        assert lines[1] == "1. Install Node.js"
        assert lines[8] == "8. Install Neovim"
        assert "9. Install All Packages" in lines
        assert "0. Exit" in lines


class TestMenuLoop:
    def test_exit(self, installer_ctx, echoed, fake_runner):
        result = run_menu(installer_ctx, read_choice=_choices("0"))

        assert result.exit_code == 0
        assert result.outcomes == []
        assert echoed[-1] == "Exiting installer. Goodbye!"
        assert fake_runner.calls == []

    def test_non_numeric_input_redisplays(self, installer_ctx, echoed, fake_runner):
        result = run_menu(installer_ctx, read_choice=_choices("abc", "", "0"))

        assert echoed.count("Invalid option. Please enter a number.") == 2
        assert echoed.count(render_menu()) == 3
        assert result.outcomes == []
        assert fake_runner.calls == []
        assert installer_ctx.install_log.messages() == []

    def test_unicode_digits_are_not_numbers(self, installer_ctx, echoed, fake_runner):
        result = run_menu(installer_ctx, read_choice=_choices("²", "٣", "0"))

        assert echoed.count("Invalid option. Please enter a number.") == 2
        assert result.outcomes == []
        assert result.exit_code == 0
        assert fake_runner.calls == []

    def test_unknown_number(self, installer_ctx, echoed):
        run_menu(installer_ctx, read_choice=_choices("42", "0"))
        assert "Invalid option. Please try again." in echoed

    def test_single_package(self, installer_ctx):
        result = run_menu(installer_ctx, read_choice=_choices("6", "0"))

        assert [o.package for o in result.outcomes] == ["terraform"]
        assert result.installed == ["terraform"]

    def test_install_all_declined(self, installer_ctx, answers, echoed):
        answers.script(False)

        result = run_menu(installer_ctx, read_choice=_choices("9", "0"))

        assert result.outcomes == []
        assert answers.questions == ["Install all packages"]
        assert "Install all cancelled." in echoed
        assert _installing_entries(installer_ctx) == []

    def test_install_all_then_decline_each(self, installer_ctx, answers, fake_runner):
        answers.script(True)
        answers.default = False

        result = run_menu(installer_ctx, read_choice=_choices("9", "0"))

        assert [o.package for o in result.outcomes] == list(PACKAGE_ORDER)
        assert all(o.skipped for o in result.outcomes)
        assert _installing_entries(installer_ctx) == []
        assert fake_runner.calls == []

    def test_failure_continues_by_default(self, installer_ctx, fake_runner):
        fake_runner.missing = {"ninja"}

        result = run_menu(installer_ctx, read_choice=_choices("8", "6", "0"))

        assert result.failed == ["nvim"]
        assert result.installed == ["terraform"]
        assert result.exit_code == 0
        assert not result.aborted

    def test_filesystem_error_does_not_end_session(self, installer_ctx, home):
        (home / ".config").write_text("not a directory")

        result = run_menu(installer_ctx, read_choice=_choices("8", "6", "0"))

        assert result.failed == ["nvim"]
        assert result.installed == ["terraform"]
        assert result.exit_code == 0

    def test_abort_on_failure(self, make_context, fake_runner):
        ctx = make_context(abort_on_failure=True)
        fake_runner.missing = {"ninja"}

        # no "0" needed: the loop stops on the failure
        result = run_menu(ctx, read_choice=_choices("8"))

        assert result.aborted
        assert result.exit_code == 1
        assert "Aborting session after nvim failure" in ctx.install_log.messages()

    def test_eviction_runs_on_exit(self, make_context, tmp_path: Path):
        ctx = make_context(cache_limit_bytes=10)
        artifact = tmp_path / "big.deb"
        artifact.write_bytes(b"x" * 100)
        ctx.cache.put("openvpn3:big.deb", artifact)

        result = run_menu(ctx, read_choice=_choices("0"))

        assert result.eviction is not None
        assert result.eviction.triggered
        assert ctx.cache.entries() == []

    def test_to_dict(self, installer_ctx):
        result = run_menu(installer_ctx, read_choice=_choices("6", "0"))
        d = result.to_dict()
        assert d["exit_code"] == 0
        assert d["outcomes"][0]["package"] == "terraform"
        assert d["eviction"]["triggered"] is False


# ── install use case ────────────────────────────────────────────────


class TestInstallPackages:
    def test_named_packages(self, installer_ctx):
        result = install_packages(installer_ctx, ["terraform", "redis-server"], assume_yes=True)

        assert result.ok
        assert [o.package for o in result.outcomes] == ["terraform", "redis-server"]

    def test_unknown_name_runs_nothing(self, installer_ctx, fake_runner):
        result = install_packages(installer_ctx, ["terraform", "emacs"])

        assert not result.ok
        assert "Unknown package 'emacs'" in result.error
        assert result.outcomes == []
        assert fake_runner.calls == []

    def test_all_expands_in_order(self, installer_ctx, answers):
        answers.default = False
        result = install_packages(installer_ctx, ["all"])
        assert [o.package for o in result.outcomes] == list(PACKAGE_ORDER)

    def test_duplicates_run_once(self, installer_ctx, answers):
        answers.default = False
        result = install_packages(installer_ctx, ["nvim", "nvim", "all"])
        assert len(result.outcomes) == len(PACKAGE_ORDER)
        assert result.outcomes[0].package == "nvim"

    def test_stop_on_failure(self, installer_ctx, fake_runner):
        fake_runner.missing = {"rg"}

        result = install_packages(
            installer_ctx, ["nvim", "terraform"], assume_yes=True, stop_on_failure=True
        )

        assert [o.package for o in result.outcomes] == ["nvim"]
        assert not result.ok

    def test_to_dict(self, installer_ctx):
        d = install_packages(installer_ctx, ["emacs"]).to_dict()
        assert "error" in d
