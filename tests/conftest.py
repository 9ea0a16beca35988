"""
Shared test fixtures and configuration.

Nothing here touches the real system: commands go to ``FakeRunner``,
which records them and emulates the few side effects installers rely
on (curl downloads, gpg dearmoring, the Starship install script).
"""

import shutil
from pathlib import Path

import pytest

from fxdev.core.context import InstallerContext
from fxdev.core.models.config import InstallerConfig


class FakeRunner:
    """Recording stand-in for ``CommandRunner``."""

    def __init__(self):
        self.calls: list[tuple[list[str], dict]] = []
        self.outputs: dict[str, str] = {"lsb_release": "jammy\n"}
        self.missing: set[str] = set()
        self._failures: dict[str, int | None] = {}

    # ── Scripting ───────────────────────────────────────────────

    def fail(self, target: str, times: int | None = None) -> None:
        """Make ``target`` fail (always, or for the next ``times`` calls).

        ``target`` is a program name (``apt-get``) or a full command line
        (``apt-get clean``).
        """
        self._failures[target] = times

    # ── CommandRunner interface ─────────────────────────────────

    def which(self, name: str) -> str | None:
        return None if name in self.missing else f"/usr/bin/{name}"

    def run(self, cmd, **kwargs) -> dict:
        argv = ["sh", "-c", cmd] if isinstance(cmd, str) else list(cmd)
        self.calls.append((argv, kwargs))
        program = program_of(argv)

        if self._should_fail(" ".join(argv)) or self._should_fail(program):
            return {
                "ok": False,
                "error": "Command failed (exit 1)",
                "returncode": 1,
                "stdout": "",
                "stderr": f"{program}: simulated failure",
            }

        if not isinstance(cmd, str):
            self._side_effects(argv)
        return {"ok": True, "stdout": self.outputs.get(program, ""), "elapsed_ms": 0}

    # ── Inspection ──────────────────────────────────────────────

    def programs(self) -> list[str]:
        return [program_of(argv) for argv, _ in self.calls]

    def commands(self) -> list[str]:
        return [" ".join(argv) for argv, _ in self.calls]

    def calls_to(self, program: str) -> list[list[str]]:
        return [argv for argv, _ in self.calls if program_of(argv) == program]

    # ── Internals ───────────────────────────────────────────────

    def _should_fail(self, target: str) -> bool:
        if target not in self._failures:
            return False
        remaining = self._failures[target]
        if remaining is None:
            return True
        if remaining <= 0:
            return False
        self._failures[target] = remaining - 1
        return True

    def _side_effects(self, argv: list[str]) -> None:
        program = argv[0]
        if program == "curl" and "-o" in argv:
            dest = Path(argv[argv.index("-o") + 1])
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(f"downloaded from {argv[2]}\n")
        elif program == "gpg" and "--dearmor" in argv:
            out = Path(argv[argv.index("-o") + 1])
            shutil.copyfile(argv[-1], out)
        elif program == "sh" and "--bin-dir" in argv:
            bin_dir = Path(argv[argv.index("--bin-dir") + 1])
            bin_dir.mkdir(parents=True, exist_ok=True)
            (bin_dir / "starship").write_bytes(b"\x7fELF starship")


def program_of(argv: list[str]) -> str:
    """The program a recorded command runs (``sh -c`` strings unwrapped)."""
    if argv[:2] == ["sh", "-c"]:
        return argv[2].split()[0]
    return argv[0]


class Answers:
    """Scripted replies for confirmation prompts."""

    def __init__(self, default: bool = True):
        self.default = default
        self.questions: list[str] = []
        self._queue: list[bool] = []

    def script(self, *replies: bool) -> None:
        self._queue.extend(replies)

    def __call__(self, question: str) -> bool:
        self.questions.append(question)
        if self._queue:
            return self._queue.pop(0)
        return self.default


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A throwaway home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path: Path, home: Path) -> InstallerConfig:
    """Installer config with every system location under tmp_path."""
    return InstallerConfig(
        home=home,
        apt_sources_dir=tmp_path / "etc" / "apt" / "sources.list.d",
        apt_keyrings_dir=tmp_path / "usr" / "share" / "keyrings",
        apt_signing_dir=tmp_path / "etc" / "apt" / "keyrings",
        bin_dir=tmp_path / "usr" / "local" / "bin",
    )


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def answers() -> Answers:
    return Answers()


@pytest.fixture
def echoed() -> list[str]:
    """Console output captured from the installer context."""
    return []


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the retry helper."""
    return []


@pytest.fixture
def make_context(config, fake_runner, answers, echoed, sleeps):
    """Build an InstallerContext, optionally overriding config fields."""

    def _make(**overrides) -> InstallerContext:
        cfg = config.model_copy(update=overrides) if overrides else config
        return InstallerContext.create(
            cfg,
            runner=fake_runner,
            confirm=answers,
            echo=echoed.append,
            sleep=sleeps.append,
        )

    return _make


@pytest.fixture
def installer_ctx(make_context) -> InstallerContext:
    return make_context()
