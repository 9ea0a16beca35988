"""
InstallerConfig — every path and tunable the installer needs.

Loaded once at startup (see ``fxdev.core.config.loader``) and threaded
into every installer through the ``InstallerContext``.  Nothing else
re-derives the cache, log, or apt locations.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

# 1 GiB
DEFAULT_CACHE_LIMIT_BYTES = 1024 ** 3

CACHE_DIR_NAME = ".install_cache"
LOG_FILE_NAME = "installation_log.txt"


class InstallerConfig(BaseModel):
    """Validated installer settings."""

    # ── Locations ────────────────────────────────────────────────
    home: Path = Field(default_factory=Path.home)
    cache_dir: Path | None = None          # default: <home>/.install_cache
    log_file: Path | None = None           # default: <home>/installation_log.txt

    # ── Cache ────────────────────────────────────────────────────
    cache_limit_bytes: int = Field(default=DEFAULT_CACHE_LIMIT_BYTES, gt=0)
    eviction_policy: Literal["flush", "oldest-first"] = "flush"

    # ── Retry ────────────────────────────────────────────────────
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=5.0, ge=0)

    # ── System locations (overridable for containers / tests) ────
    apt_sources_dir: Path = Path("/etc/apt/sources.list.d")
    apt_keyrings_dir: Path = Path("/usr/share/keyrings")
    apt_signing_dir: Path = Path("/etc/apt/keyrings")
    bin_dir: Path = Path("/usr/local/bin")

    # ── Package knobs ────────────────────────────────────────────
    node_version: str = "18"
    openvpn_release_deb: str = "openvpn3-release_2.4.6-1_amd64.deb"
    google_credentials: Path | None = None
    google_project: str | None = None

    # ── Behaviour ────────────────────────────────────────────────
    abort_on_failure: bool = False
    command_timeout: int = Field(default=1800, gt=0)

    @field_validator(
        "home", "cache_dir", "log_file", "apt_sources_dir", "apt_keyrings_dir",
        "apt_signing_dir", "bin_dir", "google_credentials",
        mode="before",
    )
    @classmethod
    def _expand_user(cls, value: object) -> object:
        if isinstance(value, str) and value:
            return Path(value).expanduser()
        if isinstance(value, Path):
            return value.expanduser()
        if value == "":
            return None
        return value

    @model_validator(mode="after")
    def _fill_home_relative(self) -> InstallerConfig:
        if self.cache_dir is None:
            self.cache_dir = self.home / CACHE_DIR_NAME
        if self.log_file is None:
            self.log_file = self.home / LOG_FILE_NAME
        return self

    @property
    def cache_path(self) -> Path:
        """Resolved cache directory (never None after validation)."""
        assert self.cache_dir is not None
        return self.cache_dir

    @property
    def log_path(self) -> Path:
        """Resolved installation log path (never None after validation)."""
        assert self.log_file is not None
        return self.log_file
