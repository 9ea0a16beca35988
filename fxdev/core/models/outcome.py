"""
InstallOutcome — the uniform result of one package installer run.

Installers never exit the process.  Whatever happens inside one
(declined prompt, network trouble, missing build dependency, apt
failure) is captured here, and the menu loop alone decides whether
the session continues.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

FailureKind = Literal["transient_network", "dependency_missing", "install_failure"]


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class InstallOutcome(BaseModel):
    """Result of running a single package installer."""

    package: str
    status: Literal["ok", "skipped", "failed"] = "ok"
    failure_kind: FailureKind | None = None
    message: str = ""
    steps: list[str] = Field(default_factory=list)

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, package: str, message: str = "", **kwargs: Any) -> InstallOutcome:
        return cls(package=package, status="ok", message=message, **kwargs)

    @classmethod
    def skip(cls, package: str, reason: str = "", **kwargs: Any) -> InstallOutcome:
        return cls(package=package, status="skipped", message=reason, **kwargs)

    @classmethod
    def failure(
        cls,
        package: str,
        message: str,
        kind: FailureKind = "install_failure",
        **kwargs: Any,
    ) -> InstallOutcome:
        return cls(
            package=package,
            status="failed",
            failure_kind=kind,
            message=message,
            **kwargs,
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
