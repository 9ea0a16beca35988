"""
Installer error taxonomy.

Steps inside a package installer raise these; the installer base class
turns them into a failed ``InstallOutcome``.  A declined confirmation
prompt is not an error and never raises: it yields a skipped outcome.
"""

from __future__ import annotations

from fxdev.core.models.outcome import FailureKind


class InstallerError(Exception):
    """Base class for failures contained to one package installer."""

    kind: FailureKind = "install_failure"

    def __init__(self, message: str, *, package: str = ""):
        super().__init__(message)
        self.message = message
        self.package = package


class TransientNetworkFailure(InstallerError):
    """A network step still failed after every retry attempt."""

    kind: FailureKind = "transient_network"


class DependencyMissing(InstallerError):
    """A prerequisite binary or package is not present."""

    kind: FailureKind = "dependency_missing"


class InstallFailure(InstallerError):
    """The package manager or a build step failed."""

    kind: FailureKind = "install_failure"
