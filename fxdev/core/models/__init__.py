"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from fxdev.core.models import InstallerConfig, CacheEntry, InstallOutcome
"""

from fxdev.core.models.cache import CacheEntry
from fxdev.core.models.config import (
    DEFAULT_CACHE_LIMIT_BYTES,
    InstallerConfig,
)
from fxdev.core.models.outcome import FailureKind, InstallOutcome

__all__ = [
    # cache.py
    "CacheEntry",
    # config.py
    "DEFAULT_CACHE_LIMIT_BYTES",
    "FailureKind",
    "InstallOutcome",
    "InstallerConfig",
]
