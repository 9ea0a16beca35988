"""
CacheEntry — one line of the download cache index.

The index is a plain text file, one ``component:filename`` record per
line.  A record may carry a trailing ``sha256=<hex>`` field with the
artifact's content digest.  Lines written by older installers have no
digest and are trusted as-is.
"""

from __future__ import annotations

from pydantic import BaseModel

_DIGEST_PREFIX = "sha256="


class CacheEntry(BaseModel):
    """A cached artifact belonging to one package component."""

    component: str
    filename: str
    sha256: str | None = None

    @property
    def key(self) -> str:
        """The ``component:filename`` lookup key."""
        return f"{self.component}:{self.filename}"

    def to_line(self) -> str:
        if self.sha256:
            return f"{self.key} {_DIGEST_PREFIX}{self.sha256}"
        return self.key

    @classmethod
    def from_key(cls, key: str, sha256: str | None = None) -> CacheEntry:
        """Build an entry from a ``component:filename`` key.

        Raises:
            ValueError: If the key has no component or no filename.
        """
        component, sep, filename = key.partition(":")
        if not sep or not component or not filename:
            raise ValueError(f"Invalid cache key {key!r} (expected component:filename)")
        return cls(component=component, filename=filename, sha256=sha256)

    @classmethod
    def parse(cls, line: str) -> CacheEntry | None:
        """Parse an index line. Returns None for blank or malformed lines."""
        parts = line.split()
        if not parts:
            return None
        sha256 = None
        for extra in parts[1:]:
            if extra.startswith(_DIGEST_PREFIX):
                sha256 = extra[len(_DIGEST_PREFIX):] or None
        try:
            return cls.from_key(parts[0], sha256=sha256)
        except ValueError:
            return None
