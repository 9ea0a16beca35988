"""
Download cache — installers, keyrings and binaries kept between sessions.

Artifacts live directly in the cache directory (``~/.install_cache``).
The ``.index`` file next to them lists one ``component:filename`` record
per cached artifact, in the order they were added.  Each component owns
at most one artifact: caching a new one for the same component replaces
the old record and file.

Lookups are exact key matches.  When a record carries a sha256 digest the
artifact is re-hashed before reuse and a mismatch counts as a miss.

Eviction runs when the whole directory grows past the size limit:

    flush         every indexed artifact is deleted (the default)
    oldest-first  indexed artifacts are deleted in index order until the
                  directory is back under the limit

Files that are not in the index are never touched.
"""

from __future__ import annotations

import hashlib
import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from fxdev.core.models.cache import CacheEntry
from fxdev.core.models.config import DEFAULT_CACHE_LIMIT_BYTES

if TYPE_CHECKING:
    from fxdev.core.persistence.install_log import InstallLog

logger = logging.getLogger(__name__)

INDEX_FILE = ".index"

EvictionPolicy = Literal["flush", "oldest-first"]


@dataclass
class EvictionReport:
    """What an eviction pass did."""

    triggered: bool = False
    size_before: int = 0
    size_after: int = 0
    evicted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "triggered": self.triggered,
            "size_before": self.size_before,
            "size_after": self.size_after,
            "evicted": list(self.evicted),
            "failed": list(self.failed),
        }


def file_sha256(path: Path) -> str:
    """Hex sha256 digest of a file, read in chunks."""
    hasher = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


class CacheManager:
    """Index-backed download cache.

    Args:
        cache_dir: Directory holding the artifacts and the ``.index`` file.
        limit_bytes: Total size above which eviction kicks in.
        policy: ``flush`` or ``oldest-first``.
        install_log: Where eviction problems are recorded.
    """

    def __init__(
        self,
        cache_dir: Path,
        *,
        limit_bytes: int = DEFAULT_CACHE_LIMIT_BYTES,
        policy: EvictionPolicy = "flush",
        install_log: InstallLog | None = None,
    ):
        self._dir = cache_dir
        self._limit = limit_bytes
        self._policy = policy
        self._install_log = install_log

    @property
    def cache_dir(self) -> Path:
        return self._dir

    @property
    def index_path(self) -> Path:
        return self._dir / INDEX_FILE

    @property
    def limit_bytes(self) -> int:
        return self._limit

    def ensure(self) -> None:
        """Create the cache directory and an empty index if missing."""
        self._dir.mkdir(parents=True, exist_ok=True)
        self.index_path.touch(exist_ok=True)

    def artifact_path(self, filename: str) -> Path:
        return self._dir / filename

    # ── Index ───────────────────────────────────────────────────

    def entries(self) -> list[CacheEntry]:
        """Index records in insertion order."""
        if not self.index_path.is_file():
            return []
        try:
            lines = self.index_path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.warning("Cannot read cache index %s: %s", self.index_path, e)
            return []

        entries = []
        for line in lines:
            entry = CacheEntry.parse(line)
            if entry is None:
                if line.strip():
                    logger.debug("Ignoring malformed cache index line: %r", line)
                continue
            entries.append(entry)
        return entries

    def _write_entries(self, entries: list[CacheEntry]) -> None:
        """Rewrite the index (atomic: temp file then rename)."""
        self._dir.mkdir(parents=True, exist_ok=True)
        content = "".join(entry.to_line() + "\n" for entry in entries)

        _fd, tmp_path = tempfile.mkstemp(dir=self._dir, prefix=".index_", suffix=".tmp")
        tmp = Path(tmp_path)
        try:
            with open(_fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp.replace(self.index_path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

    def _drop(self, key: str) -> None:
        remaining = [e for e in self.entries() if e.key != key]
        self._write_entries(remaining)

    # ── get / put ───────────────────────────────────────────────

    def get(self, key: str) -> Path | None:
        """Return the cached artifact for ``key``, or None on a miss.

        A record whose file is gone, or whose digest no longer matches,
        is pruned and reported as a miss.
        """
        entry = next((e for e in self.entries() if e.key == key), None)
        if entry is None:
            return None

        path = self.artifact_path(entry.filename)
        if not path.is_file():
            logger.info("Cached artifact %s is gone — pruning index entry", path)
            self._drop(key)
            return None

        if entry.sha256:
            actual = file_sha256(path)
            if actual != entry.sha256:
                self._log(f"Cached artifact {entry.filename} failed integrity check; discarding")
                path.unlink(missing_ok=True)
                self._drop(key)
                return None

        logger.debug("Cache hit: %s → %s", key, path)
        return path

    def put(self, key: str, artifact: Path) -> Path:
        """Store ``artifact`` under ``key`` and record it in the index.

        The artifact is copied into the cache directory as the key's
        filename unless it already lives there.  Any earlier artifact of
        the same component is removed.

        Returns:
            Path of the cached copy.

        Raises:
            ValueError: If the key is malformed.
            FileNotFoundError: If ``artifact`` does not exist.
        """
        new = CacheEntry.from_key(key)
        if not artifact.is_file():
            raise FileNotFoundError(f"Cannot cache missing artifact: {artifact}")

        self.ensure()
        dest = self.artifact_path(new.filename)
        if artifact.resolve() != dest.resolve():
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(artifact, dest)
        new.sha256 = file_sha256(dest)

        kept: list[CacheEntry] = []
        for entry in self.entries():
            if entry.component != new.component:
                kept.append(entry)
                continue
            if entry.filename != new.filename:
                self._unlink_quietly(self.artifact_path(entry.filename))
        kept.append(new)
        self._write_entries(kept)

        logger.debug("Cached %s as %s", artifact, key)
        return dest

    # ── Size & eviction ─────────────────────────────────────────

    def total_size(self) -> int:
        """Bytes used by every file under the cache directory."""
        if not self._dir.is_dir():
            return 0
        total = 0
        for f in self._dir.rglob("*"):
            try:
                if f.is_file():
                    total += f.stat().st_size
            except OSError:
                continue
        return total

    def evict_if_over_limit(self) -> EvictionReport:
        """Evict indexed artifacts when the cache is over its size limit."""
        size = self.total_size()
        report = EvictionReport(size_before=size, size_after=size)
        if size <= self._limit:
            return report

        self._log(
            f"Cache size {size} bytes exceeds limit {self._limit} bytes. Cleaning up..."
        )
        report.triggered = True

        if self._policy == "oldest-first":
            self._evict(report, stop_under_limit=True)
        else:
            self._evict(report, stop_under_limit=False)
        return report

    def clear(self) -> EvictionReport:
        """Evict every indexed artifact regardless of size."""
        report = EvictionReport(triggered=True, size_before=self.total_size())
        self._evict(report, stop_under_limit=False)
        return report

    def _evict(self, report: EvictionReport, *, stop_under_limit: bool) -> None:
        remaining: list[CacheEntry] = []
        entries = self.entries()

        for i, entry in enumerate(entries):
            if stop_under_limit and self.total_size() <= self._limit:
                remaining.extend(entries[i:])
                break

            path = self.artifact_path(entry.filename)
            if not self._inside_cache(path):
                logger.warning("Index entry %s points outside the cache — dropping", entry.key)
                report.evicted.append(entry.key)
                continue

            try:
                if path.is_file():
                    path.unlink()
                report.evicted.append(entry.key)
            except OSError as e:
                # keep the record so the next pass retries the delete
                self._log(f"Failed to delete {path}: {e}")
                report.failed.append(entry.key)
                remaining.append(entry)

        try:
            self._write_entries(remaining)
        except OSError as e:
            self._log(f"Failed to update cache index: {e}")
        report.size_after = self.total_size()

    def status(self) -> dict[str, Any]:
        """Summary of indexed artifacts and their sizes."""
        artifacts = []
        for entry in self.entries():
            path = self.artifact_path(entry.filename)
            present = path.is_file()
            artifacts.append({
                "key": entry.key,
                "component": entry.component,
                "path": str(path),
                "present": present,
                "size_bytes": path.stat().st_size if present else 0,
                "sha256": entry.sha256,
            })
        total = self.total_size()
        return {
            "cache_dir": str(self._dir),
            "policy": self._policy,
            "limit_bytes": self._limit,
            "total_size_bytes": total,
            "over_limit": total > self._limit,
            "artifacts": artifacts,
        }

    # ── Private helpers ─────────────────────────────────────────

    def _inside_cache(self, path: Path) -> bool:
        try:
            path.resolve().relative_to(self._dir.resolve())
        except ValueError:
            return False
        return True

    def _unlink_quietly(self, path: Path) -> None:
        if not self._inside_cache(path):
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            self._log(f"Failed to delete {path}: {e}")

    def _log(self, message: str) -> None:
        if self._install_log is not None:
            self._install_log.log(message, level=logging.WARNING)
        else:
            logger.warning(message)
