"""
Installation log — append-only ``[timestamp] - message`` history.

Every installer action is recorded in ``~/installation_log.txt`` so the
user can see what happened in earlier sessions.  The file is opened in
append mode for each entry; the tool never rewrites or truncates it.

Each entry is also mirrored to the module logger so ``--verbose`` shows
the same history on stderr.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_LINE_RE = re.compile(r"^\[(?P<timestamp>[^\]]+)\] - (?P<message>.*)$")


def _now_stamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


class LogEntry(BaseModel):
    """A single installation log entry."""

    timestamp: str = Field(default_factory=_now_stamp)
    message: str

    def to_line(self) -> str:
        return f"[{self.timestamp}] - {self.message}\n"

    @classmethod
    def parse(cls, line: str) -> LogEntry | None:
        match = _LINE_RE.match(line.rstrip("\n"))
        if match is None:
            return None
        return cls(timestamp=match["timestamp"], message=match["message"])


class InstallLog:
    """Append-only writer for the installation log.

    Args:
        path: Log file location. Parent directories are created on demand.
    """

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def log(self, message: str, level: int = logging.INFO) -> LogEntry:
        """Append one timestamped entry.

        A write failure is reported through the diagnostic logger and
        otherwise ignored: losing a history line must not abort an install.
        """
        entry = LogEntry(message=message)
        logger.log(level, message)

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(entry.to_line())
        except OSError as e:
            logger.error("Failed to write installation log %s: %s", self._path, e)

        return entry

    def read_all(self) -> list[LogEntry]:
        """Read every entry, oldest first. Unparseable lines are skipped."""
        if not self._path.is_file():
            return []

        entries = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    entry = LogEntry.parse(line)
                    if entry is None:
                        logger.debug("Skipping malformed log line %d", line_num)
                        continue
                    entries.append(entry)
        except OSError as e:
            logger.error("Failed to read installation log: %s", e)

        return entries

    def read_recent(self, n: int = 20) -> list[LogEntry]:
        """Read the most recent N entries."""
        if n <= 0:
            return []
        return self.read_all()[-n:]

    def messages(self) -> list[str]:
        """All logged messages, oldest first."""
        return [entry.message for entry in self.read_all()]

    def entry_count(self) -> int:
        """Count entries without parsing them."""
        if not self._path.is_file():
            return 0
        try:
            with self._path.open("r", encoding="utf-8") as f:
                return sum(1 for line in f if line.strip())
        except OSError:
            return 0
