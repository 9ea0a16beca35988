"""
Console spinner shown while a long command (``apt update``) runs.

A daemon thread redraws one character in place for as long as the
watched process is alive.  It is purely cosmetic and does nothing when
stdout is not a terminal.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable
from typing import TextIO

_FRAMES = "-\\|/"


class Spinner:
    """Spin while ``is_running()`` returns True.

    Args:
        is_running: Liveness probe for the watched process.
        stream: Output stream (default: stdout).
        delay: Seconds between frames.
    """

    def __init__(
        self,
        is_running: Callable[[], bool],
        *,
        stream: TextIO | None = None,
        delay: float = 0.1,
    ):
        self._is_running = is_running
        self._stream = stream or sys.stdout
        self._delay = delay
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def active(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        isatty = getattr(self._stream, "isatty", None)
        if not (isatty and isatty()):
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._spin, name="spinner", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout=self._delay * 5)
        self._thread = None
        self._stream.write("\b ")
        self._stream.flush()

    def _spin(self) -> None:
        frame = 0
        self._stream.write(" ")
        while not self._stop.is_set() and self._is_running():
            self._stream.write("\b" + _FRAMES[frame % len(_FRAMES)])
            self._stream.flush()
            frame += 1
            self._stop.wait(self._delay)

    def __enter__(self) -> Spinner:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
