"""Terminal busy indicator shown while a request is outstanding."""

from __future__ import annotations

import sys
import threading
from typing import TextIO

DOTS9_FRAMES = ("⢹", "⢺", "⢼", "⣸", "⣇", "⡧", "⡗", "⡏")


class Spinner:
    def __init__(
        self,
        message: str,
        stream: TextIO | None = None,
        interval: float = 0.08,
        enabled: bool = True,
    ) -> None:
        self.message = message
        self.stream = stream or sys.stdout
        self.interval = interval
        self.enabled = enabled
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def _is_tty(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def _animate(self) -> None:
        i = 0
        while not self._stop_event.is_set():
            frame = DOTS9_FRAMES[i % len(DOTS9_FRAMES)]
            self.stream.write(f"\r{frame} {self.message}")
            self.stream.flush()
            i += 1
            self._stop_event.wait(self.interval)

    def start(self) -> "Spinner":
        if not self.enabled or self._thread is not None:
            return self
        if not self._is_tty():
            self.stream.write(f"{self.message}\n")
            self.stream.flush()
            return self
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._animate, name="spinner", daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join()
        self._thread = None
        # erase the spinner line
        self.stream.write("\r\x1b[2K")
        self.stream.flush()

    @property
    def running(self) -> bool:
        return self._thread is not None

    def __enter__(self) -> "Spinner":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.stop()
