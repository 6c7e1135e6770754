"""Terminal spinner showing the progress of a long-running step."""

from __future__ import annotations

import itertools
import sys
import threading
from typing import Optional, TextIO

SPINNER_FRAMES = (
    "⠈⠁",
    "⠈⠑",
    "⠈⠱",
    "⠈⡱",
    "⢀⡱",
    "⢄⡱",
    "⢄⡱",
    "⢆⡱",
    "⢎⡱",
    "⢎⡰",
    "⢎⡠",
    "⢎⡀",
    "⢎⠁",
    "⠎⠁",
    "⠊⠁",
)

DEFAULT_DELAY = 0.1

_FRAME_COLOR = "\x1b[97;1m"
_RESET = "\x1b[0m"
_CLEAR_LINE = "\r\x1b[K"


class Spinner:
    """Animated status line that ends with a success or failure mark."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream if stream is not None else sys.stdout
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._thread is not None

    def _draw(self, frame: str, suffix: str) -> None:
        with self._lock:
            self._stream.write(f"{_CLEAR_LINE}{_FRAME_COLOR}{frame}{_RESET}{suffix}")
            self._stream.flush()

    def start(self, status: str) -> None:
        """Start spinning with the given status text."""
        if self._thread is not None:
            return
        suffix = f" {status}"
        frames = itertools.cycle(SPINNER_FRAMES)
        self._draw(next(frames), suffix)
        self._stop.clear()

        def spin() -> None:
            while not self._stop.wait(DEFAULT_DELAY):
                self._draw(next(frames), suffix)

        self._thread = threading.Thread(target=spin, name="spinner", daemon=True)
        self._thread.start()

    def stop(self, success: bool, status: str) -> None:
        """Stop spinning and print the final status line."""
        if self._thread is not None:
            self._stop.set()
            self._thread.join()
            self._thread = None
        if success:
            final = f" \x1b[32m✓\x1b[0m {status}\n"
        else:
            final = f" \x1b[31m✗\x1b[0m {status} 😵‍💫\n"
        with self._lock:
            self._stream.write(_CLEAR_LINE + final)
            self._stream.flush()