"""Leveled logger writing to a text stream, with optional ANSI colours."""

from __future__ import annotations

import inspect
import os
import sys
import threading
from typing import TextIO

_YELLOW = "\x1b[33m"
_RED = "\x1b[31m"
_BLUE = "\x1b[34m"
_RESET = "\x1b[0m"


def _color_disabled() -> bool:
    if "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb":
        return True
    isatty = getattr(sys.stdout, "isatty", None)
    return not (isatty and isatty())


def bold(s: str) -> str:
    """Render s in bold bright white when stdout is a colour terminal."""
    if _color_disabled():
        return s
    return f"\x1b[97;1m{s}{_RESET}"


def _format(message: str, args: tuple) -> str:
    return message % args if args else message


def _short_file(path: str) -> str:
    parts = path.replace(os.sep, "/").split("/")
    return "/".join(parts[-2:])


class Logger:
    """Writes messages to a stream; debug messages are gated by verbosity."""

    def __init__(self, writer: TextIO, verbosity: int = 0, colored: bool = False):
        self._writer = writer
        self._verbosity = verbosity
        self._colored = colored
        self._lock = threading.Lock()

    @property
    def verbosity(self) -> int:
        return self._verbosity

    @property
    def colored(self) -> bool:
        return self._colored

    def warn(self, message: str, *args) -> None:
        """Write a warning; printf-style args are applied when given."""
        text = _format(message, args)
        if self._colored:
            text = f"{_YELLOW}{text}{_RESET}"
        self._write(text)

    def error(self, message: str, *args) -> None:
        """Write an error; printf-style args are applied when given."""
        text = _format(message, args)
        if self._colored:
            text = f"{_RED}{text}{_RESET}"
        self._write(text)

    def v(self, level: int) -> InfoLogger:
        """Return an info logger for the given verbosity level."""
        return InfoLogger(self, level, level <= self._verbosity)

    def set_verbosity(self, verbosity: int) -> None:
        self._verbosity = verbosity

    def _write(self, text: str) -> None:
        if not text.endswith("\n"):
            text += "\n"
        with self._lock:
            self._writer.write(text)

    def _debug(self, text: str, file: str, line: int) -> None:
        header = f"DEBUG: {file}:{line}] "
        if self._colored:
            header = f"{_BLUE}{header}{_RESET}"
            text = f"{_BLUE}{text}{_RESET}"
        self._write(header + text)


class InfoLogger:
    """Logger bound to one verbosity level."""

    def __init__(self, logger: Logger, level: int, enabled: bool):
        self._logger = logger
        self._level = level
        self._enabled = enabled

    @property
    def level(self) -> int:
        return self._level

    def enabled(self) -> bool:
        return self._enabled

    def info(self, message: str, *args) -> None:
        """Write the message if enabled; levels above 0 get a debug header."""
        if not self._enabled:
            return
        text = _format(message, args)
        if self._level > 0:
            frame = inspect.currentframe()
            caller = frame.f_back if frame is not None else None
            if caller is None:
                file, line = "???", 1
            else:
                file, line = _short_file(caller.f_code.co_filename), caller.f_lineno
            del frame, caller
            self._logger._debug(text, file, line)
        else:
            self._logger._write(text)