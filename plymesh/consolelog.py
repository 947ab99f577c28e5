"""A console logger that can hold messages back inside titled sections."""

from __future__ import annotations

import enum
import sys
from typing import List, Optional, TextIO

_NOT_CLOSED = "----SECTION WAS NOT CLOSED----"
_YOU_DIDNT_CLOSE = "------YOU DIDN'T CLOSE A SECTION!------"
_SEPARATOR = "\t------------------------------------------------------"


class LogLevel(enum.IntEnum):
    """Severity of a message; lower values are more important."""

    ERR = 0
    WARNING = 1
    INFO = 2
    DEBUG = 3
    CRIT = 4


_PREFIXES = {
    LogLevel.DEBUG: "[DEBUG] ",
    LogLevel.INFO: "[INFO] ",
    LogLevel.WARNING: "[WARN] ",
    LogLevel.ERR: "[ERROR] ",
}


class ConsoleLog:
    """Writes log messages to a stream.

    Outside a section, messages at or below ``level`` are written at once.
    Inside a section every message is buffered; when the section closes the
    buffer is shown only if the log is verbose or an error was logged.
    """

    def __init__(self, level: LogLevel = LogLevel.INFO, verbose: bool = False,
                 stream: Optional[TextIO] = None) -> None:
        self.level = LogLevel(level)
        self.verbose = verbose
        self._stream = stream if stream is not None else sys.stdout
        self._buffer: List[str] = []
        self._section_open = False
        self._error_triggered = False

    @property
    def section_open(self) -> bool:
        return self._section_open

    def log(self, level: LogLevel, message: str) -> None:
        """Log a message at the given level."""
        level = LogLevel(level)
        if self._section_open:
            self._buffer.append(self._format(level, message))
        elif level <= self.level:
            self._write(self._format(level, message) + "\n")

    def info(self, message: str) -> None:
        self.log(LogLevel.INFO, message)

    def warn(self, message: str) -> None:
        self.log(LogLevel.WARNING, message)

    def debug(self, message: str) -> None:
        self.log(LogLevel.DEBUG, message)

    def error(self, message: str) -> None:
        """Log an error; the open section, if any, will show its details."""
        self.log(LogLevel.ERR, message)
        self._error_triggered = True

    def crit(self, message: str) -> None:
        self.log(LogLevel.CRIT, message)

    def open_section(self, prefix: str) -> None:
        """Start a section, writing its title without ending the line."""
        if self._section_open:
            self._close_forgotten_section()
        self._write(self._format(LogLevel.INFO, prefix))
        self._section_open = True
        self._error_triggered = False

    def close_section(self, postfix: str) -> None:
        """End the section line with ``postfix`` and show or drop its buffer."""
        self._write(postfix + "\n")
        if self.verbose or self._error_triggered:
            for line in self._buffer:
                self._write("\t|->" + line + "\n")
            if self._buffer:
                self._write(_SEPARATOR + "\n")
        self._buffer.clear()
        self._section_open = False
        self._error_triggered = False

    def close(self) -> None:
        """Finish logging, closing a section that was left open."""
        if self._section_open:
            self._close_forgotten_section()

    def __enter__(self) -> "ConsoleLog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _close_forgotten_section(self) -> None:
        self._write(_NOT_CLOSED + "\n")
        self.close_section("?")
        self._write(_YOU_DIDNT_CLOSE + "\n")

    @staticmethod
    def _format(level: LogLevel, message: str) -> str:
        return _PREFIXES.get(level, "") + message

    def _write(self, text: str) -> None:
        self._stream.write(text)