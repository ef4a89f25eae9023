"""Process-wide logger writing to the console, a rolling file, or both."""

from __future__ import annotations

import enum
import os
import sys
import threading
import time
from typing import IO, Optional

_MESSAGE_LIMIT = 1023


class LogLevel(enum.IntEnum):
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5


class LogTarget(enum.Enum):
    CONSOLE = "console"
    FILE = "file"
    BOTH = "both"


class Logger:
    """Thread-safe logger; use :meth:`get_instance` for the shared one."""

    _instance: Optional["Logger"] = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._level = LogLevel.INFO
        self._target = LogTarget.CONSOLE
        self._log_file = "app.log"
        self._max_file_size = 1024 * 1024
        self._stream: Optional[IO[str]] = None
        self._lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> "Logger":
        """Return the shared logger, creating it on first use."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def target(self) -> LogTarget:
        return self._target

    @property
    def log_file(self) -> str:
        return self._log_file

    @property
    def max_file_size(self) -> int:
        return self._max_file_size

    def init(
        self,
        level: LogLevel = LogLevel.INFO,
        target: LogTarget = LogTarget.CONSOLE,
        log_file: str = "app.log",
        max_file_size: int = 1024 * 1024,
    ) -> None:
        """Configure level, target, file name and roll size in one go."""
        with self._lock:
            self._level = level
            self._target = target
            self._log_file = os.fspath(log_file)
            self._max_file_size = max_file_size
            if self._writes_file():
                self._open_log_file()

    def log(self, level: LogLevel, file: str, line: int, msg: str) -> None:
        """Write one record if ``level`` passes the current threshold."""
        if level < self._level:
            return
        with self._lock:
            record = (
                f"[{_timestamp()}] [{LogLevel(level).name}] [{file}] [{line}] "
                f"[{threading.get_ident()}]{msg}"
            )
            if self._target in (LogTarget.CONSOLE, LogTarget.BOTH):
                out = sys.stderr if self._level >= LogLevel.ERROR else sys.stdout
                print(record, file=out, flush=True)
            if self._writes_file():
                self._check_and_roll()
                if self._stream is not None:
                    self._stream.write(record + "\n")
                    self._stream.flush()

    def set_level(self, level: LogLevel) -> None:
        with self._lock:
            self._level = level

    def set_target(self, target: LogTarget) -> None:
        with self._lock:
            self._target = target
            if self._writes_file():
                self._open_log_file()

    def set_log_file(self, log_file: str) -> None:
        with self._lock:
            self._log_file = os.fspath(log_file)
            if self._writes_file() and self._stream is not None:
                self._stream.close()
                self._stream = None
                self._open_log_file()

    def set_max_size(self, max_size: int) -> None:
        with self._lock:
            self._max_file_size = max_size

    def close(self) -> None:
        """Close the log file if one is open."""
        with self._lock:
            if self._stream is not None:
                self._stream.close()
                self._stream = None

    def _writes_file(self) -> bool:
        return self._target in (LogTarget.FILE, LogTarget.BOTH)

    def _check_and_roll(self) -> None:
        if self._stream is None:
            return
        self._stream.seek(0, os.SEEK_END)
        if self._stream.tell() >= self._max_file_size:
            suffix = _timestamp().replace(" ", "-").replace(":", "-")
            self._stream.close()
            self._stream = None
            try:
                os.rename(self._log_file, f"{self._log_file}.{suffix}")
            except OSError:
                pass
            self._open_log_file()

    def _open_log_file(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        try:
            self._stream = open(self._log_file, "a", encoding="utf-8")
        except OSError:
            print(f"Failed to open log file: {self._log_file}", file=sys.stderr)


def _timestamp() -> str:
    now_ns = time.time_ns()
    seconds, rest = divmod(now_ns, 1_000_000_000)
    stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(seconds))
    return f"{stamp}.{rest // 1_000_000:03d}"


def _emit(level: LogLevel, fmt: str, args: tuple) -> None:
    caller = sys._getframe(2)
    msg = (fmt % args) if args else fmt
    Logger.get_instance().log(
        level, caller.f_code.co_filename, caller.f_lineno, msg[:_MESSAGE_LIMIT]
    )


def trace(fmt: str, *args) -> None:
    _emit(LogLevel.TRACE, fmt, args)


def debug(fmt: str, *args) -> None:
    _emit(LogLevel.DEBUG, fmt, args)


def info(fmt: str, *args) -> None:
    _emit(LogLevel.INFO, fmt, args)


def warn(fmt: str, *args) -> None:
    _emit(LogLevel.WARN, fmt, args)


def error(fmt: str, *args) -> None:
    _emit(LogLevel.ERROR, fmt, args)


def fatal(fmt: str, *args) -> None:
    _emit(LogLevel.FATAL, fmt, args)