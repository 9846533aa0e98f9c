"""Structured JSON logging with a service name and per-record trace ids."""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Callable, Optional, TextIO


class Level(IntEnum):
    """Logging levels, ordered by severity."""

    DEBUG = -4
    INFO = 0
    WARN = 4
    ERROR = 8


TraceIDFunc = Callable[[], str]


def _caller(depth: int) -> tuple[str, int]:
    frame = sys._getframe(depth + 1)
    return os.path.basename(frame.f_code.co_filename), frame.f_lineno


class _ForwardHandler(logging.Handler):
    """Sends standard-library log records through a :class:`Logger`."""

    def __init__(self, target: "Logger", level: Level) -> None:
        super().__init__(logging.NOTSET)
        self._target = target
        self._level = level

    def emit(self, record: logging.LogRecord) -> None:
        source = (os.path.basename(record.pathname), record.lineno)
        self._target._write(self._level, record.getMessage(), {}, source)


class Logger:
    """Writes one JSON object per line for every enabled record."""

    def __init__(
        self,
        stream: TextIO,
        min_level: Level = Level.INFO,
        service_name: str = "",
        trace_id_func: Optional[TraceIDFunc] = None,
    ) -> None:
        self._stream = stream
        self.min_level = Level(min_level)
        self.service_name = service_name
        self._trace_id_func = trace_id_func
        self._lock = threading.Lock()

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log at DEBUG level."""
        self._write(Level.DEBUG, msg, kwargs, _caller(1))

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log at INFO level."""
        self._write(Level.INFO, msg, kwargs, _caller(1))

    def warn(self, msg: str, **kwargs: Any) -> None:
        """Log at WARN level."""
        self._write(Level.WARN, msg, kwargs, _caller(1))

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log at ERROR level."""
        self._write(Level.ERROR, msg, kwargs, _caller(1))

    def std_logger(self, level: Level) -> logging.Logger:
        """Return a standard-library logger whose messages go here at ``level``."""
        std = logging.Logger(f"{__name__}.std", logging.DEBUG)
        std.propagate = False
        std.addHandler(_ForwardHandler(self, Level(level)))
        return std

    def _write(
        self,
        level: Level,
        msg: str,
        fields: dict[str, Any],
        source: tuple[str, int],
    ) -> None:
        if level < self.min_level:
            return

        stamp = datetime.now(timezone.utc).isoformat(timespec="microseconds")
        record: dict[str, Any] = {
            "time": stamp.replace("+00:00", "Z"),
            "level": Level(level).name,
            "file": f"{source[0]}:{source[1]}",
            "msg": msg,
            "service": self.service_name,
        }
        record.update(fields)
        if self._trace_id_func is not None:
            record["trace_id"] = self._trace_id_func()

        line = json.dumps(record, default=str)
        with self._lock:
            self._stream.write(line + "\n")
            flush = getattr(self._stream, "flush", None)
            if flush is not None:
                flush()