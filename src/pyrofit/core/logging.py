"""Structured JSON-line logging for fitting runs."""

from __future__ import annotations

import json
import math
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, TextIO

LEVELS = {"DEBUG": 0, "INFO": 1, "WARN": 2, "ERROR": 3}


def _jsonable(value: Any) -> Any:
    # JSON has no NaN/inf; sentinel or diverged statistics are written as strings
    if isinstance(value, float) and not math.isfinite(value):
        return repr(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if hasattr(value, "tolist"):
        return _jsonable(value.tolist())
    return value


@dataclass
class LogEntry:
    """One structured log line."""

    level: str
    message: str
    logger: str
    timestamp: float = field(default_factory=time.time)
    data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        payload = {
            "level": self.level,
            "message": self.message,
            "logger": self.logger,
            "timestamp": self.timestamp,
        }
        payload.update({k: _jsonable(v) for k, v in self.data.items()})
        return json.dumps(payload)


class StructuredLogger:
    """Logger writing one JSON object per line.

    Args:
        name: Logger name (typically __name__).
        output: Stream to write to; stderr when None.
        min_level: Lowest level emitted (DEBUG, INFO, WARN, ERROR).
    """

    def __init__(
        self,
        name: str,
        output: TextIO | None = None,
        min_level: str = "INFO",
    ) -> None:
        self.name = name
        self.output = output
        self.min_level = LEVELS.get(min_level.upper(), 1)

    def _log(self, level: str, message: str, **data: Any) -> None:
        if LEVELS[level] < self.min_level:
            return
        entry = LogEntry(level=level, message=message, logger=self.name, data=data)
        stream = self.output if self.output is not None else sys.stderr
        print(entry.to_json(), file=stream, flush=True)

    def debug(self, message: str, **data: Any) -> None:
        self._log("DEBUG", message, **data)

    def info(self, message: str, **data: Any) -> None:
        self._log("INFO", message, **data)

    def warn(self, message: str, **data: Any) -> None:
        self._log("WARN", message, **data)

    def error(self, message: str, **data: Any) -> None:
        self._log("ERROR", message, **data)

    @contextmanager
    def timer(self, operation: str):
        """Log the wall-clock duration of a block at INFO.

        Usage:
            with logger.timer("ga_run"):
                engine.run()
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            self.info(f"{operation} completed", elapsed_s=time.perf_counter() - start)


_loggers: dict[str, StructuredLogger] = {}
_default_level = "INFO"


def get_logger(name: str) -> StructuredLogger:
    """Get or create the structured logger for `name`."""
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name, min_level=_default_level)
    return _loggers[name]


def set_log_level(level: str) -> None:
    """Set the minimum level for existing and future loggers."""
    global _default_level
    level = level.upper()
    if level not in LEVELS:
        raise ValueError(f"Unknown log level {level!r}; expected one of {sorted(LEVELS)}")
    _default_level = level
    for logger in _loggers.values():
        logger.min_level = LEVELS[level]
