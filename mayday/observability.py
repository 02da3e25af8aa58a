"""Process metrics, the JSON logger and the health check body."""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


class AtomicCounter:
    """A thread-safe integer counter."""

    def __init__(self, value: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = value

    def add(self, delta: int) -> int:
        """Add ``delta`` and return the new value."""
        with self._lock:
            self._value += delta
            return self._value

    def load(self) -> int:
        with self._lock:
            return self._value

    def __repr__(self) -> str:
        return f"AtomicCounter({self.load()})"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Metrics:
    """Server-wide counters."""

    start_time: datetime = field(default_factory=_utcnow)
    active_sessions: AtomicCounter = field(default_factory=AtomicCounter)
    total_sessions: AtomicCounter = field(default_factory=AtomicCounter)
    tick_count: AtomicCounter = field(default_factory=AtomicCounter)
    snapshot_count: AtomicCounter = field(default_factory=AtomicCounter)
    ws_messages_in: AtomicCounter = field(default_factory=AtomicCounter)
    ws_messages_out: AtomicCounter = field(default_factory=AtomicCounter)
    shots_fired_total: AtomicCounter = field(default_factory=AtomicCounter)
    shots_hit_total: AtomicCounter = field(default_factory=AtomicCounter)
    defeats_total: AtomicCounter = field(default_factory=AtomicCounter)

    def uptime_seconds(self) -> int:
        """Whole seconds since ``start_time``."""
        return int((_utcnow() - self.start_time).total_seconds())


_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class _JSONFormatter(logging.Formatter):
    """One JSON object per line: time, level, msg and any extra attributes."""

    def format(self, record: logging.LogRecord) -> str:
        body: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": _LEVEL_NAMES.get(record.levelno, record.levelname),
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                body[key] = value
        if record.exc_info:
            body["err"] = self.formatException(record.exc_info)
        return json.dumps(body, default=str)


def new_logger() -> logging.Logger:
    """A JSON logger on standard output; debug level when LOG_LEVEL=debug."""
    level = logging.DEBUG if os.environ.get("LOG_LEVEL") == "debug" else logging.INFO
    logger = logging.getLogger("mayday")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def health_response(metrics: Metrics) -> dict[str, Any]:
    """The body of the GET /health response."""
    return {
        "status": "ok",
        "service": "mayday-server",
        "uptime": metrics.uptime_seconds(),
        "timestamp": _utcnow().strftime("%Y-%m-%dT%H:%M:%SZ"),
    }