"""Event and session persistence records with no-op and in-memory stores."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class EventRecord:
    """Persistence shape of one session event row."""

    id: str
    session_id: str
    type: str
    server_tick: int
    payload: bytes
    created_at: datetime


class NoopEventRepository:
    """Discards events; used when no database is configured.

    Only a count of the discarded events is kept.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.dropped = 0

    def insert(self, record: EventRecord) -> None:
        with self._lock:
            self.dropped += 1


class MemoryEventRepository:
    """Keeps events in memory, in insertion order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[EventRecord] = []

    def insert(self, record: EventRecord) -> None:
        with self._lock:
            self._events.append(record)

    def all(self) -> list[EventRecord]:
        """A copy of every stored event."""
        with self._lock:
            return list(self._events)


@dataclass(frozen=True)
class SessionStartRecord:
    id: str
    player_name: str
    started_at: datetime


@dataclass(frozen=True)
class SessionEndRecord:
    id: str
    ended_at: datetime
    survived_ms: int = 0
    final_phase: str = ""
    defeat_reason: str = ""
    shots_fired: int = 0
    shots_hit: int = 0
    damage_taken: int = 0
    troops_neutralized: int = 0


class NoopSessionRepository:
    """Discards session records; used when the database is offline.

    Only counts of the discarded start and end records are kept.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.dropped_starts = 0
        self.dropped_ends = 0

    def start(self, record: SessionStartRecord) -> None:
        with self._lock:
            self.dropped_starts += 1

    def end(self, record: SessionEndRecord) -> None:
        with self._lock:
            self.dropped_ends += 1


class MemorySessionRepository:
    """Keeps session start and end records in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._starts: list[SessionStartRecord] = []
        self._ends: list[SessionEndRecord] = []

    def start(self, record: SessionStartRecord) -> None:
        with self._lock:
            self._starts.append(record)

    def end(self, record: SessionEndRecord) -> None:
        with self._lock:
            self._ends.append(record)

    def starts(self) -> list[SessionStartRecord]:
        with self._lock:
            return list(self._starts)

    def ends(self) -> list[SessionEndRecord]:
        with self._lock:
            return list(self._ends)