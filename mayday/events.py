"""Session events recorded for replay and analytics."""

from __future__ import annotations

import dataclasses
import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class EventType(StrEnum):
    SESSION_STARTED = "SESSION_STARTED"
    PHASE_CHANGED = "PHASE_CHANGED"
    PRESSURE_CHANGED = "PRESSURE_CHANGED"
    TROOP_SPAWNED = "TROOP_SPAWNED"
    PLAYER_SHOT = "PLAYER_SHOT"
    PLAYER_HIT_TROOP = "PLAYER_HIT_TROOP"
    PLAYER_DAMAGED = "PLAYER_DAMAGED"
    PLAYER_DIED = "PLAYER_DIED"
    DEFEAT_TRIGGERED = "DEFEAT_TRIGGERED"
    SESSION_ENDED = "SESSION_ENDED"


@dataclass(frozen=True)
class Event:
    """One row of the game event log."""

    id: str
    session_id: str
    type: EventType
    server_tick: int
    payload: bytes
    created_at: datetime


def _json_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"cannot serialise {type(obj).__name__}")


def encode_payload(payload: Any) -> bytes:
    """Serialise ``payload`` to compact JSON; ``b"{}"`` if it is None or unserialisable."""
    if payload is None:
        return b"{}"
    try:
        text = json.dumps(
            payload,
            default=_json_default,
            separators=(",", ":"),
            sort_keys=True,
            allow_nan=False,
            ensure_ascii=False,
        )
    except (TypeError, ValueError):
        return b"{}"
    return text.encode("utf-8")


def new_event(session_id: str, event_type: EventType, tick: int, payload: Any) -> Event:
    """Build an event with a fresh UUID, encoded payload and current UTC time."""
    return Event(
        id=str(uuid.uuid4()),
        session_id=session_id,
        type=event_type,
        server_tick=tick,
        payload=encode_payload(payload),
        created_at=datetime.now(timezone.utc),
    )