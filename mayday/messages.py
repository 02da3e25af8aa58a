"""Server-to-client message types and their wire payloads."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Any

from mayday.scenario import DefeatReason, Phase
from mayday.vector import Vector3


class ServerMessageType(StrEnum):
    WELCOME = "welcome"
    SESSION_STARTED = "session_started"
    STATE_SNAPSHOT = "state_snapshot"
    TROOP_SPAWNED = "troop_spawned"
    TROOP_SHOT = "troop_shot"
    SHOT_RESULT = "shot_result"
    DAMAGE_TAKEN = "damage_taken"
    PLAYER_DIED = "player_died"
    SCENARIO_PHASE_CHANGED = "scenario_phase_changed"
    PRESSURE_CHANGED = "pressure_changed"
    DEFEAT_TRIGGERED = "defeat_triggered"
    SESSION_ENDED = "session_ended"
    EVENT_LOGGED = "event_logged"
    PONG = "pong"
    ERROR = "error"


def _wire(value: Any) -> Any:
    """Convert payload values into plain JSON-ready Python objects."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _wire(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(key): _wire(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_wire(item) for item in value]
    return value


@dataclass(frozen=True)
class ServerMessage:
    """A typed message bound for the client."""

    type: ServerMessageType | str
    payload: Any = None

    def to_dict(self) -> dict[str, Any]:
        """The message as a JSON-ready dictionary with wire field names."""
        msg_type = self.type.value if isinstance(self.type, Enum) else self.type
        return {"type": msg_type, "payload": _wire(self.payload)}


@dataclass(frozen=True, kw_only=True)
class WelcomePayload:
    server_version: str = ""
    server_time: int = 0


@dataclass(frozen=True, kw_only=True)
class SessionStartedPayload:
    session_id: str = ""
    tick_rate: int = 0
    started_at: int = 0


@dataclass(frozen=True, kw_only=True)
class PlayerSnapshot:
    id: str = ""
    name: str = ""
    position: Vector3 = Vector3()
    yaw: float = 0.0
    pitch: float = 0.0
    hp: int = 0
    max_hp: int = 0
    ammo: int = 0
    max_ammo: int = 0
    is_alive: bool = False
    last_processed_input_seq: int = 0
    survival_time_ms: int = 0
    morale: float = 0.0


@dataclass(frozen=True, kw_only=True)
class TroopSnapshot:
    id: str = ""
    position: Vector3 = Vector3()
    yaw: float = 0.0
    hp: int = 0
    max_hp: int = 0
    state: str = ""
    is_alive: bool = False
    squad_id: str = ""


@dataclass(frozen=True, kw_only=True)
class StateSnapshotPayload:
    server_tick: int = 0
    session_id: str = ""
    scenario_phase: Phase
    display_phase: int = 0
    phase_troops_killed: int = 0
    phase_troops_total: int = 0
    pressure_level: float = 0.0
    encirclement_level: float = 0.0
    player: PlayerSnapshot = PlayerSnapshot()
    troops: tuple[TroopSnapshot, ...] = ()


@dataclass(frozen=True, kw_only=True)
class TroopSpawnedPayload:
    troop: TroopSnapshot = TroopSnapshot()
    server_tick: int = 0


@dataclass(frozen=True, kw_only=True)
class TroopShotPayload:
    source_id: str = ""
    origin: Vector3 = Vector3()
    target: Vector3 = Vector3()
    hit: bool = False
    damage: int = 0


class ShotReason(StrEnum):
    HIT = "hit"
    MISS = "miss"
    DEAD = "dead"
    NO_AMMO = "no_ammo"
    FIRE_RATE = "fire_rate"
    BAD_DIRECTION = "bad_direction"
    NO_PLAYER = "no_player"


@dataclass(frozen=True, kw_only=True)
class ShotResultPayload:
    seq: int = 0
    accepted: bool = False
    reason: ShotReason
    hit_troop_id: str = ""
    hit_distance: float = 0.0
    damage_dealt: int = 0
    troop_killed: bool = False
    ammo_left: int = 0


@dataclass(frozen=True, kw_only=True)
class DamageTakenPayload:
    source: str = ""
    source_id: str = ""
    damage: int = 0
    remaining_hp: int = 0


@dataclass(frozen=True, kw_only=True)
class PlayerDiedPayload:
    session_id: str = ""
    tick: int = 0


@dataclass(frozen=True, kw_only=True)
class ScenarioPhaseChangedPayload:
    previous_phase: Phase
    current_phase: Phase
    tick: int = 0


@dataclass(frozen=True, kw_only=True)
class PressureChangedPayload:
    pressure_level: float = 0.0
    encirclement_level: float = 0.0


@dataclass(frozen=True, kw_only=True)
class DefeatTriggeredPayload:
    reason: DefeatReason = DefeatReason.NONE
    tick: int = 0


@dataclass(frozen=True, kw_only=True)
class SessionEndedPayload:
    session_id: str = ""
    survived_ms: int = 0
    final_phase: Phase
    defeat_reason: DefeatReason = DefeatReason.NONE
    shots_fired: int = 0
    shots_hit: int = 0
    damage_taken: int = 0
    troops_neutralized: int = 0
    events_recorded: int = 0


@dataclass(frozen=True, kw_only=True)
class EventLoggedPayload:
    type: str = ""
    server_tick: int = 0


@dataclass(frozen=True, kw_only=True)
class PongPayload:
    client_time: int = 0
    server_time: int = 0