"""Authoritative server-side player and troop records and gameplay constants."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from mayday.ai import FSMState
from mayday.vector import Vector3

MIN_TROOP_FLOOR = 2
STARTING_TROOP_AMMO = 30
STARTING_TROOP_HP = 60
TROOP_FIRE_RATE_MS = 900
PLAYER_START_Y = 7.0
PLAYER_START_Z = -36.0


@dataclass
class CivilianPlayerState:
    """Server-side player record; mutated only by the session loop."""

    id: str = ""
    name: str = ""
    position: Vector3 = Vector3()
    velocity: Vector3 = Vector3()
    yaw: float = 0.0
    pitch: float = 0.0
    hp: int = 0
    max_hp: int = 0
    ammo: int = 0
    max_ammo: int = 0
    is_alive: bool = True
    last_processed_input_seq: int = 0
    joined_at: datetime | None = None
    last_seen_at: datetime | None = None
    last_shot_at: datetime | None = None
    survival_time_ms: int = 0
    morale: float = 1.0


@dataclass
class MartialTroopState:
    """Server-side record for one troop."""

    id: str = ""
    position: Vector3 = Vector3()
    velocity: Vector3 = Vector3()
    yaw: float = 0.0
    pitch: float = 0.0
    hp: int = 0
    max_hp: int = 0
    ammo: int = 0
    max_ammo: int = 0
    state: FSMState = FSMState.PATROL
    target_player_id: str = ""
    last_known_target_position: Vector3 | None = None
    is_alive: bool = True
    difficulty: str = ""
    last_shot_at: datetime | None = None
    squad_id: str = ""