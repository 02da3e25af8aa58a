"""Authoritative game systems: damage, movement, survival and shooting."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta

from mayday.messages import ShotReason
from mayday.state import CivilianPlayerState, MartialTroopState
from mayday.vector import (
    Ray,
    Vector3,
    add,
    check_ray_against_sphere,
    distance,
    is_zero,
    length,
    normalize,
    scale,
    sub,
)

MAX_DELTA_MS = 100
"""Upper bound on a client-supplied tick delta, so a stuck client cannot teleport."""

_PLAYER_MIN_X = -12.5
_PLAYER_MAX_X = 12.5
_PLAYER_MIN_Z = -45.0
_PLAYER_MAX_Z = -34.5
_PLAYER_Y = 7.0

_HIT_HEIGHTS = (0.45, 1.15, 1.7)
_HIT_RADIUS = 0.7


@dataclass(frozen=True)
class DamageResult:
    """Outcome of applying damage to a player or troop."""

    applied_damage: int = 0
    remaining_hp: int = 0
    killed: bool = False


def _apply_damage(target: CivilianPlayerState | MartialTroopState | None, dmg: int) -> DamageResult:
    if target is None or not target.is_alive or dmg <= 0:
        return DamageResult()
    target.hp -= dmg
    if target.hp <= 0:
        target.hp = 0
        target.is_alive = False
        return DamageResult(applied_damage=dmg, remaining_hp=0, killed=True)
    return DamageResult(applied_damage=dmg, remaining_hp=target.hp)


def apply_damage_to_player(player: CivilianPlayerState | None, dmg: int) -> DamageResult:
    """Reduce player HP; HP stops at zero and the player dies there."""
    return _apply_damage(player, dmg)


def apply_damage_to_troop(troop: MartialTroopState | None, dmg: int) -> DamageResult:
    """Reduce troop HP; HP stops at zero and the troop dies there."""
    return _apply_damage(troop, dmg)


@dataclass(frozen=True)
class MovementInput:
    """Directional key state for one tick."""

    forward: bool = False
    backward: bool = False
    left: bool = False
    right: bool = False


def _clamp_player_position(pos: Vector3) -> Vector3:
    return Vector3(
        max(_PLAYER_MIN_X, min(_PLAYER_MAX_X, pos.x)),
        _PLAYER_Y,
        max(_PLAYER_MIN_Z, min(_PLAYER_MAX_Z, pos.z)),
    )


def apply_client_player_position(player: CivilianPlayerState | None, pos: Vector3) -> None:
    """Accept the client-predicted position, clamped to the play area."""
    if player is None or not player.is_alive:
        return
    player.position = _clamp_player_position(pos)


def apply_player_movement(
    player: CivilianPlayerState | None, inp: MovementInput, delta_ms: int, speed: float
) -> None:
    """Move the player by key input relative to its yaw; diagonals are normalised."""
    if player is None or not player.is_alive or delta_ms <= 0:
        return
    delta_ms = min(delta_ms, MAX_DELTA_MS)

    sin_yaw = math.sin(player.yaw)
    cos_yaw = math.cos(player.yaw)
    dx = dz = 0.0
    if inp.forward:
        dx += sin_yaw
        dz += cos_yaw
    if inp.backward:
        dx -= sin_yaw
        dz -= cos_yaw
    if inp.right:
        dx -= cos_yaw
        dz += sin_yaw
    if inp.left:
        dx += cos_yaw
        dz -= sin_yaw

    direction = Vector3(dx, 0.0, dz)
    if is_zero(direction):
        player.velocity = Vector3()
        return
    direction = normalize(direction)
    step = scale(direction, speed * (delta_ms / 1000.0))
    player.position = _clamp_player_position(add(player.position, step))
    player.velocity = scale(direction, speed)


def move_troop_toward(
    troop: MartialTroopState | None, target: Vector3, delta_ms: int, speed: float
) -> float:
    """Step a troop toward ``target`` without overshooting; return the distance left."""
    if troop is None or not troop.is_alive:
        return 0.0
    if delta_ms <= 0:
        return distance(troop.position, target)
    delta_ms = min(delta_ms, MAX_DELTA_MS * 4)

    to_target = sub(target, troop.position)
    dist = length(to_target)
    if dist == 0:
        troop.velocity = Vector3()
        return 0.0
    direction = scale(to_target, 1.0 / dist)
    max_step = speed * (delta_ms / 1000.0)
    if max_step >= dist:
        troop.position = target
        troop.velocity = Vector3()
        return 0.0
    troop.position = add(troop.position, scale(direction, max_step))
    troop.velocity = scale(direction, speed)
    return dist - max_step


def apply_player_look(player: CivilianPlayerState | None, yaw: float, pitch: float) -> None:
    """Set the player's yaw and pitch, ignoring NaN values."""
    if player is None or math.isnan(yaw) or math.isnan(pitch):
        return
    player.yaw = yaw
    player.pitch = pitch


@dataclass
class SessionStats:
    """Per-session totals for the final summary and persisted session row."""

    shots_fired: int = 0
    shots_hit: int = 0
    damage_taken: int = 0
    troops_neutralized: int = 0
    events_recorded: int = 0
    survived_ms: int = 0


def accumulate_survival(player: CivilianPlayerState | None, delta_ms: int) -> None:
    """Add ``delta_ms`` to the survival time of a living player."""
    if player is None or not player.is_alive or delta_ms <= 0:
        return
    player.survival_time_ms += delta_ms


@dataclass(frozen=True)
class ShootConfig:
    """Validation parameters for one fire attempt."""

    max_distance: float = 0.0
    angle_threshold: float = 0.0
    damage: int = 0
    fire_rate_limit: timedelta = timedelta(0)


@dataclass(frozen=True)
class ShotOutcome:
    """Result of one server-validated player shot."""

    reason: ShotReason
    accepted: bool = False
    hit_troop_id: str = ""
    hit_distance: float = 0.0
    damage_dealt: int = 0
    troop_killed: bool = False


def _best_hit_distance(ray: Ray, troop: MartialTroopState, max_distance: float) -> float | None:
    hits = (
        check_ray_against_sphere(
            ray,
            Vector3(troop.position.x, troop.position.y + height, troop.position.z),
            _HIT_RADIUS,
            max_distance,
        )
        for height in _HIT_HEIGHTS
    )
    distances = [hit.distance for hit in hits if hit is not None]
    return min(distances) if distances else None


def process_player_shoot(
    player: CivilianPlayerState | None,
    troops: Mapping[str, MartialTroopState | None] | None,
    origin: Vector3,
    direction: Vector3,
    cfg: ShootConfig,
    now: datetime,
) -> ShotOutcome:
    """Validate a player shot, raycast against troops and apply damage to the nearest hit."""
    if player is None:
        return ShotOutcome(ShotReason.NO_PLAYER)
    if not player.is_alive:
        return ShotOutcome(ShotReason.DEAD)
    if player.ammo <= 0:
        return ShotOutcome(ShotReason.NO_AMMO)
    if player.last_shot_at is not None and now - player.last_shot_at < cfg.fire_rate_limit:
        return ShotOutcome(ShotReason.FIRE_RATE)
    if is_zero(direction):
        return ShotOutcome(ShotReason.BAD_DIRECTION)

    player.ammo -= 1
    player.last_shot_at = now

    ray = Ray(origin=origin, direction=direction)
    hit_id = ""
    hit_dist = cfg.max_distance + 1
    for troop_id, troop in (troops or {}).items():
        if troop is None or not troop.is_alive:
            continue
        best = _best_hit_distance(ray, troop, cfg.max_distance)
        if best is not None and best < hit_dist:
            hit_id = troop_id
            hit_dist = best

    if not hit_id:
        return ShotOutcome(ShotReason.MISS, accepted=True)

    result = apply_damage_to_troop(troops[hit_id], cfg.damage)
    return ShotOutcome(
        ShotReason.HIT,
        accepted=True,
        hit_troop_id=hit_id,
        hit_distance=hit_dist,
        damage_dealt=result.applied_damage,
        troop_killed=result.killed,
    )


def troop_shoot_attempt(
    troop: MartialTroopState | None,
    player: CivilianPlayerState | None,
    damage: int,
    fire_rate: timedelta,
    now: datetime,
) -> DamageResult | None:
    """Fire a troop's weapon at the player, gated by ammo and fire rate.

    Returns the damage result if the troop fired, or ``None`` if it could not.
    """
    if troop is None or player is None or not troop.is_alive or not player.is_alive:
        return None
    if troop.ammo <= 0:
        return None
    if troop.last_shot_at is not None and now - troop.last_shot_at < fire_rate:
        return None
    troop.ammo -= 1
    troop.last_shot_at = now
    return apply_damage_to_player(player, damage)