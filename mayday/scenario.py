"""Scenario director: phase progression, pressure and defeat triggers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum


class Phase(StrEnum):
    INITIAL_CONTACT = "INITIAL_CONTACT"
    ESCALATION = "ESCALATION"
    REINFORCEMENT = "REINFORCEMENT"
    ENCIRCLEMENT = "ENCIRCLEMENT"
    FINAL_STAND = "FINAL_STAND"
    DEFEAT = "DEFEAT"

    def is_terminal(self) -> bool:
        return self is Phase.DEFEAT

    def order(self) -> int:
        """Numeric position of the phase; later phases are higher."""
        return _PHASE_ORDER.get(self, -1)


_PHASE_ORDER = {
    Phase.INITIAL_CONTACT: 0,
    Phase.ESCALATION: 1,
    Phase.REINFORCEMENT: 2,
    Phase.ENCIRCLEMENT: 3,
    Phase.FINAL_STAND: 4,
    Phase.DEFEAT: 5,
}


class DefeatReason(StrEnum):
    NONE = ""
    PLAYER_KILLED = "PLAYER_KILLED"
    OVERRUN = "OVERRUN"
    AMMO_EXHAUSTED = "AMMO_EXHAUSTED"
    ENCIRCLED = "ENCIRCLED"
    SCRIPTED_FINAL_STAND = "SCRIPTED_FINAL_STAND"
    DISCONNECTED = "DISCONNECTED"


@dataclass(frozen=True)
class DirectorConfig:
    """Timing parameters, measured from session start."""

    final_stand_after: timedelta = timedelta(0)
    force_defeat_after: timedelta = timedelta(0)
    max_troops: int = 0


@dataclass(frozen=True)
class DirectorInput:
    """Per-tick context for the director."""

    now: datetime
    player_hp: int = 0
    player_max_hp: int = 0
    player_ammo: int = 0
    player_max_ammo: int = 0
    player_alive: bool = False
    surviving_troop_count: int = 0


@dataclass(frozen=True)
class Update:
    """What changed during one director tick."""

    previous_phase: Phase
    current_phase: Phase
    phase_changed: bool = False
    pressure_changed: bool = False
    pressure_level: float = 0.0
    encirclement_level: float = 0.0
    triggered_defeat: bool = False
    defeat_reason: DefeatReason = DefeatReason.NONE


@dataclass(frozen=True)
class PressureInput:
    elapsed_ms: int = 0
    full_pressure_after_ms: int = 0
    player_hp: int = 0
    player_max_hp: int = 0
    player_ammo: int = 0
    player_max_ammo: int = 0
    surviving_troops: int = 0
    max_troops: int = 0


def _clamp01(v: float) -> float:
    if math.isnan(v):
        return 0.0
    return min(1.0, max(0.0, v))


def _millis(td: timedelta) -> int:
    """Whole milliseconds in ``td``, truncated toward zero."""
    micros = (td.days * 86_400 + td.seconds) * 1_000_000 + td.microseconds
    ms = abs(micros) // 1000
    return ms if micros >= 0 else -ms


def compute_pressure(inp: PressureInput) -> float:
    """Weighted pressure from time, HP loss, ammo loss and troop count, in [0, 1]."""
    time_part = inp.elapsed_ms / inp.full_pressure_after_ms if inp.full_pressure_after_ms > 0 else 0.0
    hp_part = 1.0 - inp.player_hp / inp.player_max_hp if inp.player_max_hp > 0 else 0.0
    ammo_part = 1.0 - inp.player_ammo / inp.player_max_ammo if inp.player_max_ammo > 0 else 0.0
    troop_part = inp.surviving_troops / inp.max_troops if inp.max_troops > 0 else 0.0
    pressure = 0.5 * time_part + 0.2 * hp_part + 0.1 * ammo_part + 0.2 * troop_part
    return _clamp01(pressure)


def compute_encirclement(elapsed_ms: int, full_after_ms: int) -> float:
    """Quadratic ease-in of elapsed time over ``full_after_ms``, in [0, 1]."""
    if full_after_ms <= 0:
        return 0.0
    t = elapsed_ms / full_after_ms
    return _clamp01(t * t)


def _significant_pressure_change(prev: float, nxt: float) -> bool:
    return abs(nxt - prev) >= 0.05


class Director:
    """Owns scenario-level state for one session. Not thread-safe."""

    def __init__(self, now: datetime, cfg: DirectorConfig) -> None:
        self._session_started_at = now
        self._phase_started_at = now
        self._current_phase = Phase.INITIAL_CONTACT
        self._pressure_level = 0.0
        self._encirclement_level = 0.0
        self._reinforcement_level = 0
        self._escape_blocked = False
        self._forced_defeat_triggered = False
        self._defeat_reason = DefeatReason.NONE
        self._cfg = cfg

    @property
    def current_phase(self) -> Phase:
        return self._current_phase

    @property
    def pressure_level(self) -> float:
        return self._pressure_level

    @property
    def encirclement_level(self) -> float:
        return self._encirclement_level

    @property
    def reinforcement_level(self) -> int:
        return self._reinforcement_level

    @property
    def escape_blocked(self) -> bool:
        return self._escape_blocked

    @property
    def forced_defeat_triggered(self) -> bool:
        return self._forced_defeat_triggered

    @property
    def defeat_reason(self) -> DefeatReason:
        return self._defeat_reason

    @property
    def session_started_at(self) -> datetime:
        return self._session_started_at

    @property
    def phase_started_at(self) -> datetime:
        return self._phase_started_at

    def tick(self, inp: DirectorInput) -> Update:
        """Advance the director by one simulation tick."""
        prev_phase = self._current_phase
        prev_pressure = self._pressure_level

        elapsed_ms = _millis(inp.now - self._session_started_at)
        final_stand_ms = _millis(self._cfg.final_stand_after)
        force_defeat_ms = _millis(self._cfg.force_defeat_after)

        self._pressure_level = compute_pressure(
            PressureInput(
                elapsed_ms=elapsed_ms,
                full_pressure_after_ms=final_stand_ms,
                player_hp=inp.player_hp,
                player_max_hp=inp.player_max_hp,
                player_ammo=inp.player_ammo,
                player_max_ammo=inp.player_max_ammo,
                surviving_troops=inp.surviving_troop_count,
                max_troops=self._cfg.max_troops,
            )
        )
        self._encirclement_level = compute_encirclement(elapsed_ms, force_defeat_ms)

        self._advance_phase(inp.now, elapsed_ms, final_stand_ms)

        base = dict(
            previous_phase=prev_phase,
            pressure_changed=_significant_pressure_change(prev_pressure, self._pressure_level),
            pressure_level=self._pressure_level,
            encirclement_level=self._encirclement_level,
        )

        reason = None
        if not self._forced_defeat_triggered:
            reason = self._check_defeat_triggers(inp, elapsed_ms, force_defeat_ms)
        if reason is None:
            return Update(
                current_phase=self._current_phase,
                phase_changed=prev_phase != self._current_phase,
                **base,
            )

        self._forced_defeat_triggered = True
        self._defeat_reason = reason
        self._transition_to(Phase.DEFEAT, inp.now)
        return Update(
            current_phase=self._current_phase,
            phase_changed=prev_phase != self._current_phase,
            triggered_defeat=True,
            defeat_reason=reason,
            **base,
        )

    def mark_disconnected(self, now: datetime) -> Update:
        """Force DEFEAT because the client went away. Idempotent."""
        if self._forced_defeat_triggered:
            return Update(previous_phase=self._current_phase, current_phase=self._current_phase)
        prev = self._current_phase
        self._forced_defeat_triggered = True
        self._defeat_reason = DefeatReason.DISCONNECTED
        self._transition_to(Phase.DEFEAT, now)
        return Update(
            previous_phase=prev,
            current_phase=self._current_phase,
            phase_changed=prev != self._current_phase,
            triggered_defeat=True,
            defeat_reason=DefeatReason.DISCONNECTED,
        )

    def _advance_phase(self, now: datetime, elapsed_ms: int, final_stand_ms: int) -> None:
        phase = self._current_phase
        pressure = self._pressure_level
        if phase is Phase.INITIAL_CONTACT:
            if elapsed_ms > final_stand_ms // 8 or pressure >= 0.20:
                self._transition_to(Phase.ESCALATION, now)
        elif phase is Phase.ESCALATION:
            if elapsed_ms > final_stand_ms // 3 or pressure >= 0.40:
                self._reinforcement_level = 1
                self._transition_to(Phase.REINFORCEMENT, now)
        elif phase is Phase.REINFORCEMENT:
            if elapsed_ms > (2 * final_stand_ms) // 3 or pressure >= 0.60:
                self._escape_blocked = True
                self._reinforcement_level = 2
                self._transition_to(Phase.ENCIRCLEMENT, now)
        elif phase is Phase.ENCIRCLEMENT:
            if elapsed_ms >= final_stand_ms or pressure >= 0.80:
                self._reinforcement_level = 3
                self._transition_to(Phase.FINAL_STAND, now)

    def _transition_to(self, phase: Phase, now: datetime) -> None:
        if self._current_phase is phase:
            return
        self._current_phase = phase
        self._phase_started_at = now

    def _check_defeat_triggers(
        self, inp: DirectorInput, elapsed_ms: int, force_defeat_ms: int
    ) -> DefeatReason | None:
        if not inp.player_alive:
            return DefeatReason.PLAYER_KILLED
        if force_defeat_ms > 0 and elapsed_ms >= force_defeat_ms:
            return DefeatReason.SCRIPTED_FINAL_STAND
        final_stand = self._current_phase is Phase.FINAL_STAND
        if final_stand and inp.player_ammo == 0 and inp.surviving_troop_count > 0:
            return DefeatReason.AMMO_EXHAUSTED
        if final_stand and self._encirclement_level >= 0.95:
            return DefeatReason.ENCIRCLED
        return None