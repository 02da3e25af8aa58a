"""Troop perception, actions and the per-tick decision function."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from mayday.scenario import Phase
from mayday.vector import Vector3, add, length, normalize, scale, sub


class FSMState(StrEnum):
    PATROL = "PATROL"
    ADVANCE = "ADVANCE"
    SUPPRESS = "SUPPRESS"
    FLANK = "FLANK"
    CHASE = "CHASE"
    ATTACK = "ATTACK"
    TAKE_COVER = "TAKE_COVER"
    CALL_REINFORCEMENT = "CALL_REINFORCEMENT"
    BLOCK_EXIT = "BLOCK_EXIT"
    DEAD = "DEAD"


class ActionKind(StrEnum):
    IDLE = "IDLE"
    MOVE_TO = "MOVE_TO"
    LOOK_AT = "LOOK_AT"
    SHOOT = "SHOOT"
    SUPPRESS_AREA = "SUPPRESS_AREA"
    FLANK_TO = "FLANK_TO"
    TAKE_COVER = "TAKE_COVER"
    CALL_REINFORCEMENT = "CALL_REINFORCEMENT"
    BLOCK_EXIT = "BLOCK_EXIT"


@dataclass(frozen=True, slots=True)
class Action:
    """A unit of intent emitted by the AI; game systems turn it into state changes."""

    kind: ActionKind
    target: Vector3 = Vector3()
    has_point: bool = False


def move_to(p: Vector3) -> Action:
    return Action(ActionKind.MOVE_TO, p, True)


def look_at(p: Vector3) -> Action:
    return Action(ActionKind.LOOK_AT, p, True)


def shoot(at: Vector3) -> Action:
    return Action(ActionKind.SHOOT, at, True)


def flank_to(p: Vector3) -> Action:
    return Action(ActionKind.FLANK_TO, p, True)


def suppress_area(p: Vector3) -> Action:
    return Action(ActionKind.SUPPRESS_AREA, p, True)


def take_cover() -> Action:
    return Action(ActionKind.TAKE_COVER)


def call_reinforcement() -> Action:
    return Action(ActionKind.CALL_REINFORCEMENT)


def block_exit(p: Vector3) -> Action:
    return Action(ActionKind.BLOCK_EXIT, p, True)


def idle() -> Action:
    return Action(ActionKind.IDLE)


@dataclass(frozen=True)
class PerceptionInput:
    """The minimal slice of the world a troop needs to perceive the player."""

    player_alive: bool = False
    player_position: Vector3 = Vector3()
    detection_range: float = 0.0
    attack_range: float = 0.0


@dataclass(frozen=True)
class PerceptionResult:
    """What a troop sees at a given moment."""

    player_visible: bool = False
    in_attack_range: bool = False
    distance: float = 0.0
    to_player: Vector3 = Vector3()

    def player_position_from(self, troop_pos: Vector3) -> Vector3:
        """Absolute player position reconstructed from a troop position."""
        return add(troop_pos, self.to_player)


def perceive(troop_pos: Vector3, inp: PerceptionInput) -> PerceptionResult:
    """Compute visibility and attack range of the player from ``troop_pos``."""
    to_player = sub(inp.player_position, troop_pos)
    if not inp.player_alive:
        return PerceptionResult(to_player=to_player)
    dist = length(to_player)
    return PerceptionResult(
        player_visible=dist <= inp.detection_range,
        in_attack_range=dist <= inp.attack_range,
        distance=dist,
        to_player=to_player,
    )


@dataclass(frozen=True)
class TroopSnapshot:
    """Per-troop view handed to :func:`decide`."""

    id: str = ""
    position: Vector3 = Vector3()
    hp: int = 0
    max_hp: int = 0
    ammo: int = 0
    is_alive: bool = True
    state: FSMState = FSMState.PATROL


@dataclass(frozen=True)
class DecisionInput:
    """Everything needed to choose one troop's next state and actions."""

    now: int = 0
    troop: TroopSnapshot = field(default_factory=TroopSnapshot)
    perception: PerceptionResult = field(default_factory=PerceptionResult)
    phase: Phase = Phase.INITIAL_CONTACT
    pressure: float = 0.0
    encirclement: float = 0.0
    escape_blocked: bool = False
    troop_count: int = 0
    max_troops: int = 0
    min_troops: int = 0


@dataclass(frozen=True)
class Decision:
    next_state: FSMState
    actions: tuple[Action, ...]


_LATE_PHASES = frozenset({Phase.ENCIRCLEMENT, Phase.FINAL_STAND})
_REINFORCE_PHASES = frozenset({Phase.REINFORCEMENT, Phase.ENCIRCLEMENT, Phase.FINAL_STAND})


def _flank_offset(troop: Vector3, player: Vector3) -> Vector3:
    """A point six units to the side of the player, perpendicular on the XZ plane."""
    direction = normalize(sub(player, troop))
    perp = Vector3(-direction.z, 0.0, direction.x)
    return add(player, scale(perp, 6))


def decide(inp: DecisionInput) -> Decision:
    """Choose the next FSM state and this tick's actions for one troop."""
    troop = inp.troop
    if not troop.is_alive or troop.hp <= 0:
        return Decision(FSMState.DEAD, (idle(),))

    low = troop.max_hp > 0 and troop.hp * 100 // troop.max_hp <= 25
    if low and inp.pressure < 0.7:
        return Decision(FSMState.TAKE_COVER, (take_cover(),))

    perception = inp.perception
    if inp.escape_blocked and inp.phase in _LATE_PHASES:
        return Decision(
            FSMState.BLOCK_EXIT,
            (
                block_exit(perception.to_player),
                look_at(perception.player_position_from(troop.position)),
            ),
        )

    if (
        inp.max_troops > 0
        and inp.troop_count < inp.min_troops
        and inp.phase in _REINFORCE_PHASES
    ):
        return Decision(FSMState.CALL_REINFORCEMENT, (call_reinforcement(),))

    if not perception.player_visible:
        return Decision(FSMState.PATROL, (idle(),))

    player_pos = perception.player_position_from(troop.position)

    if perception.in_attack_range:
        if troop.ammo <= 0:
            return Decision(FSMState.ADVANCE, (move_to(player_pos), look_at(player_pos)))
        actions = (look_at(player_pos), shoot(player_pos))
        if inp.pressure >= 0.6:
            return Decision(FSMState.SUPPRESS, actions + (suppress_area(player_pos),))
        return Decision(FSMState.ATTACK, actions)

    if inp.phase in _LATE_PHASES or inp.encirclement >= 0.5:
        point = _flank_offset(troop.position, player_pos)
        return Decision(FSMState.FLANK, (flank_to(point), look_at(player_pos)))

    return Decision(FSMState.CHASE, (move_to(player_pos), look_at(player_pos)))