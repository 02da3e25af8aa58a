import pytest

from mayday.ai import (
    ActionKind,
    DecisionInput,
    FSMState,
    PerceptionInput,
    PerceptionResult,
    TroopSnapshot,
    block_exit,
    decide,
    idle,
    move_to,
    perceive,
    take_cover,
)
from mayday.scenario import Phase
from mayday.vector import Vector3, distance, dot, sub


def new_troop_at(pos, **kw):
    fields = dict(
        id="troop-1", position=pos, hp=60, max_hp=60, ammo=30,
        is_alive=True, state=FSMState.PATROL,
    )
    fields.update(kw)
    return TroopSnapshot(**fields)


def perceive_player(troop_pos, player_pos):
    return perceive(
        troop_pos,
        PerceptionInput(
            player_alive=True,
            player_position=player_pos,
            detection_range=35,
            attack_range=22,
        ),
    )


def kinds(decision):
    return [a.kind for a in decision.actions]


def test_troop_attacks_when_player_in_range():
    troop_pos = Vector3()
    perc = perceive_player(troop_pos, Vector3(z=5))
    dec = decide(DecisionInput(
        troop=new_troop_at(troop_pos), perception=perc,
        phase=Phase.INITIAL_CONTACT, pressure=0.1, max_troops=10,
    ))
    assert dec.next_state is FSMState.ATTACK
    assert ActionKind.SHOOT in kinds(dec)


def test_troop_chases_when_player_visible_but_out_of_range():
    troop_pos = Vector3()
    perc = perceive_player(troop_pos, Vector3(z=30))
    dec = decide(DecisionInput(
        troop=new_troop_at(troop_pos), perception=perc,
        phase=Phase.INITIAL_CONTACT, pressure=0.1, max_troops=10,
    ))
    assert dec.next_state is FSMState.CHASE
    assert kinds(dec) == [ActionKind.MOVE_TO, ActionKind.LOOK_AT]


def test_troop_flanks_during_encirclement():
    troop_pos = Vector3()
    player_pos = Vector3(z=30)
    perc = perceive_player(troop_pos, player_pos)
    dec = decide(DecisionInput(
        troop=new_troop_at(troop_pos), perception=perc,
        phase=Phase.ENCIRCLEMENT, pressure=0.7, encirclement=0.7,
        escape_blocked=False, max_troops=10,
    ))
    assert dec.next_state is FSMState.FLANK
    flank = dec.actions[0]
    assert flank.kind is ActionKind.FLANK_TO
    assert distance(flank.target, player_pos) == pytest.approx(6.0)
    assert dot(sub(flank.target, player_pos), sub(player_pos, troop_pos)) == pytest.approx(0.0)


def test_troop_calls_reinforcement_when_low():
    troop_pos = Vector3()
    perc = perceive_player(troop_pos, Vector3(z=5))
    dec = decide(DecisionInput(
        troop=new_troop_at(troop_pos), perception=perc,
        phase=Phase.REINFORCEMENT, pressure=0.5,
        troop_count=1, min_troops=3, max_troops=10,
    ))
    assert dec.next_state is FSMState.CALL_REINFORCEMENT


def test_dead_troop_goes_dead():
    dec = decide(DecisionInput(
        troop=TroopSnapshot(id="t-dead", is_alive=False, hp=0, max_hp=60),
        perception=PerceptionResult(),
    ))
    assert dec.next_state is FSMState.DEAD
    assert dec.actions == (idle(),)


def test_low_hp_takes_cover_under_low_pressure():
    perc = perceive_player(Vector3(), Vector3(z=5))
    dec = decide(DecisionInput(
        troop=new_troop_at(Vector3(), hp=15), perception=perc, pressure=0.5,
    ))
    assert dec.next_state is FSMState.TAKE_COVER
    assert dec.actions == (take_cover(),)


def test_low_hp_keeps_fighting_under_high_pressure():
    perc = perceive_player(Vector3(), Vector3(z=5))
    dec = decide(DecisionInput(
        troop=new_troop_at(Vector3(), hp=15), perception=perc, pressure=0.7,
    ))
    assert dec.next_state is FSMState.SUPPRESS
    assert kinds(dec) == [ActionKind.LOOK_AT, ActionKind.SHOOT, ActionKind.SUPPRESS_AREA]


def test_escape_blocked_in_final_stand_blocks_exit():
    troop_pos = Vector3(x=1)
    player_pos = Vector3(z=30)
    perc = perceive_player(troop_pos, player_pos)
    dec = decide(DecisionInput(
        troop=new_troop_at(troop_pos), perception=perc,
        phase=Phase.FINAL_STAND, escape_blocked=True,
    ))
    assert dec.next_state is FSMState.BLOCK_EXIT
    assert dec.actions[0] == block_exit(perc.to_player)
    assert dec.actions[1].target == player_pos


def test_invisible_player_means_patrol():
    perc = perceive_player(Vector3(), Vector3(z=100))
    dec = decide(DecisionInput(troop=new_troop_at(Vector3()), perception=perc))
    assert dec.next_state is FSMState.PATROL


def test_no_ammo_in_range_advances():
    player_pos = Vector3(z=5)
    perc = perceive_player(Vector3(), player_pos)
    dec = decide(DecisionInput(troop=new_troop_at(Vector3(), ammo=0), perception=perc))
    assert dec.next_state is FSMState.ADVANCE
    assert dec.actions[0] == move_to(player_pos)


def test_perceive_dead_player_is_not_visible():
    res = perceive(
        Vector3(),
        PerceptionInput(player_alive=False, player_position=Vector3(z=5),
                        detection_range=35, attack_range=22),
    )
    assert not res.player_visible
    assert not res.in_attack_range
    assert res.to_player == Vector3(z=5)


def test_perceive_reports_distance_and_ranges():
    res = perceive_player(Vector3(x=1), Vector3(x=1, z=30))
    assert res.distance == pytest.approx(30.0)
    assert res.player_visible
    assert not res.in_attack_range
    assert res.player_position_from(Vector3(x=1)) == Vector3(x=1, z=30)


def test_action_factories_flag_points():
    assert move_to(Vector3(x=1)).has_point
    assert not take_cover().has_point
    assert idle().kind is ActionKind.IDLE