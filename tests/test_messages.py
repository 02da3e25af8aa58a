import json

from mayday.messages import (
    DefeatTriggeredPayload,
    PlayerSnapshot,
    PongPayload,
    ServerMessage,
    ServerMessageType,
    SessionEndedPayload,
    ShotReason,
    ShotResultPayload,
    StateSnapshotPayload,
    TroopSnapshot,
)
from mayday.scenario import DefeatReason, Phase
from mayday.vector import Vector3


def test_message_type_wire_names():
    assert ServerMessage(ServerMessageType.WELCOME).to_dict()["type"] == "welcome"
    assert (
        ServerMessage(ServerMessageType.SCENARIO_PHASE_CHANGED).to_dict()["type"]
        == "scenario_phase_changed"
    )
    result = ServerMessage(
        ServerMessageType.SHOT_RESULT,
        ShotResultPayload(reason=ShotReason.FIRE_RATE),
    ).to_dict()
    assert result["payload"]["reason"] == "fire_rate"


def test_pong_to_dict():
    msg = ServerMessage(ServerMessageType.PONG, PongPayload(client_time=1, server_time=2))
    assert msg.to_dict() == {"type": "pong", "payload": {"client_time": 1, "server_time": 2}}


def test_plain_string_type_and_empty_payload():
    msg = ServerMessage("custom")
    assert msg.to_dict() == {"type": "custom", "payload": None}


def test_state_snapshot_nested_conversion():
    troop = TroopSnapshot(id="t1", position=Vector3(1.0, 0.0, 4.0), state="ATTACK", is_alive=True)
    payload = StateSnapshotPayload(
        server_tick=10,
        session_id="s1",
        scenario_phase=Phase.FINAL_STAND,
        player=PlayerSnapshot(id="p1", position=Vector3(0.0, 7.0, -36.0)),
        troops=(troop,),
    )
    out = ServerMessage(ServerMessageType.STATE_SNAPSHOT, payload).to_dict()["payload"]
    assert out["scenario_phase"] == "FINAL_STAND"
    assert out["player"]["position"] == {"x": 0.0, "y": 7.0, "z": -36.0}
    assert out["troops"] == [
        {
            "id": "t1",
            "position": {"x": 1.0, "y": 0.0, "z": 4.0},
            "yaw": 0.0,
            "hp": 0,
            "max_hp": 0,
            "state": "ATTACK",
            "is_alive": True,
            "squad_id": "",
        }
    ]


def test_state_snapshot_field_order():
    payload = StateSnapshotPayload(scenario_phase=Phase.ESCALATION)
    keys = list(ServerMessage(ServerMessageType.STATE_SNAPSHOT, payload).to_dict()["payload"])
    assert keys == [
        "server_tick",
        "session_id",
        "scenario_phase",
        "display_phase",
        "phase_troops_killed",
        "phase_troops_total",
        "pressure_level",
        "encirclement_level",
        "player",
        "troops",
    ]


def test_to_dict_survives_json_round_trip():
    payload = ShotResultPayload(seq=3, accepted=True, reason=ShotReason.MISS, ammo_left=5)
    as_dict = ServerMessage(ServerMessageType.SHOT_RESULT, payload).to_dict()
    assert json.loads(json.dumps(as_dict)) == as_dict
    assert as_dict["payload"]["reason"] == "miss"


def test_enum_payload_values_become_strings():
    ended = ServerMessage(
        ServerMessageType.SESSION_ENDED,
        SessionEndedPayload(final_phase=Phase.DEFEAT),
    ).to_dict()["payload"]
    assert ended["final_phase"] == "DEFEAT"
    assert ended["defeat_reason"] == ""

    defeat = ServerMessage(
        ServerMessageType.DEFEAT_TRIGGERED,
        DefeatTriggeredPayload(reason=DefeatReason.ENCIRCLED, tick=4),
    ).to_dict()["payload"]
    assert defeat == {"reason": "ENCIRCLED", "tick": 4}


def test_mapping_payload_with_nested_dataclass():
    msg = ServerMessage("event", {"position": Vector3(1.0, 2.0, 3.0), "items": [Phase.ESCALATION]})
    assert msg.to_dict()["payload"] == {
        "position": {"x": 1.0, "y": 2.0, "z": 3.0},
        "items": ["ESCALATION"],
    }