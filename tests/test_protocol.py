import json
import math

import pytest

from mayday.messages import PongPayload, ServerMessage, ServerMessageType
from mayday.protocol import (
    ClientMessageType,
    EmptyMessageError,
    InteractPayload,
    InvalidJSONError,
    MalformedPayloadError,
    PingPayload,
    PlayerInputPayload,
    PlayerLookPayload,
    ProtocolError,
    ReloadPayload,
    ShootPayload,
    StartSessionPayload,
    UnknownMessageError,
    encode,
    parse,
)
from mayday.vector import Vector3


def test_parse_start_session():
    msg = parse(b'{"type":"start_session","payload":{"player_name":"jin"}}')
    assert isinstance(msg.payload, StartSessionPayload)
    assert msg.payload.player_name == "jin"
    assert msg.type == "start_session"


def test_parse_player_input():
    raw = b'{"type":"player_input","payload":{"seq":12,"move":{"forward":true,"right":true},"delta_ms":16}}'
    msg = parse(raw)
    assert isinstance(msg.payload, PlayerInputPayload)
    assert msg.payload.seq == 12
    assert msg.payload.move.forward is True
    assert msg.payload.move.right is True
    assert msg.payload.move.backward is False
    assert msg.payload.delta_ms == 16
    assert msg.payload.position is None


def test_parse_shoot():
    raw = (
        b'{"type":"shoot","payload":{"seq":1,"origin":{"x":0,"y":1.6,"z":0},'
        b'"direction":{"x":0,"y":0,"z":1},"client_time":42}}'
    )
    msg = parse(raw)
    assert isinstance(msg.payload, ShootPayload)
    assert msg.payload.origin.y == pytest.approx(1.6, abs=1e-9)
    assert msg.payload.direction.z == pytest.approx(1.0, abs=1e-9)
    assert msg.payload.client_time == 42


def test_parse_invalid_json():
    with pytest.raises(InvalidJSONError):
        parse(b"not json")


def test_parse_unknown_type():
    with pytest.raises(UnknownMessageError) as info:
        parse(b'{"type":"telekinesis","payload":{}}')
    assert str(info.value) == "unknown_message_type: telekinesis"


def test_parse_empty_message():
    with pytest.raises(EmptyMessageError):
        parse(b"")
    with pytest.raises(EmptyMessageError):
        parse(b'{"type":"","payload":{}}')


def test_parse_malformed_payload():
    with pytest.raises(MalformedPayloadError) as info:
        parse(b'{"type":"player_input","payload":{"seq":"not-a-number"}}')
    assert str(info.value).startswith("malformed_payload: ")


def test_encode_server_message():
    msg = ServerMessage(ServerMessageType.PONG, PongPayload(client_time=1, server_time=2))
    body = encode(msg).decode()
    assert '"type":"pong"' in body
    assert '"client_time":1' in body


def test_errors_share_base_class():
    with pytest.raises(ProtocolError):
        parse(b"[1, 2]")
    with pytest.raises(ValueError):
        parse(b'{"type":"ping","payload":{"client_time":1.5}}')


def test_missing_payload_gives_defaults():
    msg = parse('{"type":"ping"}')
    assert msg.payload == PingPayload(client_time=0)


def test_null_payload_gives_defaults():
    msg = parse(b'{"type":"interact","payload":null}')
    assert msg.payload == InteractPayload(target_id="")


def test_reload_ignores_bad_payload():
    msg = parse(b'{"type":"reload","payload":[1,2,3]}')
    assert msg.type == ClientMessageType.RELOAD
    assert msg.payload == ReloadPayload()


def test_player_input_with_position():
    msg = parse(b'{"type":"player_input","payload":{"seq":3,"position":{"x":1,"y":2,"z":3}}}')
    assert msg.payload.position == Vector3(1.0, 2.0, 3.0)


def test_player_look_and_case_insensitive_keys():
    msg = parse(b'{"Type":"player_look","Payload":{"YAW":0.5,"pitch":-0.25}}')
    assert msg.payload == PlayerLookPayload(yaw=0.5, pitch=-0.25)


def test_wrong_field_kinds_are_malformed():
    with pytest.raises(MalformedPayloadError):
        parse(b'{"type":"player_input","payload":{"move":{"forward":1}}}')
    with pytest.raises(MalformedPayloadError):
        parse(b'{"type":"shoot","payload":{"origin":"here"}}')
    with pytest.raises(MalformedPayloadError):
        parse(b'{"type":"start_session","payload":"jin"}')


def test_non_string_type_is_invalid_json():
    with pytest.raises(InvalidJSONError):
        parse(b'{"type":5,"payload":{}}')


def test_nan_literal_is_invalid_json():
    with pytest.raises(InvalidJSONError):
        parse(b'{"type":"player_look","payload":{"yaw":NaN}}')


def test_null_document_is_empty():
    with pytest.raises(EmptyMessageError):
        parse(b"null")


def test_encode_round_trips_and_escapes_html():
    msg = ServerMessage("error", {"message": "<b>&</b>"})
    body = encode(msg)
    assert b"<" not in body
    assert b"\\u003c" in body
    assert json.loads(body) == msg.to_dict()


def test_encode_rejects_nan():
    with pytest.raises(ValueError):
        encode(ServerMessage("pressure_changed", {"pressure_level": math.nan}))