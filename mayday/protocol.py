"""Client message decoding and server message encoding."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from mayday.messages import ServerMessage
from mayday.vector import Vector3


class ProtocolError(ValueError):
    """Base class for client message decoding errors."""

    code = "protocol_error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(self.code if detail is None else f"{self.code}: {detail}")


class InvalidJSONError(ProtocolError):
    code = "invalid_json"


class UnknownMessageError(ProtocolError):
    code = "unknown_message_type"


class MalformedPayloadError(ProtocolError):
    code = "malformed_payload"


class EmptyMessageError(ProtocolError):
    code = "empty_message"


@dataclass(frozen=True)
class ErrorPayload:
    """Wire shape of an error sent back to a client."""

    code: str
    message: str


class ClientMessageType(StrEnum):
    START_SESSION = "start_session"
    PLAYER_INPUT = "player_input"
    PLAYER_LOOK = "player_look"
    SHOOT = "shoot"
    RELOAD = "reload"
    INTERACT = "interact"
    PING = "ping"


@dataclass(frozen=True)
class StartSessionPayload:
    player_name: str = ""


@dataclass(frozen=True)
class MoveInput:
    forward: bool = False
    backward: bool = False
    left: bool = False
    right: bool = False


@dataclass(frozen=True)
class PlayerInputPayload:
    seq: int = 0
    move: MoveInput = MoveInput()
    position: Vector3 | None = None
    delta_ms: int = 0


@dataclass(frozen=True)
class PlayerLookPayload:
    yaw: float = 0.0
    pitch: float = 0.0


@dataclass(frozen=True)
class ShootPayload:
    seq: int = 0
    origin: Vector3 = Vector3()
    direction: Vector3 = Vector3()
    client_time: int = 0


@dataclass(frozen=True)
class ReloadPayload:
    pass


@dataclass(frozen=True)
class InteractPayload:
    target_id: str = ""


@dataclass(frozen=True)
class PingPayload:
    client_time: int = 0


ClientPayload = (
    StartSessionPayload
    | PlayerInputPayload
    | PlayerLookPayload
    | ShootPayload
    | ReloadPayload
    | InteractPayload
    | PingPayload
)


@dataclass(frozen=True)
class ClientMessage:
    """A decoded client message: its wire type and typed payload."""

    type: str
    payload: ClientPayload


class _DecodeError(ValueError):
    pass


_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _describe(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return f"number {value}"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _lookup(obj: dict[str, Any], name: str) -> Any:
    """Field value by case-insensitive key; the last matching key wins."""
    found = None
    for key, value in obj.items():
        if key.lower() == name:
            found = value
    return found


def _object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _DecodeError(f"cannot decode {_describe(value)} into {what}")
    return value


def _int(obj: dict[str, Any], name: str) -> int:
    value = _lookup(obj, name)
    if value is None:
        return 0
    if (
        isinstance(value, bool)
        or not isinstance(value, int)
        or not _INT64_MIN <= value <= _INT64_MAX
    ):
        raise _DecodeError(f"cannot decode {_describe(value)} into field {name} of type int64")
    return value


def _float(obj: dict[str, Any], name: str) -> float:
    value = _lookup(obj, name)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _DecodeError(f"cannot decode {_describe(value)} into field {name} of type float64")
    return float(value)


def _bool(obj: dict[str, Any], name: str) -> bool:
    value = _lookup(obj, name)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise _DecodeError(f"cannot decode {_describe(value)} into field {name} of type bool")
    return value


def _str(obj: dict[str, Any], name: str) -> str:
    value = _lookup(obj, name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _DecodeError(f"cannot decode {_describe(value)} into field {name} of type string")
    return value


def _vector(value: Any, name: str) -> Vector3:
    obj = _object(value, f"field {name}")
    return Vector3(_float(obj, "x"), _float(obj, "y"), _float(obj, "z"))


def _decode_start_session(obj: dict[str, Any]) -> StartSessionPayload:
    return StartSessionPayload(player_name=_str(obj, "player_name"))


def _decode_player_input(obj: dict[str, Any]) -> PlayerInputPayload:
    move = _object(_lookup(obj, "move"), "field move")
    raw_position = _lookup(obj, "position")
    return PlayerInputPayload(
        seq=_int(obj, "seq"),
        move=MoveInput(
            forward=_bool(move, "forward"),
            backward=_bool(move, "backward"),
            left=_bool(move, "left"),
            right=_bool(move, "right"),
        ),
        position=None if raw_position is None else _vector(raw_position, "position"),
        delta_ms=_int(obj, "delta_ms"),
    )


def _decode_player_look(obj: dict[str, Any]) -> PlayerLookPayload:
    return PlayerLookPayload(yaw=_float(obj, "yaw"), pitch=_float(obj, "pitch"))


def _decode_shoot(obj: dict[str, Any]) -> ShootPayload:
    return ShootPayload(
        seq=_int(obj, "seq"),
        origin=_vector(_lookup(obj, "origin"), "origin"),
        direction=_vector(_lookup(obj, "direction"), "direction"),
        client_time=_int(obj, "client_time"),
    )


def _decode_interact(obj: dict[str, Any]) -> InteractPayload:
    return InteractPayload(target_id=_str(obj, "target_id"))


def _decode_ping(obj: dict[str, Any]) -> PingPayload:
    return PingPayload(client_time=_int(obj, "client_time"))


_DECODERS: dict[str, Callable[[dict[str, Any]], ClientPayload]] = {
    ClientMessageType.START_SESSION: _decode_start_session,
    ClientMessageType.PLAYER_INPUT: _decode_player_input,
    ClientMessageType.PLAYER_LOOK: _decode_player_look,
    ClientMessageType.SHOOT: _decode_shoot,
    ClientMessageType.INTERACT: _decode_interact,
    ClientMessageType.PING: _decode_ping,
}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid literal {name}")


def parse(raw: bytes | str) -> ClientMessage:
    """Decode one raw WebSocket frame into a :class:`ClientMessage`.

    Raises a :class:`ProtocolError` subclass when the frame is empty, is not
    valid JSON, names an unknown type, or carries a payload of the wrong shape.
    """
    if not raw:
        raise EmptyMessageError()
    text = raw if isinstance(raw, str) else raw.decode("utf-8", errors="replace")
    try:
        doc = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise InvalidJSONError(str(exc)) from exc

    if doc is None:
        raise EmptyMessageError()
    if not isinstance(doc, dict):
        raise InvalidJSONError(f"cannot decode {_describe(doc)} into envelope")

    msg_type = _lookup(doc, "type")
    if msg_type is None:
        msg_type = ""
    if not isinstance(msg_type, str):
        raise InvalidJSONError(f"cannot decode {_describe(msg_type)} into field type of type string")
    if not msg_type:
        raise EmptyMessageError()

    payload = _lookup(doc, "payload")

    if msg_type == ClientMessageType.RELOAD:
        return ClientMessage(type=msg_type, payload=ReloadPayload())

    decoder = _DECODERS.get(msg_type)
    if decoder is None:
        raise UnknownMessageError(msg_type)
    try:
        decoded = decoder(_object(payload, "payload"))
    except _DecodeError as exc:
        raise MalformedPayloadError(str(exc)) from exc
    return ClientMessage(type=msg_type, payload=decoded)


_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def encode(msg: ServerMessage) -> bytes:
    """Serialise a server message to compact JSON bytes.

    Raises ``ValueError`` if the payload holds NaN or infinite floats.
    """
    text = json.dumps(
        msg.to_dict(),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    for char, escape in _ESCAPES:
        text = text.replace(char, escape)
    return text.encode("utf-8")