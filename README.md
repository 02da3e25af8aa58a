# mayday

The simulation core of a single-player last-stand shooter. One civilian
player holds out against martial-law troops. Every outcome is decided on the
server side: scenario phases, pressure, troop behaviour, hit detection and
damage. The package has no dependencies beyond the standard library.

## Installation

```
pip install .
```

To run the tests, install the test extra and run pytest:

```
pip install ".[test]"
pytest
```

## Modules

- `mayday.vector`: the immutable `Vector3` (with `+`, `-` and `*` by a
  number), the functions `add`, `sub`, `scale`, `dot`, `length`, `distance`,
  `normalize` and `is_zero`, and the ray tests `check_ray_against_point` and
  `check_ray_against_sphere`. Each ray test returns a `RayHit` or `None` on a
  miss.
- `mayday.scenario`: the `Director`, which moves a session through the `Phase`
  values `INITIAL_CONTACT`, `ESCALATION`, `REINFORCEMENT`, `ENCIRCLEMENT`,
  `FINAL_STAND` and `DEFEAT`. `Director.tick` returns an `Update`, and
  `Director.mark_disconnected` forces defeat. The module also has the functions
  `compute_pressure` and `compute_encirclement` and the `DefeatReason` enum.
- `mayday.ai`: troop perception (`perceive`) and the pure decision function
  `decide`. `decide` returns a `Decision` that holds the next `FSMState` and a
  tuple of `Action`s, built with `move_to`, `look_at`, `shoot`, `flank_to`,
  `suppress_area`, `take_cover`, `call_reinforcement`, `block_exit` and `idle`.
- `mayday.state`: the mutable records `CivilianPlayerState` and
  `MartialTroopState`, and gameplay constants such as `STARTING_TROOP_HP` and
  `MIN_TROOP_FLOOR`.
- `mayday.systems`:
  - damage: `apply_damage_to_player` and `apply_damage_to_troop`;
  - movement: `apply_player_movement`, `apply_client_player_position`,
    `move_troop_toward` and `apply_player_look`;
  - survival bookkeeping: `accumulate_survival` and `SessionStats`;
  - shooting: `process_player_shoot` returns a `ShotOutcome`;
    `troop_shoot_attempt` returns a `DamageResult`, or `None` if the troop
    could not fire.
- `mayday.protocol`: `parse` turns a raw client frame (bytes or str) into a
  `ClientMessage` with a `type` and a typed `payload`. A bad frame raises a
  subclass of `ProtocolError`: `EmptyMessageError`, `InvalidJSONError`,
  `UnknownMessageError` or `MalformedPayloadError`. `encode` serialises a
  `ServerMessage` to compact JSON bytes.
- `mayday.messages`: `ServerMessageType`, `ServerMessage` (with `to_dict`),
  `ShotReason` and the server-to-client payload dataclasses.
- `mayday.events`: `EventType`, `Event`, `new_event` and `encode_payload`.
- `mayday.storage`: event and session records, with in-memory repositories
  (`MemoryEventRepository`, `MemorySessionRepository`) and no-op repositories
  that only count what they discard.
- `mayday.observability`: `Metrics` with thread-safe `AtomicCounter` fields,
  `new_logger` (a JSON logger on standard output, at debug level when
  `LOG_LEVEL=debug`), and `health_response`, which builds the body of a health
  check as a dictionary.

## Example

```python
from datetime import datetime, timedelta, timezone

from mayday.scenario import Director, DirectorConfig, DirectorInput, Phase

start = datetime.now(timezone.utc)
director = Director(start, DirectorConfig(
    final_stand_after=timedelta(seconds=30),
    force_defeat_after=timedelta(seconds=60),
    max_troops=10,
))
update = director.tick(DirectorInput(
    now=start + timedelta(seconds=5),
    player_hp=100, player_max_hp=100,
    player_ammo=24, player_max_ammo=24,
    player_alive=True, surviving_troop_count=4,
))
assert update.current_phase is Phase.ESCALATION
```

Parsing a client frame:

```python
from mayday.protocol import UnknownMessageError, parse

msg = parse(b'{"type":"start_session","payload":{"player_name":"jin"}}')
print(msg.type, msg.payload.player_name)  # start_session jin

try:
    parse(b'{"type":"telekinesis","payload":{}}')
except UnknownMessageError as exc:
    print(exc)  # unknown_message_type: telekinesis
```

## What this package does not do

This is a library of simulation building blocks. It has:

- no network server: no HTTP or WebSocket listener. `health_response` only
  builds a dictionary.
- no session loop that ticks the director, runs the AI and sends messages to
  a client.
- no configuration loading from the environment.
- no database persistence. Storage is in memory or discarded.
- no command-line entry point.