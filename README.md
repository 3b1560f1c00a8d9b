# simple_message

A pure-Python library for the *simple message* protocol that industrial robot
controllers use to exchange status and commands over TCP or UDP. It has no
dependencies outside the standard library.

## Modules

- `simple_message.message`: the message envelope.
  - `ByteBuffer` holds bytes; `load_int`, `load_real` and `load_bytes` append
    little-endian 32-bit integers, 32-bit floats and raw bytes, and
    `unload_int`, `unload_real` and `unload_bytes` remove them from the end.
  - `SimpleMessage` is a dataclass of `msg_type`, `comm_type`, `reply_code`
    and `data`. `to_bytes()` serializes it; `SimpleMessage.from_bytes()`
    parses and validates it. `validate()` raises on an inconsistent header,
    `is_valid()` returns a bool.
  - `MessageType`, `CommType` and `ReplyType` hold the standard values.
  - `PingMessage` is a typed message with no data.
- `simple_message.robot_status`: `RobotStatus` (drives powered, e-stopped,
  error code, in error, in motion, mode, motion possible) and
  `RobotStatusMessage`, with the `TriState` and `RobotMode` enumerations.
- `simple_message.velocity`: `VelocityCommand` (sequence, ten joint
  velocities, type) and `VelocityConfig` (command type, frame and tool
  references, acceleration and velocity limits), wrapped by
  `VelocityCommandMessage` (type 2002) and `VelocityConfigMessage` (type 2001).
- `simple_message.connection`: `SmplMsgConnection`, an abstract connection
  that adds the length prefix to each message (`send_msg`, `receive_msg`,
  `send_and_receive_msg`), and `SimpleCommsFaultHandler`, whose
  `connection_fail_cb()` reconnects a connection that is down.
- `simple_message.socket_base`: `SimpleSocket`, the socket base with polled,
  timeout-aware receives, and `PollResult`.
- `simple_message.tcp`: `TcpClient` and `TcpServer` (one client at a time).
- `simple_message.udp`: `UdpClient` and `UdpServer`, which connect by
  exchanging a one-byte handshake.
- `simple_message.utils`: `is_within_range`, `is_within_range_map`,
  `is_within_range_kv`, `map_insert` and `to_map` for comparing joint values
  held as lists or name-keyed maps.

Every typed message has `from_simple(msg)` to read it from a `SimpleMessage`
and `to_simple(comm_type, reply_code)` to wrap it in one.

## Installation

```
pip install .
```

## Example

```python
from simple_message.robot_status import RobotStatusMessage
from simple_message.tcp import TcpClient

client = TcpClient("127.0.0.1", 11002)
client.make_connect()

reply = client.receive_msg(timeout_ms=1000)
status = RobotStatusMessage.from_simple(reply)
print(status.status)
```

Sending a ping and waiting for the reply:

```python
from simple_message.message import CommType, ReplyType, PingMessage

ping = PingMessage().to_simple(CommType.SERVICE_REQUEST, ReplyType.INVALID)
answer = client.send_and_receive_msg(ping, timeout_ms=1000)
```

A negative `timeout_ms` (the default) waits forever.

## Errors

- `SerializationError` (a `ValueError`) when a buffer is too short, a value
  cannot be packed, a header is inconsistent or a typed message is built from
  a message of the wrong type.
- `CommsError` (a `ConnectionError`) when sending, receiving or connecting
  fails; the socket is then marked as not connected.
- `TimeoutError` when a receive times out; the connection stays up.

## What it does not do

- Only ping, robot status and the two velocity messages have typed classes.
  The other values in `MessageType` (joint position, trajectory points,
  feedback, I/O) can be sent and received as plain `SimpleMessage` objects,
  but their payloads are not decoded.
- There is no message dispatcher or handler registry: the caller receives
  messages and decides what to do with each.
- There is no command-line program; this is a library.

## Running the tests

```
pip install .[test]
pytest
```