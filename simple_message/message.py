"""Simple message framing: byte buffers, message headers and the ping message."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

_INT = struct.Struct("<i")
_REAL = struct.Struct("<f")


class SerializationError(ValueError):
    """Raised when data cannot be packed into or unpacked from a buffer."""


class MessageType(IntEnum):
    """Standard message type identifiers."""

    INVALID = 0
    PING = 1
    GET_VERSION = 2
    JOINT_POSITION = 10
    JOINT = 10
    JOINT_TRAJ_PT = 11
    JOINT_TRAJ = 12
    STATUS = 13
    JOINT_TRAJ_PT_FULL = 14
    JOINT_FEEDBACK = 15
    READ_INPUT = 20
    WRITE_OUTPUT = 21


class CommType(IntEnum):
    """How a message is exchanged."""

    INVALID = 0
    TOPIC = 1
    SERVICE_REQUEST = 2
    SERVICE_REPLY = 3


class ReplyType(IntEnum):
    """Reply codes carried by service replies."""

    INVALID = 0
    SUCCESS = 1
    FAILURE = 2


def _as_enum(enum_cls, value: int) -> int:
    try:
        return enum_cls(value)
    except ValueError:
        return value


class ByteBuffer:
    """Growable byte buffer: values are loaded at the end and unloaded from the end."""

    INT_SIZE: ClassVar[int] = _INT.size
    REAL_SIZE: ClassVar[int] = _REAL.size

    def __init__(self, data: bytes = b"") -> None:
        self._data = bytearray(data)

    def load_int(self, value: int) -> None:
        """Append a 32-bit signed integer."""
        try:
            self._data += _INT.pack(value)
        except (struct.error, OverflowError) as exc:
            raise SerializationError(f"cannot pack integer {value!r}") from exc

    def load_real(self, value: float) -> None:
        """Append a 32-bit float."""
        try:
            self._data += _REAL.pack(value)
        except (struct.error, OverflowError) as exc:
            raise SerializationError(f"cannot pack real {value!r}") from exc

    def load_bytes(self, data: bytes) -> None:
        """Append raw bytes."""
        self._data += bytes(data)

    def _take(self, count: int) -> bytes:
        if count < 0:
            raise SerializationError(f"cannot unload a negative count: {count}")
        if count > len(self._data):
            raise SerializationError(
                f"cannot unload {count} bytes, only {len(self._data)} available"
            )
        if count == 0:
            return b""
        chunk = bytes(self._data[-count:])
        del self._data[-count:]
        return chunk

    def unload_int(self) -> int:
        """Remove and return the 32-bit signed integer at the end."""
        return _INT.unpack(self._take(_INT.size))[0]

    def unload_real(self) -> float:
        """Remove and return the 32-bit float at the end."""
        return _REAL.unpack(self._take(_REAL.size))[0]

    def unload_bytes(self, count: int) -> bytes:
        """Remove and return the last ``count`` bytes."""
        return self._take(count)

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __repr__(self) -> str:
        return f"ByteBuffer({bytes(self._data)!r})"


@dataclass
class SimpleMessage:
    """A message header (type, comm type, reply code) followed by a data payload."""

    msg_type: int
    comm_type: int = CommType.TOPIC
    reply_code: int = ReplyType.INVALID
    data: bytes = b""

    HEADER_SIZE: ClassVar[int] = 3 * _INT.size
    LENGTH_SIZE: ClassVar[int] = _INT.size

    def __post_init__(self) -> None:
        self.data = bytes(self.data)

    @classmethod
    def from_bytes(cls, data: bytes) -> "SimpleMessage":
        """Parse a message (without its length prefix) and validate it."""
        buffer = ByteBuffer(data)
        if len(buffer) < cls.HEADER_SIZE:
            raise SerializationError(
                f"buffer too small for a message header: {len(buffer)} bytes"
            )
        payload = buffer.unload_bytes(len(buffer) - cls.HEADER_SIZE)
        reply_code = buffer.unload_int()
        comm_type = buffer.unload_int()
        msg_type = buffer.unload_int()
        message = cls(
            _as_enum(MessageType, msg_type),
            _as_enum(CommType, comm_type),
            _as_enum(ReplyType, reply_code),
            payload,
        )
        message.validate()
        return message

    def to_bytes(self) -> bytes:
        """Serialize header and data (without the length prefix)."""
        buffer = ByteBuffer()
        buffer.load_int(self.msg_type)
        buffer.load_int(self.comm_type)
        buffer.load_int(self.reply_code)
        buffer.load_bytes(self.data)
        return bytes(buffer)

    def validate(self) -> None:
        """Raise SerializationError if the header is inconsistent."""
        if self.msg_type == MessageType.INVALID:
            raise SerializationError(f"invalid message type: {self.msg_type}")
        if self.comm_type == CommType.INVALID:
            raise SerializationError(f"invalid comm type: {self.comm_type}")
        is_reply = self.comm_type == CommType.SERVICE_REPLY
        has_no_reply_code = self.reply_code == ReplyType.INVALID
        if is_reply == has_no_reply_code:
            raise SerializationError(
                f"invalid reply: comm type {self.comm_type}, reply code {self.reply_code}"
            )

    def is_valid(self) -> bool:
        """Return True if the header is consistent."""
        try:
            self.validate()
        except SerializationError:
            return False
        return True


@dataclass(frozen=True)
class PingMessage:
    """A ping message; it carries no data."""

    msg_type: ClassVar[int] = MessageType.PING

    @classmethod
    def from_simple(cls, msg: SimpleMessage) -> "PingMessage":
        """Build a ping from a simple message of the ping type."""
        if msg.msg_type != MessageType.PING:
            raise SerializationError(
                f"wrong message type: {msg.msg_type}, expected {int(MessageType.PING)}"
            )
        return cls()

    def to_simple(
        self, comm_type: int = CommType.TOPIC, reply_code: int = ReplyType.INVALID
    ) -> SimpleMessage:
        """Wrap the ping in a simple message."""
        return SimpleMessage(MessageType.PING, comm_type, reply_code)