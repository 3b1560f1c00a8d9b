"""Robot status data and the status message that carries it."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import ClassVar

from simple_message.message import (
    ByteBuffer,
    CommType,
    MessageType,
    ReplyType,
    SerializationError,
    SimpleMessage,
)


class TriState(IntEnum):
    """A boolean that may also be unknown."""

    UNKNOWN = -1
    FALSE = 0
    TRUE = 1
    OFF = 0
    LOW = 0
    DISABLED = 0
    ON = 1
    HIGH = 1
    ENABLED = 1


class RobotMode(IntEnum):
    """Controller operating mode."""

    UNKNOWN = -1
    MANUAL = 1
    AUTO = 2


def _as_enum(enum_cls, value: int) -> int:
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class RobotStatus:
    """Robot controller status flags, mode and error code."""

    drives_powered: int = TriState.UNKNOWN
    e_stopped: int = TriState.UNKNOWN
    error_code: int = 0
    in_error: int = TriState.UNKNOWN
    in_motion: int = TriState.UNKNOWN
    mode: int = RobotMode.UNKNOWN
    motion_possible: int = TriState.UNKNOWN

    _FIELD_COUNT: ClassVar[int] = 7

    def dump(self, buffer: ByteBuffer) -> None:
        """Load all fields into ``buffer`` in wire order."""
        for item in fields(self):
            buffer.load_int(getattr(self, item.name))

    @classmethod
    def read(cls, buffer: ByteBuffer) -> "RobotStatus":
        """Unload a status from the end of ``buffer``."""
        motion_possible = buffer.unload_int()
        mode = buffer.unload_int()
        in_motion = buffer.unload_int()
        in_error = buffer.unload_int()
        error_code = buffer.unload_int()
        e_stopped = buffer.unload_int()
        drives_powered = buffer.unload_int()
        return cls(
            drives_powered=_as_enum(TriState, drives_powered),
            e_stopped=_as_enum(TriState, e_stopped),
            error_code=error_code,
            in_error=_as_enum(TriState, in_error),
            in_motion=_as_enum(TriState, in_motion),
            mode=_as_enum(RobotMode, mode),
            motion_possible=_as_enum(TriState, motion_possible),
        )

    def byte_length(self) -> int:
        """Serialized size in bytes."""
        return self._FIELD_COUNT * ByteBuffer.INT_SIZE


@dataclass
class RobotStatusMessage:
    """Typed message wrapping a RobotStatus."""

    status: RobotStatus = field(default_factory=RobotStatus)

    msg_type: ClassVar[int] = MessageType.STATUS

    @classmethod
    def from_simple(cls, msg: SimpleMessage) -> "RobotStatusMessage":
        """Build from a simple message of the status type."""
        if msg.msg_type != MessageType.STATUS:
            raise SerializationError(
                f"wrong message type: {msg.msg_type}, expected {int(MessageType.STATUS)}"
            )
        return cls(RobotStatus.read(ByteBuffer(msg.data)))

    def to_simple(
        self, comm_type: int = CommType.TOPIC, reply_code: int = ReplyType.INVALID
    ) -> SimpleMessage:
        """Wrap the status in a simple message."""
        buffer = ByteBuffer()
        self.status.dump(buffer)
        return SimpleMessage(MessageType.STATUS, comm_type, reply_code, bytes(buffer))

    def byte_length(self) -> int:
        """Serialized size of the data portion in bytes."""
        return self.status.byte_length()