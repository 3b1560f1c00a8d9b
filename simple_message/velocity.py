"""Velocity command and velocity configuration data and their typed messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from simple_message.message import (
    ByteBuffer,
    CommType,
    ReplyType,
    SerializationError,
    SimpleMessage,
)

MAX_NUM_JOINTS = 10
"""Number of joint values carried by a velocity command."""

REF_FRAME_SIZE = 6
"""Number of values in a frame or tool reference."""

VELOCITY_CONFIG_MSG_TYPE = 2001
"""Message type identifier used for velocity configuration messages."""

VELOCITY_COMMAND_MSG_TYPE = 2002
"""Message type identifier used for velocity command messages."""


def _fixed_reals(values, size: int, name: str) -> tuple[float, ...]:
    result = tuple(float(v) for v in values)
    if len(result) != size:
        raise ValueError(f"{name} must hold exactly {size} values, got {len(result)}")
    return result


def _read_reals(buffer: ByteBuffer, count: int) -> tuple[float, ...]:
    # Values come off the end of the buffer, so the last one is read first.
    backwards = [buffer.unload_real() for _ in range(count)]
    return tuple(reversed(backwards))


@dataclass
class VelocityCommand:
    """A sequence number, one velocity per joint and a command type."""

    sequence: int = 0
    vector: tuple[float, ...] = (0.0,) * MAX_NUM_JOINTS
    type: int = 0

    def __post_init__(self) -> None:
        self.vector = _fixed_reals(self.vector, MAX_NUM_JOINTS, "vector")

    def dump(self, buffer: ByteBuffer) -> None:
        """Load all fields into ``buffer`` in wire order."""
        buffer.load_int(self.sequence)
        for value in self.vector:
            buffer.load_real(value)
        buffer.load_int(self.type)

    @classmethod
    def read(cls, buffer: ByteBuffer) -> "VelocityCommand":
        """Unload a command from the end of ``buffer``."""
        command_type = buffer.unload_int()
        vector = _read_reals(buffer, MAX_NUM_JOINTS)
        sequence = buffer.unload_int()
        return cls(sequence=sequence, vector=vector, type=command_type)

    def byte_length(self) -> int:
        """Serialized size in bytes."""
        return 2 * ByteBuffer.INT_SIZE + MAX_NUM_JOINTS * ByteBuffer.REAL_SIZE


@dataclass
class VelocityConfig:
    """Velocity command configuration: frame and tool references and speed limits."""

    cmd_type: int = 0
    frame_ref: tuple[float, ...] = (0.0,) * REF_FRAME_SIZE
    tool_ref: tuple[float, ...] = (0.0,) * REF_FRAME_SIZE
    accel: float = 0.0
    vel: float = 0.0
    tvel: float = 0.0
    rvel: float = 0.0

    def __post_init__(self) -> None:
        self.frame_ref = _fixed_reals(self.frame_ref, REF_FRAME_SIZE, "frame_ref")
        self.tool_ref = _fixed_reals(self.tool_ref, REF_FRAME_SIZE, "tool_ref")

    def dump(self, buffer: ByteBuffer) -> None:
        """Load all fields into ``buffer`` in wire order."""
        buffer.load_int(self.cmd_type)
        for value in (*self.frame_ref, *self.tool_ref):
            buffer.load_real(value)
        for value in (self.accel, self.vel, self.tvel, self.rvel):
            buffer.load_real(value)

    @classmethod
    def read(cls, buffer: ByteBuffer) -> "VelocityConfig":
        """Unload a configuration from the end of ``buffer``."""
        rvel = buffer.unload_real()
        tvel = buffer.unload_real()
        vel = buffer.unload_real()
        accel = buffer.unload_real()
        tool_ref = _read_reals(buffer, REF_FRAME_SIZE)
        frame_ref = _read_reals(buffer, REF_FRAME_SIZE)
        cmd_type = buffer.unload_int()
        return cls(
            cmd_type=cmd_type,
            frame_ref=frame_ref,
            tool_ref=tool_ref,
            accel=accel,
            vel=vel,
            tvel=tvel,
            rvel=rvel,
        )

    def byte_length(self) -> int:
        """Serialized size in bytes."""
        return ByteBuffer.INT_SIZE + (2 * REF_FRAME_SIZE + 4) * ByteBuffer.REAL_SIZE


def _check_type(msg: SimpleMessage, expected: int) -> None:
    if msg.msg_type != expected:
        raise SerializationError(
            f"wrong message type: {msg.msg_type}, expected {expected}"
        )


@dataclass
class VelocityCommandMessage:
    """Typed message wrapping a VelocityCommand."""

    data: VelocityCommand = field(default_factory=VelocityCommand)

    msg_type: ClassVar[int] = VELOCITY_COMMAND_MSG_TYPE

    @classmethod
    def from_simple(cls, msg: SimpleMessage) -> "VelocityCommandMessage":
        """Build from a simple message of the velocity command type."""
        _check_type(msg, cls.msg_type)
        return cls(VelocityCommand.read(ByteBuffer(msg.data)))

    def to_simple(
        self, comm_type: int = CommType.TOPIC, reply_code: int = ReplyType.INVALID
    ) -> SimpleMessage:
        """Wrap the command in a simple message."""
        buffer = ByteBuffer()
        self.data.dump(buffer)
        return SimpleMessage(self.msg_type, comm_type, reply_code, bytes(buffer))

    def byte_length(self) -> int:
        """Serialized size of the data portion in bytes."""
        return self.data.byte_length()


@dataclass
class VelocityConfigMessage:
    """Typed message wrapping a VelocityConfig."""

    data: VelocityConfig = field(default_factory=VelocityConfig)

    msg_type: ClassVar[int] = VELOCITY_CONFIG_MSG_TYPE

    @classmethod
    def from_simple(cls, msg: SimpleMessage) -> "VelocityConfigMessage":
        """Build from a simple message of the velocity config type."""
        _check_type(msg, cls.msg_type)
        return cls(VelocityConfig.read(ByteBuffer(msg.data)))

    def to_simple(
        self, comm_type: int = CommType.TOPIC, reply_code: int = ReplyType.INVALID
    ) -> SimpleMessage:
        """Wrap the configuration in a simple message."""
        buffer = ByteBuffer()
        self.data.dump(buffer)
        return SimpleMessage(self.msg_type, comm_type, reply_code, bytes(buffer))

    def byte_length(self) -> int:
        """Serialized size of the data portion in bytes."""
        return self.data.byte_length()