"""Message-level connection: length-prefixed framing over a byte transport."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from simple_message.message import ByteBuffer, SimpleMessage

_log = logging.getLogger(__name__)


class CommsError(ConnectionError):
    """Raised when bytes cannot be sent or received over a connection."""


class SmplMsgConnection(ABC):
    """A connection that exchanges simple messages.

    Concrete transports supply the byte-level operations; this class adds
    the length prefix that frames each message on the wire.
    """

    @abstractmethod
    def send_bytes(self, data: bytes) -> None:
        """Send ``data``; raise CommsError on failure."""

    @abstractmethod
    def receive_bytes(self, num_bytes: int, timeout_ms: int = -1) -> bytes:
        """Receive exactly ``num_bytes``; raise CommsError or TimeoutError on failure."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Return True while the connection is up."""

    @abstractmethod
    def make_connect(self) -> None:
        """Establish the connection; raise CommsError on failure."""

    def send_msg(self, message: SimpleMessage) -> None:
        """Validate ``message`` and send it with its length prefix."""
        message.validate()
        payload = message.to_bytes()
        buffer = ByteBuffer()
        buffer.load_int(len(payload))
        buffer.load_bytes(payload)
        self.send_bytes(bytes(buffer))

    def receive_msg(self, timeout_ms: int = -1) -> SimpleMessage:
        """Receive one length-prefixed message; a negative timeout waits forever."""
        length_bytes = self.receive_bytes(SimpleMessage.LENGTH_SIZE, timeout_ms)
        length = ByteBuffer(length_bytes).unload_int()
        _log.debug("message length: %d", length)
        body = self.receive_bytes(length, timeout_ms)
        return SimpleMessage.from_bytes(body)

    def send_and_receive_msg(
        self, message: SimpleMessage, timeout_ms: int = -1
    ) -> SimpleMessage:
        """Send ``message`` and return the next message received."""
        self.send_msg(message)
        _log.debug("sent message")
        reply = self.receive_msg(timeout_ms)
        _log.debug("got message")
        return reply


class SimpleCommsFaultHandler:
    """Reconnects a connection when a communication fault is reported."""

    def __init__(self, connection: SmplMsgConnection) -> None:
        if connection is None:
            raise ValueError("a connection is required")
        self.connection = connection

    def connection_fail_cb(self) -> None:
        """Reconnect if the connection is down."""
        if not self.connection.is_connected():
            _log.info("connection failed, attempting reconnect")
            self.connection.make_connect()
        else:
            _log.warning(
                "connection fail callback called while still connected (possible bug)"
            )