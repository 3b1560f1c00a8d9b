"""Socket-backed connection with polled, timeout-aware receive."""

from __future__ import annotations

import logging
from abc import abstractmethod
from enum import Enum

from simple_message.connection import CommsError, SmplMsgConnection

_log = logging.getLogger(__name__)


class PollResult(Enum):
    """Outcome of polling a socket for readable data."""

    TIMEOUT = "timeout"
    READY = "ready"
    ERROR = "error"


class SimpleSocket(SmplMsgConnection):
    """Base for socket connections.

    Subclasses implement the raw send, receive and poll operations and
    connection setup; this class handles size checks, chunked receives,
    timeouts and tracking of the connected state.
    """

    MAX_BUFFER_SIZE = 1024
    SOCKET_POLL_TO = 1000

    def __init__(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    @abstractmethod
    def raw_send_bytes(self, data: bytes) -> int:
        """Send ``data`` on the socket; raise OSError on failure."""

    @abstractmethod
    def raw_receive_bytes(self, num_bytes: int) -> bytes:
        """Read up to ``num_bytes``; empty bytes means the peer closed."""

    @abstractmethod
    def raw_poll(self, timeout_ms: int) -> PollResult:
        """Wait up to ``timeout_ms`` for data to become readable."""

    def send_bytes(self, data: bytes) -> None:
        """Send ``data``; the connection is marked down on any failure."""
        data = bytes(data)
        try:
            if not self._connected:
                raise CommsError("not connected, bytes not sent")
            if len(data) >= self.MAX_BUFFER_SIZE:
                raise CommsError(
                    f"buffer size {len(data)} is not below max socket size "
                    f"{self.MAX_BUFFER_SIZE}"
                )
            try:
                self.raw_send_bytes(data)
            except OSError as exc:
                raise CommsError(f"socket send failed: {exc}") from exc
        except CommsError:
            self._connected = False
            raise

    def receive_bytes(self, num_bytes: int, timeout_ms: int = -1) -> bytes:
        """Receive exactly ``num_bytes``.

        A negative timeout waits forever. The timeout restarts after each
        successful read. A timeout raises TimeoutError and leaves the
        connection up; every other failure marks it down and raises CommsError.
        """
        remaining = num_bytes
        remaining_time = timeout_ms
        received = bytearray()

        if not self._connected:
            raise CommsError("not connected, bytes not received")

        try:
            while remaining > 0 and (timeout_ms < 0 or remaining_time > 0):
                result = self.raw_poll(self.SOCKET_POLL_TO)
                if result is PollResult.READY:
                    try:
                        chunk = self.raw_receive_bytes(remaining)
                    except OSError as exc:
                        raise CommsError(f"socket receive failed: {exc}") from exc
                    if not chunk:
                        raise CommsError("received zero bytes")
                    received += chunk
                    remaining -= len(chunk)
                    remaining_time = timeout_ms
                    _log.debug(
                        "read %d bytes, %d required, %d left",
                        len(chunk),
                        num_bytes,
                        remaining,
                    )
                elif result is PollResult.ERROR:
                    raise CommsError("socket poll returned an error")
                else:
                    remaining_time -= self.SOCKET_POLL_TO
        except CommsError:
            self._connected = False
            raise

        if remaining > 0 or num_bytes <= 0:
            if timeout_ms >= 0 and remaining_time <= 0:
                raise TimeoutError(
                    f"timed out after {timeout_ms} ms with {remaining} bytes outstanding"
                )
            self._connected = False
            raise CommsError(f"failed to receive {num_bytes} bytes")
        return bytes(received)