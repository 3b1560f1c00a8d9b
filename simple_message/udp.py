"""UDP transports for simple messages: a client and a server joined by a handshake."""

from __future__ import annotations

import logging
import select
import socket

from simple_message.connection import CommsError
from simple_message.socket_base import PollResult, SimpleSocket

_log = logging.getLogger(__name__)

_HANDSHAKE_INTERVAL_MS = 1000


class UdpSocket(SimpleSocket):
    """A datagram socket carrying simple messages.

    Each datagram is read whole into an internal buffer, from which
    callers may take it in pieces.
    """

    CONNECT_HANDSHAKE = 255

    def __init__(self) -> None:
        super().__init__()
        self._sock: socket.socket | None = None
        self._pending = b""
        self.address: tuple[str, int] | None = None

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise CommsError("no socket handle")
        return self._sock

    def _create_socket(self) -> socket.socket:
        try:
            return socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as exc:
            raise CommsError(f"failed to create socket: {exc}") from exc

    @property
    def _handshake(self) -> bytes:
        return bytes([self.CONNECT_HANDSHAKE])

    def raw_send_bytes(self, data: bytes) -> int:
        """Send ``data`` as one datagram to the peer address."""
        if self.address is None:
            raise CommsError("no peer address to send to")
        return self._require_socket().sendto(bytes(data), self.address)

    def raw_receive_bytes(self, num_bytes: int) -> bytes:
        """Return up to ``num_bytes`` of buffered data, reading a datagram if none is held.

        A count of zero returns everything held. A failed or empty read
        returns empty bytes. The sender of a datagram becomes the peer address.
        """
        if not self._pending:
            try:
                datagram, sender = self._require_socket().recvfrom(self.MAX_BUFFER_SIZE)
            except OSError as exc:
                _log.debug("datagram read failed: %s", exc)
                return b""
            if not datagram:
                return b""
            self.address = sender
            self._pending = datagram
        if num_bytes == 0 or num_bytes >= len(self._pending):
            chunk, self._pending = self._pending, b""
        else:
            chunk, self._pending = self._pending[:num_bytes], self._pending[num_bytes:]
        return chunk

    def raw_poll(self, timeout_ms: int) -> PollResult:
        """Report READY at once if data is buffered, else wait up to ``timeout_ms``."""
        if self._pending:
            return PollResult.READY
        sock = self._require_socket()
        try:
            readable, _, exceptional = select.select(
                [sock], [], [sock], timeout_ms / 1000.0
            )
        except (OSError, ValueError) as exc:
            _log.error("socket select function failed: %s", exc)
            return PollResult.TIMEOUT
        if readable:
            return PollResult.READY
        if exceptional:
            return PollResult.ERROR
        return PollResult.TIMEOUT

    def _ready_receive(self, timeout_ms: int) -> bool:
        return self.raw_poll(timeout_ms) is PollResult.READY

    def close(self) -> None:
        """Close the socket and mark the connection down."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        self._pending = b""
        self._connected = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class UdpClient(UdpSocket):
    """UDP client that handshakes with a server at a given host and port."""

    def __init__(self, host: str, port: int) -> None:
        super().__init__()
        self._sock = self._create_socket()
        try:
            infos = socket.getaddrinfo(host, None, socket.AF_INET, socket.SOCK_DGRAM)
            address = infos[0][4][0]
        except (OSError, IndexError):
            # Not a resolvable hostname: use it as a dotted IP address.
            address = host
        self.address = (address, port)

    def make_connect(self) -> None:
        """Send handshakes until the server echoes one back."""
        if self.is_connected():
            _log.warning("tried to connect when socket already in connected state")
            return
        handshake = self._handshake
        while True:
            _log.debug("UDP client sending handshake")
            try:
                self.raw_send_bytes(handshake)
            except OSError as exc:
                _log.debug("handshake send failed: %s", exc)
            if self._ready_receive(_HANDSHAKE_INTERVAL_MS):
                reply = self.raw_receive_bytes(0)
                if reply and reply[-1:] == handshake:
                    break
        _log.info("UDP client connected")
        self._connected = True


class UdpServer(UdpSocket):
    """UDP server bound to a port that waits for a client's handshake."""

    def __init__(self, port: int) -> None:
        super().__init__()
        server = self._create_socket()
        try:
            server.bind(("", port))
        except OSError as exc:
            server.close()
            raise CommsError(f"failed to bind socket: {exc}") from exc
        self._sock = server
        self.port: int = server.getsockname()[1]
        _log.info("server socket successfully initialized")

    def make_connect(self) -> None:
        """Wait for a handshake, then answer it to the sender."""
        if self.is_connected():
            _log.warning("tried to connect when socket already in connected state")
            return
        handshake = self._handshake
        while True:
            if self._ready_receive(_HANDSHAKE_INTERVAL_MS):
                received = self.raw_receive_bytes(0)
                if received:
                    _log.debug(
                        "UDP server received %d bytes while waiting for handshake",
                        len(received),
                    )
                    if received[-1:] == handshake:
                        break
        self.raw_send_bytes(handshake)
        self._connected = True