"""TCP transports for simple messages: a client and a single-connection server."""

from __future__ import annotations

import logging
import select
import socket

from simple_message.connection import CommsError
from simple_message.socket_base import PollResult, SimpleSocket

_log = logging.getLogger(__name__)


def _set_no_delay(sock: socket.socket) -> None:
    # Disabling Nagle keeps small messages from being held back.
    try:
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    except OSError as exc:
        _log.warning(
            "failed to set no socket delay (%s), sending data can be delayed by up to 250ms",
            exc,
        )


class TcpSocket(SimpleSocket):
    """A stream socket carrying simple messages."""

    def __init__(self) -> None:
        super().__init__()
        self._sock: socket.socket | None = None

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise CommsError("no socket handle")
        return self._sock

    def raw_send_bytes(self, data: bytes) -> int:
        """Send ``data`` on the connected socket and return the count sent."""
        return self._require_socket().send(bytes(data))

    def raw_receive_bytes(self, num_bytes: int) -> bytes:
        """Read up to ``num_bytes``; empty bytes means the peer closed."""
        return self._require_socket().recv(num_bytes)

    def raw_poll(self, timeout_ms: int) -> PollResult:
        """Wait up to ``timeout_ms`` for the socket to become readable."""
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

    def close(self) -> None:
        """Close the socket and mark the connection down."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        self._connected = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class TcpClient(TcpSocket):
    """TCP client that connects to a robot controller."""

    def __init__(self, host: str, port: int) -> None:
        super().__init__()
        self._open_socket()
        try:
            infos = socket.getaddrinfo(host, None, socket.AF_INET, socket.SOCK_STREAM)
            address = infos[0][4][0]
        except (OSError, IndexError):
            # Not a resolvable hostname: use it as a dotted IP address.
            address = host
        self.address: tuple[str, int] = (address, port)

    def _open_socket(self) -> None:
        if self.is_connected():
            return
        if self._sock is not None:
            # The handle is stale: replace it.
            self._sock.close()
            self._sock = None
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as exc:
            raise CommsError(f"failed to create socket: {exc}") from exc
        _set_no_delay(sock)
        self._sock = sock

    def make_connect(self) -> None:
        """Connect to the server; raise CommsError on failure."""
        if self.is_connected():
            raise CommsError("tried to connect when socket already in connected state")
        self._open_socket()
        try:
            self._require_socket().connect(self.address)
        except OSError as exc:
            raise CommsError(f"failed to connect to server: {exc}") from exc
        _log.info("connected to server")
        self._connected = True


class TcpServer(TcpSocket):
    """TCP server that listens on a port and accepts one client at a time."""

    def __init__(self, port: int) -> None:
        super().__init__()
        try:
            server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as exc:
            raise CommsError(f"failed to create socket: {exc}") from exc
        try:
            server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server.bind(("", port))
        except OSError as exc:
            server.close()
            raise CommsError(f"failed to bind socket: {exc}") from exc
        _log.info("server socket successfully initialized")
        try:
            server.listen(1)
        except OSError as exc:
            server.close()
            raise CommsError(f"failed to set socket to listen: {exc}") from exc
        _log.debug("socket in listen mode")
        self._server: socket.socket | None = server
        self.port: int = server.getsockname()[1]

    def make_connect(self) -> None:
        """Block until a client connects; raise CommsError on failure."""
        if self.is_connected():
            raise CommsError("tried to connect when socket already in connected state")
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        if self._server is None:
            raise CommsError("server socket is closed")
        try:
            client, _ = self._server.accept()
        except OSError as exc:
            raise CommsError(f"failed to accept client connection: {exc}") from exc
        _set_no_delay(client)
        self._sock = client
        self._connected = True

    def close(self) -> None:
        """Close the client connection and the listening socket."""
        super().close()
        if self._server is not None:
            self._server.close()
            self._server = None