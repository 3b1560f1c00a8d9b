import socket
import struct

import pytest

from simple_message.connection import CommsError, SimpleCommsFaultHandler
from simple_message.message import CommType, MessageType, ReplyType, SimpleMessage
from simple_message.socket_base import PollResult
from simple_message.tcp import TcpClient, TcpServer


@pytest.fixture
def pair():
    server = TcpServer(0)
    client = TcpClient("127.0.0.1", server.port)
    client.make_connect()
    server.make_connect()
    yield server, client
    client.close()
    server.close()


def _free_port():
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return port


def test_both_ends_connected(pair):
    server, client = pair
    assert server.is_connected() and client.is_connected()


def test_ping_wire_bytes(pair):
    server, client = pair
    client.send_msg(SimpleMessage(MessageType.PING))
    raw = server.receive_bytes(16, 1000)
    assert raw == struct.pack("<4i", 12, 1, 1, 0)


def test_message_round_trip(pair):
    server, client = pair
    sent = SimpleMessage(MessageType.STATUS, CommType.TOPIC, ReplyType.INVALID, b"abcd")
    client.send_msg(sent)
    assert server.receive_msg(1000) == sent


def test_request_and_reply(pair):
    server, client = pair
    request = SimpleMessage(MessageType.PING, CommType.SERVICE_REQUEST)
    client.send_msg(request)
    assert server.receive_msg(1000) == request
    reply = SimpleMessage(MessageType.PING, CommType.SERVICE_REPLY, ReplyType.SUCCESS)
    server.send_msg(reply)
    assert client.receive_msg(1000) == reply


def test_poll_times_out_without_data(pair):
    server, _ = pair
    assert server.raw_poll(10) is PollResult.TIMEOUT


def test_poll_ready_after_send(pair):
    server, client = pair
    client.raw_send_bytes(b"x")
    assert server.raw_poll(1000) is PollResult.READY
    assert server.raw_receive_bytes(1) == b"x"


def test_receive_timeout_keeps_connection(pair):
    server, _ = pair
    server.SOCKET_POLL_TO = 20
    with pytest.raises(TimeoutError):
        server.receive_bytes(4, 20)
    assert server.is_connected()


def test_peer_close_marks_down(pair):
    server, client = pair
    client.close()
    with pytest.raises(CommsError):
        server.receive_bytes(4, 1000)
    assert not server.is_connected()


def test_oversized_send_marks_down(pair):
    _, client = pair
    with pytest.raises(CommsError):
        client.send_bytes(b"\0" * client.MAX_BUFFER_SIZE)
    assert not client.is_connected()


def test_client_double_connect_raises(pair):
    _, client = pair
    with pytest.raises(CommsError):
        client.make_connect()
    assert client.is_connected()


def test_server_double_connect_raises(pair):
    server, _ = pair
    with pytest.raises(CommsError):
        server.make_connect()


def test_connect_refused_raises():
    client = TcpClient("127.0.0.1", _free_port())
    with pytest.raises(CommsError):
        client.make_connect()
    assert not client.is_connected()
    client.close()


def test_hostname_resolves_to_ipv4():
    client = TcpClient("localhost", 1234)
    assert client.address[1] == 1234
    assert socket.inet_aton(client.address[0])
    client.close()


def test_fault_handler_reconnects():
    with TcpServer(0) as server:
        client = TcpClient("127.0.0.1", server.port)
        handler = SimpleCommsFaultHandler(client)
        handler.connection_fail_cb()
        assert client.is_connected()
        server.make_connect()
        client.send_msg(SimpleMessage(MessageType.PING))
        assert server.receive_msg(1000).msg_type == MessageType.PING
        client.close()


def test_context_manager_closes():
    with TcpServer(0) as server:
        client = TcpClient("127.0.0.1", server.port)
        client.make_connect()
        server.make_connect()
    assert not server.is_connected()
    with pytest.raises(CommsError):
        server.make_connect()
    client.close()