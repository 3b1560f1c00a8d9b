import pytest

from simple_message.connection import (
    CommsError,
    SimpleCommsFaultHandler,
    SmplMsgConnection,
)
from simple_message.message import (
    CommType,
    MessageType,
    ReplyType,
    SerializationError,
    SimpleMessage,
)


class LoopbackConnection(SmplMsgConnection):
    def __init__(self, connected=True, echo=False):
        self.connected = connected
        self.echo = echo
        self.sent = bytearray()
        self.incoming = bytearray()
        self.connect_calls = 0

    def send_bytes(self, data):
        self.sent += data
        if self.echo:
            self.incoming += data

    def receive_bytes(self, num_bytes, timeout_ms=-1):
        if num_bytes > len(self.incoming):
            raise CommsError("not enough data")
        chunk = bytes(self.incoming[:num_bytes])
        del self.incoming[:num_bytes]
        return chunk

    def is_connected(self):
        return self.connected

    def make_connect(self):
        self.connect_calls += 1
        self.connected = True


def test_send_ping_wire_bytes():
    conn = LoopbackConnection()
    conn.send_msg(SimpleMessage(MessageType.PING))
    assert bytes(conn.sent) == (
        b"\x0c\x00\x00\x00" + b"\x01\x00\x00\x00" + b"\x01\x00\x00\x00" + b"\x00\x00\x00\x00"
    )


def test_send_prefixes_length_of_message():
    conn = LoopbackConnection()
    msg = SimpleMessage(MessageType.STATUS, data=b"abcdefgh")
    conn.send_msg(msg)
    body = msg.to_bytes()
    assert bytes(conn.sent[4:]) == body
    assert int.from_bytes(conn.sent[:4], "little") == len(body)


def test_send_invalid_message_raises_and_sends_nothing():
    conn = LoopbackConnection()
    with pytest.raises(SerializationError):
        conn.send_msg(SimpleMessage(MessageType.INVALID))
    assert conn.sent == bytearray()


def test_receive_round_trip():
    conn = LoopbackConnection()
    msg = SimpleMessage(
        MessageType.PING, CommType.SERVICE_REPLY, ReplyType.SUCCESS, b"\x01\x02\x03\x04"
    )
    conn.send_msg(msg)
    conn.incoming += conn.sent
    assert conn.receive_msg() == msg
    assert conn.incoming == bytearray()


def test_receive_two_messages_in_order():
    conn = LoopbackConnection(echo=True)
    first = SimpleMessage(MessageType.PING)
    second = SimpleMessage(MessageType.STATUS, data=b"xyzw")
    conn.send_msg(first)
    conn.send_msg(second)
    assert conn.receive_msg() == first
    assert conn.receive_msg() == second


def test_receive_truncated_message_raises():
    conn = LoopbackConnection()
    conn.send_msg(SimpleMessage(MessageType.PING))
    conn.incoming += conn.sent[:-2]
    with pytest.raises(CommsError):
        conn.receive_msg()


def test_receive_invalid_message_raises_then_recovers():
    conn = LoopbackConnection()
    valid = SimpleMessage(MessageType.PING)
    body = valid.to_bytes()
    invalid_body = b"\x00\x00\x00\x00" + body[4:]
    conn.incoming += len(invalid_body).to_bytes(4, "little") + invalid_body
    with pytest.raises(SerializationError):
        conn.receive_msg()
    assert conn.incoming == bytearray()
    conn.incoming += len(body).to_bytes(4, "little") + body
    assert conn.receive_msg() == valid


def test_send_and_receive_returns_reply():
    conn = LoopbackConnection(echo=True)
    msg = SimpleMessage(MessageType.PING, CommType.SERVICE_REQUEST)
    reply = conn.send_and_receive_msg(msg)
    assert reply == msg


def test_send_and_receive_invalid_does_not_receive():
    conn = LoopbackConnection()
    conn.incoming += b"leftover"
    with pytest.raises(SerializationError):
        conn.send_and_receive_msg(SimpleMessage(MessageType.PING, CommType.INVALID))
    assert bytes(conn.incoming) == b"leftover"


def test_fault_handler_requires_connection():
    with pytest.raises(ValueError):
        SimpleCommsFaultHandler(None)


def test_fault_handler_reconnects_when_down():
    conn = LoopbackConnection(connected=False)
    handler = SimpleCommsFaultHandler(conn)
    handler.connection_fail_cb()
    assert conn.connect_calls == 1
    assert conn.is_connected() is True


def test_fault_handler_leaves_live_connection_alone():
    conn = LoopbackConnection(connected=True)
    handler = SimpleCommsFaultHandler(conn)
    handler.connection_fail_cb()
    assert conn.connect_calls == 0
    assert handler.connection is conn