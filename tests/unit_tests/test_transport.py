import socket
import time

import pytest

from prusa.link.client import SocketTransport


@pytest.fixture
def server():
    sock = socket.create_server(("127.0.0.1", 0))
    sock.settimeout(5)
    yield sock
    sock.close()


def _read_until(transport, predicate, limit=5.0):
    received = b""
    deadline = time.monotonic() + limit
    while not predicate(received) and time.monotonic() < deadline:
        received += transport.read(0.05)
    return received


def test_round_trip(server):
    transport = SocketTransport(connect_timeout=2.0)
    assert transport.connect("127.0.0.1", server.getsockname()[1])
    peer, _ = server.accept()

    try:
        assert transport.write(b"GET / HTTP/1.1\r\n\r\n") == 18
        assert peer.recv(64) == b"GET / HTTP/1.1\r\n\r\n"

        peer.sendall(b"HTTP/1.1 204 No Content\r\n\r\n")
        assert _read_until(transport, lambda data: data.endswith(b"\r\n\r\n")) == b"HTTP/1.1 204 No Content\r\n\r\n"
    finally:
        peer.close()
        transport.close()


def test_read_times_out_without_data(server):
    transport = SocketTransport()
    assert transport.connect("127.0.0.1", server.getsockname()[1])
    peer, _ = server.accept()

    try:
        start = time.monotonic()
        assert transport.read(0.05) == b""
        assert time.monotonic() - start < 1.0
    finally:
        peer.close()
        transport.close()


def test_peer_close_marks_eof(server):
    transport = SocketTransport()
    assert transport.connect("127.0.0.1", server.getsockname()[1])
    peer, _ = server.accept()
    peer.sendall(b"bye")
    peer.close()

    try:
        assert _read_until(transport, lambda data: data == b"bye") == b"bye"
        _read_until(transport, lambda _: not transport.connected)
        assert not transport.connected
        assert transport.read(0.01) == b""
    finally:
        transport.close()


def test_connect_refused():
    server = socket.create_server(("127.0.0.1", 0))
    port = server.getsockname()[1]
    server.close()

    transport = SocketTransport(connect_timeout=1.0)
    assert transport.connect("127.0.0.1", port) is False
    assert transport.write(b"data") == 0
    transport.close()


def test_close_is_idempotent():
    transport = SocketTransport()
    transport.close()
    transport.close()
    assert not transport.connected
