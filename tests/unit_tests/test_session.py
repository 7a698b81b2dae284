import pytest

from prusa.link.client import ApiKeyAuth, EndpointTarget, consts
from prusa.link.client.parser import ParseStatus, ResponseParser
from prusa.link.client.request import HttpMethod, PendingRequest
from prusa.link.client.session import HttpSession, pump

TARGET = EndpointTarget(host="10.0.0.7", port=8080)
STATUS = PendingRequest(method=HttpMethod.GET, path="/api/v1/status")


@pytest.fixture
def make_session(clock):
    def _make(transport, timeout=consts.DEFAULT_TIMEOUT, max_body_size=consts.MAX_BODY_SIZE):
        return HttpSession(
            TARGET, ApiKeyAuth("k"), transport, timeout=timeout, max_body_size=max_body_size, clock=clock
        )

    return _make


def test_complete_response(make_session, make_transport, make_response):
    transport = make_transport([make_response("200 OK", b'{"ok": true}')])

    result = make_session(transport).send(STATUS)

    assert result.status_code == 200
    assert result.ok
    assert result.complete
    assert result.body == b'{"ok": true}'
    assert transport.connect_calls == [("10.0.0.7", 8080)]
    assert transport.written.startswith(b"GET /api/v1/status HTTP/1.1\r\nHost: 10.0.0.7:8080\r\n")
    assert transport.close_calls == 1


def test_stops_reading_once_complete(make_session, make_transport, make_response, clock):
    start = clock()
    response = make_response("204 No Content")
    transport = make_transport([response[:10], response[10:], b"should never be read"])

    result = make_session(transport).send(STATUS)

    assert result.status_code == 204
    assert transport.read_calls == 2
    assert list(transport.chunks) == [b"should never be read"]
    assert clock() == start


def test_response_in_single_bytes(make_session, make_transport, make_response):
    raw = make_response("200 OK", b"hello")
    transport = make_transport([bytes([b]) for b in raw])

    result = make_session(transport).send(STATUS)

    assert result.body == b"hello"
    assert result.complete


def test_short_body_returns_at_deadline(make_session, make_transport, clock):
    start = clock()
    transport = make_transport([b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\n\r\nab"])

    result = make_session(transport, timeout=2.0).send(STATUS)

    assert result.status_code == 200
    assert result.body == b"ab"
    assert not result.complete
    assert clock() - start == pytest.approx(2.0)
    assert transport.close_calls == 1


def test_no_content_length_relies_on_timeout(make_session, make_transport, clock):
    start = clock()
    transport = make_transport([b"HTTP/1.1 200 OK\r\n\r\n", b'{"a":', b"1}"])

    result = make_session(transport, timeout=1.5).send(STATUS)

    assert result.json() == {"a": 1}
    assert not result.complete
    assert clock() - start == pytest.approx(1.5)


def test_silence_yields_sentinel(make_session, make_transport):
    transport = make_transport([])

    result = make_session(transport, timeout=0.5).send(STATUS)

    assert result.status_code == -1
    assert result.body == b""
    assert transport.close_calls == 1


def test_partial_status_line_yields_sentinel(make_session, make_transport):
    transport = make_transport([b"HTTP/1.1"])

    result = make_session(transport, timeout=0.5).send(STATUS)

    assert result.status_code == -1
    assert result.status_line == "HTTP/1.1"


def test_connection_failure(make_session, make_transport):
    transport = make_transport(connect_ok=False)

    result = make_session(transport).send(STATUS)

    assert result.status_code == -1
    assert result.body == b""
    assert not result.responded
    assert transport.written == b""
    assert transport.read_calls == 0
    assert transport.close_calls == 1


@pytest.mark.parametrize("written", [0, 10])
def test_short_write_is_no_response(make_session, make_transport, make_response, clock, written):
    transport = make_transport([make_response("200 OK", b"{}")])
    transport.write = lambda data: written
    start = clock()

    result = make_session(transport).send(STATUS)

    assert result.status_code == -1
    assert result.body == b""
    assert transport.read_calls == 0
    assert transport.close_calls == 1
    assert clock() == start


def test_unsupported_method_never_connects(make_session, make_transport):
    transport = make_transport()

    result = make_session(transport).send(PendingRequest.create("PUT", "/api/v1/job"))

    assert result.status_code == -1
    assert transport.connect_calls == []
    assert transport.close_calls == 0


def test_close_runs_when_read_raises(make_session, make_transport):
    transport = make_transport()

    def _boom(timeout):
        raise RuntimeError("read exploded")

    transport.read = _boom
    with pytest.raises(RuntimeError):
        make_session(transport).send(STATUS)
    assert transport.close_calls == 1


def test_error_status_keeps_body(make_session, make_transport, make_response):
    transport = make_transport([make_response("401 Unauthorized", b"Unauthorized")])

    result = make_session(transport).send(STATUS)

    assert result.status_code == 401
    assert result.error_body == "Unauthorized"


def test_body_cap_applies_per_request(make_session, make_transport, make_response):
    transport = make_transport([make_response("200 OK", b"x" * 100)])

    result = make_session(transport, max_body_size=10).send(STATUS)

    assert result.complete
    assert result.body == b"x" * 10


def test_pump_reports_deadline(make_transport, clock):
    transport = make_transport([b"abc"])
    received = []

    def sink(data):
        received.append(data)
        return ParseStatus.NEED_MORE

    assert pump(transport, sink, deadline=clock() + 0.1, clock=clock) is False
    assert received == [b"abc"]


def test_pump_reports_completion(make_transport, make_response, clock):
    parser = ResponseParser()
    transport = make_transport([make_response("200 OK", b"ok")])

    assert pump(transport, parser.feed, deadline=clock() + 1.0, clock=clock) is True
    assert parser.body == b"ok"


@pytest.mark.parametrize(
    "raw",
    [
        b"HTTP/1.1 200 OK\r\nContent-Length: \xb2\r\n\r\nxy",
        b"HTTP/1.1 200 OK\r\nContent-Length: " + b"9" * 5000 + b"\r\n\r\nxy",
        b"HTTP/1.1 \xb200 OK\r\nContent-Length: 2\r\n\r\nxy",
    ],
)
def test_malformed_numbers_do_not_escape(make_session, make_transport, raw):
    transport = make_transport([raw])

    result = make_session(transport, timeout=0.5).send(STATUS)

    assert result.body == b"xy"
    assert transport.close_calls == 1
