import pytest

from prusa.link.client import exceptions
from prusa.link.client.result import RequestResult, extract_status_code


@pytest.mark.parametrize(
    ("status_line", "expected"),
    [
        ("HTTP/1.1 204 No Content", 204),
        ("HTTP/1.1 200 OK", 200),
        ("HTTP/1.1 404 Not Found", 404),
        ("HTTP/1.1 409", 409),
        ("HTTP/1.0 500 Internal Server Error", 500),
        ("", -1),
        ("HTTP/1.1", -1),
        ("garbage", -1),
        ("HTTP/1.1 abc Nope", -1),
        ("HTTP/1.1 5", 5),
        ("HTTP/1.1 \xb200 OK", -1),
        ("HTTP/1.1 \uff12\uff10\uff10 OK", -1),
        ("HTTP/1.1 " + "9" * 5000 + " OK", -1),
    ],
)
def test_extract_status_code(status_line, expected):
    assert extract_status_code(status_line) == expected


def test_success_has_no_error_body():
    result = RequestResult.classify("HTTP/1.1 200 OK", b'{"a": 1}', complete=True)
    assert result.ok
    assert result.responded
    assert result.error_body is None
    assert result.json() == {"a": 1}
    result.raise_for_status()


def test_failure_keeps_error_body():
    result = RequestResult.classify("HTTP/1.1 409 Conflict", b'{"title": "Printer busy"}')
    assert not result.ok
    assert result.status_code == 409
    assert result.error_body == '{"title": "Printer busy"}'


def test_invalid_utf8_body_is_replaced():
    result = RequestResult.classify("HTTP/1.1 500 Oops", b"\xff\xfebad")
    assert result.error_body is not None
    assert result.error_body.endswith("bad")


def test_no_response():
    result = RequestResult.no_response()
    assert result.status_code == -1
    assert result.body == b""
    assert not result.responded
    with pytest.raises(exceptions.PrusaLinkNetworkError):
        result.raise_for_status()


@pytest.mark.parametrize("code", [401, 403])
def test_raise_for_status_auth(code):
    result = RequestResult.classify(f"HTTP/1.1 {code} Unauthorized", b"nope")
    with pytest.raises(exceptions.PrusaLinkAuthError) as excinfo:
        result.raise_for_status()
    assert excinfo.value.status_code == code
    assert excinfo.value.response_body == "nope"


def test_raise_for_status_api_error():
    result = RequestResult.classify("HTTP/1.1 409 Conflict", b"busy")
    with pytest.raises(exceptions.PrusaLinkApiError, match=r"\[409\] Request failed: Conflict"):
        result.raise_for_status()


def test_json_raises_value_error():
    result = RequestResult.classify("HTTP/1.1 200 OK", b"{truncated")
    with pytest.raises(ValueError):
        result.json()
