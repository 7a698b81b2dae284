from unittest.mock import MagicMock, patch

import pytest

from prusa.link.client import PrusaLinkClient, RequestResult, exceptions
from prusa.link.client.cli import app


@pytest.fixture
def mock_client():
    with patch("prusa.link.client.cli.commands.api.common.get_client") as mock:
        client = MagicMock(spec=PrusaLinkClient)
        mock.return_value = client
        yield client, mock


def test_api_get(mock_client, capsys):
    client, _ = mock_client
    client.request.return_value = RequestResult.classify("HTTP/1.1 200 OK", b'{"api":  "2.0.0"}', complete=True)

    app(["api", "/api/version"], exit_on_error=False)

    client.request.assert_called_once_with("GET", "/api/version", None)
    assert capsys.readouterr().out.strip() == '{"api": "2.0.0"}'


def test_api_post_with_data(mock_client):
    client, _ = mock_client
    client.request.return_value = RequestResult.classify("HTTP/1.1 204 No Content", b"", complete=True)

    app(["api", "/api/v1/job", "--method", "post", "--data", '{"command": "pause"}'], exit_on_error=False)

    client.request.assert_called_once_with("POST", "/api/v1/job", '{"command": "pause"}')


def test_api_status_line(mock_client, capsys):
    client, _ = mock_client
    client.request.return_value = RequestResult.classify("HTTP/1.1 200 OK", b"plain text", complete=True)

    app(["api", "/api/v1/info", "-s"], exit_on_error=False)

    captured = capsys.readouterr()
    assert "HTTP/1.1 200 OK" in captured.err
    assert captured.out.strip() == "plain text"


def test_api_output_file(mock_client, tmp_path):
    client, _ = mock_client
    client.request.return_value = RequestResult.classify("HTTP/1.1 200 OK", b'{"a": 1}', complete=True)
    target = tmp_path / "out.json"

    app(["api", "/api/v1/status", "--output", str(target)], exit_on_error=False)

    assert target.read_bytes() == b'{"a": 1}'


def test_api_error_status(mock_client, capsys):
    client, _ = mock_client
    client.request.return_value = RequestResult.classify("HTTP/1.1 404 Not Found", b"missing", complete=True)

    with pytest.raises(exceptions.PrusaLinkApiError) as excinfo:
        app(["api", "/api/v1/nope"], exit_on_error=False)

    assert excinfo.value.status_code == 404
    assert "missing" in capsys.readouterr().out


def test_api_no_response(mock_client):
    client, _ = mock_client
    client.request.return_value = RequestResult.no_response()

    with pytest.raises(exceptions.PrusaLinkNetworkError):
        app(["api", "/api/v1/status"], exit_on_error=False)


def test_api_unsupported_method(mock_client):
    _, get_client = mock_client

    with pytest.raises(SystemExit) as excinfo:
        app(["api", "/api/v1/job", "--method", "PUT"], exit_on_error=False)

    assert excinfo.value.code == 1
    get_client.assert_not_called()


def test_api_invalid_json(mock_client):
    _, get_client = mock_client

    with pytest.raises(SystemExit):
        app(["api", "/api/v1/job", "--method", "POST", "--data", "{oops"], exit_on_error=False)

    get_client.assert_not_called()
