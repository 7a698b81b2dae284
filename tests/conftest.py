import collections
import os
from unittest.mock import patch

import pytest

from prusa.link.client import ApiKeyAuth, EndpointTarget, PrusaLinkClient, config


def pytest_load_initial_conftests(early_config, parser, args):
    """Conditionally append coverage report to GITHUB_STEP_SUMMARY.

    Only applies when running in GitHub Actions.
    """
    summary_file = os.getenv("GITHUB_STEP_SUMMARY")
    if (
        os.getenv("GITHUB_ACTIONS") == "true"
        and summary_file
        and not any(arg.startswith("--cov-report=markdown-append:") for arg in args)
    ):
        args.append(f"--cov-report=markdown-append:{summary_file}")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """Scripted transport: records what was written and replays queued chunks.

    Every `read` that finds the queue empty advances the clock by the requested timeout, as a real
    blocking read would.
    """

    def __init__(self, clock: FakeClock, chunks: list[bytes] | None = None, connect_ok: bool = True) -> None:
        self.clock = clock
        self.chunks = collections.deque(chunks or [])
        self.connect_ok = connect_ok
        self.connect_calls: list[tuple[str, int]] = []
        self.written = b""
        self.close_calls = 0
        self.read_calls = 0

    def queue(self, *chunks: bytes) -> None:
        self.chunks.extend(chunks)

    def connect(self, host: str, port: int) -> bool:
        self.connect_calls.append((host, port))
        return self.connect_ok

    def write(self, data: bytes) -> int:
        self.written += data
        return len(data)

    def read(self, timeout: float) -> bytes:
        self.read_calls += 1
        if self.chunks:
            return self.chunks.popleft()
        self.clock.advance(timeout)
        return b""

    def close(self) -> None:
        self.close_calls += 1


def http_response(status: str, body: bytes = b"", headers: dict[str, str] | None = None, length: bool = True) -> bytes:
    """Assemble a raw HTTP/1.1 response."""
    lines = [f"HTTP/1.1 {status}"]
    for name, value in (headers or {}).items():
        lines.append(f"{name}: {value}")
    if length:
        lines.append(f"Content-Length: {len(body)}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode() + body


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep the user's config.json and PRUSA_LINK_* environment out of the tests."""
    for key in list(os.environ):
        if key.startswith("PRUSA_LINK_"):
            monkeypatch.delenv(key)
    config.reset_settings()
    with patch("prusa.link.client.config.load_json_config", return_value={}):
        yield
    config.reset_settings()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport(clock):
    return FakeTransport(clock)


@pytest.fixture
def client(transport, clock):
    return PrusaLinkClient(
        EndpointTarget(host="192.168.1.50"),
        auth=ApiKeyAuth("secret-key"),
        transport=transport,
        clock=clock,
    )


@pytest.fixture
def make_response():
    return http_response


@pytest.fixture
def make_transport(clock):
    def _make(chunks: list[bytes] | None = None, connect_ok: bool = True) -> FakeTransport:
        return FakeTransport(clock, chunks, connect_ok=connect_ok)

    return _make
