"""Request engine: one request, one connection, one bounded read loop.

For every request the session connects, writes the serialized request, then pumps incoming bytes
into a fresh `ResponseParser` until the parser reports completion or the deadline passes. A failed
connect or a short write ends the request at once with no response. The connection is closed on
every path. Whatever was accumulated at that point is classified into a
`RequestResult`; nothing here raises for network or protocol failures, and nothing is retried.

How to use the most important parts:
- `HttpSession.send()`: Send a `PendingRequest` and get a `RequestResult`.
- `pump()`: The read loop on its own, usable with any `Transport` and parser.
"""

from __future__ import annotations

import collections.abc
import time
import typing

import structlog

from prusa.link.client import consts, request
from prusa.link.client.parser import ParseStatus, ResponseParser
from prusa.link.client.result import RequestResult

if typing.TYPE_CHECKING:
    from prusa.link.client.auth import AuthStrategy
    from prusa.link.client.models import EndpointTarget
    from prusa.link.client.transport import Transport

logger = structlog.get_logger(__name__)

type Clock = collections.abc.Callable[[], float]


def pump(
    transport: Transport,
    sink: collections.abc.Callable[[bytes], ParseStatus],
    deadline: float,
    clock: Clock = time.monotonic,
    poll_interval: float = consts.DEFAULT_POLL_INTERVAL,
) -> bool:
    """Deliver incoming bytes to `sink` until it reports completion or `deadline` passes.

    Args:
        transport: A connected transport.
        sink: Receives each chunk; usually `ResponseParser.feed`.
        deadline: Absolute time, on `clock`, at which to stop reading.
        clock: Monotonic time source.
        poll_interval: Longest single wait for data.

    Returns:
        True if the sink reported completion, False if the deadline passed first.
    """
    while (remaining := deadline - clock()) > 0:
        data = transport.read(min(remaining, poll_interval))
        if data and sink(data) is ParseStatus.COMPLETE:
            return True
    return False


class HttpSession:
    """Sends requests to one printer over short-lived connections."""

    def __init__(
        self,
        target: EndpointTarget,
        auth: AuthStrategy,
        transport: Transport,
        timeout: float = consts.DEFAULT_TIMEOUT,
        max_body_size: int = consts.MAX_BODY_SIZE,
        clock: Clock = time.monotonic,
        poll_interval: float = consts.DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize the session.

        Args:
            target: The printer to talk to.
            auth: Strategy supplying the authentication header.
            transport: The byte-stream connection, reused (reconnected) for every request.
            timeout: Seconds to wait for a response, counted from the end of the write.
            max_body_size: Cap on body bytes kept per response.
            clock: Monotonic time source.
            poll_interval: Longest single wait for data inside the read loop.
        """
        self.target = target
        self.auth = auth
        self.transport = transport
        self.timeout = timeout
        self.max_body_size = max_body_size
        self.clock = clock
        self.poll_interval = poll_interval

    def send(self, pending: request.PendingRequest | None) -> RequestResult:
        """Perform one request cycle.

        Args:
            pending: The request to send. None (an unsupported method) is answered with a
                no-response result without touching the network.

        Returns:
            The classified `RequestResult`.
        """
        if pending is None:
            return RequestResult.no_response()

        wire = request.build_request(pending, self.target, self.auth)
        log = logger.bind(method=str(pending.method), path=pending.path, target=str(self.target))
        parser = ResponseParser(self.max_body_size)

        try:
            if not self.transport.connect(self.target.host, self.target.port):
                log.warning("Connection failed")
                return RequestResult.no_response()

            log.debug("HTTP request", size=len(wire))
            written = self.transport.write(wire)
            if written != len(wire):
                log.warning("Request was not fully written", written=written, size=len(wire))
                return RequestResult.no_response()

            deadline = self.clock() + self.timeout
            if not pump(self.transport, parser.feed, deadline, self.clock, self.poll_interval):
                log.debug("Read loop ended at deadline", **parser.snapshot())
        finally:
            self.transport.close()

        result = RequestResult.classify(parser.status_line, parser.body, complete=parser.complete)
        log.debug("HTTP response", status_code=result.status_code, body=parser.body, **parser.snapshot())
        return result
