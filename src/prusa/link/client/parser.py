"""Streaming HTTP/1.1 response parser.

Bytes from the connection arrive in chunks of any size with no framing guarantees. The parser walks
through three phases, strictly forward:

    STATUS_LINE ──\\n──▶ HEADERS ──empty line──▶ BODY ──Content-Length reached──▶ (complete)

- Lines end at a bare `\\n`; a `\\r` right before it is dropped, so CRLF is accepted but not required.
- Only `Content-Length` is interpreted among the headers. Without it (or with a malformed value) the
  parser never reports completion and the caller's deadline decides when the response is over.
  Chunked transfer-encoding is not supported.
- Body bytes past `max_body_size` are dropped, but still counted towards `Content-Length`.

How to use the most important parts:
- `ResponseParser.feed()`: Push the next chunk; returns `ParseStatus.COMPLETE` once the declared body
  length has been received.
- `ResponseParser.status_line`, `.content_length`, `.body`: The accumulated response.
"""

import typing
from enum import IntEnum, StrEnum

import structlog

from prusa.link.client import consts

logger = structlog.get_logger(__name__)


class ParsePhase(IntEnum):
    """Parser phase, ordered so that phases only ever increase."""

    STATUS_LINE = 0
    HEADERS = 1
    BODY = 2


class ParseStatus(StrEnum):
    """Outcome of feeding a chunk to the parser."""

    NEED_MORE = "NEED_MORE"
    COMPLETE = "COMPLETE"


def parse_content_length(value: str) -> int | None:
    """Parse a `Content-Length` value; None if it is not a non-negative integer."""
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    try:
        return int(value)
    except ValueError:
        # longer than the interpreter's integer string limit
        return None


class ResponseParser:
    """Incremental parser for a single HTTP response.

    One instance is used for exactly one request and then discarded.
    """

    def __init__(self, max_body_size: int = consts.MAX_BODY_SIZE) -> None:
        """Initialize an empty parser.

        Args:
            max_body_size: Hard cap on the number of body bytes kept in memory.
        """
        if max_body_size < 0:
            raise ValueError("max_body_size must not be negative")
        self.max_body_size = max_body_size
        self.phase = ParsePhase.STATUS_LINE
        self.content_length: int | None = None
        self.headers: list[str] = []
        self.body_received = 0
        self.complete = False

        self._status_line = bytearray()
        self._line = bytearray()
        self._body = bytearray()

    @property
    def status_line(self) -> str:
        """The raw status line, e.g. `HTTP/1.1 200 OK` (partial if the response was cut short)."""
        return self._status_line.decode("latin-1").rstrip("\r")

    @property
    def body(self) -> bytes:
        """Body bytes received so far, up to `max_body_size`."""
        return bytes(self._body)

    @property
    def truncated(self) -> bool:
        """Whether body bytes were dropped because of the size cap."""
        return self.body_received > len(self._body)

    def feed(self, data: bytes) -> ParseStatus:
        """Consume the next chunk of the response.

        Bytes arriving after completion are ignored.

        Args:
            data: The next bytes read from the connection, of any length.

        Returns:
            `ParseStatus.COMPLETE` once the full declared body has arrived, else `ParseStatus.NEED_MORE`.
        """
        pos = 0
        size = len(data)
        while pos < size and not self.complete:
            if self.phase is ParsePhase.STATUS_LINE:
                pos = self._consume_status_line(data, pos)
            elif self.phase is ParsePhase.HEADERS:
                pos = self._consume_headers(data, pos)
            else:
                pos = self._consume_body(data, pos)
        return ParseStatus.COMPLETE if self.complete else ParseStatus.NEED_MORE

    def _consume_status_line(self, data: bytes, pos: int) -> int:
        end = data.find(b"\n", pos)
        if end == -1:
            self._status_line += data[pos:]
            return len(data)
        self._status_line += data[pos:end]
        if self._status_line.endswith(b"\r"):
            del self._status_line[-1]
        logger.debug("Status line received", status_line=self.status_line)
        self.phase = ParsePhase.HEADERS
        return end + 1

    def _consume_headers(self, data: bytes, pos: int) -> int:
        end = data.find(b"\n", pos)
        if end == -1:
            self._line += data[pos:]
            return len(data)
        self._line += data[pos:end]
        line = self._line.decode("latin-1").rstrip("\r")
        self._line.clear()
        if line:
            self._header_line(line)
        else:
            self._end_of_headers()
        return end + 1

    def _header_line(self, line: str) -> None:
        self.headers.append(line)
        name, sep, value = line.partition(":")
        if not sep or name.strip().lower() != "content-length":
            return
        self.content_length = parse_content_length(value)
        if self.content_length is None:
            logger.debug("Ignoring malformed Content-Length", value=value)

    def _end_of_headers(self) -> None:
        logger.debug("Headers received", count=len(self.headers), content_length=self.content_length)
        self.phase = ParsePhase.BODY
        if self.content_length == 0:
            self.complete = True

    def _consume_body(self, data: bytes, pos: int) -> int:
        end = len(data)
        if self.content_length is not None:
            end = min(end, pos + self.content_length - self.body_received)
        chunk = data[pos:end]
        self.body_received += len(chunk)

        room = self.max_body_size - len(self._body)
        if room > 0:
            self._body += chunk[:room]

        if self.content_length is not None and self.body_received >= self.content_length:
            self.complete = True
            if self.truncated:
                logger.warning(
                    "Response body exceeded buffer", received=self.body_received, kept=len(self._body)
                )
        return end

    def snapshot(self) -> dict[str, typing.Any]:
        """Summary of the parse state, for logging."""
        return {
            "phase": self.phase.name,
            "status_line": self.status_line,
            "content_length": self.content_length,
            "body_received": self.body_received,
            "complete": self.complete,
        }
