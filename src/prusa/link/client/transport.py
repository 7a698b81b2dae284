"""Byte-stream transports.

The request engine only needs a generic bidirectional stream: connect, write, read whatever is
available, close. `SocketTransport` provides that over plain TCP; anything else with the same four
methods (a serial bridge, a test double, a MicroPython-style client wrapper) can be used instead.

How to use the most important parts:
- `Transport`: The protocol a connection must implement.
- `SocketTransport`: The default TCP implementation.
"""

import select
import socket
import time
import typing

import structlog

from prusa.link.client import consts

logger = structlog.get_logger(__name__)


class Transport(typing.Protocol):
    """Protocol for the connection used by a single request."""

    def connect(self, host: str, port: int) -> bool:
        """Open the connection. Returns False instead of raising on failure."""
        ...

    def write(self, data: bytes) -> int:
        """Send `data`, returning the number of bytes written (0 on failure)."""
        ...

    def read(self, timeout: float) -> bytes:
        """Return the bytes available now, waiting at most `timeout` seconds.

        Returns `b""` when nothing arrived in time. Must not block past `timeout`.
        """
        ...

    def close(self) -> None:
        """Close the connection. Safe to call more than once, or after a failed `connect`."""
        ...


class SocketTransport:
    """TCP transport built on the standard `socket` module.

    After the printer closes its side, `read` keeps honouring `timeout` by sleeping, so the
    caller's deadline rather than EOF ends the read loop.
    """

    def __init__(
        self,
        connect_timeout: float = consts.DEFAULT_CONNECT_TIMEOUT,
        chunk_size: int = consts.READ_CHUNK_SIZE,
    ) -> None:
        """Initialize the transport.

        Args:
            connect_timeout: Seconds allowed for name resolution and the TCP handshake.
            chunk_size: Maximum bytes returned by a single `read`.
        """
        self.connect_timeout = connect_timeout
        self.chunk_size = chunk_size
        self._sock: socket.socket | None = None
        self._eof = False

    @property
    def connected(self) -> bool:
        return self._sock is not None and not self._eof

    def connect(self, host: str, port: int) -> bool:
        self.close()
        self._eof = False
        try:
            self._sock = socket.create_connection((host, port), timeout=self.connect_timeout)
        except OSError as e:
            logger.warning("Connection failed", host=host, port=port, error=str(e))
            self._sock = None
            return False
        self._sock.setblocking(False)
        logger.debug("Connected", host=host, port=port)
        return True

    def write(self, data: bytes) -> int:
        if self._sock is None:
            return 0
        try:
            self._sock.settimeout(self.connect_timeout)
            self._sock.sendall(data)
        except OSError as e:
            logger.warning("Write failed", error=str(e))
            return 0
        finally:
            self._sock.setblocking(False)
        return len(data)

    def read(self, timeout: float) -> bytes:
        if self._sock is None or self._eof:
            if timeout > 0:
                time.sleep(timeout)
            return b""
        try:
            readable, _, _ = select.select([self._sock], [], [], max(timeout, 0.0))
            if not readable:
                return b""
            data = self._sock.recv(self.chunk_size)
        except BlockingIOError:
            return b""
        except OSError as e:
            logger.warning("Read failed", error=str(e))
            self._eof = True
            return b""
        if not data:
            logger.debug("Connection closed by peer")
            self._eof = True
        return data

    def close(self) -> None:
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError as e:
            logger.debug("Error while closing socket", error=str(e))
        finally:
            self._sock = None
