"""Wrap the socket transport to print every byte exchanged with the printer."""

import sys

from prusa.link.client import BasicAuth, PrusaLinkClient, SocketTransport


class LoggingTransport:
    """Any object with connect/write/read/close can carry the requests."""

    def __init__(self) -> None:
        self._inner = SocketTransport()

    def connect(self, host: str, port: int) -> bool:
        print(f">>> connect {host}:{port}", file=sys.stderr)
        return self._inner.connect(host, port)

    def write(self, data: bytes) -> int:
        print(data.decode("latin-1"), end="", file=sys.stderr)
        return self._inner.write(data)

    def read(self, timeout: float) -> bytes:
        data = self._inner.read(timeout)
        if data:
            print(data.decode("latin-1"), end="", file=sys.stderr)
        return data

    def close(self) -> None:
        print("\n>>> close", file=sys.stderr)
        self._inner.close()


client = PrusaLinkClient("192.168.1.50", auth=BasicAuth("maker", "password"), transport=LoggingTransport())
client.printer_command("M117 Hello from Python")
print("status code:", client.http_status_code)
