"""PrusaLink REST API Client.

This module provides a high-level interface to a printer's PrusaLink API: status and job queries,
G-code commands, job lifecycle and motion/temperature helpers. Every operation performs exactly one
request over a fresh connection and reports its outcome as a boolean or a populated snapshot; the
status code and error body of the most recent request stay available on the client.

How to use the most important parts:
- `PrusaLinkClient`: The core class. Instantiate it with a host and credentials (or use
  `PrusaLinkClient.from_settings()`) to begin controlling a printer.
- `get_printer_status()` / `get_job_info()`: Refresh `client.status` and `client.job`.
- `printer_command(...)`, `pause_job()`, `stop_job()`, ...: Control the printer; each returns True on success.
- `request(...)`: Raw access to any endpoint, returning a `RequestResult`.
"""

from __future__ import annotations

import typing

import pydantic
import structlog

from prusa.link.client import auth, consts, models, transport
from prusa.link.client.request import HttpMethod, PendingRequest
from prusa.link.client.result import RequestResult
from prusa.link.client.session import Clock, HttpSession

if typing.TYPE_CHECKING:
    from prusa.link.client.config import Settings

__all__ = ["PrusaLinkClient"]

logger = structlog.get_logger(__name__)

_AXES = "XYZ"


def _format_number(value: float) -> str:
    """Format a G-code parameter without a trailing `.0`."""
    return f"{value:g}"


class PrusaLinkClient:
    """Client for the PrusaLink API of a single printer.

    Not safe for concurrent use: one request is in flight at a time and the snapshots and last
    result are plain instance state.

    Attributes:
        status: The most recent `PrinterStatus`, or None before the first successful query.
        job: The most recent `JobInfo`, or None before the first successful query.
        last_result: The `RequestResult` of the most recent request.

    Usage Example:
    ```python
        >>> from prusa.link.client import ApiKeyAuth, PrusaLinkClient
        >>> client = PrusaLinkClient("192.168.1.50", auth=ApiKeyAuth("my-api-key"))
        >>> if client.get_printer_status():
        ...     print(client.status.state, client.status.temp_nozzle)
    ```
    """

    def __init__(
        self,
        host: str | models.EndpointTarget,
        port: int = consts.DEFAULT_PORT,
        auth: auth.AuthStrategy | None = None,
        timeout: float = consts.DEFAULT_TIMEOUT,
        transport: transport.Transport | None = None,
        max_body_size: int = consts.MAX_BODY_SIZE,
        clock: Clock | None = None,
    ) -> None:
        """Initializes the client.

        Args:
            host: Printer address or hostname, or a ready-made `EndpointTarget`.
            port: TCP port of the PrusaLink interface (ignored when `host` is an `EndpointTarget`).
            auth: An object adhering to the `AuthStrategy` protocol. Defaults to no authentication.
            timeout: Seconds to wait for each response.
            transport: Byte-stream connection to use. Defaults to a `SocketTransport`.
            max_body_size: Cap on response body bytes kept in memory.
            clock: Monotonic time source, mainly for tests.
        """
        target = host if isinstance(host, models.EndpointTarget) else models.EndpointTarget(host=host, port=port)
        session_kwargs: dict[str, typing.Any] = {}
        if clock is not None:
            session_kwargs["clock"] = clock
        self._session = HttpSession(
            target=target,
            auth=auth if auth is not None else _no_auth(),
            transport=transport if transport is not None else _socket_transport(),
            timeout=timeout,
            max_body_size=max_body_size,
            **session_kwargs,
        )
        self.status: models.PrinterStatus | None = None
        self.job: models.JobInfo | None = None
        self.last_result = RequestResult()
        self._last_error_body = ""

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: typing.Any) -> PrusaLinkClient:
        """Create a client from `Settings` (environment, `.env` or config.json).

        Args:
            settings: Settings to use. Defaults to the module-level settings.
            **kwargs: Extra arguments forwarded to the constructor (e.g. `transport`).

        Raises:
            ValueError: If no host is configured.
        """
        if settings is None:
            from prusa.link.client import config

            settings = config.settings
        kwargs.setdefault("transport", transport.SocketTransport(connect_timeout=settings.connect_timeout))
        return cls(
            settings.build_target(),
            auth=settings.build_auth(),
            timeout=settings.timeout,
            max_body_size=settings.max_body_size,
            **kwargs,
        )

    @property
    def target(self) -> models.EndpointTarget:
        """The printer this client talks to."""
        return self._session.target

    @property
    def http_status_code(self) -> int:
        """Status code of the most recent request (-1 when no response was obtained)."""
        return self.last_result.status_code

    @property
    def http_error_body(self) -> str:
        """Body of the most recent request that ended outside the 2xx range."""
        return self._last_error_body

    # -- Raw requests -------------------------------------------------------

    def request(self, method: str, path: str, body: bytes | str | None = None) -> RequestResult:
        """Make a single request and record its result.

        Unsupported methods are rejected before any connection is made.

        Args:
            method: "GET", "POST" or "DELETE".
            path: Absolute API path, e.g. `/api/v1/status`.
            body: Optional JSON body.

        Returns:
            The `RequestResult`; also stored as `last_result`.

        Usage Example:
        ```python
            >>> result = client.request("GET", "/api/v1/storage")
            >>> if result.ok:
            ...     print(result.json())
        ```
        """
        return self._send(PendingRequest.create(method, path, body))

    def get(self, path: str) -> RequestResult:
        """Send a GET request."""
        return self._send(PendingRequest(method=HttpMethod.GET, path=path))

    def post(self, path: str, body: bytes | str | None = None) -> RequestResult:
        """Send a POST request with an optional JSON body."""
        return self.request(HttpMethod.POST, path, body)

    def delete(self, path: str) -> RequestResult:
        """Send a DELETE request."""
        return self._send(PendingRequest(method=HttpMethod.DELETE, path=path))

    def _send(self, pending: PendingRequest | None) -> RequestResult:
        result = self._session.send(pending)
        self.last_result = result
        if result.error_body is not None:
            self._last_error_body = result.error_body
        return result

    def _command(self, pending: PendingRequest, expected: int = consts.COMMAND_SUCCESS_CODE) -> bool:
        result = self._send(pending)
        if result.status_code != expected:
            logger.info(
                "Command failed",
                path=pending.path,
                status_code=result.status_code,
                expected=expected,
                error_body=result.error_body,
            )
            return False
        return True

    # -- Queries ------------------------------------------------------------

    def _get_json(self, path: str) -> typing.Any:
        result = self.get(path)
        if not result.ok:
            return None
        try:
            return result.json()
        except ValueError as e:
            logger.warning("Failed to parse response", path=path, error=str(e), complete=result.complete)
            return None

    def get_printer_status(self) -> bool:
        """Refresh `status` from `/api/v1/status`.

        Returns:
            True if the status was fetched and decoded. On failure `status` keeps its previous value.

        Usage Example:
        ```python
            >>> if client.get_printer_status() and client.status.is_printing:
            ...     print(f"Nozzle at {client.status.temp_nozzle}°C")
        ```
        """
        data = self._get_json(consts.STATUS_PATH)
        if data is None:
            return False
        try:
            self.status = models.PrinterStatus.from_response(data)
        except (ValueError, pydantic.ValidationError) as e:
            logger.warning("Failed to parse printer status", error=str(e))
            return False
        logger.debug("Printer status", state=self.status.state)
        return True

    def get_job_info(self) -> bool:
        """Refresh `job` from `/api/v1/job`.

        Returns:
            True if an active job was reported and decoded. When no job is running, or on any
            other failure, `job` keeps its previous value.
        """
        data = self._get_json(consts.JOB_PATH)
        if data is None:
            return False
        try:
            self.job = models.JobInfo.from_response(data)
        except (ValueError, pydantic.ValidationError) as e:
            logger.info("No active job", error=str(e))
            return False
        logger.debug("Job info", file_name=self.job.file_name, completion=self.job.completion)
        return True

    def get_version(self) -> dict[str, typing.Any] | None:
        """Fetch `/api/version` (API, server and firmware versions), or None on failure."""
        return self._get_json(consts.VERSION_PATH)

    def get_info(self) -> dict[str, typing.Any] | None:
        """Fetch `/api/v1/info` (printer name, serial, nozzle diameter, ...), or None on failure."""
        return self._get_json(consts.INFO_PATH)

    # -- Commands -----------------------------------------------------------

    def printer_command(self, gcode: str) -> bool:
        """Send G-code to the printer.

        Several lines can be sent at once, separated by newlines.

        Args:
            gcode: The G-code to execute, e.g. "M117 Hello".

        Returns:
            True if the printer accepted the command (204 No Content).
        """
        gcode = gcode.strip()
        if not gcode:
            raise ValueError("G-code command must not be empty")
        logger.debug("Sending G-code", gcode=gcode)
        return self._command(
            PendingRequest.with_json(HttpMethod.POST, consts.PRINTER_COMMAND_PATH, {"command": gcode})
        )

    def home(self, axes: str = _AXES) -> bool:
        """Home the given axes (all by default)."""
        axes = axes.upper()
        unknown = set(axes) - set(_AXES)
        if unknown or not axes:
            raise ValueError(f"Axes must be a combination of X, Y and Z, got {axes!r}")
        if set(axes) == set(_AXES):
            return self.printer_command("G28")
        return self.printer_command("G28 " + " ".join(a for a in _AXES if a in axes))

    def jog(
        self,
        x: float = 0.0,
        y: float = 0.0,
        z: float = 0.0,
        feedrate: int = consts.DEFAULT_JOG_FEEDRATE,
    ) -> bool:
        """Move the head relative to its current position.

        Args:
            x: Millimetres along X.
            y: Millimetres along Y.
            z: Millimetres along Z.
            feedrate: Speed in mm/min.
        """
        if feedrate <= 0:
            raise ValueError("Feedrate must be positive")
        moves = [f"{axis}{_format_number(dist)}" for axis, dist in zip(_AXES, (x, y, z), strict=True) if dist]
        if not moves:
            raise ValueError("At least one axis distance must be non-zero")
        return self.printer_command(f"G91\nG1 {' '.join(moves)} F{feedrate}\nG90")

    def extrude(self, amount: float, feedrate: int = consts.DEFAULT_EXTRUDE_FEEDRATE) -> bool:
        """Extrude (or, with a negative amount, retract) filament.

        Args:
            amount: Millimetres of filament.
            feedrate: Speed in mm/min.
        """
        if feedrate <= 0:
            raise ValueError("Feedrate must be positive")
        if not amount:
            raise ValueError("Extrusion amount must be non-zero")
        return self.printer_command(f"M83\nG1 E{_format_number(amount)} F{feedrate}")

    def set_tool_temperature(self, celsius: float) -> bool:
        """Set the nozzle target temperature (0 turns the heater off)."""
        if celsius < 0:
            raise ValueError("Temperature must not be negative")
        return self.printer_command(f"M104 S{_format_number(celsius)}")

    def set_bed_temperature(self, celsius: float) -> bool:
        """Set the bed target temperature (0 turns the heater off)."""
        if celsius < 0:
            raise ValueError("Temperature must not be negative")
        return self.printer_command(f"M140 S{_format_number(celsius)}")

    def _job_command(self, command: str) -> bool:
        return self._command(PendingRequest.with_json(HttpMethod.POST, consts.JOB_PATH, {"command": command}))

    def start_job(self) -> bool:
        """Start the selected job."""
        return self._job_command("start")

    def pause_job(self) -> bool:
        """Pause the running job."""
        return self._job_command("pause")

    def resume_job(self) -> bool:
        """Resume a paused job."""
        return self._job_command("resume")

    def stop_job(self) -> bool:
        """Stop (cancel) the running job."""
        return self._command(PendingRequest(method=HttpMethod.DELETE, path=consts.JOB_PATH))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(target={self.target!s})"


def _no_auth() -> auth.AuthStrategy:
    return auth.NoAuth()


def _socket_transport() -> transport.Transport:
    return transport.SocketTransport()

