"""HTTP/1.1 request serialization.

Requests are written by hand onto the byte stream: request line, `Host`, the authentication header,
`User-Agent`, `Connection: close`, and for requests with a body `Content-Type` and an exact
`Content-Length`, followed by a blank line and the body.

How to use the most important parts:
- `HttpMethod`: The only verbs the client speaks (GET, POST, DELETE).
- `PendingRequest`: A single request waiting to be sent. Use `PendingRequest.create()` to validate
  a method given as a plain string.
- `build_request()`: Serialize a `PendingRequest` into wire bytes.
"""

from __future__ import annotations

import json
import typing
from enum import StrEnum

import pydantic
import structlog

from prusa.link.client import consts

if typing.TYPE_CHECKING:
    from prusa.link.client.auth import AuthStrategy
    from prusa.link.client.models import EndpointTarget

logger = structlog.get_logger(__name__)

CRLF = b"\r\n"


class HttpMethod(StrEnum):
    """Supported HTTP methods."""

    GET = "GET"
    POST = "POST"
    DELETE = "DELETE"


class PendingRequest(pydantic.BaseModel):
    """A request that has not been sent yet."""

    model_config = pydantic.ConfigDict(frozen=True)

    method: HttpMethod
    path: str
    body: bytes | None = None

    @pydantic.field_validator("path")
    @classmethod
    def check_path(cls, v: str) -> str:
        """Paths must be absolute and must not smuggle extra lines into the request."""
        if not v.startswith("/"):
            raise ValueError(f"Path must start with '/': {v!r}")
        if any(c in v for c in ("\r", "\n", " ")):
            raise ValueError(f"Path contains whitespace or line breaks: {v!r}")
        return v

    @classmethod
    def create(cls, method: str, path: str, body: bytes | str | None = None) -> PendingRequest | None:
        """Build a request from loosely typed arguments.

        Args:
            method: The HTTP verb; anything but GET, POST and DELETE is rejected.
            path: Absolute request path, e.g. `/api/v1/status`.
            body: Optional body; strings are encoded as UTF-8.

        Returns:
            The request, or None if the method is not supported.

        Raises:
            pydantic.ValidationError: If the path is malformed.
        """
        try:
            http_method = HttpMethod(method)
        except ValueError:
            logger.warning("Only GET, POST and DELETE are supported", method=method)
            return None
        if isinstance(body, str):
            body = body.encode("utf-8")
        return cls(method=http_method, path=path, body=body)

    @classmethod
    def with_json(cls, method: HttpMethod, path: str, payload: typing.Any) -> PendingRequest:
        """Build a request whose body is `payload` encoded as JSON."""
        return cls(method=method, path=path, body=json.dumps(payload).encode("utf-8"))


def build_headers(request: PendingRequest, target: EndpointTarget, auth: AuthStrategy) -> dict[str, str]:
    """Assemble the ordered header block for `request`."""
    headers: dict[str, str] = {"Host": target.host_header}
    auth.before_request(headers)
    headers["User-Agent"] = consts.USER_AGENT
    headers["Connection"] = "close"
    if request.body is not None:
        headers["Content-Type"] = "application/json"
        headers["Content-Length"] = str(len(request.body))
    return headers


def build_request(request: PendingRequest, target: EndpointTarget, auth: AuthStrategy) -> bytes:
    """Serialize `request` into the bytes written to the connection.

    Args:
        request: The request to send.
        target: The printer being addressed, used for the `Host` header.
        auth: The strategy providing the authentication header.

    Returns:
        The complete request: request line, headers, blank line and body (if any).
    """
    lines = [f"{request.method} {request.path} HTTP/1.1".encode("ascii")]
    for name, value in build_headers(request, target, auth).items():
        if "\r" in value or "\n" in value:
            raise ValueError(f"Header {name} contains a line break")
        lines.append(f"{name}: {value}".encode("latin-1"))
    head = CRLF.join(lines) + CRLF + CRLF
    return head + (request.body or b"")
