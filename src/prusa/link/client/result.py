"""Status line classification and request results.

How to use the most important parts:
- `extract_status_code()`: Turn a raw status line into an integer; -1 when there is none.
- `RequestResult`: The outcome of one request. Check `ok`, read `body`/`json()`, or call
  `raise_for_status()` to get an exception instead.
"""

from __future__ import annotations

import json
import typing

import pydantic
import structlog

from prusa.link.client import consts, exceptions

logger = structlog.get_logger(__name__)


def extract_status_code(status_line: str) -> int:
    """Extract the status code from an HTTP status line.

    The code is the token between the first and the second space: `HTTP/1.1 204 No Content` gives 204.
    A line without at least two space-separated tokens, or with a non-numeric code, gives -1.

    Args:
        status_line: The raw status line, possibly empty or cut short.

    Returns:
        The status code, or `consts.NO_RESPONSE`.
    """
    parts = status_line.strip().split(" ")
    if len(parts) < 2:
        return consts.NO_RESPONSE
    code = parts[1].strip()
    if not (code.isascii() and code.isdigit()):
        return consts.NO_RESPONSE
    try:
        return int(code)
    except ValueError:
        return consts.NO_RESPONSE


def is_success(status_code: int) -> bool:
    """Whether `status_code` is in the 2xx range."""
    return 200 <= status_code < 300


class RequestResult(pydantic.BaseModel):
    """Outcome of a single request.

    Attributes:
        status_code: The HTTP status code, or -1 when no response was obtained.
        status_line: The raw status line as received.
        body: The (possibly capped or incomplete) response body.
        error_body: The body decoded as text, kept only for non-2xx responses.
        complete: Whether the body reached the declared `Content-Length` before the deadline.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    status_code: int = consts.NO_RESPONSE
    status_line: str = ""
    body: bytes = b""
    error_body: str | None = None
    complete: bool = False

    @classmethod
    def classify(cls, status_line: str, body: bytes, complete: bool = False) -> RequestResult:
        """Build a result from what the parser accumulated.

        Args:
            status_line: The raw status line.
            body: The body bytes.
            complete: Whether the parser reached its declared body length.

        Returns:
            A `RequestResult`; `error_body` is set when the code is outside [200, 300).
        """
        status_code = extract_status_code(status_line)
        error_body = None
        if not is_success(status_code):
            error_body = body.decode("utf-8", errors="replace")
            if status_code != consts.NO_RESPONSE:
                logger.info("Printer returned an error", status_line=status_line, body=error_body)
        return cls(
            status_code=status_code,
            status_line=status_line,
            body=body,
            error_body=error_body,
            complete=complete,
        )

    @classmethod
    def no_response(cls) -> RequestResult:
        """Result used when no HTTP exchange took place."""
        return cls(error_body="")

    @property
    def ok(self) -> bool:
        """Whether the status code is in the 2xx range."""
        return is_success(self.status_code)

    @property
    def responded(self) -> bool:
        """Whether a status line with a valid code was received."""
        return self.status_code != consts.NO_RESPONSE

    @property
    def text(self) -> str:
        """The body decoded as UTF-8, invalid sequences replaced."""
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> typing.Any:  # type: ignore[override]
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.body)

    def raise_for_status(self) -> None:
        """Raise the matching `PrusaLinkError` if the request did not succeed.

        Raises:
            exceptions.PrusaLinkNetworkError: If no response was obtained.
            exceptions.PrusaLinkAuthError: On 401/403.
            exceptions.PrusaLinkApiError: On any other non-2xx status.
        """
        if not self.responded:
            raise exceptions.PrusaLinkNetworkError("No response from printer.")
        if self.ok:
            return
        reason = self.status_line.split(" ", 2)[2] if self.status_line.count(" ") >= 2 else ""
        if self.status_code in (401, 403):
            raise exceptions.PrusaLinkAuthError(
                "Invalid credentials.", status_code=self.status_code, response_body=self.error_body or ""
            )
        raise exceptions.PrusaLinkApiError(
            message=f"Request failed: {reason}".rstrip(": "),
            status_code=self.status_code,
            response_body=self.error_body or "",
        )
