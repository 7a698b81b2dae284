"""Exceptions for the PrusaLink client.

The request engine never raises these on its own: every request yields a `RequestResult`.
They are produced by `RequestResult.raise_for_status()` for callers that prefer exceptions.

How to use the most important parts:
- `PrusaLinkError`: Catch this base exception to handle all client-related errors.
- `PrusaLinkNetworkError`: No HTTP response was obtained (connection failure, timeout, garbage status line).
- `PrusaLinkAuthError`: The printer rejected the API key or the username/password pair.
- `PrusaLinkApiError`: Catch this to inspect detailed failure responses (like 409 or 500 errors).
"""


class PrusaLinkError(Exception):
    """Base exception for all PrusaLink client errors."""


class PrusaLinkNetworkError(PrusaLinkError):
    """Raised when the printer is unreachable or did not send a valid status line."""


class PrusaLinkApiError(PrusaLinkError):
    """Raised when the printer returns a status outside the 2xx range."""

    def __init__(self, message: str, status_code: int, response_body: str) -> None:
        """Initialize the error.

        Args:
            message: Error description.
            status_code: HTTP status code.
            response_body: Raw response body from the printer.
        """
        super().__init__(f"[{status_code}] {message}")
        self.status_code = status_code
        self.response_body = response_body


class PrusaLinkAuthError(PrusaLinkApiError):
    """Raised when the credentials are rejected (401/403)."""
