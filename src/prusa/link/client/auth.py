"""Authentication strategies for PrusaLink.

PrusaLink accepts either an API key header or a username/password pair. Both are static for the
lifetime of a client, so the header value is computed once when the strategy is created.

How to use the most important parts:
- `ApiKeyAuth`: Sends the key in the `X-Api-Key` header. This is what current PrusaLink firmware expects.
- `BasicAuth`: Sends `Authorization: Basic <base64(user:pass)>`, for older firmware/proxies.
- `NoAuth`: Sends no credentials at all.
- Pass any of them to `PrusaLinkClient(auth=...)`.
"""

from __future__ import annotations

import base64
import collections.abc  # noqa: TC003
import typing

import pydantic
import structlog

logger = structlog.get_logger(__name__)


class AuthStrategy(typing.Protocol):
    """Protocol defining how authentication credentials behave."""

    def before_request(self, headers: collections.abc.MutableMapping[str, str]) -> None:
        """Inject credentials into the request headers.

        This method is called while a request is being serialized.
        The header values are emitted verbatim, in insertion order.

        Args:
            headers: The ordered mapping of headers to modify in-place.
        """
        ...


class ApiKeyAuth:
    """Authenticate with a PrusaLink API key."""

    header_name = "X-Api-Key"

    def __init__(self, api_key: str | pydantic.SecretStr) -> None:
        """Initialize with the key shown on the printer's settings screen."""
        if isinstance(api_key, str):
            api_key = pydantic.SecretStr(api_key)
        if not api_key.get_secret_value():
            raise ValueError("API key must not be empty")
        self._api_key = api_key

    def before_request(self, headers: collections.abc.MutableMapping[str, str]) -> None:
        """Inject the `X-Api-Key` header."""
        headers[self.header_name] = self._api_key.get_secret_value()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(api_key={self._api_key!r})"


class BasicAuth:
    """Authenticate with HTTP Basic credentials."""

    header_name = "Authorization"

    def __init__(self, username: str, password: str | pydantic.SecretStr) -> None:
        """Encode the credentials once.

        Args:
            username: The PrusaLink user (usually `maker`).
            password: The password for that user.
        """
        if isinstance(password, pydantic.SecretStr):
            password = password.get_secret_value()
        self.username = username
        token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        self._header_value = pydantic.SecretStr(f"Basic {token}")

    def before_request(self, headers: collections.abc.MutableMapping[str, str]) -> None:
        """Inject the pre-encoded `Authorization` header."""
        headers[self.header_name] = self._header_value.get_secret_value()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(username={self.username!r})"


class NoAuth:
    """Send requests without credentials."""

    def before_request(self, headers: collections.abc.MutableMapping[str, str]) -> None:
        """Leave the headers untouched."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def resolve_auth(
    api_key: str | pydantic.SecretStr | None = None,
    username: str | None = None,
    password: str | pydantic.SecretStr | None = None,
) -> AuthStrategy:
    """Pick an authentication strategy from whatever credentials are available.

    An API key wins over a username/password pair; with neither, requests are unauthenticated.

    Args:
        api_key: Optional PrusaLink API key.
        username: Optional username for Basic auth.
        password: Optional password for Basic auth.

    Returns:
        An object adhering to the `AuthStrategy` protocol.
    """
    if isinstance(api_key, pydantic.SecretStr):
        api_key = api_key.get_secret_value() or None
    if api_key:
        logger.debug("Using API key authentication")
        return ApiKeyAuth(api_key)
    if username and password is not None:
        logger.debug("Using basic authentication", username=username)
        return BasicAuth(username, password)
    logger.debug("No credentials configured, sending unauthenticated requests")
    return NoAuth()
