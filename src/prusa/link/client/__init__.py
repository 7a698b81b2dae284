"""PrusaLink Client SDK.

This package provides a small Python client for the PrusaLink REST interface that runs on Prusa
printers. It speaks a minimal HTTP/1.1 over any byte stream, so it works with plain sockets as well
as with custom transports.

How to use the most important parts:
- Explore the submodules to understand the available features. Look closely at
  `sdk`, `session`, `parser`, `models` and `auth`.
- `PrusaLinkClient`: Exposes the printer operations. Start here for monitoring or control.
- `ApiKeyAuth` / `BasicAuth`: Pass one of these to `PrusaLinkClient(auth=...)`.
- `RequestResult`: What every raw request returns.
"""

import logging

import structlog

# Set default library logging level to WARNING if the user hasn't configured structlog
if not structlog.is_configured():
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING))

from prusa.link.client.__version__ import __version__
from prusa.link.client.auth import ApiKeyAuth, AuthStrategy, BasicAuth, NoAuth
from prusa.link.client.models import EndpointTarget, JobInfo, PrinterState, PrinterStatus
from prusa.link.client.result import RequestResult
from prusa.link.client.sdk import PrusaLinkClient
from prusa.link.client.transport import SocketTransport, Transport

__all__ = [
    "ApiKeyAuth",
    "AuthStrategy",
    "BasicAuth",
    "EndpointTarget",
    "JobInfo",
    "NoAuth",
    "PrinterState",
    "PrinterStatus",
    "PrusaLinkClient",
    "RequestResult",
    "SocketTransport",
    "Transport",
    "__version__",
]
