"""PrusaLink CLI package.

This module provides a command-line tool `prusalinkctl` used to query and control a printer over PrusaLink.
"""

from prusa.link.client.cli.common import console, get_client, logger
from prusa.link.client.cli.main import app, main

__all__ = [
    "app",
    "console",
    "get_client",
    "logger",
    "main",
]
