"""Constants used across the PrusaLink client.

How to use the most important parts:
- Import this module to reference default ports, timeouts, buffer limits and API paths without
  hardcoding them in your application logic.
"""

from prusa.link.client.__version__ import __version__

APP_NAME = "prusa-link"
APP_AUTHOR = "Prusa"

# Connection defaults
DEFAULT_PORT = 80
DEFAULT_TIMEOUT = 3.0
DEFAULT_CONNECT_TIMEOUT = 3.0
DEFAULT_POLL_INTERVAL = 0.01
READ_CHUNK_SIZE = 512

# Response limits
MAX_BODY_SIZE = 8192

# Snapshot string limits
MAX_STATE_LENGTH = 19
MAX_FILE_NAME_LENGTH = 63

USER_AGENT = f"PrusaLinkAPI/{__version__} (Python)"

# Status code used when no HTTP response could be obtained
NO_RESPONSE = -1

# API Endpoints
STATUS_PATH = "/api/v1/status"
JOB_PATH = "/api/v1/job"
PRINTER_COMMAND_PATH = "/api/v1/printer/command"
INFO_PATH = "/api/v1/info"
VERSION_PATH = "/api/version"

# Printer control endpoints answer with 204 No Content on success
COMMAND_SUCCESS_CODE = 204

# G-code defaults
DEFAULT_JOG_FEEDRATE = 3000
DEFAULT_EXTRUDE_FEEDRATE = 300
