"""Shared CLI helpers: output formatting, logging setup and client construction."""

import json
import logging
import sys
import typing

import better_exceptions
import structlog
from rich import console as rich_console
from rich.table import Table
from rich.text import Text

from prusa.link.client import config, consts, sdk

if typing.TYPE_CHECKING:
    from structlog.typing import Processor

better_exceptions.hook()
console = rich_console.Console()
err_console = rich_console.Console(stderr=True)
logger = structlog.get_logger(consts.APP_NAME)

type Fields = list[tuple[str, str]]

# Set by --format; None falls back to the configured format, then to TTY detection
_output_format: config.OutputFormat | None = None


def set_output_format(fmt: str | None) -> None:
    """Select the output format from the --format flag. Exits with code 1 on an unknown format."""
    global _output_format
    if fmt is None:
        _output_format = None
        return
    try:
        _output_format = config.OutputFormat(fmt)
    except ValueError:
        choices = ", ".join(f.value for f in config.OutputFormat)
        output_message(f"[red]Unknown output format `{fmt}`; choose one of: {choices}[/red]", error=True)
        sys.exit(1)


def get_output_format() -> config.OutputFormat:
    """The active output format: --format, then settings, then rich on a terminal and plain otherwise."""
    if _output_format is not None:
        return _output_format
    if config.settings.output_format is not None:
        return config.settings.output_format
    return config.OutputFormat.RICH if sys.stdout.isatty() else config.OutputFormat.PLAIN


def _plain(markup: str) -> str:
    return Text.from_markup(markup).plain


def output_message(msg: str, *, error: bool = False) -> None:
    """Print a one-line message.

    Rich markup is rendered in rich mode and stripped otherwise. In json mode every message goes
    to stderr so that stdout carries only JSON.
    """
    fmt = get_output_format()
    if fmt is config.OutputFormat.RICH:
        (err_console if error else console).print(msg)
        return
    to_stderr = error or fmt is config.OutputFormat.JSON
    print(_plain(msg), file=sys.stderr if to_stderr else sys.stdout)


def _field_key(label: str) -> str:
    return "_".join(label.lower().replace("(", " ").replace(")", " ").split())


def output_fields(title: str, fields: Fields, *, value_style: str = "green") -> None:
    """Print a titled list of label/value pairs.

    - rich: a two-column table, labels in cyan
    - plain: `# title` followed by one tab-separated `label<TAB>value` line per field
    - json: a single object keyed by the snake_cased labels
    """
    fmt = get_output_format()
    if fmt is config.OutputFormat.JSON:
        print(json.dumps({_field_key(label): _plain(value) for label, value in fields}))
    elif fmt is config.OutputFormat.PLAIN:
        print(f"# {title}")
        for label, value in fields:
            print(f"{label}\t{_plain(value)}")
    else:
        table = Table(title=title, show_header=False)
        table.add_column(style="cyan")
        table.add_column(style=value_style)
        for label, value in fields:
            table.add_row(label, value)
        console.print(table)


def report_command(ok: bool, action: str, client: sdk.PrusaLinkClient) -> None:
    """Print the outcome of a control command and exit non-zero on failure."""
    if ok:
        output_message(f"[green]{action}: OK[/green]")
        return
    code = client.http_status_code
    if code == consts.NO_RESPONSE:
        output_message(f"[red]{action} failed: no response from {client.target}[/red]", error=True)
    else:
        output_message(f"[red]{action} failed: HTTP {code}[/red]", error=True)
        if client.http_error_body:
            output_message(f"Details: {client.http_error_body}", error=True)
    sys.exit(1)


_LOGGING_INITIALIZED = False


def _log_level(verbose: bool, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def configure_logging(verbose: bool | None, debug: bool | None):
    """Route structlog output to stderr at the level chosen by --verbose/--debug.

    Called with neither flag after logging was set up, it leaves the existing setup alone.
    """
    global _LOGGING_INITIALIZED
    global logger

    if verbose is None and debug is None and _LOGGING_INITIALIZED:
        return
    _LOGGING_INITIALIZED = True

    renderer: Processor
    if sys.stderr.isatty():
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
        renderer,
    ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_log_level(bool(verbose), bool(debug))),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )
    logger = structlog.get_logger(consts.APP_NAME)


def get_client() -> sdk.PrusaLinkClient:
    """Build a client from the configured settings, exiting with code 1 when no host is set.

    Settings come from `PRUSA_LINK_*` environment variables, `.env` and `config.json`
    (see `prusa.link.client.config.Settings`).
    """
    try:
        return sdk.PrusaLinkClient.from_settings(config.settings)
    except ValueError as e:
        output_message(f"[red]{e}[/red]", error=True)
        sys.exit(1)
