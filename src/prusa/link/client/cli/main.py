"""Main entry point for the CLI."""

import sys
import typing

import cyclopts

from prusa.link.client import __version__
from prusa.link.client.cli import common
from prusa.link.client.cli.commands import api, config, job, printer

# Define the App
app = cyclopts.App(
    name="prusalinkctl",
    help="PrusaLink CLI and API Client",
    version=__version__,
    version_flags=["--version"],
    help_flags=["--help"],
)
app.register_install_completion_command(add_to_startup=False)

# Mount Sub-Apps
app.command(printer.printer_app)
app.command(job.job_app)
app.command(config.config_app)

# Register Aliases and Commands
app.command(printer.status_alias, name="status")
app.command(api.api_command, name="api")


@app.meta.default
def entry_point(
    tokens: typing.Annotated[list[str] | None, cyclopts.Parameter(show=False, allow_leading_hyphen=True)] = None,
    verbose: typing.Annotated[
        bool, cyclopts.Parameter(name=["--verbose", "-v"], help="Enable verbose logging")
    ] = False,
    debug: typing.Annotated[bool, cyclopts.Parameter(name=["--debug"], help="Enable debug logging")] = False,
    output_format: typing.Annotated[
        str | None, cyclopts.Parameter(name=["--format"], help="Output format: rich, plain or json")
    ] = None,
):
    """Main entry point handling global flags."""
    common.configure_logging(verbose, debug)
    common.set_output_format(output_format)

    if tokens is None:
        tokens = []
    try:
        app(tokens)
    except cyclopts.exceptions.CycloptsError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def main(args: list[str] | None = None):
    """Main entry point."""
    if args is None:
        args = sys.argv[1:]

    try:
        app.meta(args)
    except cyclopts.exceptions.CycloptsError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        from prusa.link.client import exceptions

        if isinstance(e, exceptions.PrusaLinkApiError):
            print(f"API Error: {e}", file=sys.stderr)
            if e.response_body:
                print(f"Details: {e.response_body}", file=sys.stderr)
        elif isinstance(e, exceptions.PrusaLinkNetworkError):
            print(f"Network Error: {e}", file=sys.stderr)
        elif isinstance(e, ValueError):
            print(f"Error: {e}", file=sys.stderr)
        else:
            print(f"Unexpected Error: {e}", file=sys.stderr)
            common.logger.exception("An unexpected error occurred")
        sys.exit(1)


if __name__ == "__main__":
    main()
