"""Raw API request commands."""

from __future__ import annotations

import json
import pathlib  # noqa: TC003
import sys
import typing

import cyclopts
from rich import print as rprint

from prusa.link.client.cli import common
from prusa.link.client.request import HttpMethod

if typing.TYPE_CHECKING:
    from prusa.link.client.result import RequestResult


def _render_body(res: RequestResult) -> str:
    """Re-serialize JSON bodies on one line, pass anything else through as text."""
    try:
        return json.dumps(res.json())
    except ValueError:
        return res.text


def api_command(
    path: typing.Annotated[str, cyclopts.Parameter(help="API endpoint (e.g. /api/v1/storage)")],
    method: typing.Annotated[str, cyclopts.Parameter(help="HTTP Method (GET, POST or DELETE)")] = "GET",
    data: typing.Annotated[str | None, cyclopts.Parameter(help="JSON data body")] = None,
    output: typing.Annotated[pathlib.Path | None, cyclopts.Parameter(help="Output file for response")] = None,
    response_status: typing.Annotated[bool, cyclopts.Parameter(help="Print the status line", alias=["-s"])] = False,
):
    """Make a raw authenticated API request."""
    common.logger.debug("Command started", command="api", method=method, path=path, data=data, output=output)

    method = method.upper()
    if method not in HttpMethod.__members__:
        common.output_message(f"[red]Unsupported method {method}; use GET, POST or DELETE.[/red]", error=True)
        sys.exit(1)

    if data is not None:
        try:
            json.loads(data)
        except ValueError as e:
            common.output_message(f"[red]Invalid JSON body: {e}[/red]", error=True)
            sys.exit(1)

    client = common.get_client()
    res = client.request(method, path, data)

    if not res.responded:
        res.raise_for_status()

    if response_status:
        rprint(res.status_line, file=sys.stderr)

    body = _render_body(res)
    if output and str(output) != "-":
        output.write_bytes(res.body)
        rprint(f"[green]Response saved to {output}[/green]")
    elif body:
        print(body)

    res.raise_for_status()
