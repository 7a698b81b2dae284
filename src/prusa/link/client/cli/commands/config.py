"""Configuration commands."""

import typing

import cyclopts

from prusa.link.client import config
from prusa.link.client.cli import common

config_app = cyclopts.App(name="config", help="Show or change the saved printer connection")


@config_app.command(name="show")
def config_show():
    """Show the effective configuration (secrets masked)."""
    common.logger.debug("Command started", command="config show")
    s = config.settings
    fields = [
        ("Host", s.host or "(not set)"),
        ("Port", str(s.port)),
        ("Auth", type(s.build_auth()).__name__),
        ("Timeout", f"{s.timeout:g}s"),
        ("Config file", str(config.get_config_path())),
    ]
    common.output_fields("Configuration", fields)


@config_app.command(name="set")
def config_set(
    host: typing.Annotated[str | None, cyclopts.Parameter(help="Printer IP address or hostname")] = None,
    port: typing.Annotated[int | None, cyclopts.Parameter(help="PrusaLink port")] = None,
    api_key: typing.Annotated[str | None, cyclopts.Parameter(help="PrusaLink API key")] = None,
    username: typing.Annotated[str | None, cyclopts.Parameter(help="Username for basic auth")] = None,
    password: typing.Annotated[str | None, cyclopts.Parameter(help="Password for basic auth")] = None,
    timeout: typing.Annotated[float | None, cyclopts.Parameter(help="Response timeout in seconds")] = None,
):
    """Save connection settings to config.json."""
    common.logger.debug("Command started", command="config set", host=host, port=port)
    updates: dict[str, typing.Any] = {
        "host": host,
        "port": port,
        "api_key": api_key,
        "username": username,
        "password": password,
        "timeout": timeout,
    }
    current = config.Settings(**{k: v for k, v in updates.items() if v is not None})
    path = config.save_json_config(current)
    config.reset_settings()
    common.output_message(f"[green]Configuration saved to {path}[/green]")
