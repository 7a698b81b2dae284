"""Printer status and control commands."""

import typing

import cyclopts

from prusa.link.client import consts
from prusa.link.client.cli import common

printer_app = cyclopts.App(name="printer", help="Printer status and control")


@printer_app.command(name="status")
def printer_status():
    """Show the printer state and temperatures."""
    common.logger.debug("Command started", command="printer status")
    client = common.get_client()

    if not client.get_printer_status() or client.status is None:
        common.report_command(False, "Status query", client)
        return

    s = client.status
    fields = [
        ("State", s.state),
        ("Nozzle", f"{s.temp_nozzle:.1f} / {s.target_nozzle:.1f} °C"),
        ("Bed", f"{s.temp_bed:.1f} / {s.target_bed:.1f} °C"),
    ]
    if s.axis_z is not None:
        fields.append(("Z", f"{s.axis_z:.2f} mm"))
    if s.speed is not None:
        fields.append(("Speed", f"{s.speed}%"))
    common.output_fields(f"Printer {client.target}", fields)


def status_alias():
    """Show the printer state and temperatures (alias for 'printer status')."""
    printer_status()


@printer_app.command(name="gcode")
def printer_gcode(
    gcode: typing.Annotated[list[str], cyclopts.Parameter(help="G-code lines, e.g. 'G28' 'M117 Hi'")],
):
    """Send G-code to the printer."""
    common.logger.debug("Command started", command="printer gcode", gcode=gcode)
    client = common.get_client()
    common.report_command(client.printer_command("\n".join(gcode)), "G-code", client)


@printer_app.command(name="home")
def printer_home(
    axes: typing.Annotated[str, cyclopts.Parameter(help="Axes to home, e.g. 'XY'")] = "XYZ",
):
    """Home the printer axes."""
    common.logger.debug("Command started", command="printer home", axes=axes)
    client = common.get_client()
    common.report_command(client.home(axes), f"Home {axes.upper()}", client)


@printer_app.command(name="jog")
def printer_jog(
    x: typing.Annotated[float, cyclopts.Parameter(name=["--x", "-x"], help="Relative X move (mm)")] = 0.0,
    y: typing.Annotated[float, cyclopts.Parameter(name=["--y", "-y"], help="Relative Y move (mm)")] = 0.0,
    z: typing.Annotated[float, cyclopts.Parameter(name=["--z", "-z"], help="Relative Z move (mm)")] = 0.0,
    feedrate: typing.Annotated[int, cyclopts.Parameter(help="Feedrate (mm/min)")] = consts.DEFAULT_JOG_FEEDRATE,
):
    """Move the print head relative to its current position."""
    common.logger.debug("Command started", command="printer jog", x=x, y=y, z=z, feedrate=feedrate)
    client = common.get_client()
    common.report_command(client.jog(x=x, y=y, z=z, feedrate=feedrate), "Jog", client)


@printer_app.command(name="extrude")
def printer_extrude(
    amount: typing.Annotated[
        float, cyclopts.Parameter(help="Filament length (mm), negative to retract", allow_leading_hyphen=True)
    ],
    feedrate: typing.Annotated[int, cyclopts.Parameter(help="Feedrate (mm/min)")] = consts.DEFAULT_EXTRUDE_FEEDRATE,
):
    """Extrude or retract filament."""
    common.logger.debug("Command started", command="printer extrude", amount=amount, feedrate=feedrate)
    client = common.get_client()
    common.report_command(client.extrude(amount, feedrate=feedrate), "Extrude", client)


@printer_app.command(name="temp")
def printer_temp(
    tool: typing.Annotated[float | None, cyclopts.Parameter(name="--tool", help="Nozzle target (°C)")] = None,
    bed: typing.Annotated[float | None, cyclopts.Parameter(name="--bed", help="Bed target (°C)")] = None,
):
    """Set nozzle and/or bed target temperatures."""
    common.logger.debug("Command started", command="printer temp", tool=tool, bed=bed)
    if tool is None and bed is None:
        common.output_message("[red]Specify --tool and/or --bed.[/red]", error=True)
        raise SystemExit(1)

    client = common.get_client()
    if tool is not None:
        common.report_command(client.set_tool_temperature(tool), f"Nozzle target {tool:g}°C", client)
    if bed is not None:
        common.report_command(client.set_bed_temperature(bed), f"Bed target {bed:g}°C", client)
