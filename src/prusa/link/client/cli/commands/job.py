"""Job management commands."""

import datetime

import cyclopts

from prusa.link.client.cli import common

job_app = cyclopts.App(name="job", help="Job management")


def _format_duration(seconds: int) -> str:
    return str(datetime.timedelta(seconds=max(seconds, 0)))


@job_app.command(name="show")
def job_show():
    """Show the active job."""
    common.logger.debug("Command started", command="job show")
    client = common.get_client()

    if not client.get_job_info() or client.job is None:
        if client.last_result.ok:
            common.output_message("No active job.")
            return
        common.report_command(False, "Job query", client)
        return

    j = client.job
    fields = [
        ("File", j.file_name),
        ("Progress", f"{j.progress_percent:.1f}%"),
        ("Printing", _format_duration(j.print_time)),
        ("Remaining", _format_duration(j.print_time_left)),
    ]
    if j.state:
        fields.insert(0, ("State", j.state))
    common.output_fields("Job", fields, value_style="yellow")


@job_app.command(name="start")
def job_start():
    """Start the selected job."""
    common.logger.debug("Command started", command="job start")
    client = common.get_client()
    common.report_command(client.start_job(), "Start job", client)


@job_app.command(name="pause")
def job_pause():
    """Pause the running job."""
    common.logger.debug("Command started", command="job pause")
    client = common.get_client()
    common.report_command(client.pause_job(), "Pause job", client)


@job_app.command(name="resume")
def job_resume():
    """Resume a paused job."""
    common.logger.debug("Command started", command="job resume")
    client = common.get_client()
    common.report_command(client.resume_job(), "Resume job", client)


@job_app.command(name="stop")
def job_stop():
    """Stop the running job."""
    common.logger.debug("Command started", command="job stop")
    client = common.get_client()
    common.report_command(client.stop_job(), "Stop job", client)
