"""Hello PrusaLink example."""

from prusa.link.client import PrusaLinkClient

# Host and credentials are loaded from PRUSA_LINK_* variables, .env or config.json
client = PrusaLinkClient.from_settings()

if client.get_printer_status():
    status = client.status
    print(f"{client.target}: {status.state}")
    print(f"  Nozzle: {status.temp_nozzle}°C (target {status.target_nozzle}°C)")
    print(f"  Bed: {status.temp_bed}°C (target {status.target_bed}°C)")
else:
    print(f"Status query failed: HTTP {client.http_status_code} {client.http_error_body}")

if client.get_job_info():
    print(f"Printing {client.job.file_name}: {client.job.progress_percent:.1f}%")
