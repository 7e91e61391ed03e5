"""CSV export of applicants who agreed to share their contact details."""

import csv
import io
from datetime import date, datetime
from typing import Any

CSV_HEADER = ["Name", "Email", "Phone", "Applied Date", "Status"]


def _format_date(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    return str(value) if value else ""


def consenting_applications(applications: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep applications whose applicant agreed to share contact info."""
    return [app for app in applications if app.get("share_contact_info") is True]


def applications_to_csv(applications: list[dict[str, Any]]) -> str:
    """Render consenting applications as CSV text with every field quoted.

    Args:
        applications: Application dictionaries as returned by ApplicationService

    Returns:
        CSV text: header row plus one row per consenting application
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for app in consenting_applications(applications):
        writer.writerow(
            [
                app.get("full_name") or "",
                app.get("email") or "",
                app.get("phone") or "",
                _format_date(app.get("applied_at")),
                app.get("status") or "",
            ]
        )
    return buffer.getvalue()


def export_filename(job_id: int) -> str:
    return f"applications-{job_id}.csv"
