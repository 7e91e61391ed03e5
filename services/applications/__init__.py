"""Job applications and applicant export."""

from .application_service import APPLICATION_STATUSES, ApplicationService, can_transition
from .csv_export import applications_to_csv, export_filename

__all__ = [
    "ApplicationService",
    "APPLICATION_STATUSES",
    "can_transition",
    "applications_to_csv",
    "export_filename",
]
