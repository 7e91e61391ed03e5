"""Per-session view over the job directory.

The board holds what one user is looking at: the loaded postings, which of
them are saved or applied to, and the last load error. Local state only
changes after the service call that backs it has succeeded.
"""

import logging
from typing import Any

from shared.errors import BackendUnavailable
from shared.session import Session

from .job_filters import FilterState, filter_jobs, search_jobs
from .job_service import JobService
from .saved_job_service import SavedJobService

logger = logging.getLogger(__name__)


class JobBoard:
    """Jobs list, saved and applied state for one session."""

    def __init__(
        self,
        job_service: JobService,
        saved_job_service: SavedJobService,
        session: Session | None = None,
        application_service: Any = None,
    ):
        if not job_service:
            raise ValueError("JobService is required")
        if not saved_job_service:
            raise ValueError("SavedJobService is required")
        self.job_service = job_service
        self.saved_job_service = saved_job_service
        self.application_service = application_service
        self.session = session
        self.jobs: list[dict[str, Any]] = []
        self.saved_job_ids: set[int] = set()
        self.applied_job_ids: set[int] = set()
        self.error: str | None = None
        self.loaded = False

    @property
    def retryable(self) -> bool:
        return self.error is not None

    def refresh(self) -> bool:
        """Reload postings and saved ids.

        Returns:
            True on success. On failure the previous jobs are kept, ``error``
            holds a message for the user, and False is returned.
        """
        try:
            jobs = self.job_service.list_jobs()
            saved_ids = self.saved_job_service.get_saved_job_ids(self.session)
        except BackendUnavailable as e:
            logger.error(f"Error loading jobs: {e}")
            self.error = "Failed to fetch jobs. Please try again."
            return False

        self.jobs = jobs
        self.saved_job_ids = set(saved_ids)
        self.error = None
        self.loaded = True
        return True

    def visible_jobs(
        self,
        query: str | None = None,
        filters: FilterState | None = None,
        include_closed: bool = False,
    ) -> list[dict[str, Any]]:
        """Search and filter the loaded jobs, marking saved ones.

        Args:
            query: Free-text search
            filters: Selected filter options
            include_closed: Also show postings that are no longer active

        Returns:
            Copies of the matching jobs, each with an ``is_saved`` flag
        """
        jobs = self.jobs
        if not include_closed:
            jobs = [job for job in jobs if job.get("status", "active") == "active"]
        jobs = filter_jobs(search_jobs(jobs, query), filters)
        return [{**job, "is_saved": job["job_id"] in self.saved_job_ids} for job in jobs]

    def is_saved(self, job_id: int) -> bool:
        return job_id in self.saved_job_ids

    def toggle_saved(self, job_id: int) -> bool:
        """Toggle the saved state and record the confirmed result."""
        saved = self.saved_job_service.toggle_saved(self.session, job_id)
        if saved:
            self.saved_job_ids.add(job_id)
        else:
            self.saved_job_ids.discard(job_id)
        return saved

    def apply(self, job_id: int, data: dict[str, Any]) -> dict[str, Any]:
        """Apply for a job and record it once the application is stored."""
        if self.application_service is None:
            raise ValueError("ApplicationService is required to apply")
        application = self.application_service.apply_for_job(self.session, job_id, data)
        self.applied_job_ids.add(job_id)
        return application
