"""Job postings, saved jobs, search and filtering."""

from .job_board import JobBoard
from .job_filters import FILTER_CATEGORIES, FILTER_OPTIONS, FilterState, filter_jobs, search_jobs
from .job_service import JobService
from .saved_job_service import SavedJobService

__all__ = [
    "JobService",
    "SavedJobService",
    "JobBoard",
    "FilterState",
    "FILTER_CATEGORIES",
    "FILTER_OPTIONS",
    "filter_jobs",
    "search_jobs",
]
