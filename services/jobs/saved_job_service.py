"""Service for the per-user saved jobs list."""

import logging
from typing import Any

from shared.database import Database
from shared.errors import NotFound
from shared.session import Session, require_session
from shared.structured_logging import get_structured_logger

from .queries import (
    DELETE_SAVED_JOB,
    GET_SAVED_JOB_IDS,
    GET_SAVED_JOBS,
    INSERT_SAVED_JOB,
    JOB_EXISTS,
)

logger = logging.getLogger(__name__)


class SavedJobService:
    """Service for saving and un-saving jobs."""

    def __init__(self, database: Database):
        """Initialize the saved job service.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def toggle_saved(self, session: Session | None, job_id: int) -> bool:
        """Save the job if it is not saved yet, otherwise remove it.

        The lookup and the write run in one transaction, and the unique key
        on (user_id, job_id) absorbs a racing duplicate insert.

        Args:
            session: Current session
            job_id: Job ID

        Returns:
            True if the job is saved afterwards, False if it was removed

        Raises:
            AuthRequired: If there is no session
            NotFound: If the job does not exist
        """
        session = require_session(session, "save a job")
        log = get_structured_logger(__name__, user_id=session.user_id, job_id=job_id)

        with self.db.get_transaction() as cur:
            cur.execute(JOB_EXISTS, (job_id,))
            if not cur.fetchone():
                raise NotFound(f"Job {job_id} not found")

            cur.execute(DELETE_SAVED_JOB, (session.user_id, job_id))
            if cur.fetchone():
                saved = False
            else:
                cur.execute(INSERT_SAVED_JOB, (session.user_id, job_id))
                if not cur.fetchone():
                    log.debug("Saved-job link already present, keeping it")
                saved = True

        log.info("Saved job" if saved else "Removed saved job")
        return saved

    def get_saved_job_ids(self, session: Session | None) -> set[int]:
        """Get the IDs of the jobs saved by the signed-in user.

        Anonymous callers have no saved jobs.
        """
        if session is None:
            return set()
        with self.db.get_cursor() as cur:
            cur.execute(GET_SAVED_JOB_IDS, (session.user_id,))
            return {row[0] for row in cur.fetchall()}

    def get_saved_jobs(self, session: Session | None) -> list[dict[str, Any]]:
        """Get saved jobs with posting details, most recently saved first."""
        session = require_session(session, "view saved jobs")
        with self.db.get_cursor() as cur:
            cur.execute(GET_SAVED_JOBS, (session.user_id,))
            columns = [desc[0] for desc in cur.description]
            rows = [dict(zip(columns, row)) for row in cur.fetchall()]

        seen = set()
        jobs = []
        for job in rows:
            if job["job_id"] not in seen:
                seen.add(job["job_id"])
                jobs.append(job)

        logger.debug(f"Retrieved {len(jobs)} saved job(s) for user {session.user_id}")
        return jobs
