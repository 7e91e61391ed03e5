"""Service for submitting and deciding job applications."""

import logging
from typing import Any

from shared.database import Database
from shared.errors import AlreadyApplied, NotAuthorized, NotFound, ValidationFailed
from shared.session import Session, require_session
from shared.structured_logging import get_structured_logger

from .queries import (
    DELETE_PENDING_APPLICATION,
    GET_APPLICATION_FOR_JOB_AND_APPLICANT,
    GET_APPLICATION_WITH_POSTER,
    GET_APPLICATIONS_FOR_APPLICANT,
    GET_APPLICATIONS_FOR_JOB,
    GET_APPLICATIONS_FOR_JOBS,
    GET_JOB_POSTER,
    GET_JOB_STATUS_FOR_APPLY,
    INSERT_APPLICATION,
    UPDATE_APPLICATION_STATUS,
)

logger = logging.getLogger(__name__)

PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"
APPLICATION_STATUSES = (PENDING, ACCEPTED, REJECTED)

# Allowed status changes; accepted and rejected are terminal
STATUS_TRANSITIONS = {
    PENDING: (ACCEPTED, REJECTED),
    ACCEPTED: (),
    REJECTED: (),
}


def can_transition(current: str, new: str) -> bool:
    """Check whether an application may move from one status to another."""
    return new in STATUS_TRANSITIONS.get(current, ())


def _applicant_snapshot(session: Session, data: dict[str, Any]) -> tuple:
    full_name = str(data.get("full_name") or data.get("fullName") or session.display_name or "")
    email = str(data.get("email") or session.email or "")
    phone = str(data.get("phone") or "").strip() or None
    share = data.get("share_contact_info", data.get("shareContactInfo", True))

    missing = [field for field, value in (("full_name", full_name), ("email", email)) if not value.strip()]
    if missing:
        raise ValidationFailed(
            f"Please fill in all required fields: {', '.join(missing)}", fields=missing
        )
    if "@" not in email:
        raise ValidationFailed(f"Invalid email address '{email}'", fields=["email"])
    if not isinstance(share, bool):
        raise ValidationFailed(
            "share_contact_info must be true or false", fields=["share_contact_info"]
        )
    return full_name.strip(), email.strip().lower(), phone, share


class ApplicationService:
    """Service for job applications."""

    def __init__(self, database: Database):
        """Initialize the application service.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def apply_for_job(
        self, session: Session | None, job_id: int, data: dict[str, Any]
    ) -> dict[str, Any]:
        """Submit an application for the signed-in user.

        Args:
            session: Current session
            job_id: Job ID
            data: Contact snapshot (full_name, email, phone) and the
                share_contact_info consent flag (defaults to True)

        Returns:
            The created application with status 'pending'

        Raises:
            AuthRequired: If there is no session
            NotFound: If the job does not exist
            ValidationFailed: If the job is closed or contact details are missing
            AlreadyApplied: If the user already applied for this job
        """
        session = require_session(session, "apply for a job")
        full_name, email, phone, share = _applicant_snapshot(session, data)
        log = get_structured_logger(__name__, user_id=session.user_id, job_id=job_id)

        with self.db.get_transaction() as cur:
            cur.execute(GET_JOB_STATUS_FOR_APPLY, (job_id,))
            job = cur.fetchone()
            if not job:
                raise NotFound(f"Job {job_id} not found")
            if job[1] != "active":
                raise ValidationFailed("This job is no longer accepting applications", fields=[])

            cur.execute(
                INSERT_APPLICATION, (job_id, session.user_id, full_name, email, phone, share)
            )
            columns = [desc[0] for desc in cur.description]
            row = cur.fetchone()

        if not row:
            log.warning("Duplicate application rejected")
            raise AlreadyApplied()

        application = dict(zip(columns, row))
        log.info(f"Application {application['application_id']} submitted")
        return application

    def get_application_for_user(
        self, session: Session | None, job_id: int
    ) -> dict[str, Any] | None:
        """Get the signed-in user's own application for a job, if any."""
        if session is None:
            return None
        with self.db.get_cursor() as cur:
            cur.execute(GET_APPLICATION_FOR_JOB_AND_APPLICANT, (job_id, session.user_id))
            columns = [desc[0] for desc in cur.description]
            row = cur.fetchone()

        return dict(zip(columns, row)) if row else None

    def _require_poster(self, session: Session, job_id: int) -> None:
        with self.db.get_cursor() as cur:
            cur.execute(GET_JOB_POSTER, (job_id,))
            row = cur.fetchone()
        if not row:
            raise NotFound(f"Job {job_id} not found")
        if row[0] != session.user_id:
            logger.warning(f"User {session.user_id} denied access to applications of job {job_id}")
            raise NotAuthorized("You are not authorized to view applications for this job")

    def get_applications_for_job(
        self, session: Session | None, job_id: int
    ) -> list[dict[str, Any]]:
        """Get every application for a job, newest first. Poster only.

        Raises:
            AuthRequired: If there is no session
            NotFound: If the job does not exist
            NotAuthorized: If the caller did not post the job
        """
        session = require_session(session, "view applications")
        self._require_poster(session, job_id)
        return self.load_applications_for_job(job_id)

    def load_applications_for_job(self, job_id: int) -> list[dict[str, Any]]:
        """Read applications for a job without an ownership check.

        Used to refresh snapshots for a subscriber already checked by
        get_applications_for_job.
        """
        with self.db.get_cursor() as cur:
            cur.execute(GET_APPLICATIONS_FOR_JOB, (job_id,))
            columns = [desc[0] for desc in cur.description]
            applications = [dict(zip(columns, row)) for row in cur.fetchall()]

        logger.debug(f"Retrieved {len(applications)} application(s) for job {job_id}")
        return applications

    def attach_applications(self, jobs: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Embed each job's applications under an 'applications' key."""
        if not jobs:
            return jobs
        job_ids = [job["job_id"] for job in jobs]
        with self.db.get_cursor() as cur:
            cur.execute(GET_APPLICATIONS_FOR_JOBS, (job_ids,))
            columns = [desc[0] for desc in cur.description]
            applications = [dict(zip(columns, row)) for row in cur.fetchall()]

        by_job: dict[int, list[dict[str, Any]]] = {job_id: [] for job_id in job_ids}
        for application in applications:
            by_job.setdefault(application["job_id"], []).append(application)
        for job in jobs:
            job["applications"] = by_job[job["job_id"]]
        return jobs

    def get_applications_for_applicant(self, session: Session | None) -> list[dict[str, Any]]:
        """Get the signed-in user's applications with job details, newest first."""
        session = require_session(session, "view your applications")
        with self.db.get_cursor() as cur:
            cur.execute(GET_APPLICATIONS_FOR_APPLICANT, (session.user_id,))
            columns = [desc[0] for desc in cur.description]
            applications = [dict(zip(columns, row)) for row in cur.fetchall()]

        logger.debug(f"Retrieved {len(applications)} application(s) for user {session.user_id}")
        return applications

    def _get_application(self, application_id: int) -> dict[str, Any]:
        with self.db.get_cursor() as cur:
            cur.execute(GET_APPLICATION_WITH_POSTER, (application_id,))
            columns = [desc[0] for desc in cur.description]
            row = cur.fetchone()
        if not row:
            raise NotFound(f"Application {application_id} not found")
        return dict(zip(columns, row))

    def update_status(
        self, session: Session | None, application_id: int, status: str
    ) -> dict[str, Any]:
        """Accept or reject a pending application. Poster only.

        Args:
            session: Current session
            application_id: Application ID
            status: 'accepted' or 'rejected'

        Returns:
            The updated application

        Raises:
            AuthRequired: If there is no session
            NotFound: If the application does not exist
            NotAuthorized: If the caller did not post the job
            ValidationFailed: If the transition is not allowed
        """
        session = require_session(session, "update an application")
        application = self._get_application(application_id)
        log = get_structured_logger(
            __name__,
            user_id=session.user_id,
            job_id=application["job_id"],
            application_id=application_id,
        )
        if application["poster_id"] != session.user_id:
            log.warning("Status change denied: caller is not the poster")
            raise NotAuthorized("You are not authorized to update this application")
        if status not in APPLICATION_STATUSES:
            raise ValidationFailed(
                f"Invalid status. Must be one of: {', '.join(APPLICATION_STATUSES)}",
                fields=["status"],
            )
        if not can_transition(application["status"], status):
            raise ValidationFailed(
                f"Cannot change application status from {application['status']} to {status}",
                fields=["status"],
            )

        try:
            with self.db.get_cursor() as cur:
                cur.execute(UPDATE_APPLICATION_STATUS, (status, application_id))
                columns = [desc[0] for desc in cur.description]
                row = cur.fetchone()
        except Exception as e:
            log.error(f"Error updating application status: {e}", exc_info=True)
            raise

        if not row:
            # Decided by someone else between our read and the update
            raise ValidationFailed("This application has already been decided", fields=["status"])

        log.info(f"Application marked {status}")
        return dict(zip(columns, row))

    def withdraw_application(self, session: Session | None, application_id: int) -> None:
        """Delete the signed-in user's own pending application.

        Raises:
            AuthRequired: If there is no session
            NotFound: If the application does not exist
            NotAuthorized: If the application belongs to someone else
            ValidationFailed: If the application was already decided
        """
        session = require_session(session, "withdraw an application")
        application = self._get_application(application_id)
        if application["applicant_id"] != session.user_id:
            logger.warning(
                f"User {session.user_id} tried to withdraw application {application_id}"
            )
            raise NotAuthorized("You are not authorized to withdraw this application")
        if application["status"] != PENDING:
            raise ValidationFailed(
                f"Cannot withdraw an application that was {application['status']}",
                fields=["status"],
            )

        with self.db.get_cursor() as cur:
            cur.execute(DELETE_PENDING_APPLICATION, (application_id, session.user_id))
            row = cur.fetchone()
        if not row:
            raise ValidationFailed("This application has already been decided", fields=["status"])

        logger.info(f"Application {application_id} withdrawn by user {session.user_id}")
