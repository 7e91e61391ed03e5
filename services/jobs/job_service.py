"""Service for creating, reading, updating and deleting job postings."""

import logging
from typing import Any

from shared.database import Database
from shared.errors import NotAuthorized, NotFound, ValidationFailed
from shared.session import Session, require_session
from shared.structured_logging import get_structured_logger

from .job_filters import JOB_TYPES, parse_amount
from .queries import (
    DELETE_JOB,
    GET_JOB_BY_ID,
    GET_JOB_FOR_UPDATE,
    INSERT_JOB,
    LIST_JOBS,
    LIST_JOBS_BY_POSTER,
    UPDATE_JOB,
)

logger = logging.getLogger(__name__)

JOB_STATUSES = ("active", "closed")

# Request field -> column. "type" and "distance" are the names the job form uses.
INPUT_FIELDS = {
    "title": "title",
    "company": "company",
    "location": "location",
    "type": "job_type",
    "job_type": "job_type",
    "salary": "salary",
    "description": "description",
    "requirements": "requirements",
    "responsibilities": "responsibilities",
    "accessibility": "accessibility",
    "suitable_for": "suitable_for",
    "suitableFor": "suitable_for",
    "distance": "distance_km",
    "distance_km": "distance_km",
    "contact_name": "contact_name",
    "contact_email": "contact_email",
    "contact_phone": "contact_phone",
    "status": "status",
}

REQUIRED_FIELDS = (
    ("title", "title"),
    ("company", "company"),
    ("location", "location"),
    ("type", "job_type"),
    ("salary", "salary"),
    ("description", "description"),
)

TEXT_COLUMNS = (
    "title",
    "company",
    "location",
    "salary",
    "description",
    "contact_name",
    "contact_email",
    "contact_phone",
)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _split_lines(value: Any) -> list[str]:
    """Accept a list or newline-separated text and return non-empty lines."""
    if value is None:
        return []
    items = value.splitlines() if isinstance(value, str) else value
    return [str(item).strip() for item in items if str(item).strip()]


def _tag_list(value: Any) -> list[str]:
    """Accept a list or comma-separated text and return unique tags in order."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value
    tags = []
    for item in items:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _canonical_job_type(value: str) -> str:
    for job_type in JOB_TYPES:
        if job_type.lower() == value.strip().lower():
            return job_type
    raise ValidationFailed(
        f"Invalid job type '{value}'. Must be one of: {', '.join(JOB_TYPES)}", fields=["type"]
    )


def build_job_record(data: dict[str, Any], base: dict[str, Any] | None = None) -> dict[str, Any]:
    """Merge job form data onto an existing record and validate the result.

    Only editable fields are read from ``data``; identifiers, the poster and
    timestamps always come from ``base``.

    Args:
        data: Submitted fields (form names or column names)
        base: Existing job row for updates, None for new postings

    Returns:
        Record keyed by column name

    Raises:
        ValidationFailed: If required fields are missing or values are invalid
    """
    record = dict(base or {})
    for key, column in INPUT_FIELDS.items():
        if key in data:
            record[column] = data[key]
    contact = data.get("contact")
    if isinstance(contact, dict):
        for part in ("name", "email", "phone"):
            if part in contact:
                record[f"contact_{part}"] = contact[part]

    missing = [field for field, column in REQUIRED_FIELDS if _is_blank(record.get(column))]
    if missing:
        raise ValidationFailed(
            f"Please fill in all required fields: {', '.join(missing)}", fields=missing
        )

    for column in TEXT_COLUMNS:
        value = record.get(column)
        record[column] = str(value).strip() if not _is_blank(value) else None

    record["job_type"] = _canonical_job_type(str(record["job_type"]))
    record["requirements"] = _split_lines(record.get("requirements"))
    record["responsibilities"] = _split_lines(record.get("responsibilities"))
    record["accessibility"] = _tag_list(record.get("accessibility"))
    record["suitable_for"] = _tag_list(record.get("suitable_for"))

    distance = record.get("distance_km")
    if _is_blank(distance):
        record["distance_km"] = None
    else:
        parsed = parse_amount(distance)
        if parsed is None or parsed < 0:
            raise ValidationFailed(
                f"Invalid distance '{distance}'. Use a number of kilometres", fields=["distance"]
            )
        record["distance_km"] = parsed

    status = record.get("status") or "active"
    if status not in JOB_STATUSES:
        raise ValidationFailed(
            f"Invalid status '{status}'. Must be one of: {', '.join(JOB_STATUSES)}",
            fields=["status"],
        )
    record["status"] = status
    return record


def _editable_values(record: dict[str, Any]) -> tuple:
    return (
        record["title"],
        record["company"],
        record["location"],
        record["job_type"],
        record["salary"],
        record["description"],
        record["requirements"],
        record["responsibilities"],
        record["accessibility"],
        record["suitable_for"],
        record["distance_km"],
        record["contact_name"],
        record["contact_email"],
        record["contact_phone"],
    )


class JobService:
    """Service for job postings."""

    def __init__(self, database: Database):
        """Initialize the job service.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def list_jobs(self) -> list[dict[str, Any]]:
        """Get every posting, newest first.

        Returns:
            List of job dictionaries

        Raises:
            BackendUnavailable: If the database cannot be reached
        """
        with self.db.get_cursor() as cur:
            cur.execute(LIST_JOBS)
            columns = [desc[0] for desc in cur.description]
            jobs = [dict(zip(columns, row)) for row in cur.fetchall()]

        logger.debug(f"Retrieved {len(jobs)} job(s)")
        return jobs

    def list_jobs_for_poster(self, session: Session | None) -> list[dict[str, Any]]:
        """Get the postings created by the signed-in user, newest first."""
        session = require_session(session, "view your job postings")
        with self.db.get_cursor() as cur:
            cur.execute(LIST_JOBS_BY_POSTER, (session.user_id,))
            columns = [desc[0] for desc in cur.description]
            jobs = [dict(zip(columns, row)) for row in cur.fetchall()]

        logger.debug(f"Retrieved {len(jobs)} job(s) posted by user {session.user_id}")
        return jobs

    def get_job(self, job_id: int) -> dict[str, Any]:
        """Get a single posting.

        Args:
            job_id: Job ID

        Returns:
            Job dictionary

        Raises:
            NotFound: If the job does not exist
        """
        with self.db.get_cursor() as cur:
            cur.execute(GET_JOB_BY_ID, (job_id,))
            columns = [desc[0] for desc in cur.description]
            row = cur.fetchone()

        if not row:
            raise NotFound(f"Job {job_id} not found")
        return dict(zip(columns, row))

    def post_job(self, session: Session | None, data: dict[str, Any]) -> dict[str, Any]:
        """Create a new posting owned by the signed-in user.

        Args:
            session: Current session
            data: Job form fields; title, company, location, type, salary and
                description are required

        Returns:
            The created job

        Raises:
            AuthRequired: If there is no session
            ValidationFailed: If required fields are missing or invalid
        """
        session = require_session(session, "post a job")
        record = build_job_record(data)
        log = get_structured_logger(__name__, user_id=session.user_id)

        try:
            with self.db.get_cursor() as cur:
                cur.execute(INSERT_JOB, (session.user_id, *_editable_values(record)))
                row = cur.fetchone()
                if not row:
                    raise ValueError("Failed to create job")
        except Exception as e:
            log.error(f"Error posting job: {e}", exc_info=True)
            raise

        job_id, status, created_at, updated_at = row
        record.update(
            job_id=job_id,
            poster_id=session.user_id,
            status=status,
            created_at=created_at,
            updated_at=updated_at,
        )
        log.info(f"Posted job {job_id}: {record['title']} at {record['company']}")
        return record

    def _load_owned_job(self, cur, session: Session, job_id: int) -> dict[str, Any]:
        cur.execute(GET_JOB_FOR_UPDATE, (job_id,))
        columns = [desc[0] for desc in cur.description]
        row = cur.fetchone()
        if not row:
            raise NotFound(f"Job {job_id} not found")
        job = dict(zip(columns, row))
        if job["poster_id"] != session.user_id:
            logger.warning(f"User {session.user_id} tried to modify job {job_id} they do not own")
            raise NotAuthorized("You are not authorized to modify this job")
        return job

    def update_job(
        self, session: Session | None, job_id: int, changes: dict[str, Any]
    ) -> dict[str, Any]:
        """Apply a partial update to a posting owned by the signed-in user.

        Args:
            session: Current session
            job_id: Job ID
            changes: Fields to change; unknown and immutable fields are ignored

        Returns:
            The updated job

        Raises:
            AuthRequired: If there is no session
            NotFound: If the job does not exist
            NotAuthorized: If the caller did not post the job
            ValidationFailed: If the merged job is invalid
        """
        session = require_session(session, "update a job")
        log = get_structured_logger(__name__, user_id=session.user_id, job_id=job_id)

        with self.db.get_transaction() as cur:
            existing = self._load_owned_job(cur, session, job_id)
            record = build_job_record(changes, base=existing)
            cur.execute(
                UPDATE_JOB, (*_editable_values(record), record["status"], job_id, session.user_id)
            )
            row = cur.fetchone()
            if not row:
                raise NotFound(f"Job {job_id} not found")

        record["updated_at"] = row[0]
        log.info(f"Updated job {job_id}")
        return record

    def delete_job(self, session: Session | None, job_id: int) -> None:
        """Delete a posting owned by the signed-in user.

        Applications and saved-job links are removed with it.

        Raises:
            AuthRequired: If there is no session
            NotFound: If the job does not exist
            NotAuthorized: If the caller did not post the job
        """
        session = require_session(session, "delete a job")
        log = get_structured_logger(__name__, user_id=session.user_id, job_id=job_id)

        with self.db.get_transaction() as cur:
            self._load_owned_job(cur, session, job_id)
            cur.execute(DELETE_JOB, (job_id, session.user_id))
            if not cur.fetchone():
                raise NotFound(f"Job {job_id} not found")

        log.info(f"Deleted job {job_id}")
