"""Service for the public profile shown on a user's profile page."""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

from psycopg2.extras import Json
from shared.database import Database
from shared.errors import ValidationFailed
from shared.session import Session, require_session

from .queries import GET_USER_PROFILE, UPSERT_USER_PROFILE

logger = logging.getLogger(__name__)

DEFAULT_PROFILE: dict[str, Any] = {
    "bio": "",
    "skills": [],
    "location": "",
    "company": "",
    "phone": "",
    "github": "",
    "linkedin": "",
    "twitter": "",
}

PROFILE_FIELDS = tuple(DEFAULT_PROFILE)


def _parse_skills(value: Any) -> list[str] | None:
    # Accepts a list or the comma-separated text of the edit form
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list) or not all(isinstance(skill, str) for skill in value):
        return None
    return [skill.strip() for skill in value if skill.strip()]


def normalize_profile_changes(changes: dict[str, Any]) -> dict[str, Any]:
    """Validate profile changes and return them trimmed.

    Raises:
        ValidationFailed: Listing every unknown or mistyped field
    """
    normalized: dict[str, Any] = {}
    invalid = []
    for key, value in changes.items():
        if key not in DEFAULT_PROFILE:
            invalid.append(key)
        elif key == "skills":
            skills = _parse_skills(value)
            if skills is None:
                invalid.append(key)
            else:
                normalized[key] = skills
        elif value is None:
            normalized[key] = ""
        elif isinstance(value, str):
            normalized[key] = value.strip()
        else:
            invalid.append(key)

    if invalid:
        raise ValidationFailed(f"Invalid profile fields: {', '.join(invalid)}", fields=invalid)
    return normalized


def _with_defaults(stored: Any) -> dict[str, Any]:
    if isinstance(stored, str):
        try:
            stored = json.loads(stored)
        except (json.JSONDecodeError, TypeError):
            stored = {}
    if not isinstance(stored, dict):
        stored = {}
    profile = copy.deepcopy(DEFAULT_PROFILE)
    profile.update({key: value for key, value in stored.items() if key in DEFAULT_PROFILE})
    return profile


class ProfileService:
    """Service for reading and saving user profiles."""

    def __init__(self, database: Database):
        """Initialize the profile service.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def get_profile(self, session: Session | None) -> dict[str, Any]:
        """Get the signed-in user's profile, filled in with empty defaults."""
        session = require_session(session, "view your profile")
        with self.db.get_cursor() as cur:
            cur.execute(GET_USER_PROFILE, (session.user_id,))
            row = cur.fetchone()

        return _with_defaults(row[0] if row else {})

    def update_profile(self, session: Session | None, changes: dict[str, Any]) -> dict[str, Any]:
        """Merge changes into the signed-in user's profile.

        Fields not named in changes keep their stored values.

        Args:
            session: Current session
            changes: Partial profile

        Returns:
            The full profile after the update

        Raises:
            AuthRequired: If there is no session
            ValidationFailed: If a field is unknown or has the wrong type
        """
        session = require_session(session, "update your profile")
        normalized = normalize_profile_changes(changes)

        try:
            with self.db.get_cursor() as cur:
                cur.execute(UPSERT_USER_PROFILE, (session.user_id, Json(normalized)))
                row = cur.fetchone()
        except Exception as e:
            logger.error(f"Error saving profile for user {session.user_id}: {e}", exc_info=True)
            raise

        logger.info(f"Saved profile fields {sorted(normalized)} for user {session.user_id}")
        return _with_defaults(row[0] if row else normalized)
