"""Service for per-user notification, display and privacy settings."""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

from psycopg2.extras import Json
from shared.database import Database
from shared.errors import ValidationFailed
from shared.session import Session, require_session

from .queries import GET_USER_SETTINGS, UPSERT_USER_SETTINGS

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    "email_notifications": True,
    "job_alerts": True,
    "message_notifications": True,
    "dark_mode": False,
    "language": "English",
    "privacy": {
        "profile_visibility": "public",
        "show_email": False,
        "show_phone": False,
    },
}

LANGUAGES = ("English", "Hindi", "Marathi", "Tamil", "Telugu", "Bengali")
PROFILE_VISIBILITY = ("public", "private", "connections")


def _merge(base: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_settings_changes(changes: dict[str, Any]) -> None:
    """Reject unknown keys and values of the wrong type.

    Raises:
        ValidationFailed: Listing every offending field
    """
    invalid = []
    for key, value in changes.items():
        if key not in DEFAULT_SETTINGS:
            invalid.append(key)
        elif key == "privacy":
            if not isinstance(value, dict):
                invalid.append(key)
                continue
            for privacy_key, privacy_value in value.items():
                default = DEFAULT_SETTINGS["privacy"].get(privacy_key)
                if default is None:
                    invalid.append(f"privacy.{privacy_key}")
                elif privacy_key == "profile_visibility":
                    if privacy_value not in PROFILE_VISIBILITY:
                        invalid.append(f"privacy.{privacy_key}")
                elif not isinstance(privacy_value, bool):
                    invalid.append(f"privacy.{privacy_key}")
        elif key == "language":
            if value not in LANGUAGES:
                invalid.append(key)
        elif not isinstance(value, bool):
            invalid.append(key)

    if invalid:
        raise ValidationFailed(f"Invalid settings: {', '.join(invalid)}", fields=invalid)


class SettingsService:
    """Service for reading and saving user settings."""

    def __init__(self, database: Database):
        """Initialize the settings service.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def get_settings(self, session: Session | None) -> dict[str, Any]:
        """Get the signed-in user's settings, filled in with defaults."""
        session = require_session(session, "view your settings")
        with self.db.get_cursor() as cur:
            cur.execute(GET_USER_SETTINGS, (session.user_id,))
            row = cur.fetchone()

        if not row:
            return copy.deepcopy(DEFAULT_SETTINGS)

        stored = row[0]
        if isinstance(stored, str):
            try:
                stored = json.loads(stored)
            except (json.JSONDecodeError, TypeError):
                logger.warning(f"Unreadable settings for user {session.user_id}, using defaults")
                stored = {}
        if not isinstance(stored, dict):
            stored = {}
        known = {key: value for key, value in stored.items() if key in DEFAULT_SETTINGS}
        return _merge(DEFAULT_SETTINGS, known)

    def update_settings(self, session: Session | None, changes: dict[str, Any]) -> dict[str, Any]:
        """Merge changes into the signed-in user's settings and save them.

        Args:
            session: Current session
            changes: Partial settings; nested privacy keys merge individually

        Returns:
            The full settings after the update

        Raises:
            AuthRequired: If there is no session
            ValidationFailed: If a key is unknown or a value is invalid
        """
        session = require_session(session, "save your settings")
        validate_settings_changes(changes)
        settings = _merge(self.get_settings(session), changes)

        try:
            with self.db.get_cursor() as cur:
                cur.execute(UPSERT_USER_SETTINGS, (session.user_id, Json(settings)))
        except Exception as e:
            logger.error(f"Error saving settings for user {session.user_id}: {e}", exc_info=True)
            raise

        logger.info(f"Saved settings for user {session.user_id}")
        return settings
