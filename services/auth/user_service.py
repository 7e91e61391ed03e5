"""User management service for authentication."""

import logging
from typing import Any

import bcrypt
import psycopg2
from shared.database import Database
from shared.errors import NotFound, ValidationFailed
from shared.session import ROLES, Session, require_session

from .queries import (
    GET_USER_BY_EMAIL,
    GET_USER_BY_ID,
    INSERT_USER,
    UPDATE_USER_DISPLAY_NAME,
    UPDATE_USER_LAST_LOGIN,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class UserService:
    """Service for user management and authentication."""

    def __init__(self, database: Database):
        """Initialize the user service.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def create_user(
        self,
        email: str,
        password: str,
        display_name: str,
        role: str = "seeker",
    ) -> int:
        """Create a new user account.

        Args:
            email: Unique email address (stored lower-cased)
            password: Plain text password (will be hashed)
            display_name: Name shown to other users
            role: 'seeker' or 'employer', defaults to 'seeker'

        Returns:
            User ID of the created user

        Raises:
            ValidationFailed: If the email is taken or a field is invalid
        """
        if not email or not email.strip():
            raise ValidationFailed("Email is required", fields=["email"])
        if "@" not in email:
            raise ValidationFailed("Please enter a valid email address.", fields=["email"])
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailed(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters.",
                fields=["password"],
            )
        if not display_name or not display_name.strip():
            raise ValidationFailed("Display name is required", fields=["display_name"])
        if role not in ROLES:
            raise ValidationFailed(
                f"Role must be one of: {', '.join(ROLES)}", fields=["role"]
            )

        if self.get_user_by_email(email):
            raise ValidationFailed("This email is already registered.", fields=["email"])

        password_hash = self._hash_password(password)

        try:
            with self.db.get_cursor() as cur:
                cur.execute(
                    INSERT_USER,
                    (email.strip().lower(), display_name.strip(), password_hash, role),
                )
                result = cur.fetchone()
                if result:
                    user_id = result[0]
                    logger.info(f"Created {role} user {user_id}")
                    return user_id
                else:
                    raise ValueError("Failed to create user")
        except psycopg2.IntegrityError as e:
            raise ValidationFailed("This email is already registered.", fields=["email"]) from e
        except Exception as e:
            logger.error(f"Error creating user: {e}", exc_info=True)
            raise

    def get_user_by_email(self, email: str) -> dict[str, Any] | None:
        """Get user by email.

        Args:
            email: Email address to lookup

        Returns:
            User dictionary or None if not found
        """
        with self.db.get_cursor() as cur:
            cur.execute(GET_USER_BY_EMAIL, (email.strip().lower(),))
            columns = [desc[0] for desc in cur.description]
            row = cur.fetchone()

            if not row:
                return None

            return dict(zip(columns, row))

    def get_user_by_id(self, user_id: int) -> dict[str, Any] | None:
        """Get user by ID.

        Args:
            user_id: User ID to lookup

        Returns:
            User dictionary or None if not found
        """
        with self.db.get_cursor() as cur:
            cur.execute(GET_USER_BY_ID, (user_id,))
            columns = [desc[0] for desc in cur.description]
            row = cur.fetchone()

            if not row:
                return None

            return dict(zip(columns, row))

    def get_profile(self, session: Session | None) -> dict[str, Any]:
        """Get the signed-in user's account without the password hash."""
        session = require_session(session, "view your account")
        user = self.get_user_by_id(session.user_id)
        if not user:
            raise NotFound("User not found")
        return {k: v for k, v in user.items() if k != "password_hash"}

    def update_display_name(self, session: Session | None, display_name: str) -> None:
        """Change the signed-in user's display name.

        Raises:
            ValidationFailed: If the name is blank
            NotFound: If the user no longer exists
        """
        session = require_session(session, "update your profile")
        if not display_name or not display_name.strip():
            raise ValidationFailed("Display name is required", fields=["display_name"])

        with self.db.get_cursor() as cur:
            cur.execute(UPDATE_USER_DISPLAY_NAME, (display_name.strip(), session.user_id))
            if not cur.fetchone():
                raise NotFound("User not found")
        logger.info(f"Updated display name for user {session.user_id}")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a password against a hash.

        Args:
            password: Plain text password
            password_hash: Bcrypt password hash

        Returns:
            True if password matches, False otherwise
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Error verifying password: {e}", exc_info=True)
            return False

    def update_last_login(self, user_id: int) -> None:
        """Update user's last login timestamp.

        Args:
            user_id: User ID to update
        """
        try:
            with self.db.get_cursor() as cur:
                cur.execute(UPDATE_USER_LAST_LOGIN, (user_id,))
        except Exception as e:
            logger.error(f"Error updating last login for user {user_id}: {e}", exc_info=True)
            raise

    def _hash_password(self, password: str) -> str:
        """Hash a password using bcrypt."""
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
