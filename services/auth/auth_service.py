"""Authentication service for sign-up, sign-in and sign-out."""

import logging
from dataclasses import dataclass
from typing import Any

from shared.change_feed import EventBus
from shared.database import Database
from shared.session import Session, require_session

from .queries import GET_REVOKED_TOKEN, INSERT_REVOKED_TOKEN
from .user_service import UserService

logger = logging.getLogger(__name__)

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"


@dataclass(frozen=True)
class SessionEvent:
    """Published whenever a user signs in or out."""

    kind: str
    session: Session


class AuthService:
    """Service for authentication operations."""

    def __init__(
        self,
        user_service: UserService,
        events: EventBus | None = None,
        database: Database | None = None,
    ):
        """Initialize the auth service.

        Args:
            user_service: UserService instance for user operations
            events: Bus that receives SessionEvent on sign-in and sign-out
            database: Database holding revoked tokens (defaults to the user service's)
        """
        if not user_service:
            raise ValueError("UserService is required")
        self.user_service = user_service
        self.db = database if database is not None else user_service.db
        self.events = events if events is not None else EventBus()

    def authenticate_user(self, email: str, password: str) -> dict[str, Any] | None:
        """Authenticate a user by email and password.

        Args:
            email: Email address
            password: Plain text password

        Returns:
            User dictionary (without password hash) if authentication
            succeeds, None otherwise
        """
        if not email or not password:
            return None

        user = self.user_service.get_user_by_email(email.strip())
        if not user:
            logger.warning("Authentication failed: unknown email")
            return None

        if not self.user_service.verify_password(password, user["password_hash"]):
            logger.warning(f"Authentication failed: invalid password for user {user['user_id']}")
            return None

        try:
            self.user_service.update_last_login(user["user_id"])
        except Exception as e:
            logger.error(f"Error updating last login: {e}", exc_info=True)
            # Don't fail authentication if last login update fails

        user_clean = {k: v for k, v in user.items() if k != "password_hash"}
        logger.info(f"User authenticated: {user['user_id']}")
        return user_clean

    def sign_in(self, email: str, password: str) -> tuple[dict[str, Any], Session] | None:
        """Authenticate and open a session.

        Returns:
            (user, session) on success, None if the credentials are wrong
        """
        user = self.authenticate_user(email, password)
        if not user:
            return None
        session = Session.from_user(user)
        self.events.publish(SessionEvent(SIGNED_IN, session))
        return user, session

    def register_user(
        self, email: str, password: str, display_name: str, role: str = "seeker"
    ) -> tuple[int, Session]:
        """Register a new user and open a session for them.

        Args:
            email: Unique email address
            password: Plain text password (will be hashed)
            display_name: Name shown to other users
            role: 'seeker' or 'employer'

        Returns:
            (user_id, session)

        Raises:
            ValidationFailed: If the email is taken or a field is invalid
        """
        user_id = self.user_service.create_user(
            email=email, password=password, display_name=display_name, role=role
        )
        session = Session(
            user_id=user_id,
            email=email.strip().lower(),
            display_name=display_name.strip(),
            role=role,
        )
        self.events.publish(SessionEvent(SIGNED_IN, session))
        return user_id, session

    def sign_out(self, session: Session | None, jti: str) -> None:
        """Revoke the access token behind a session.

        Args:
            session: Current session
            jti: Unique identifier of the access token being revoked
        """
        session = require_session(session, "sign out")
        with self.db.get_cursor() as cur:
            cur.execute(INSERT_REVOKED_TOKEN, (jti, session.user_id))
        logger.info(f"User {session.user_id} signed out")
        self.events.publish(SessionEvent(SIGNED_OUT, session))

    def is_token_revoked(self, jti: str) -> bool:
        """Check whether an access token was revoked by sign-out."""
        with self.db.get_cursor() as cur:
            cur.execute(GET_REVOKED_TOKEN, (jti,))
            return cur.fetchone() is not None
