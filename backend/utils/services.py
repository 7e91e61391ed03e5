import logging
import os
import sys
from pathlib import Path

# Add services to path
if Path("/app").exists():
    sys.path.insert(0, "/app/services")
else:
    services_path = Path(__file__).resolve().parents[2] / "services"
    sys.path.insert(0, str(services_path))

from applications import ApplicationService
from auth import SIGNED_IN, AuthService, SessionEvent, UserService
from jobs import JobBoard, JobService, SavedJobService
from shared import ChangeFeed, EventBus, PostgreSQLDatabase, Session
from user_settings import ProfileService, SettingsService

logger = logging.getLogger(__name__)

# Sign-in/sign-out events for this process
_session_events = EventBus()


def build_db_connection_string() -> str:
    """
    Build PostgreSQL connection string from environment variables.

    Checks DATABASE_URL first, then falls back to individual POSTGRES_* variables.

    Returns:
        PostgreSQL connection string
    """
    # Check for DATABASE_URL first (useful for tests and deployments)
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    # Fall back to individual environment variables
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    user = os.getenv("POSTGRES_USER", "postgres")
    password = os.getenv("POSTGRES_PASSWORD", "postgres")
    db = os.getenv("POSTGRES_DB", "skillsetgo")
    ssl_mode = os.getenv("POSTGRES_SSL_MODE", "")

    conn_str = f"postgresql://{user}:{password}@{host}:{port}/{db}"
    if ssl_mode:
        conn_str += f"?sslmode={ssl_mode}"
    return conn_str


def get_database() -> PostgreSQLDatabase:
    """Get a database handle for the configured connection string."""
    return PostgreSQLDatabase(connection_string=build_db_connection_string())


def get_session_events() -> EventBus:
    """Get the bus that receives SessionEvent on sign-in and sign-out."""
    return _session_events


def log_session_event(event: SessionEvent) -> None:
    """Audit subscriber for session events."""
    verb = "signed in" if event.kind == SIGNED_IN else "signed out"
    logger.info(f"User {event.session.user_id} ({event.session.role}) {verb}")


def get_user_service() -> UserService:
    """
    Get UserService instance with database connection.

    Returns:
        UserService instance
    """
    return UserService(database=get_database())


def get_auth_service() -> AuthService:
    """
    Get AuthService instance with database connection.

    Returns:
        AuthService instance
    """
    user_service = get_user_service()
    return AuthService(user_service=user_service, events=get_session_events())


def get_job_service() -> JobService:
    """
    Get JobService instance with database connection.

    Returns:
        JobService instance
    """
    return JobService(database=get_database())


def get_saved_job_service() -> SavedJobService:
    """
    Get SavedJobService instance with database connection.

    Returns:
        SavedJobService instance
    """
    return SavedJobService(database=get_database())


def get_application_service() -> ApplicationService:
    """
    Get ApplicationService instance with database connection.

    Returns:
        ApplicationService instance
    """
    return ApplicationService(database=get_database())


def get_settings_service() -> SettingsService:
    """
    Get SettingsService instance with database connection.

    Returns:
        SettingsService instance
    """
    return SettingsService(database=get_database())


def get_profile_service() -> ProfileService:
    """
    Get ProfileService instance with database connection.

    Returns:
        ProfileService instance
    """
    return ProfileService(database=get_database())


def get_change_feed() -> ChangeFeed:
    """
    Get ChangeFeed for live job and application snapshots.

    Returns:
        ChangeFeed instance
    """
    return ChangeFeed(database=get_database())


def get_job_board(session: Session | None) -> JobBoard:
    """
    Get a JobBoard for one session.

    Args:
        session: Current session, or None for anonymous visitors

    Returns:
        JobBoard instance
    """
    return JobBoard(
        job_service=get_job_service(),
        saved_job_service=get_saved_job_service(),
        application_service=get_application_service(),
        session=session,
    )
