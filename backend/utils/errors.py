import logging

from flask import jsonify
from shared.errors import (
    AlreadyApplied,
    AuthRequired,
    BackendUnavailable,
    MarketplaceError,
    NotAuthorized,
    NotFound,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    AuthRequired: 401,
    NotAuthorized: 403,
    NotFound: 404,
    AlreadyApplied: 409,
    ValidationFailed: 400,
    BackendUnavailable: 503,
}


def status_code_for(error: MarketplaceError) -> int:
    for error_type, status in STATUS_CODES.items():
        if isinstance(error, error_type):
            return status
    return 400


def error_response(error: MarketplaceError):
    """Translate a service error into a JSON response and status code."""
    status = status_code_for(error)
    if status >= 500:
        logger.error(f"{type(error).__name__}: {error.message}")
    else:
        logger.info(f"{type(error).__name__}: {error.message}")
    return jsonify(error.to_dict()), status


def _sanitize_error_message(error: Exception) -> str:
    """Sanitize error messages to avoid leaking sensitive information.

    Args:
        error: Exception object

    Returns:
        Sanitized error message safe for client display
    """
    error_str = str(error).lower()

    # Remove database connection strings
    if "password" in error_str or "connection" in error_str or "database" in error_str:
        return "Database operation failed. Please try again."

    # Remove secrets
    if "secret" in error_str or "token" in error_str:
        return "Authentication configuration error. Please try again later."

    # Generic fallback for unknown errors
    return "An unexpected error occurred. Please try again later."
