"""Error kinds raised by the marketplace services.

Every error here is recoverable: callers translate it into a response and
the user can retry. ``AuthRequired`` is the only one that should send the
user somewhere else (the sign-in page).
"""

from typing import Any


class MarketplaceError(Exception):
    """Base class for expected, user-facing failures."""

    kind = "error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload = {"error": self.message, "kind": self.kind}
        payload.update(self.details)
        return payload


class AuthRequired(MarketplaceError):
    """Raised when an operation needs a signed-in user."""

    kind = "auth_required"

    def __init__(self, message: str = "You must be logged in to do that", **details: Any):
        details.setdefault("redirect", "/signin")
        super().__init__(message, **details)


class NotAuthorized(MarketplaceError):
    """Raised when the signed-in user does not own the resource."""

    kind = "not_authorized"


class NotFound(MarketplaceError):
    """Raised when a referenced job or application does not exist."""

    kind = "not_found"


class AlreadyApplied(MarketplaceError):
    """Raised on a second application to the same job by the same user."""

    kind = "already_applied"

    def __init__(self, message: str = "You have already applied for this job", **details: Any):
        super().__init__(message, **details)


class ValidationFailed(MarketplaceError):
    """Raised when input is missing required fields or holds invalid values."""

    kind = "validation_failed"

    def __init__(self, message: str, fields: list[str] | None = None, **details: Any):
        super().__init__(message, fields=list(fields or []), **details)
        self.fields = list(fields or [])


class BackendUnavailable(MarketplaceError):
    """Raised when the database cannot be reached."""

    kind = "backend_unavailable"

    def __init__(self, message: str, **details: Any):
        details.setdefault("retryable", True)
        super().__init__(message, **details)
