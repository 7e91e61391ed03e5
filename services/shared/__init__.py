"""
Shared infrastructure for services.

This package contains shared building blocks used across multiple services:
the database abstraction, error kinds, the session object, live
subscriptions and structured logging.
"""

from .change_feed import ChangeFeed, EventBus, Subscription
from .database import Database, PostgreSQLDatabase
from .errors import (
    AlreadyApplied,
    AuthRequired,
    BackendUnavailable,
    MarketplaceError,
    NotAuthorized,
    NotFound,
    ValidationFailed,
)
from .session import Session, require_session

__all__ = [
    "Database",
    "PostgreSQLDatabase",
    "ChangeFeed",
    "EventBus",
    "Subscription",
    "MarketplaceError",
    "AuthRequired",
    "NotAuthorized",
    "NotFound",
    "AlreadyApplied",
    "ValidationFailed",
    "BackendUnavailable",
    "Session",
    "require_session",
]
