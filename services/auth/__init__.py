"""User accounts, sign-in and sign-out."""

from .auth_service import SIGNED_IN, SIGNED_OUT, AuthService, SessionEvent
from .user_service import UserService

__all__ = ["AuthService", "UserService", "SessionEvent", "SIGNED_IN", "SIGNED_OUT"]
