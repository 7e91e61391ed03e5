"""The authenticated caller, passed explicitly into every service call."""

from dataclasses import dataclass
from typing import Any

from .errors import AuthRequired

ROLES = ("seeker", "employer")


@dataclass(frozen=True)
class Session:
    """A signed-in user as resolved from an access token."""

    user_id: int
    email: str
    display_name: str
    role: str = "seeker"

    @property
    def is_employer(self) -> bool:
        return self.role == "employer"

    def to_claims(self) -> dict[str, Any]:
        """Claims stored in the access token next to the identity."""
        return {"email": self.email, "display_name": self.display_name, "role": self.role}

    @classmethod
    def from_user(cls, user: dict[str, Any]) -> "Session":
        return cls(
            user_id=int(user["user_id"]),
            email=user["email"],
            display_name=user.get("display_name") or "",
            role=user.get("role") or "seeker",
        )


def require_session(session: Session | None, action: str = "do that") -> Session:
    """Return the session or raise AuthRequired when there is none."""
    if session is None:
        raise AuthRequired(f"You must be logged in to {action}")
    return session
