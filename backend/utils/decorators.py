import logging
from datetime import datetime
from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity
from shared.session import Session

logger = logging.getLogger(__name__)

# Rate limiting storage (in-memory, resets on restart)
_rate_limit_storage: dict[str, list[float]] = {}


def current_session() -> Session | None:
    """Build the Session for the current request from its access token.

    Must run inside a view decorated with ``jwt_required`` (optional or not).
    Returns None for anonymous requests.
    """
    identity = get_jwt_identity()
    if identity is None:
        return None
    claims = get_jwt()
    return Session(
        user_id=int(identity),
        email=claims.get("email", ""),
        display_name=claims.get("display_name", ""),
        role=claims.get("role", "seeker"),
    )


def _prune_rate_limit_storage(endpoint: str, now: float, window_seconds: int) -> None:
    """Drop an endpoint's timestamps outside the window and keys left with none."""
    for key in [k for k in _rate_limit_storage if k.endswith(f":{endpoint}")]:
        recent = [t for t in _rate_limit_storage[key] if now - t < window_seconds]
        if recent:
            _rate_limit_storage[key] = recent
        else:
            del _rate_limit_storage[key]


def rate_limit(max_calls: int = 5, window_seconds: int = 60):
    """Simple rate limiting decorator.

    Args:
        max_calls: Maximum number of calls allowed
        window_seconds: Time window in seconds
    """

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user_id = get_jwt_identity()
            if not user_id:
                return jsonify({"error": "Authentication required", "redirect": "/signin"}), 401

            # Use user_id + endpoint as key
            key = f"{user_id}:{f.__name__}"
            now = datetime.now().timestamp()

            # Clean old entries
            _prune_rate_limit_storage(f.__name__, now, window_seconds)
            recent = _rate_limit_storage.get(key, [])

            if len(recent) >= max_calls:
                logger.warning(f"Rate limit exceeded for user {user_id} on {f.__name__}")
                return jsonify(
                    {
                        "error": f"Rate limit exceeded. Maximum {max_calls} requests per {window_seconds} seconds."
                    }
                ), 429

            # Record this call
            _rate_limit_storage[key] = recent + [now]

            return f(*args, **kwargs)

        return decorated_function

    return decorator
