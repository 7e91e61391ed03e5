import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import create_access_token, get_jwt, jwt_required
from shared.errors import MarketplaceError

from utils.decorators import current_session
from utils.errors import _sanitize_error_message, error_response
from utils.services import get_auth_service

logger = logging.getLogger(__name__)
auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _user_payload(session) -> dict:
    return {
        "user_id": session.user_id,
        "email": session.email,
        "display_name": session.display_name,
        "role": session.role,
    }


@auth_bp.route("/register", methods=["POST"])
def api_register():
    """Register a new user via API."""
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({"error": "No data provided"}), 400

        email = data.get("email")
        password = data.get("password")
        display_name = data.get("display_name") or data.get("displayName")
        role = data.get("role") or "seeker"

        if not all([email, password, display_name]):
            return jsonify({"error": "Email, password, and display name are required"}), 400

        auth_service = get_auth_service()
        user_id, session = auth_service.register_user(email, password, display_name, role)

        # Create access token for immediate login
        access_token = create_access_token(
            identity=str(user_id), additional_claims=session.to_claims()
        )
        return (
            jsonify(
                {
                    "message": "User registered successfully",
                    "user": _user_payload(session),
                    "access_token": access_token,
                }
            ),
            201,
        )

    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Registration error: {str(e)}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@auth_bp.route("/login", methods=["POST"])
def api_login():
    """Login a user via API."""
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({"error": "No data provided"}), 400

        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "Email and password are required"}), 400

        auth_service = get_auth_service()
        result = auth_service.sign_in(email, password)

        if not result:
            return jsonify({"error": "Invalid email or password"}), 401

        _, session = result
        access_token = create_access_token(
            identity=str(session.user_id), additional_claims=session.to_claims()
        )
        return (
            jsonify(
                {
                    "message": "Login successful",
                    "access_token": access_token,
                    "user": _user_payload(session),
                }
            ),
            200,
        )

    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Login error: {str(e)}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def api_logout():
    """Revoke the current access token."""
    try:
        auth_service = get_auth_service()
        auth_service.sign_out(current_session(), get_jwt()["jti"])
        return jsonify({"message": "Signed out"}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Logout error: {str(e)}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500
