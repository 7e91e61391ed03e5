import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from shared.errors import MarketplaceError, ValidationFailed

from utils.decorators import current_session
from utils.errors import _sanitize_error_message, error_response
from utils.services import get_profile_service, get_settings_service, get_user_service

logger = logging.getLogger(__name__)
account_bp = Blueprint("account", __name__, url_prefix="/api/account")


@account_bp.route("", methods=["GET"])
@jwt_required()
def api_get_account():
    """Get user account information API endpoint."""
    try:
        session = current_session()
        user_data = get_user_service().get_profile(session)
        profile = get_profile_service().get_profile(session)
        return jsonify({"user": user_data, "profile": profile}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching account: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@account_bp.route("", methods=["PATCH"])
@jwt_required()
def api_update_account():
    """Update the display name and profile details of the current user."""
    try:
        if not request.is_json:
            return jsonify({"error": "Missing JSON in request"}), 400

        changes = request.json
        if not isinstance(changes, dict):
            return jsonify({"error": "Profile must be a JSON object"}), 400

        changes = dict(changes)
        display_name = None
        for key in ("display_name", "displayName", "name"):
            if key in changes:
                display_name = changes.pop(key)
        # Email is shown on the profile but changes only through sign-up
        changes.pop("email", None)

        if display_name is None and not changes:
            raise ValidationFailed("Nothing to update")
        if display_name is not None and (
            not isinstance(display_name, str) or not display_name.strip()
        ):
            raise ValidationFailed("Display name is required", fields=["display_name"])

        session = current_session()
        user_service = get_user_service()
        profile_service = get_profile_service()
        if changes:
            profile = profile_service.update_profile(session, changes)
        else:
            profile = profile_service.get_profile(session)
        if display_name is not None:
            user_service.update_display_name(session, display_name)
        return jsonify({"user": user_service.get_profile(session), "profile": profile}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating account: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@account_bp.route("/settings", methods=["GET"])
@jwt_required()
def api_get_settings():
    """Get the current user's settings."""
    try:
        settings = get_settings_service().get_settings(current_session())
        return jsonify({"settings": settings}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching settings: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@account_bp.route("/settings", methods=["PUT"])
@jwt_required()
def api_update_settings():
    """Save the current user's settings."""
    try:
        if not request.is_json:
            return jsonify({"error": "Missing JSON in request"}), 400

        changes = request.json
        if not isinstance(changes, dict):
            return jsonify({"error": "Settings must be a JSON object"}), 400

        settings = get_settings_service().update_settings(current_session(), changes)
        return jsonify({"message": "Settings saved", "settings": settings}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error saving settings: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500
