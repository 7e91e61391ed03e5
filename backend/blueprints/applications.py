import logging

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from shared.errors import MarketplaceError

from utils.decorators import current_session
from utils.errors import _sanitize_error_message, error_response
from utils.services import get_application_service

logger = logging.getLogger(__name__)
applications_bp = Blueprint("applications", __name__, url_prefix="/api/applications")


@applications_bp.route("", methods=["GET"])
@jwt_required()
def api_my_applications():
    """Applications submitted by the current user, with job details."""
    try:
        applications = get_application_service().get_applications_for_applicant(
            current_session()
        )
        return jsonify({"applications": applications}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching applications: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@applications_bp.route("/<int:application_id>", methods=["PATCH"])
@jwt_required()
def api_update_application_status(application_id: int):
    """Accept or reject an application (job poster only)."""
    try:
        data = request.get_json(silent=True) or {}
        status = data.get("status") if isinstance(data, dict) else None
        if not status:
            return jsonify({"error": "Status is required"}), 400

        application = get_application_service().update_status(
            current_session(), application_id, status
        )
        return jsonify({"message": f"Application {status}", "application": application}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating application {application_id}: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@applications_bp.route("/<int:application_id>", methods=["DELETE"])
@jwt_required()
def api_withdraw_application(application_id: int):
    """Withdraw one of the current user's pending applications."""
    try:
        get_application_service().withdraw_application(current_session(), application_id)
        return jsonify({"message": "Application withdrawn"}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error withdrawing application {application_id}: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500
