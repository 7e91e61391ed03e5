import logging

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required
from shared.errors import MarketplaceError

from utils.decorators import current_session
from utils.errors import _sanitize_error_message, error_response
from utils.services import get_saved_job_service

logger = logging.getLogger(__name__)
saved_jobs_bp = Blueprint("saved_jobs", __name__, url_prefix="/api/saved-jobs")


@saved_jobs_bp.route("", methods=["GET"])
@jwt_required()
def api_saved_jobs():
    """Jobs saved by the current user, most recently saved first."""
    try:
        jobs = get_saved_job_service().get_saved_jobs(current_session())
        return jsonify({"jobs": jobs}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching saved jobs: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500
