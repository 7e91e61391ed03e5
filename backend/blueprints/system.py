import logging
import os

from flask import Blueprint, jsonify

from utils.services import get_database

logger = logging.getLogger(__name__)
system_bp = Blueprint("system", __name__)


@system_bp.route("/api/version")
def api_version():
    """Return deployment version and metadata."""
    payload = {
        "environment": os.getenv("ENVIRONMENT", "development"),
        "branch": os.getenv("DEPLOYED_BRANCH"),
        "commit_sha": os.getenv("DEPLOYED_SHA"),
        "deployed_at": os.getenv("DEPLOYED_AT"),
    }
    return jsonify(payload)


@system_bp.route("/api/health")
def api_health():
    """Health check endpoint."""
    try:
        db = get_database()
        with db.get_cursor() as cur:
            cur.execute("SELECT 1")
        db_status = "healthy"
    except Exception as e:
        logger.warning(f"Health check could not reach the database: {e}")
        db_status = "unhealthy"

    response = {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "database": db_status,
        "environment": os.getenv("ENVIRONMENT", "development"),
    }
    return jsonify(response)


@system_bp.route("/api/<path:path>")
def api_not_found(path: str):
    """Unknown API endpoints."""
    return jsonify({"error": "API endpoint not found"}), 404
