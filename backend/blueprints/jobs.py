import logging
from collections.abc import Generator

from applications import applications_to_csv, export_filename
from config import Config
from flask import Blueprint, Response, current_app, jsonify, request, stream_with_context
from flask_jwt_extended import jwt_required
from jobs import FILTER_CATEGORIES, FILTER_OPTIONS, FilterState
from shared.change_feed import JOB_APPLICATIONS_CHANNEL, JOB_POSTINGS_CHANNEL
from shared.errors import MarketplaceError

from utils.decorators import current_session, rate_limit
from utils.errors import _sanitize_error_message, error_response
from utils.services import (
    get_application_service,
    get_change_feed,
    get_job_board,
    get_job_service,
    get_saved_job_service,
)

logger = logging.getLogger(__name__)
jobs_bp = Blueprint("jobs", __name__, url_prefix="/api/jobs")


def _sse_stream(subscription, name: str) -> Response:
    """Stream subscription snapshots as server-sent events.

    Idle periods are filled with keep-alive comments. The subscription is
    closed when the client goes away.
    """

    def generate() -> Generator[str, None, None]:
        try:
            while True:
                snapshot = subscription.next_snapshot(timeout=Config.SSE_KEEPALIVE_SECONDS)
                if snapshot is None:
                    yield ": keep-alive\n\n"
                    continue
                yield f"event: {name}\ndata: {current_app.json.dumps(snapshot)}\n\n"
        except MarketplaceError as e:
            logger.error(f"Live {name} stream stopped: {e.message}")
            yield f"event: error\ndata: {current_app.json.dumps(e.to_dict())}\n\n"
        finally:
            subscription.close()

    return Response(
        stream_with_context(generate()),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # Disable proxy buffering
        },
    )


@jobs_bp.route("", methods=["GET"])
@jwt_required(optional=True)
def api_list_jobs():
    """Jobs list API endpoint with search and filters."""
    try:
        filters = FilterState.from_mapping(request.args)
        query = request.args.get("q", "")
        include_closed = request.args.get("include_closed", "").lower() in ("1", "true")

        board = get_job_board(current_session())
        if not board.refresh():
            return jsonify({"error": board.error, "retryable": board.retryable}), 503

        jobs = board.visible_jobs(query=query, filters=filters, include_closed=include_closed)
        return jsonify({"jobs": jobs, "filters": filters.to_dict(), "total": len(jobs)}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching jobs: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/filters", methods=["GET"])
def api_filter_options():
    """Filter categories and the options each offers."""
    return jsonify({"categories": list(FILTER_CATEGORIES), "options": FILTER_OPTIONS}), 200


@jobs_bp.route("", methods=["POST"])
@jwt_required()
def api_post_job():
    """Post a new job."""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "No data provided"}), 400

        job = get_job_service().post_job(current_session(), data)
        return jsonify({"message": "Job posted successfully", "job": job}), 201
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error posting job: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/mine", methods=["GET"])
@jwt_required()
def api_my_jobs():
    """Jobs posted by the current user, each with its applications."""
    try:
        jobs = get_job_service().list_jobs_for_poster(current_session())
        jobs = get_application_service().attach_applications(jobs)
        return jsonify({"jobs": jobs}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching posted jobs: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/stream", methods=["GET"])
@jwt_required(optional=True)
def api_stream_jobs():
    """Live job list: a snapshot now and a fresh one after every change."""
    try:
        filters = FilterState.from_mapping(request.args)
        query = request.args.get("q", "")
        board = get_job_board(current_session())

        def load_snapshot():
            if not board.refresh():
                return {"jobs": board.visible_jobs(query, filters), "error": board.error}
            return {"jobs": board.visible_jobs(query, filters)}

        subscription = get_change_feed().subscribe(JOB_POSTINGS_CHANNEL, load_snapshot)
        return _sse_stream(subscription, "jobs")
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error opening job stream: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/<int:job_id>", methods=["GET"])
@jwt_required(optional=True)
def api_get_job(job_id: int):
    """Get job details.

    The poster sees every application; anyone else sees only their own.
    """
    try:
        session = current_session()
        job = get_job_service().get_job(job_id)
        application_service = get_application_service()

        if session is not None and job.get("poster_id") == session.user_id:
            job["applications"] = application_service.load_applications_for_job(job_id)
        else:
            job["my_application"] = application_service.get_application_for_user(session, job_id)
        job["is_saved"] = job_id in get_saved_job_service().get_saved_job_ids(session)

        return jsonify({"job": job}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching job {job_id}: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/<int:job_id>", methods=["PATCH", "PUT"])
@jwt_required()
def api_update_job(job_id: int):
    """Update a job posted by the current user."""
    try:
        changes = request.get_json(silent=True)
        if not isinstance(changes, dict):
            return jsonify({"error": "No data provided"}), 400

        job = get_job_service().update_job(current_session(), job_id, changes)
        return jsonify({"message": "Job updated successfully", "job": job}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating job {job_id}: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/<int:job_id>", methods=["DELETE"])
@jwt_required()
def api_delete_job(job_id: int):
    """Delete a job posted by the current user."""
    try:
        get_job_service().delete_job(current_session(), job_id)
        return jsonify({"message": "Job deleted successfully"}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error deleting job {job_id}: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/<int:job_id>/save", methods=["POST"])
@jwt_required()
def api_toggle_saved(job_id: int):
    """Save a job, or unsave it if already saved."""
    try:
        saved = get_saved_job_service().toggle_saved(current_session(), job_id)
        return jsonify({"job_id": job_id, "saved": saved}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error toggling saved job {job_id}: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/<int:job_id>/applications", methods=["POST"])
@jwt_required()
@rate_limit(max_calls=Config.APPLY_RATE_LIMIT, window_seconds=60)
def api_apply(job_id: int):
    """Apply for a job."""
    try:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return jsonify({"error": "Application must be a JSON object"}), 400

        application = get_application_service().apply_for_job(current_session(), job_id, data)
        return jsonify({"message": "Application submitted", "application": application}), 201
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error applying for job {job_id}: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/<int:job_id>/applications", methods=["GET"])
@jwt_required()
def api_job_applications(job_id: int):
    """Applications for a job, visible to its poster."""
    try:
        applications = get_application_service().get_applications_for_job(
            current_session(), job_id
        )
        return jsonify({"applications": applications}), 200
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching applications for job {job_id}: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/<int:job_id>/applications/export", methods=["GET"])
@jwt_required()
def api_export_applications(job_id: int):
    """Download consenting applicants of a job as CSV."""
    try:
        applications = get_application_service().get_applications_for_job(
            current_session(), job_id
        )
        return Response(
            applications_to_csv(applications),
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{export_filename(job_id)}"'},
        )
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error exporting applications for job {job_id}: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500


@jobs_bp.route("/<int:job_id>/applications/stream", methods=["GET"])
@jwt_required()
def api_stream_applications(job_id: int):
    """Live applications for a job, visible to its poster."""
    try:
        application_service = get_application_service()
        # Ownership is checked once, before the stream opens
        application_service.get_applications_for_job(current_session(), job_id)

        subscription = get_change_feed().subscribe(
            JOB_APPLICATIONS_CHANNEL,
            lambda: {"applications": application_service.load_applications_for_job(job_id)},
            key=job_id,
        )
        return _sse_stream(subscription, "applications")
    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error opening application stream for job {job_id}: {e}", exc_info=True)
        return jsonify({"error": _sanitize_error_message(e)}), 500
