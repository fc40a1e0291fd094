"""
JSON API Blueprint.

Routes:
- GET  /api/jobs: active jobs, optional ?q=&department= (public)
- GET  /api/applications: all applications, optional ?field=&q= search
- GET  /api/applications/<id>: one application
- POST /api/applications/<id>/status: record a review decision
- GET  /api/stats: dashboard summary counts
"""

import logging

from flask import Blueprint, jsonify, request
from pymongo.errors import PyMongoError

from portal import repositories
from portal.applications import get_application, list_applications, set_status
from portal.auth import current_admin, login_required
from portal.filters import APPLICATION_SEARCH_FIELDS, filter_applications, filter_jobs
from portal.public import load_active_jobs
from portal.utils import serialize_document, to_object_id

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


@api_bp.route("/jobs", methods=["GET"])
def list_jobs():
    """Active jobs, with the same q/department filters as the job board."""
    try:
        jobs = load_active_jobs()
    except PyMongoError as e:
        logger.error(f"Failed to fetch jobs: {e}")
        return jsonify({"error": "Failed to fetch jobs"}), 500

    jobs = filter_jobs(
        jobs,
        request.args.get("q", "").strip(),
        request.args.get("department", "").strip() or None,
    )
    return jsonify({"jobs": jobs, "total": len(jobs)})


@api_bp.route("/applications", methods=["GET"])
@login_required
def api_list_applications():
    """
    List applications, newest first.

    Query parameters:
        field: Search field (name, email, phone, address, city, state, zip, job, status)
        q: Search term; substring match on the chosen field
    """
    field = request.args.get("field", "name")
    term = request.args.get("q", "").strip()
    if field not in APPLICATION_SEARCH_FIELDS:
        return jsonify({"error": f"Invalid search field. Must be one of: {', '.join(APPLICATION_SEARCH_FIELDS)}"}), 400

    try:
        rows = list_applications(repositories.get_repository("applications"))
    except PyMongoError as e:
        logger.error(f"Failed to fetch applications: {e}")
        return jsonify({"error": "Failed to fetch applications"}), 500

    applications = filter_applications([serialize_document(row) for row in rows], field, term)
    return jsonify({"applications": applications, "total": len(applications)})


@api_bp.route("/applications/<application_id>", methods=["GET"])
@login_required
def api_get_application(application_id: str):
    if to_object_id(application_id) is None:
        return jsonify({"error": "Invalid application id"}), 400

    try:
        application = get_application(repositories.get_repository("applications"), application_id)
    except PyMongoError as e:
        logger.error(f"Failed to fetch application {application_id}: {e}")
        return jsonify({"error": "Failed to fetch application details"}), 500

    if application is None:
        return jsonify({"error": "Application not found"}), 404
    return jsonify(serialize_document(application))


@api_bp.route("/applications/<application_id>/status", methods=["POST"])
@login_required
def api_update_status(application_id: str):
    """
    Record a review decision.

    Request body:
    {
        "status": "approved"  // pending, approved or rejected
    }
    """
    data = request.get_json(silent=True) or {}
    status = data.get("status", "")

    try:
        result = set_status(
            repositories.get_repository("applications"),
            application_id,
            status,
            current_admin(),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except PyMongoError as e:
        logger.error(f"Failed to update status of {application_id}: {e}")
        return jsonify({"error": "Failed to update status"}), 500

    if result.matched_count == 0:
        return jsonify({"error": "Application not found"}), 404

    return jsonify({
        "success": True,
        "status": status,
        "status_by": current_admin(),
    })


@api_bp.route("/stats", methods=["GET"])
@login_required
def api_stats():
    """Total applications, active jobs and admin users."""
    try:
        stats = {
            "applications": repositories.get_repository("applications").count_documents({}),
            "active_jobs": repositories.get_repository("jobs").count_documents({"active": True}),
            "users": repositories.get_repository("admin_users").count_documents({}),
        }
    except PyMongoError as e:
        logger.error(f"Failed to compute stats: {e}")
        return jsonify({"error": "Failed to fetch stats"}), 500
    return jsonify(stats)
