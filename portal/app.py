"""
Flask application for the job-application portal.

Public side: job board and three-tab application form.
Admin side: login, dashboard, application review, and management of
jobs, stores and admin users. A small JSON API mirrors the read and
review operations.

Stack: Flask + HTMX + Tailwind CSS (CDN), MongoDB via pymongo/GridFS
"""

import logging
import os

from flask import Flask, flash, jsonify, redirect, request, url_for
from pymongo.errors import PyMongoError
from werkzeug.exceptions import RequestEntityTooLarge

from portal import repositories
from portal.admin import admin_bp
from portal.api import api_bp
from portal.config import get_settings
from portal.public import public_bp

try:
    from version import __version__
    APP_VERSION = __version__
except ImportError:
    APP_VERSION = "dev"

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

settings = get_settings()

app = Flask(__name__)

# Session configuration
flask_secret_key = settings.flask_secret_key

if not flask_secret_key:
    if settings.is_production:
        raise RuntimeError(
            "CRITICAL: FLASK_SECRET_KEY not set in production. "
            "Admin sessions and application drafts would be lost on every restart."
        )
    logger.warning("FLASK_SECRET_KEY not set. Generating random key (sessions will not persist between restarts)")
    flask_secret_key = os.urandom(24).hex()

app.secret_key = flask_secret_key

# Cookie security settings
app.config["SESSION_COOKIE_HTTPONLY"] = True
app.config["SESSION_COOKIE_SECURE"] = settings.is_production
app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
app.config["PERMANENT_SESSION_LIFETIME"] = 60 * 60 * 24 * 7  # 7 days

# Resume limit plus room for the rest of the multipart form
app.config["MAX_CONTENT_LENGTH"] = settings.max_resume_bytes + 1024 * 1024

for issue in settings.validate_production_config():
    logger.warning(issue)

app.register_blueprint(public_bp)
app.register_blueprint(admin_bp)
app.register_blueprint(api_bp)


@app.context_processor
def inject_version():
    """Inject version info into all templates."""
    return {"version": APP_VERSION}


@app.errorhandler(RequestEntityTooLarge)
def request_too_large(e):
    message = f"Max file size is {settings.max_resume_mb}MB"
    if request.path.startswith("/api/"):
        return jsonify({"error": message}), 413
    flash(message, "error")
    return redirect(url_for("public.application_form"))


@app.errorhandler(404)
def not_found(e):
    if request.path.startswith("/api/"):
        return jsonify({"error": "Not found"}), 404
    return e


@app.errorhandler(500)
def internal_error(e):
    logger.error(f"Unhandled error on {request.path}: {e}")
    if request.path.startswith("/api/"):
        return jsonify({"error": "Internal server error"}), 500
    return e


@app.route("/health", methods=["GET"])
def health_check():
    """
    Public health endpoint for external monitoring.

    Returns minimal info: overall status, version, database reachability.
    """
    try:
        repositories.get_repository("jobs").count_documents({})
        mongo_status = "connected"
    except PyMongoError as e:
        logger.error(f"Health check failed: {e}")
        mongo_status = "disconnected"

    overall = "healthy" if mongo_status == "connected" else "degraded"
    return jsonify({
        "status": overall,
        "version": APP_VERSION,
        "services": {"mongodb": mongo_status},
    })


# ============================================================================
# Application Entry Point
# ============================================================================

if __name__ == "__main__":
    port = int(os.getenv("FLASK_PORT", 5000))
    debug = os.getenv("FLASK_DEBUG", "true").lower() == "true"

    logger.info(f"Starting job portal on http://localhost:{port}")
    logger.info(f"Database: {settings.mongo_db_name}")

    app.run(host="0.0.0.0", port=port, debug=debug)
