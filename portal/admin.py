"""
Admin Blueprint - dashboard, application review, and table management.

Every list is fetched in full and re-fetched after each mutation.
One form per entity serves both create and edit: a hidden `id` field
turns the save into an update.

Blueprint prefix: /admin
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type
from urllib.parse import urlparse

from flask import Blueprint, abort, flash, redirect, render_template, request, session, url_for
from pydantic import BaseModel, ValidationError
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from portal import repositories
from portal.applications import REVIEW_STATUSES, get_application, list_applications, set_status
from portal.auth import authenticate, current_admin, hash_password, login_required
from portal.filters import (
    APPLICATION_SEARCH_FIELDS,
    STORE_SEARCH_FIELDS,
    filter_applications,
    filter_stores,
)
from portal.models import JOB_TYPES, AdminUserForm, JobForm, StoreForm, format_errors
from portal.utils import serialize_document, to_object_id

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")

DASHBOARD_TABS = ("applications", "jobs", "stores", "users")

JOB_FIELDS = [
    {"name": "title", "label": "Title", "type": "text"},
    {"name": "department", "label": "Department", "type": "text"},
    {"name": "location", "label": "Location", "type": "text"},
    {"name": "type", "label": "Job type", "type": "select", "options": JOB_TYPES},
    {"name": "description", "label": "Description", "type": "textarea"},
    {"name": "requirements", "label": "Requirements", "type": "textarea"},
    {"name": "salary_range", "label": "Salary range (optional)", "type": "text"},
    {"name": "active", "label": "Active (visible on the job board)", "type": "checkbox"},
]

STORE_FIELDS = [
    {"name": "name", "label": "Store name", "type": "text"},
    {"name": "address", "label": "Address", "type": "text"},
    {"name": "city", "label": "City", "type": "text"},
    {"name": "state", "label": "State", "type": "text"},
    {"name": "zip_code", "label": "ZIP code", "type": "text"},
    {"name": "phone", "label": "Phone (optional)", "type": "text"},
    {"name": "email", "label": "Email (optional)", "type": "email"},
    {"name": "description", "label": "Description (optional)", "type": "textarea"},
    {"name": "active", "label": "Active", "type": "checkbox"},
]

USER_FIELDS = [
    {"name": "username", "label": "Username", "type": "text"},
    {"name": "password", "label": "Password", "type": "password"},
]

# URL entity -> table, form model, form fields, display label
ENTITIES: Dict[str, Dict[str, Any]] = {
    "jobs": {"table": "jobs", "model": JobForm, "fields": JOB_FIELDS, "label": "job"},
    "stores": {"table": "stores", "model": StoreForm, "fields": STORE_FIELDS, "label": "store"},
    "users": {"table": "admin_users", "model": AdminUserForm, "fields": USER_FIELDS, "label": "user"},
}

_NEW_RECORD_DEFAULTS = {
    "jobs": {"type": "Full-time", "active": True},
    "stores": {"active": True},
    "users": {},
}


# ------------------------------------------------------------------
# Login / logout
# ------------------------------------------------------------------

@admin_bp.route("/login", methods=["GET", "POST"])
def login_page():
    """Admin login. Already-authenticated sessions go straight to the dashboard."""
    if session.get("authenticated"):
        return redirect(url_for("admin.dashboard"))

    if request.method == "GET":
        return render_template("admin/login.html", error=None)

    username = request.form.get("username", "").strip()
    password = request.form.get("password", "")
    try:
        user = authenticate(repositories.get_repository("admin_users"), username, password)
    except PyMongoError as e:
        logger.error(f"Login lookup failed: {e}")
        return render_template("admin/login.html", error="Login failed. Please try again."), 503

    if user is None:
        return render_template("admin/login.html", error="Invalid username or password"), 401

    session["authenticated"] = True
    session["admin_username"] = user["username"]
    session.permanent = True
    logger.info(f"Admin '{user['username']}' logged in")
    return redirect(url_for("admin.dashboard"))


@admin_bp.route("/logout", methods=["POST"])
def logout():
    session.clear()
    return redirect(url_for("admin.login_page"))


# ------------------------------------------------------------------
# Dashboard
# ------------------------------------------------------------------

def _fetch(table: str, label: str, **kwargs) -> List[Dict[str, Any]]:
    """Fetch a whole table; failures become a notification and an empty list."""
    try:
        rows = repositories.get_repository(table).find({}, **kwargs)
    except PyMongoError as e:
        logger.error(f"Failed to fetch {label}: {e}")
        flash(f"Failed to fetch {label}", "error")
        return []
    return [serialize_document(row) for row in rows]


def _fetch_applications() -> List[Dict[str, Any]]:
    try:
        rows = list_applications(repositories.get_repository("applications"))
    except PyMongoError as e:
        logger.error(f"Failed to fetch applications: {e}")
        flash("Failed to fetch applications", "error")
        return []
    return [serialize_document(row) for row in rows]


def _search_args() -> Dict[str, str]:
    field = request.args.get("field", "name")
    if field not in APPLICATION_SEARCH_FIELDS:
        field = "name"
    store_field = request.args.get("store_field", "all")
    if store_field not in STORE_SEARCH_FIELDS:
        store_field = "all"
    return {
        "field": field,
        "q": request.args.get("q", "").strip(),
        "store_field": store_field,
        "store_q": request.args.get("store_q", "").strip(),
    }


def _applications_url(search: Dict[str, str]) -> str:
    """Dashboard applications tab with the current search kept."""
    params = {"tab": "applications"}
    if search["q"]:
        params.update(field=search["field"], q=search["q"])
    return url_for("admin.dashboard", **params)


@admin_bp.route("")
@admin_bp.route("/")
@login_required
def dashboard():
    """Tabbed dashboard over applications, jobs, stores and admin users."""
    tab = request.args.get("tab", "applications")
    if tab not in DASHBOARD_TABS:
        tab = "applications"
    search = _search_args()

    applications = _fetch_applications()
    jobs = _fetch("jobs", "jobs", sort=[("created_at", DESCENDING)])
    stores = _fetch("stores", "stores", sort=[("name", ASCENDING)])
    users = _fetch("admin_users", "users", projection={"password": 0}, sort=[("created_at", DESCENDING)])

    stats = {
        "applications": len(applications),
        "active_jobs": sum(1 for job in jobs if job.get("active")),
        "users": len(users),
    }

    return render_template(
        "admin/dashboard.html",
        tab=tab,
        tabs=DASHBOARD_TABS,
        stats=stats,
        applications=filter_applications(applications, search["field"], search["q"]),
        jobs=jobs,
        stores=filter_stores(stores, search["store_q"], search["store_field"]),
        users=users,
        return_to=_applications_url(search),
        search=search,
        application_fields=APPLICATION_SEARCH_FIELDS,
        store_fields=STORE_SEARCH_FIELDS,
        admin_username=current_admin(),
    )


@admin_bp.route("/partials/application-rows")
@login_required
def application_rows_partial():
    """HTMX partial: application table rows for the current search."""
    search = _search_args()
    applications = filter_applications(_fetch_applications(), search["field"], search["q"])
    return render_template(
        "partials/application_rows.html",
        applications=applications,
        return_to=_applications_url(search),
    )


# ------------------------------------------------------------------
# Application detail / review
# ------------------------------------------------------------------

@admin_bp.route("/application/<application_id>")
@login_required
def application_detail(application_id: str):
    try:
        application = get_application(repositories.get_repository("applications"), application_id)
    except PyMongoError as e:
        logger.error(f"Error fetching application {application_id}: {e}")
        flash("Failed to fetch application details", "error")
        return redirect(url_for("admin.dashboard"))

    if application is None:
        flash("Application not found", "error")
        return redirect(url_for("admin.dashboard"))

    return render_template(
        "admin/application_detail.html",
        application=serialize_document(application),
    )


def _local_url(url: str) -> Optional[str]:
    """Return `url` when it is a same-site path, else None."""
    if not url.startswith("/") or "\\" in url:
        return None
    parsed = urlparse(url)
    if parsed.scheme or parsed.netloc:
        return None
    return url


@admin_bp.route("/application/<application_id>/status", methods=["POST"])
@login_required
def update_application_status(application_id: str):
    """Approve or reject an application (form post from the detail page or dashboard)."""
    status = request.form.get("status", "")
    next_url = _local_url(request.form.get("next", ""))
    if next_url is None:
        next_url = url_for("admin.application_detail", application_id=application_id)

    if status not in REVIEW_STATUSES:
        flash("Invalid status", "error")
        return redirect(next_url)

    try:
        result = set_status(
            repositories.get_repository("applications"),
            application_id,
            status,
            current_admin(),
        )
    except ValueError as e:
        flash(str(e), "error")
        return redirect(next_url)
    except PyMongoError as e:
        logger.error(f"Failed to update status of {application_id}: {e}")
        flash("Failed to update status", "error")
        return redirect(next_url)

    if result.matched_count == 0:
        flash("Application not found", "error")
    else:
        flash("Status updated successfully", "success")
    return redirect(next_url)


# ------------------------------------------------------------------
# Jobs / stores / users: shared create-edit form and delete
# ------------------------------------------------------------------

def _entity_or_404(entity: str) -> Dict[str, Any]:
    if entity not in ENTITIES:
        abort(404)
    return ENTITIES[entity]


def _form_values(entity: str, form) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for field in ENTITIES[entity]["fields"]:
        if field["type"] == "checkbox":
            values[field["name"]] = field["name"] in form
        else:
            values[field["name"]] = form.get(field["name"], "")
    return values


def _render_record_form(entity: str, values: Dict[str, Any], record_id: Optional[str], errors=None, status: int = 200):
    config = ENTITIES[entity]
    return render_template(
        "admin/record_form.html",
        entity=entity,
        label=config["label"],
        fields=config["fields"],
        values=values,
        record_id=record_id,
        errors=errors or {},
    ), status


@admin_bp.route("/<entity>/form")
@login_required
def record_form(entity: str):
    """Create form (no id) or edit form (?id=...) for a job, store or user."""
    config = _entity_or_404(entity)
    record_id = request.args.get("id")
    if not record_id:
        return _render_record_form(entity, dict(_NEW_RECORD_DEFAULTS[entity]), None)

    object_id = to_object_id(record_id)
    record = None
    if object_id is not None:
        try:
            record = repositories.get_repository(config["table"]).find_one(
                {"_id": object_id}, {"password": 0}
            )
        except PyMongoError as e:
            logger.error(f"Failed to fetch {config['label']} {record_id}: {e}")
            flash(f"Failed to fetch {config['label']}", "error")
            return redirect(url_for("admin.dashboard", tab=entity))

    if record is None:
        flash(f"{config['label'].capitalize()} not found", "error")
        return redirect(url_for("admin.dashboard", tab=entity))

    return _render_record_form(entity, serialize_document(record), record_id)


def _username_taken(username: str, record_id: Optional[str]) -> bool:
    existing = repositories.get_repository("admin_users").find_one({"username": username})
    if existing is None:
        return False
    return str(existing["_id"]) != (record_id or "")


def _to_document(entity: str, model: BaseModel, creating: bool) -> Dict[str, Any]:
    document = model.model_dump()
    now = datetime.now(timezone.utc)
    if entity == "users":
        document["password"] = hash_password(document["password"])
    if entity == "stores":
        document["updated_at"] = now
    if creating:
        document["created_at"] = now
    return document


@admin_bp.route("/<entity>/save", methods=["POST"])
@login_required
def save_record(entity: str):
    """Insert (no id) or update (with id) a job, store or user."""
    config = _entity_or_404(entity)
    label = config["label"]
    record_id = request.form.get("id") or None
    values = _form_values(entity, request.form)

    model_cls: Type[BaseModel] = config["model"]
    try:
        model = model_cls.model_validate(values)
    except ValidationError as exc:
        return _render_record_form(entity, values, record_id, format_errors(exc), 400)

    repo = repositories.get_repository(config["table"])
    try:
        if entity == "users" and _username_taken(model.username, record_id):
            return _render_record_form(
                entity, values, record_id, {"username": "Username already exists"}, 400
            )

        if record_id:
            object_id = to_object_id(record_id)
            if object_id is None:
                flash(f"Invalid {label} id", "error")
                return redirect(url_for("admin.dashboard", tab=entity))
            result = repo.update_one({"_id": object_id}, {"$set": _to_document(entity, model, creating=False)})
            if result.matched_count == 0:
                flash(f"{label.capitalize()} not found", "error")
            else:
                logger.info(f"Updated {label} {record_id}")
                flash(f"{label.capitalize()} updated successfully", "success")
        else:
            result = repo.insert_one(_to_document(entity, model, creating=True))
            logger.info(f"Created {label} {result.inserted_id}")
            flash(f"{label.capitalize()} created successfully", "success")
    except PyMongoError as e:
        logger.error(f"Failed to save {label}: {e}")
        flash(f"Failed to save {label}", "error")

    return redirect(url_for("admin.dashboard", tab=entity))


@admin_bp.route("/<entity>/<record_id>/delete", methods=["POST"])
@login_required
def delete_record(entity: str, record_id: str):
    """
    Delete a job, store or user.

    The confirmation prompt runs in the browser before this POST.
    Deleting a job leaves applications that mention it untouched.
    """
    config = _entity_or_404(entity)
    label = config["label"]
    object_id = to_object_id(record_id)
    if object_id is None:
        flash(f"Invalid {label} id", "error")
        return redirect(url_for("admin.dashboard", tab=entity))

    try:
        result = repositories.get_repository(config["table"]).delete_one({"_id": object_id})
    except PyMongoError as e:
        logger.error(f"Failed to delete {label} {record_id}: {e}")
        flash(f"Failed to delete {label}", "error")
        return redirect(url_for("admin.dashboard", tab=entity))

    if result.modified_count == 0:
        flash(f"{label.capitalize()} not found", "error")
    else:
        logger.info(f"Deleted {label} {record_id}")
        flash(f"{label.capitalize()} deleted successfully", "success")
    return redirect(url_for("admin.dashboard", tab=entity))
