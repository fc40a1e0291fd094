"""
Public Blueprint - job board and application form.

Routes:
- /, /jobs: job board (active jobs, text/department filter)
- /application: multi-step application form
- /application/step: save the current tab and move between tabs
- /application/submit: upload resume + insert the application
- /resumes/<file_id>: stream a stored resume
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from flask import (
    Blueprint,
    Response,
    abort,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from gridfs.errors import NoFile
from pydantic import ValidationError
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from portal import repositories
from portal.applications import ResumeUpload, SubmissionError, submit_application
from portal.config import get_settings
from portal.filters import departments, filter_jobs
from portal.models import (
    COMPUTER_SKILLS,
    EMPLOYMENT_TYPES,
    EQUIPMENT_SKILLS,
    OTHER_SKILLS_MAX_LENGTH,
    POSITIONS,
    TEXT_MAX_LENGTH,
    PersonalInfo,
    SkillsInfo,
    format_errors,
)
from portal.utils import serialize_document, to_object_id
from portal.validation import validate_resume
from portal.wizard import (
    DRAFT_SESSION_KEY,
    PERSONAL_INCOMPLETE_MESSAGE,
    TAB_PROGRESS,
    TAB_SESSION_KEY,
    TABS,
    build_submission,
    empty_draft,
    navigate,
    next_tab,
    parse_education_form,
    parse_personal_form,
    parse_skills_form,
    previous_tab,
)

logger = logging.getLogger(__name__)

public_bp = Blueprint("public", __name__)

ELIGIBILITY_QUESTIONS = [
    ("is_under_18", "Are you under 18 years of age?"),
    ("has_work_permit", "If under 18, do you have a work permit?"),
    ("is_eligible_to_work", "Are you legally eligible to work in the United States?"),
    ("can_provide_proof", "Can you provide proof of eligibility if hired?"),
    ("has_felony", "Have you ever been convicted of a felony?"),
    ("previously_employed", "Have you previously been employed by us?"),
]

_TAB_PARSERS = {
    "personal": parse_personal_form,
    "education": parse_education_form,
    "skills": parse_skills_form,
}


def load_active_jobs() -> List[Dict[str, Any]]:
    """Active job rows, newest first."""
    repo = repositories.get_repository("jobs")
    rows = repo.find({"active": True}, sort=[("created_at", DESCENDING)])
    return [serialize_document(row) for row in rows]


# ------------------------------------------------------------------
# Job board
# ------------------------------------------------------------------

@public_bp.route("/")
@public_bp.route("/jobs")
def job_board():
    """Job board with free-text and department filtering."""
    term = request.args.get("q", "").strip()
    department = request.args.get("department", "").strip() or None

    try:
        jobs = load_active_jobs()
    except PyMongoError as e:
        logger.error(f"Failed to fetch jobs: {e}")
        flash("Failed to load job listings", "error")
        jobs = []

    return render_template(
        "jobs.html",
        jobs=filter_jobs(jobs, term, department),
        departments=departments(jobs),
        total=len(jobs),
        term=term,
        department=department,
        highlight=request.args.get("job"),
    )


# ------------------------------------------------------------------
# Application form
# ------------------------------------------------------------------

def _load_draft() -> Dict[str, Any]:
    return session.get(DRAFT_SESSION_KEY) or empty_draft()


def _save_draft(draft: Dict[str, Any], tab: str) -> None:
    session[DRAFT_SESSION_KEY] = draft
    session[TAB_SESSION_KEY] = tab


def _clear_draft() -> None:
    session.pop(DRAFT_SESSION_KEY, None)
    session.pop(TAB_SESSION_KEY, None)


def _apply_job(draft: Dict[str, Any], raw_job_id: Optional[str]) -> None:
    """Pre-fill job title/location from the `job` query parameter."""
    job_id = (raw_job_id or "").split("/")[0]
    object_id = to_object_id(job_id)
    if object_id is None:
        return
    try:
        job = repositories.get_repository("jobs").find_one({"_id": object_id})
    except PyMongoError as e:
        logger.error(f"Error fetching job {job_id}: {e}")
        return
    if job:
        draft["job_title"] = job.get("title", "")
        draft["job_location"] = job.get("location", "")


def _tab_for_errors(errors: Dict[str, str]) -> str:
    """The first tab holding one of the failing fields."""
    fields = {key.split(".")[0] for key in errors}
    if fields & set(PersonalInfo.model_fields):
        return "personal"
    if fields & set(SkillsInfo.model_fields):
        return "skills"
    return "education"


def _render_form(draft: Dict[str, Any], tab: str, errors: Optional[Dict[str, str]] = None, status: int = 200):
    try:
        department_options = departments(load_active_jobs())
    except PyMongoError as e:
        logger.error(f"Failed to fetch departments: {e}")
        department_options = []

    return render_template(
        "application/form.html",
        draft=draft,
        tab=tab,
        tabs=TABS,
        progress=TAB_PROGRESS[tab],
        errors=errors or {},
        eligibility_questions=ELIGIBILITY_QUESTIONS,
        employment_types=EMPLOYMENT_TYPES,
        computer_skills=COMPUTER_SKILLS,
        equipment_skills=EQUIPMENT_SKILLS,
        positions=POSITIONS,
        department_options=department_options,
        max_resume_mb=get_settings().max_resume_mb,
        text_max_length=TEXT_MAX_LENGTH,
        other_skills_max_length=OTHER_SKILLS_MAX_LENGTH,
    ), status


@public_bp.route("/application")
def application_form():
    """Render the current tab of the application form."""
    draft = _load_draft()
    if request.args.get("job"):
        _apply_job(draft, request.args.get("job"))

    tab = session.get(TAB_SESSION_KEY, TABS[0])
    requested = request.args.get("tab")
    errors: Dict[str, str] = {}
    if requested in TABS:
        result = navigate(tab, requested, draft)
        if not result.allowed:
            flash(PERSONAL_INCOMPLETE_MESSAGE, "error")
            errors = result.errors
        tab = result.tab

    _save_draft(draft, tab)
    return _render_form(draft, tab, errors)


@public_bp.route("/application/step", methods=["POST"])
def application_step():
    """
    Save the posted tab's fields into the draft and change tabs.

    Form fields:
        tab: Tab whose fields are being posted
        action: "next", "previous", or a tab name
    """
    draft = _load_draft()
    posted_tab = request.form.get("tab", session.get(TAB_SESSION_KEY, TABS[0]))
    if posted_tab not in TABS:
        posted_tab = TABS[0]
    draft[posted_tab] = _TAB_PARSERS[posted_tab](request.form)

    action = request.form.get("action", "next")
    if action == "next":
        target = next_tab(posted_tab)
    elif action == "previous":
        target = previous_tab(posted_tab)
    elif action in TABS:
        target = action
    else:
        target = posted_tab

    result = navigate(posted_tab, target, draft)
    _save_draft(draft, result.tab)

    if not result.allowed:
        flash(PERSONAL_INCOMPLETE_MESSAGE, "error")
        return _render_form(draft, result.tab, result.errors, 400)

    return redirect(url_for("public.application_form"))


def _read_resume(upload) -> Tuple[Optional[ResumeUpload], List[str]]:
    if upload is None or not upload.filename:
        return None, []
    data = upload.read()
    errors = validate_resume(
        upload.filename,
        upload.mimetype,
        len(data),
        max_bytes=get_settings().max_resume_bytes,
    )
    if errors:
        return None, errors
    return ResumeUpload(filename=upload.filename, content_type=upload.mimetype, data=data), []


@public_bp.route("/application/submit", methods=["POST"])
def application_submit():
    """
    Submit the application from the skills tab.

    Validates every section and the resume, uploads the resume, inserts
    one pending row, then shows the confirmation page. Any failure
    returns the applicant to a form tab with a notification.
    """
    draft = _load_draft()
    draft["skills"] = parse_skills_form(request.form)

    try:
        submission = build_submission(draft)
    except ValidationError as exc:
        errors = format_errors(exc)
        tab = _tab_for_errors(errors)
        flash(next(iter(errors.values())), "error")
        _save_draft(draft, tab)
        return _render_form(draft, tab, errors, 400)

    resume, resume_errors = _read_resume(request.files.get("resume"))
    if resume_errors:
        for message in resume_errors:
            flash(message, "error")
        _save_draft(draft, "skills")
        return _render_form(draft, "skills", {"resume": resume_errors[0]}, 400)

    try:
        submit_application(
            repositories.get_repository("applications"),
            repositories.get_resume_storage(),
            submission,
            resume,
            resume_url_for=lambda file_id: url_for("public.download_resume", file_id=file_id, _external=True),
        )
    except SubmissionError as e:
        flash(str(e), "error")
        flash("Please review your application starting from personal information", "info")
        _save_draft(draft, TABS[0])
        return redirect(url_for("public.application_form"))

    _clear_draft()
    return render_template(
        "application/thank_you.html",
        redirect_url=url_for("public.job_board"),
        delay=get_settings().redirect_delay_seconds,
    )


# ------------------------------------------------------------------
# Resume download
# ------------------------------------------------------------------

@public_bp.route("/resumes/<file_id>")
def download_resume(file_id: str):
    """Stream a stored resume."""
    if not ObjectId.is_valid(file_id):
        abort(404)
    try:
        stored = repositories.get_resume_storage().open(file_id)
    except NoFile:
        abort(404)
    except PyMongoError as e:
        logger.error(f"Failed to open resume {file_id}: {e}")
        abort(503)

    return Response(
        stored.chunks,
        mimetype=stored.content_type,
        headers={
            "Content-Disposition": f'inline; filename="{stored.filename}"',
            "Content-Length": str(stored.length),
        },
    )
