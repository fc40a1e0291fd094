"""
Multi-step application form state.

The form has three tabs (personal -> education -> skills). The draft
for all tabs lives in the Flask session between requests; this module
holds the pure logic: parsing each tab's form fields, gating tab
navigation, and composing the final submission.

Navigation rules:
- Going back is always allowed
- Leaving the personal tab forward requires every personal field to validate
- education -> skills is not gated
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from pydantic import ValidationError

from portal.models import (
    ELIGIBILITY_FLAGS,
    MAX_REFERENCES,
    MAX_TAGS,
    OTHER_SKILLS_MAX_LENGTH,
    TEXT_MAX_LENGTH,
    ApplicationSubmission,
    PersonalInfo,
    Reference,
    format_errors,
)
from portal.normalize import EDUCATION_FIELDS, TAG_FIELDS

TABS = ("personal", "education", "skills")
TAB_PROGRESS = {"personal": 33, "education": 66, "skills": 100}

# Session keys
DRAFT_SESSION_KEY = "application_draft"
TAB_SESSION_KEY = "application_tab"

PERSONAL_TEXT_FIELDS = (
    "first_name", "last_name", "email", "phone",
    "address", "city", "state", "zip_code",
)
REFERENCE_FIELDS = tuple(Reference.model_fields)

PERSONAL_INCOMPLETE_MESSAGE = "Please complete all required personal information fields"


@dataclass
class NavigationResult:
    """Outcome of a tab change request."""
    tab: str
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def allowed(self) -> bool:
        return not self.errors


def empty_draft() -> Dict[str, Any]:
    return {
        "personal": {},
        "education": {},
        "skills": {},
        "job_title": "",
        "job_location": "",
    }


def next_tab(current: str) -> str:
    index = TABS.index(current) if current in TABS else 0
    return TABS[min(index + 1, len(TABS) - 1)]


def previous_tab(current: str) -> str:
    index = TABS.index(current) if current in TABS else 0
    return TABS[max(index - 1, 0)]


def validate_personal(personal: Dict[str, Any]) -> Dict[str, str]:
    """Validate the personal tab. Returns {field: message}, empty when valid."""
    try:
        PersonalInfo.model_validate(personal)
    except ValidationError as exc:
        return format_errors(exc)
    return {}


def navigate(current: str, target: str, draft: Dict[str, Any]) -> NavigationResult:
    """
    Decide which tab to show after a navigation request.

    Args:
        current: Tab the user is on
        target: Tab the user asked for
        draft: Session draft (already updated with the current tab's fields)

    Returns:
        NavigationResult with the tab to show and, when the move was
        refused, the personal-tab errors
    """
    if target not in TABS:
        raise ValueError(f"Unknown tab '{target}'. Must be one of: {', '.join(TABS)}")
    if current not in TABS:
        current = TABS[0]

    if TABS.index(target) <= TABS.index(current):
        return NavigationResult(tab=target)

    if current == "personal":
        errors = validate_personal(draft.get("personal", {}))
        if errors:
            return NavigationResult(tab="personal", errors=errors)

    return NavigationResult(tab=target)


def _getlist(form: Any, key: str) -> List[str]:
    if hasattr(form, "getlist"):
        return [v for v in form.getlist(key) if v]
    value = form.get(key)
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _text(form: Any, key: str, limit: int = TEXT_MAX_LENGTH) -> str:
    return (form.get(key) or "")[:limit]


def parse_personal_form(form: Any) -> Dict[str, Any]:
    """Collect the personal tab fields. Yes/no flags stay as strings for re-rendering."""
    data: Dict[str, Any] = {name: _text(form, name) for name in PERSONAL_TEXT_FIELDS}
    for flag in ELIGIBILITY_FLAGS:
        data[flag] = form.get(flag, "no")
    data["previous_employment"] = {
        "location": _text(form, "previous_employment_location"),
        "position": _text(form, "previous_employment_position"),
    }
    data["employment_type"] = form.get("employment_type", "Full Time")
    return data


def parse_education_form(form: Any) -> Dict[str, Any]:
    """Collect the education tab: three education entries and two reference slots."""
    data: Dict[str, Any] = {}
    for entry in EDUCATION_FIELDS:
        data[entry] = {
            "name": _text(form, f"{entry}_name"),
            "address": _text(form, f"{entry}_address"),
            "degree": _text(form, f"{entry}_degree"),
            "graduated": bool(form.get(f"{entry}_graduated")),
        }
    data["references"] = [
        {name: _text(form, f"reference_{i}_{name}") for name in REFERENCE_FIELDS}
        for i in range(MAX_REFERENCES)
    ]
    return data


def parse_skills_form(form: Any) -> Dict[str, Any]:
    """Collect the skills tab. Free text is cut to the model limits before it reaches the session."""
    data: Dict[str, Any] = {
        name: [value[:TEXT_MAX_LENGTH] for value in _getlist(form, name)[:MAX_TAGS]]
        for name in TAG_FIELDS
    }
    data["other_skills"] = _text(form, "other_skills", OTHER_SKILLS_MAX_LENGTH)
    return data


def build_submission(draft: Dict[str, Any]) -> ApplicationSubmission:
    """
    Compose and validate the full application from the draft.

    Empty reference slots are dropped.

    Raises:
        pydantic.ValidationError: if any section is invalid
    """
    education = dict(draft.get("education", {}))
    education["references"] = [
        ref for ref in education.get("references", [])
        if any(str(v).strip() for v in ref.values())
    ]
    data: Dict[str, Any] = {}
    data.update(draft.get("personal", {}))
    data.update(education)
    data.update(draft.get("skills", {}))
    data["job_title"] = draft.get("job_title") or ""
    data["job_location"] = draft.get("job_location") or ""
    return ApplicationSubmission.model_validate(data)
