"""
Unit tests for the application form wizard logic.
"""

import pytest
from pydantic import ValidationError
from werkzeug.datastructures import MultiDict

from portal.models import MAX_TAGS, OTHER_SKILLS_MAX_LENGTH, TEXT_MAX_LENGTH
from portal.wizard import (
    PERSONAL_INCOMPLETE_MESSAGE,
    TAB_PROGRESS,
    build_submission,
    empty_draft,
    navigate,
    next_tab,
    parse_education_form,
    parse_personal_form,
    parse_skills_form,
    previous_tab,
)


@pytest.fixture
def draft(personal_form):
    d = empty_draft()
    d["personal"] = parse_personal_form(personal_form)
    return d


class TestNavigation:
    """Tests for tab gating."""

    def test_forward_from_incomplete_personal_is_refused(self):
        result = navigate("personal", "education", empty_draft())

        assert not result.allowed
        assert result.tab == "personal"
        assert "first_name" in result.errors

    def test_jumping_to_skills_is_also_gated(self):
        result = navigate("personal", "skills", empty_draft())
        assert result.tab == "personal"

    def test_forward_from_valid_personal(self, draft):
        result = navigate("personal", "education", draft)
        assert result.allowed
        assert result.tab == "education"

    def test_education_to_skills_not_gated(self):
        result = navigate("education", "skills", empty_draft())
        assert result.allowed
        assert result.tab == "skills"

    def test_backward_always_allowed(self):
        result = navigate("skills", "personal", empty_draft())
        assert result.allowed
        assert result.tab == "personal"

    def test_staying_on_tab(self):
        assert navigate("education", "education", empty_draft()).tab == "education"

    def test_unknown_target_raises(self):
        with pytest.raises(ValueError):
            navigate("personal", "summary", empty_draft())

    def test_next_and_previous_clamp(self):
        assert next_tab("personal") == "education"
        assert next_tab("skills") == "skills"
        assert previous_tab("education") == "personal"
        assert previous_tab("personal") == "personal"

    def test_progress(self):
        assert TAB_PROGRESS == {"personal": 33, "education": 66, "skills": 100}

    def test_message(self):
        assert PERSONAL_INCOMPLETE_MESSAGE == "Please complete all required personal information fields"


class TestParsing:
    """Tests for reading each tab's form fields."""

    def test_personal_defaults(self):
        data = parse_personal_form(MultiDict({"first_name": "Jane"}))

        assert data["first_name"] == "Jane"
        assert data["last_name"] == ""
        assert data["has_felony"] == "no"
        assert data["employment_type"] == "Full Time"
        assert data["previous_employment"] == {"location": "", "position": ""}

    def test_education_entries_and_references(self):
        form = MultiDict({
            "high_school_name": "Central High",
            "high_school_graduated": "yes",
            "reference_0_name": "Bob Smith",
            "reference_0_phone": "2175550100",
        })
        data = parse_education_form(form)

        assert data["high_school"]["name"] == "Central High"
        assert data["high_school"]["graduated"] is True
        assert data["college"]["graduated"] is False
        assert len(data["references"]) == 2
        assert data["references"][0]["name"] == "Bob Smith"
        assert data["references"][1]["name"] == ""

    def test_skills_multi_select(self):
        form = MultiDict([
            ("computer_skills", "Data Entry"),
            ("computer_skills", "Microsoft Word"),
            ("other_skills", "Bilingual"),
        ])
        data = parse_skills_form(form)

        assert data["computer_skills"] == ["Data Entry", "Microsoft Word"]
        assert data["equipment_skills"] == []
        assert data["other_skills"] == "Bilingual"

    def test_free_text_cut_to_limits(self):
        form = MultiDict([("other_skills", "a" * 2000), ("first_name", "J" * 300)]
                         + [("department_preferences", "D" * 300)] * 30)

        skills = parse_skills_form(form)
        personal = parse_personal_form(form)

        assert len(skills["other_skills"]) == OTHER_SKILLS_MAX_LENGTH
        assert len(skills["department_preferences"]) == MAX_TAGS
        assert all(len(value) == TEXT_MAX_LENGTH for value in skills["department_preferences"])
        assert len(personal["first_name"]) == TEXT_MAX_LENGTH

    def test_education_text_cut_to_limit(self):
        data = parse_education_form(MultiDict({"college_name": "x" * 500, "reference_0_email": "y" * 500}))
        assert len(data["college"]["name"]) == TEXT_MAX_LENGTH
        assert len(data["references"][0]["email"]) == TEXT_MAX_LENGTH


class TestBuildSubmission:
    """Tests for composing the final submission from the draft."""

    def test_empty_reference_slots_dropped(self, draft):
        draft["education"] = parse_education_form(MultiDict({"reference_1_name": "Bob"}))
        draft["job_title"] = "Cashier"

        submission = build_submission(draft)

        assert [ref.name for ref in submission.references] == ["Bob"]
        assert submission.job_title == "Cashier"
        assert submission.phone == "2175550123"

    def test_general_application_has_no_job(self, draft):
        submission = build_submission(draft)
        assert submission.job_title == ""

    def test_invalid_personal_raises(self):
        with pytest.raises(ValidationError):
            build_submission(empty_draft())
