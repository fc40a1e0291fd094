"""
Unit tests for format-level validation helpers.
"""

import pytest

from portal.validation import (
    is_valid_email,
    is_valid_phone,
    is_valid_zip,
    normalize_phone,
    resume_storage_name,
    validate_resume,
)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class TestPhone:
    """Tests for phone normalization."""

    def test_strips_formatting(self):
        assert normalize_phone("(217) 555-0123") == "2175550123"

    def test_none_is_empty(self):
        assert normalize_phone(None) == ""

    @pytest.mark.parametrize("value,expected", [
        ("217-555-0123", True),
        ("2175550123", True),
        ("555-0123", False),
        ("1-217-555-0123", False),
        ("", False),
    ])
    def test_requires_exactly_ten_digits(self, value, expected):
        assert is_valid_phone(value) is expected


class TestZipAndEmail:
    """Tests for ZIP and email format checks."""

    @pytest.mark.parametrize("value,expected", [
        ("62701", True),
        ("62701-1234", True),
        ("6270", False),
        ("62701-12", False),
        ("abcde", False),
    ])
    def test_zip_accepts_zip_and_zip_plus_four(self, value, expected):
        assert is_valid_zip(value) is expected

    def test_email(self):
        assert is_valid_email("jane@example.com")
        assert not is_valid_email("jane@example")
        assert not is_valid_email("not an email")
        assert not is_valid_email(None)


class TestValidateResume:
    """Tests for resume size/type validation."""

    def test_no_file_is_valid(self):
        assert validate_resume("", None, 0) == []

    def test_pdf_under_limit_is_valid(self):
        assert validate_resume("cv.pdf", PDF, 1024) == []

    def test_docx_is_valid(self):
        assert validate_resume("cv.docx", DOCX, 1024) == []

    def test_exactly_five_megabytes_is_accepted(self):
        assert validate_resume("cv.pdf", PDF, 5 * 1024 * 1024) == []

    def test_over_limit_is_rejected(self):
        errors = validate_resume("cv.pdf", PDF, 6 * 1024 * 1024)
        assert errors == ["Max file size is 5MB"]

    def test_unsupported_type_is_rejected(self):
        errors = validate_resume("cv.png", "image/png", 1024)
        assert errors == ["Only .pdf, .doc, and .docx files are accepted"]

    def test_both_errors_reported(self):
        errors = validate_resume("cv.png", "image/png", 6 * 1024 * 1024)
        assert len(errors) == 2

    def test_custom_limit(self):
        errors = validate_resume("cv.pdf", PDF, 2 * 1024 * 1024, max_bytes=1024 * 1024)
        assert errors == ["Max file size is 1MB"]


class TestResumeStorageName:
    """Tests for the stored resume file name."""

    def test_keeps_original_extension(self):
        assert resume_storage_name("My CV.PDF", PDF, 1700000000000) == "1700000000000.pdf"

    def test_falls_back_to_mime_type(self):
        assert resume_storage_name("resume", DOCX, 42) == "42.docx"
