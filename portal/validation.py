"""
Format-level validation for the application form and admin tools.

These checks only look at the shape of a value (email, 10-digit phone,
ZIP or ZIP+4, resume size and type); nothing here talks to the database.
"""

import os
import re
from typing import List, Optional

PHONE_DIGITS = 10
ZIP_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MAX_RESUME_BYTES = 5 * 1024 * 1024
ACCEPTED_RESUME_TYPES = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
}


def normalize_phone(value: Optional[str]) -> str:
    """Strip every non-digit character from a phone number."""
    return re.sub(r"\D", "", value or "")


def is_valid_phone(value: Optional[str]) -> bool:
    return len(normalize_phone(value)) == PHONE_DIGITS


def is_valid_zip(value: Optional[str]) -> bool:
    return bool(ZIP_CODE_PATTERN.match((value or "").strip()))


def is_valid_email(value: Optional[str]) -> bool:
    return bool(EMAIL_PATTERN.match((value or "").strip()))


def validate_resume(
    filename: Optional[str],
    content_type: Optional[str],
    size: int,
    max_bytes: int = MAX_RESUME_BYTES,
) -> List[str]:
    """
    Validate an uploaded resume.

    No file at all is valid (the resume is optional).

    Args:
        filename: Original file name from the upload (may be empty)
        content_type: MIME type reported by the browser
        size: File size in bytes
        max_bytes: Size limit (5 MB unless configured otherwise)

    Returns:
        List of error messages, empty when the file is acceptable
    """
    if not filename and size == 0:
        return []

    errors = []
    if size > max_bytes:
        errors.append(f"Max file size is {max_bytes // (1024 * 1024)}MB")
    if content_type not in ACCEPTED_RESUME_TYPES:
        errors.append("Only .pdf, .doc, and .docx files are accepted")
    return errors


def resume_storage_name(filename: str, content_type: str, timestamp_ms: int) -> str:
    """
    Build the storage name for a resume: `<epoch-millis>.<extension>`.

    The original extension is kept when present, otherwise it is derived
    from the MIME type.
    """
    ext = os.path.splitext(filename or "")[1].lower().lstrip(".")
    if not ext:
        ext = ACCEPTED_RESUME_TYPES.get(content_type, ".bin").lstrip(".")
    return f"{timestamp_ms}.{ext}"
