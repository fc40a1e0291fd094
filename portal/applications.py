"""
Application submission and review.

Submission is two sequential calls with no transaction between them:
upload the resume (optional), then insert the row. When the insert
fails after a successful upload the stored file is removed again.

Review is a single update setting status, status_by and status_date.
There is no transition graph: any status can be set at any time and
setting the same status twice leaves the same final state.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from gridfs.errors import GridFSError
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from portal.models import ApplicationStatus, ApplicationSubmission
from portal.normalize import normalize_application
from portal.repositories import ResumeStorage, TableRepositoryInterface, WriteResult
from portal.utils import to_object_id
from portal.validation import resume_storage_name

logger = logging.getLogger(__name__)

REVIEW_STATUSES = (ApplicationStatus.APPROVED.value, ApplicationStatus.REJECTED.value)


class SubmissionError(Exception):
    """Raised when the resume upload or the row insert fails."""


@dataclass
class ResumeUpload:
    """A resume file received with the submission."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def submit_application(
    repo: TableRepositoryInterface,
    storage: ResumeStorage,
    submission: ApplicationSubmission,
    resume: Optional[ResumeUpload],
    resume_url_for: Callable[[str], str],
    now: Optional[datetime] = None,
) -> str:
    """
    Upload the resume (if any) and insert one pending application row.

    Args:
        repo: applications table
        storage: resume storage
        submission: Validated form data
        resume: Uploaded file, already validated, or None
        resume_url_for: Builds the public URL for a stored file id
        now: Submission time (defaults to UTC now)

    Returns:
        The inserted application id

    Raises:
        SubmissionError: if the upload or the insert fails
    """
    now = now or datetime.now(timezone.utc)
    resume_url = None
    file_id = None

    if resume is not None:
        storage_name = resume_storage_name(resume.filename, resume.content_type, int(time.time() * 1000))
        try:
            file_id = storage.upload(resume.data, storage_name, resume.content_type)
        except (GridFSError, PyMongoError) as e:
            logger.error(f"Resume upload failed: {e}")
            raise SubmissionError("Failed to upload resume. Please try again.") from e
        resume_url = resume_url_for(file_id)

    try:
        result = repo.insert_one(submission.to_document(resume_url, now))
    except PyMongoError as e:
        logger.error(f"Application insert failed: {e}")
        if file_id is not None:
            _discard_resume(storage, file_id)
        raise SubmissionError("Failed to submit application. Please try again.") from e

    logger.info(f"Application {result.inserted_id} submitted for '{submission.job_title or 'general'}'")
    return result.inserted_id


def _discard_resume(storage: ResumeStorage, file_id: str) -> None:
    try:
        storage.delete(file_id)
    except (GridFSError, PyMongoError) as e:
        logger.error(f"Could not remove orphaned resume {file_id}: {e}")


def list_applications(repo: TableRepositoryInterface) -> List[Dict[str, Any]]:
    """All applications, newest first, in normalized shape."""
    rows = repo.find({}, sort=[("created_at", DESCENDING)])
    return [normalize_application(row) for row in rows]


def get_application(repo: TableRepositoryInterface, application_id: str) -> Optional[Dict[str, Any]]:
    """One application in normalized shape, or None for unknown/malformed ids."""
    object_id = to_object_id(application_id)
    if object_id is None:
        return None
    row = repo.find_one({"_id": object_id})
    return normalize_application(row) if row else None


def set_status(
    repo: TableRepositoryInterface,
    application_id: str,
    status: str,
    admin_username: str,
    now: Optional[datetime] = None,
) -> WriteResult:
    """
    Record a review decision.

    Args:
        repo: applications table
        application_id: Application id
        status: pending, approved or rejected
        admin_username: Admin recorded in status_by
        now: Decision time recorded in status_date (defaults to UTC now)

    Returns:
        WriteResult; matched_count is 0 when the id is unknown

    Raises:
        ValueError: for an unknown status or a malformed id
    """
    allowed = [s.value for s in ApplicationStatus]
    if status not in allowed:
        raise ValueError(f"Invalid status. Must be one of: {', '.join(allowed)}")

    object_id = to_object_id(application_id)
    if object_id is None:
        raise ValueError("Invalid application id")

    update = {
        "status": status,
        "status_by": admin_username,
        "status_date": now or datetime.now(timezone.utc),
    }
    result = repo.update_one({"_id": object_id}, {"$set": update})
    logger.info(f"Application {application_id} marked {status} by {admin_username}")
    return result
