"""
Shared fixtures for portal tests.

Storage is replaced by in-memory fakes so no test ever talks to MongoDB:
- FakeRepository implements TableRepositoryInterface over a list of dicts
- FakeStorage stands in for the GridFS-backed ResumeStorage
"""

import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from gridfs.errors import GridFSError, NoFile

# Set test environment BEFORE any portal imports so settings load test values
os.environ["ENVIRONMENT"] = "testing"
os.environ["FLASK_SECRET_KEY"] = "test-secret-key"
os.environ["MONGODB_URI"] = "mongodb://localhost:27017/job_portal_test"
os.environ["MONGO_DB_NAME"] = "job_portal_test"

from portal.repositories import StoredResume, TableRepositoryInterface, WriteResult  # noqa: E402


def _matches(doc: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in filter.items())


def _project(doc: Dict[str, Any], projection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not projection:
        return dict(doc)
    if any(projection.values()):
        keep = {key for key, flag in projection.items() if flag}
        return {key: value for key, value in doc.items() if key in keep or key == "_id"}
    return {key: value for key, value in doc.items() if key not in projection}


class FakeRepository(TableRepositoryInterface):
    """In-memory table with equality filters, $set updates and simple sorting."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.rows: List[Dict[str, Any]] = []
        self.fail_with: Optional[Exception] = None
        for row in rows or []:
            self.insert_one(row)

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def find_one(self, filter, projection=None):
        self._check()
        for row in self.rows:
            if _matches(row, filter):
                return _project(row, projection)
        return None

    def find(self, filter, projection=None, sort=None, limit=0, skip=0):
        self._check()
        results = [row for row in self.rows if _matches(row, filter)]
        for key, direction in reversed(sort or []):
            results.sort(
                key=lambda row: (row.get(key) is not None, row.get(key) if row.get(key) is not None else 0),
                reverse=direction < 0,
            )
        if skip:
            results = results[skip:]
        if limit:
            results = results[:limit]
        return [_project(row, projection) for row in results]

    def count_documents(self, filter):
        self._check()
        return sum(1 for row in self.rows if _matches(row, filter))

    def insert_one(self, document):
        self._check()
        row = dict(document)
        row.setdefault("_id", ObjectId())
        self.rows.append(row)
        return WriteResult(matched_count=0, modified_count=0, inserted_id=str(row["_id"]))

    def update_one(self, filter, update):
        self._check()
        for row in self.rows:
            if _matches(row, filter):
                changes = update.get("$set", {})
                modified = any(row.get(k) != v for k, v in changes.items())
                row.update(changes)
                return WriteResult(matched_count=1, modified_count=int(modified))
        return WriteResult(matched_count=0, modified_count=0)

    def delete_one(self, filter):
        self._check()
        for i, row in enumerate(self.rows):
            if _matches(row, filter):
                del self.rows[i]
                return WriteResult(matched_count=1, modified_count=1)
        return WriteResult(matched_count=0, modified_count=0)


class FakeStorage:
    """In-memory replacement for ResumeStorage."""

    def __init__(self):
        self.files: Dict[str, Dict[str, Any]] = {}
        self.fail_upload = False
        self.deleted: List[str] = []

    def upload(self, data: bytes, filename: str, content_type: str) -> str:
        if self.fail_upload:
            raise GridFSError("upload failed")
        file_id = str(ObjectId())
        self.files[file_id] = {"data": data, "filename": filename, "content_type": content_type}
        return file_id

    def open(self, file_id: str) -> StoredResume:
        if file_id not in self.files:
            raise NoFile(f"no file {file_id}")
        stored = self.files[file_id]
        return StoredResume(
            file_id=file_id,
            filename=stored["filename"],
            content_type=stored["content_type"],
            length=len(stored["data"]),
            chunks=iter([stored["data"]]),
        )

    def delete(self, file_id: str) -> None:
        self.deleted.append(file_id)
        if file_id not in self.files:
            raise NoFile(f"no file {file_id}")
        del self.files[file_id]


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings from the environment for every test."""
    from portal.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_db(mocker):
    """
    Patch the repository factory with in-memory tables.

    Returns a dict of FakeRepository keyed by table name, plus the
    FakeStorage under "storage".
    """
    tables = {name: FakeRepository() for name in ("applications", "jobs", "stores", "admin_users")}
    storage = FakeStorage()

    def get_repository(table):
        if table not in tables:
            raise ValueError(f"Unknown table '{table}'")
        return tables[table]

    mocker.patch("portal.repositories.get_repository", side_effect=get_repository)
    mocker.patch("portal.repositories.get_resume_storage", return_value=storage)

    db = dict(tables)
    db["storage"] = storage
    return db


@pytest.fixture
def app():
    """Flask app fixture with test configuration."""
    from portal.app import app
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret-key"
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def authenticated_client(client):
    """Flask test client with an authenticated admin session."""
    with client.session_transaction() as sess:
        sess["authenticated"] = True
        sess["admin_username"] = "alice"
    return client


@pytest.fixture
def personal_form():
    """A personal tab that passes validation."""
    return {
        "tab": "personal",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane.doe@example.com",
        "phone": "(217) 555-0123",
        "address": "12 Elm St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "is_under_18": "no",
        "has_work_permit": "no",
        "is_eligible_to_work": "yes",
        "can_provide_proof": "yes",
        "has_felony": "no",
        "previously_employed": "no",
        "employment_type": "Part Time",
    }


@pytest.fixture
def sample_job():
    return {
        "_id": ObjectId(),
        "title": "Cashier",
        "department": "Front End",
        "location": "Springfield, IL",
        "type": "Part-time",
        "description": "Operate the register",
        "requirements": "POS experience",
        "salary_range": "$15/hr",
        "active": True,
        "created_at": datetime(2026, 1, 10, tzinfo=timezone.utc),
    }


@pytest.fixture
def sample_application():
    return {
        "_id": ObjectId(),
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane.doe@example.com",
        "phone": "2175550123",
        "address": "12 Elm St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "job_title": "Cashier",
        "job_location": "Springfield, IL",
        "high_school": {"name": "Central High", "address": "", "degree": "", "graduated": True},
        "college": {"name": "", "address": "", "degree": "", "graduated": False},
        "other_education": {"name": "", "address": "", "degree": "", "graduated": False},
        "references": [],
        "computer_skills": ["Microsoft Excel"],
        "equipment_skills": [],
        "position_preferences": [],
        "department_preferences": [],
        "other_skills": "",
        "resume_url": None,
        "status": "pending",
        "status_by": None,
        "status_date": None,
        "created_at": datetime(2026, 2, 1, tzinfo=timezone.utc),
    }


@pytest.fixture
def make_repo():
    """Factory for standalone in-memory tables."""
    return FakeRepository


@pytest.fixture
def fake_storage():
    return FakeStorage()
