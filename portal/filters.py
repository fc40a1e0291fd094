"""
In-memory search over fetched lists.

Lists are always fetched in full; searching is a predicate applied to
the fetched rows, never a database query.
"""

from typing import Any, Dict, Iterable, List, Optional

APPLICATION_SEARCH_FIELDS = (
    "name", "email", "phone", "address", "city", "state", "zip", "job", "status",
)
STORE_SEARCH_FIELDS = ("all", "name", "city", "state")

# Search field -> stored attribute, for the simple one-column cases
_APPLICATION_COLUMNS = {
    "email": "email",
    "address": "address",
    "city": "city",
    "state": "state",
    "job": "job_title",
    "status": "status",
}


def _contains(value: Any, term: str) -> bool:
    """Case-insensitive substring test; missing values never match."""
    if not value:
        return False
    return term.lower() in str(value).lower()


def _contains_raw(value: Any, term: str) -> bool:
    if not value:
        return False
    return term in str(value)


def filter_jobs(
    jobs: Iterable[Dict[str, Any]],
    term: Optional[str] = None,
    department: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Job board filter.

    Args:
        jobs: Active jobs
        term: Free text matched against title or description
        department: Exact department name, or None/"" for all

    Returns:
        Matching jobs in their original order
    """
    results = list(jobs)
    if term:
        results = [
            job for job in results
            if _contains(job.get("title"), term) or _contains(job.get("description"), term)
        ]
    if department:
        results = [job for job in results if job.get("department") == department]
    return results


def departments(jobs: Iterable[Dict[str, Any]]) -> List[str]:
    """Unique department names in first-seen order."""
    seen: List[str] = []
    for job in jobs:
        name = job.get("department")
        if name and name not in seen:
            seen.append(name)
    return seen


def application_matches(application: Dict[str, Any], field: str, term: str) -> bool:
    """
    Search predicate for the admin applications list.

    `name` matches first or last name; `phone` and `zip` are raw
    substring matches; every other field compares case-insensitively.
    Unknown fields match everything.
    """
    if field == "name":
        return (
            _contains(application.get("first_name"), term)
            or _contains(application.get("last_name"), term)
        )
    if field == "phone":
        return _contains_raw(application.get("phone"), term)
    if field == "zip":
        return _contains_raw(application.get("zip_code"), term)
    if field in _APPLICATION_COLUMNS:
        return _contains(application.get(_APPLICATION_COLUMNS[field]), term)
    return True


def filter_applications(
    applications: Iterable[Dict[str, Any]],
    field: str = "name",
    term: Optional[str] = None,
) -> List[Dict[str, Any]]:
    if not term:
        return list(applications)
    return [app for app in applications if application_matches(app, field, term)]


def filter_stores(
    stores: Iterable[Dict[str, Any]],
    term: Optional[str] = None,
    field: str = "all",
) -> List[Dict[str, Any]]:
    """Store search by name, city or state (`all` matches any of the three)."""
    if not term:
        return list(stores)
    if field in ("name", "city", "state"):
        columns = (field,)
    else:
        columns = ("name", "city", "state")
    return [
        store for store in stores
        if any(_contains(store.get(column), term) for column in columns)
    ]
