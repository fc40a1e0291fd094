"""
Normalization of application rows read from storage.

Older rows stored education entries and references either as plain
strings or as objects, and sometimes left the tag arrays null. Every
read path runs through normalize_application() so templates and the
JSON API only ever see one structured shape. migrate_legacy_applications()
rewrites the stored rows into that shape.
"""

import json
import logging
from typing import Any, Dict, List

from portal.models import Reference, parse_yes_no
from portal.repositories import TableRepositoryInterface

logger = logging.getLogger(__name__)

EDUCATION_FIELDS = ("high_school", "college", "other_education")
TAG_FIELDS = (
    "computer_skills",
    "equipment_skills",
    "position_preferences",
    "department_preferences",
)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def normalize_education(value: Any) -> Dict[str, Any]:
    """
    Coerce a stored education entry to {name, address, degree, graduated}.

    A bare string becomes the entry name. A legacy `graduation_year`
    counts as graduated. Stored text is kept as is, even past the form limits.
    """
    if value is None:
        value = {}
    elif not isinstance(value, dict):
        value = {"name": value}
    graduated = value.get("graduated")
    if not graduated and value.get("graduation_year"):
        graduated = True
    return {
        "name": _text(value.get("name")),
        "address": _text(value.get("address")),
        "degree": _text(value.get("degree")),
        "graduated": parse_yes_no(graduated),
    }


def _normalize_reference(value: Any) -> Dict[str, Any]:
    if isinstance(value, str):
        value = {"name": value}
    return {name: _text(value.get(name)) for name in Reference.model_fields}


def normalize_references(value: Any) -> List[Dict[str, Any]]:
    """Coerce stored references to a list of reference dicts, dropping empty slots."""
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, list):
        return []

    references = []
    for item in value:
        if not item:
            continue
        if not isinstance(item, (str, dict)):
            item = str(item)
        reference = _normalize_reference(item)
        if any(reference.values()):
            references.append(reference)
    return references


def normalize_tags(value: Any) -> List[str]:
    """Coerce a tag array to a list of strings (non-strings rendered as JSON)."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if not isinstance(value, list):
        value = [value]
    return [item if isinstance(item, str) else json.dumps(item, default=str) for item in value]


def normalize_application(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of an application row in the structured shape."""
    result = dict(doc)
    for field in EDUCATION_FIELDS:
        result[field] = normalize_education(doc.get(field))
    result["references"] = normalize_references(doc.get("references"))
    for field in TAG_FIELDS:
        result[field] = normalize_tags(doc.get(field))
    result["other_skills"] = doc.get("other_skills") or ""
    result["status"] = doc.get("status") or "pending"
    return result


def migrate_legacy_applications(repo: TableRepositoryInterface) -> int:
    """
    Rewrite stored application rows whose shape differs from the normalized one.

    Returns:
        Number of rows updated
    """
    updated = 0
    for doc in repo.find({}):
        normalized = normalize_application(doc)
        changes = {
            key: value for key, value in normalized.items()
            if key != "_id" and doc.get(key) != value
        }
        if not changes:
            continue
        repo.update_one({"_id": doc["_id"]}, {"$set": changes})
        updated += 1

    logger.info(f"Normalized {updated} legacy application rows")
    return updated
