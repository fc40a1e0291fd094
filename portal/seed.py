"""
Bootstrap script: admin account, sample jobs and stores, legacy migration.

Usage:
    python -m portal.seed --admin alice --password s3cret   # Create/replace an admin
    python -m portal.seed --jobs                            # Add sample jobs and stores
    python -m portal.seed --jobs --clear                    # Clear jobs/stores first
    python -m portal.seed --migrate                         # Rewrite legacy application rows
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from portal import repositories
from portal.auth import hash_password
from portal.models import AdminUserForm, format_errors
from portal.normalize import migrate_legacy_applications

logger = logging.getLogger(__name__)

SAMPLE_JOBS = [
    {
        "title": "Sales Associate",
        "department": "Sales",
        "location": "Springfield, IL",
        "type": "Part-time",
        "description": "Help customers find what they need and keep the floor tidy.",
        "requirements": "Friendly attitude, weekend availability.",
        "salary_range": "$14-16/hr",
    },
    {
        "title": "Cashier",
        "department": "Front End",
        "location": "Springfield, IL",
        "type": "Full-time",
        "description": "Operate the register and handle returns.",
        "requirements": "Basic math, POS experience a plus.",
        "salary_range": None,
    },
    {
        "title": "Warehouse Associate",
        "department": "Warehouse",
        "location": "Decatur, IL",
        "type": "Full-time",
        "description": "Receive freight, stock shelves and operate a pallet jack.",
        "requirements": "Able to lift 50 lbs. Forklift certification preferred.",
        "salary_range": "$17-19/hr",
    },
    {
        "title": "Seasonal Stocker",
        "department": "Warehouse",
        "location": "Decatur, IL",
        "type": "Seasonal",
        "description": "Overnight restocking during the holiday season.",
        "requirements": "Available nights November through January.",
        "salary_range": "$16/hr",
    },
]

SAMPLE_STORES = [
    {
        "name": "Springfield Main Street",
        "address": "100 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "phone": "2175550100",
        "email": "springfield@example.com",
        "description": "Flagship store",
    },
    {
        "name": "Decatur Distribution",
        "address": "2500 Industrial Pkwy",
        "city": "Decatur",
        "state": "IL",
        "zip_code": "62526",
        "phone": None,
        "email": None,
        "description": "Warehouse and distribution center",
    },
]


def create_admin(username: str, password: str) -> str:
    """
    Create an admin account, or reset the password of an existing one.

    Returns:
        "created" or "updated"

    Raises:
        ValueError: if the username or password fails validation
    """
    try:
        form = AdminUserForm(username=username, password=password)
    except ValidationError as exc:
        raise ValueError("; ".join(format_errors(exc).values())) from exc

    repo = repositories.get_repository("admin_users")
    hashed = hash_password(form.password)
    existing = repo.find_one({"username": form.username})
    if existing:
        repo.update_one({"_id": existing["_id"]}, {"$set": {"password": hashed}})
        logger.info(f"Reset password for admin '{form.username}'")
        return "updated"

    repo.insert_one({
        "username": form.username,
        "password": hashed,
        "created_at": datetime.now(timezone.utc),
    })
    logger.info(f"Created admin '{form.username}'")
    return "created"


def _stamped(rows: List[Dict[str, Any]], now: datetime, with_updated: bool) -> List[Dict[str, Any]]:
    stamped = []
    for i, row in enumerate(rows):
        created = now - timedelta(days=len(rows) - i)
        doc = dict(row, active=True, created_at=created)
        if with_updated:
            doc["updated_at"] = created
        stamped.append(doc)
    return stamped


def seed_sample_data(clear: bool = False) -> Dict[str, int]:
    """
    Insert sample jobs and stores.

    Args:
        clear: If True, delete existing jobs and stores first

    Returns:
        Number of rows inserted per table
    """
    now = datetime.now(timezone.utc)
    counts = {}
    for table, rows, with_updated in (
        ("jobs", SAMPLE_JOBS, False),
        ("stores", SAMPLE_STORES, True),
    ):
        repo = repositories.get_repository(table)
        if clear:
            removed = 0
            for existing in repo.find({}, projection={"_id": 1}):
                removed += repo.delete_one({"_id": existing["_id"]}).modified_count
            logger.info(f"Cleared {removed} existing {table}")
        for doc in _stamped(rows, now, with_updated):
            repo.insert_one(doc)
        counts[table] = len(rows)
        logger.info(f"Inserted {len(rows)} sample {table}")
    return counts


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Bootstrap the job portal database")
    parser.add_argument("--admin", help="Admin username to create or reset")
    parser.add_argument("--password", help="Password for --admin")
    parser.add_argument("--jobs", action="store_true", help="Insert sample jobs and stores")
    parser.add_argument("--clear", action="store_true", help="Clear jobs and stores before --jobs")
    parser.add_argument("--migrate", action="store_true", help="Rewrite legacy application rows")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if not (args.admin or args.jobs or args.migrate):
        parser.error("nothing to do: pass --admin, --jobs and/or --migrate")
    if args.admin and not args.password:
        parser.error("--password is required with --admin")

    try:
        if args.admin:
            outcome = create_admin(args.admin, args.password)
            print(f"Admin '{args.admin}' {outcome}")
        if args.jobs:
            counts = seed_sample_data(clear=args.clear)
            print(f"Inserted {counts['jobs']} jobs and {counts['stores']} stores")
        if args.migrate:
            changed = migrate_legacy_applications(repositories.get_repository("applications"))
            print(f"Migrated {changed} legacy application rows")
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except PyMongoError as e:
        logger.error(f"Database error: {e}")
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
