"""
Authentication Module

Admin accounts live in the admin_users table. Passwords are stored as
Werkzeug hashes; rows created before hashing was introduced still hold
plain text and are rehashed the first time they log in successfully.
"""

import hmac
import logging
from functools import wraps
from typing import Any, Dict, Optional, Tuple

from flask import jsonify, redirect, request, session, url_for
from werkzeug.security import check_password_hash, generate_password_hash

from portal.repositories import TableRepositoryInterface

logger = logging.getLogger(__name__)

# Prefixes produced by werkzeug.security.generate_password_hash
_HASH_PREFIXES = ("scrypt:", "pbkdf2:")


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def is_password_hash(stored: Optional[str]) -> bool:
    return bool(stored) and stored.startswith(_HASH_PREFIXES)


def verify_password(stored: Optional[str], password: str) -> Tuple[bool, bool]:
    """
    Check a password against the stored value.

    Returns:
        (matches, needs_rehash); needs_rehash is True when the stored
        value is legacy plain text that matched
    """
    if not stored:
        return False, False
    if is_password_hash(stored):
        return check_password_hash(stored, password), False
    matches = hmac.compare_digest(stored.encode(), password.encode())
    return matches, matches


def authenticate(
    repo: TableRepositoryInterface, username: str, password: str
) -> Optional[Dict[str, Any]]:
    """
    Look up an admin by username and check the password.

    Legacy plain-text passwords are replaced by a hash on success.

    Returns:
        The admin_users row, or None when the credentials do not match
    """
    user = repo.find_one({"username": username})
    if not user:
        logger.info(f"Login failed for unknown admin '{username}'")
        return None

    matches, needs_rehash = verify_password(user.get("password"), password)
    if not matches:
        logger.info(f"Login failed for admin '{username}'")
        return None

    if needs_rehash:
        repo.update_one({"_id": user["_id"]}, {"$set": {"password": hash_password(password)}})
        logger.info(f"Rehashed legacy password for admin '{username}'")

    return user


def current_admin() -> str:
    return session.get("admin_username") or "admin"


def login_required(f):
    """
    Decorator to require an authenticated admin session.

    For API routes (/api/*): Returns JSON 401 if not authenticated
    For page routes: Redirects to the admin login page
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not session.get("authenticated"):
            if request.path.startswith("/api/"):
                return jsonify({"error": "Not authenticated"}), 401
            return redirect(url_for("admin.login_page"))
        return f(*args, **kwargs)
    return decorated_function
