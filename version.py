"""
Version information for the Job Portal application.

This file is the single source of truth for version numbers.
The Flask app imports from here.
"""

__version__ = "1.2.0"
__version_info__ = (1, 2, 0)

# Build metadata (set by CI/CD or manually)
BUILD_DATE = "2026-10-19"
GIT_COMMIT = None  # Will be set at runtime if available
