"""
Portal Repository Pattern for MongoDB Operations

Provides an abstraction layer over MongoDB for the portal tables
and the resume object store.

Public API:
- get_repository(table): Factory to get a table repository instance
- get_resume_storage(): Factory to get the resume storage
- TableRepositoryInterface: Abstract interface for a table
- WriteResult: Result dataclass for write operations
"""

from .base import TableRepositoryInterface, WriteResult
from .config import (
    TABLES,
    get_repository,
    get_resume_storage,
    reset_repository,
    RepositoryConfig,
)
from .storage import ResumeStorage, StoredResume

__all__ = [
    "TABLES",
    "get_repository",
    "get_resume_storage",
    "reset_repository",
    "RepositoryConfig",
    "TableRepositoryInterface",
    "WriteResult",
    "ResumeStorage",
    "StoredResume",
]
