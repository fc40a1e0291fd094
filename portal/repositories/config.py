"""
Repository Configuration and Factory

Provides factory functions returning the repository for a portal table
and the resume storage, based on environment configuration.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from portal.config import get_settings

from .base import TableRepositoryInterface
from .storage import ResumeStorage

logger = logging.getLogger(__name__)

# Tables owned by the portal
TABLES = ("applications", "jobs", "stores", "admin_users")


@dataclass
class RepositoryConfig:
    """
    Configuration for repository initialization.

    Loaded from PortalSettings (environment variables / .env).
    """
    mongodb_uri: str
    database: str = "job_portal"
    resume_bucket: str = "resumes"

    @classmethod
    def from_env(cls) -> "RepositoryConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - MONGODB_URI: MongoDB connection string
        - MONGO_DB_NAME: Database name
        - RESUME_BUCKET: GridFS bucket name for resumes
        """
        settings = get_settings()
        return cls(
            mongodb_uri=settings.mongodb_uri,
            database=settings.mongo_db_name,
            resume_bucket=settings.resume_bucket,
        )


# Singleton instances, one per table
_repositories: Dict[str, TableRepositoryInterface] = {}
_resume_storage: Optional[ResumeStorage] = None


def get_repository(table: str) -> TableRepositoryInterface:
    """
    Get the repository for a portal table.

    Uses a per-table singleton; all repositories share one MongoClient.

    Raises:
        ValueError: if the table is not one of TABLES
    """
    if table not in TABLES:
        raise ValueError(f"Unknown table '{table}'. Must be one of: {', '.join(TABLES)}")

    if table not in _repositories:
        from .mongo_repository import MongoTableRepository

        config = RepositoryConfig.from_env()
        _repositories[table] = MongoTableRepository(
            mongodb_uri=config.mongodb_uri,
            database=config.database,
            collection=table,
        )
        logger.info(f"Initialized repository for table '{table}'")

    return _repositories[table]


def get_resume_storage() -> ResumeStorage:
    """Get the resume storage singleton."""
    global _resume_storage

    if _resume_storage is None:
        from .mongo_repository import MongoTableRepository

        config = RepositoryConfig.from_env()
        database = MongoTableRepository.get_database(config.mongodb_uri, config.database)
        _resume_storage = ResumeStorage(database, bucket_name=config.resume_bucket)
        logger.info(f"Initialized resume storage (bucket '{config.resume_bucket}')")

    return _resume_storage


def reset_repository() -> None:
    """Reset the repository singletons and close the shared client."""
    global _resume_storage

    from .mongo_repository import MongoTableRepository
    MongoTableRepository.reset_connection()

    _repositories.clear()
    _resume_storage = None
    logger.info("Repository singletons reset")
