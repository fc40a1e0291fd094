"""
MongoDB Table Repository

Wraps one MongoDB collection behind TableRepositoryInterface.
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from .base import TableRepositoryInterface, WriteResult

logger = logging.getLogger(__name__)


class MongoTableRepository(TableRepositoryInterface):
    """
    Repository for one portal table stored as a MongoDB collection.

    Connection Management:
    - A single MongoClient is shared by every table repository
    - Client is created lazily on first use and reused across requests
    - PyMongo handles the connection pool internally

    Error Handling:
    - Fail-fast: All errors propagate to caller
    - No retries, no silent failures
    """

    _client: Optional[MongoClient] = None
    _db: Optional[Database] = None

    def __init__(self, mongodb_uri: str, database: str, collection: str):
        """
        Initialize repository with connection parameters.

        Args:
            mongodb_uri: MongoDB connection string
            database: Database name
            collection: Collection (table) name
        """
        self._mongodb_uri = mongodb_uri
        self._database_name = database
        self._collection_name = collection

    @classmethod
    def get_database(cls, mongodb_uri: str, database: str) -> Database:
        """Return the shared database handle, creating the client if needed."""
        if cls._db is None:
            cls._client = MongoClient(mongodb_uri, serverSelectionTimeoutMS=5000)
            cls._db = cls._client[database]
            logger.info(f"MongoDB client connected: {database}")
        return cls._db

    def _get_collection(self) -> Collection:
        return self.get_database(self._mongodb_uri, self._database_name)[self._collection_name]

    def find_one(
        self, filter: Dict[str, Any], projection: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """Find a single document."""
        return self._get_collection().find_one(filter, projection)

    def find(
        self,
        filter: Dict[str, Any],
        projection: Optional[Dict[str, Any]] = None,
        sort: Optional[List[tuple]] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> List[Dict[str, Any]]:
        """Find multiple documents."""
        cursor = self._get_collection().find(filter, projection)

        if sort:
            cursor = cursor.sort(sort)
        if skip > 0:
            cursor = cursor.skip(skip)
        if limit > 0:
            cursor = cursor.limit(limit)

        return list(cursor)

    def count_documents(self, filter: Dict[str, Any]) -> int:
        """Count documents matching the filter."""
        return self._get_collection().count_documents(filter)

    def insert_one(self, document: Dict[str, Any]) -> WriteResult:
        """Insert a single document."""
        result = self._get_collection().insert_one(document)

        return WriteResult(
            matched_count=0,
            modified_count=0,
            inserted_id=str(result.inserted_id) if result.inserted_id else None,
        )

    def update_one(self, filter: Dict[str, Any], update: Dict[str, Any]) -> WriteResult:
        """
        Update a single document.

        Last write wins; there is no version check.
        """
        result = self._get_collection().update_one(filter, update)

        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    def delete_one(self, filter: Dict[str, Any]) -> WriteResult:
        """Delete a single document."""
        result = self._get_collection().delete_one(filter)

        return WriteResult(
            matched_count=result.deleted_count,
            modified_count=result.deleted_count,
        )

    @classmethod
    def reset_connection(cls) -> None:
        """
        Reset the shared connection.

        Used for testing or connection recovery.
        """
        if cls._client:
            cls._client.close()
        cls._client = None
        cls._db = None
        logger.info("MongoDB connection reset")
