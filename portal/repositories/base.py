"""
Repository Interface Definitions

Defines the abstract interface for table operations against the
external document store. Every portal table (applications, jobs,
stores, admin_users) is accessed through this interface so the
routes never talk to pymongo directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class WriteResult:
    """
    Result of a write operation.

    Attributes:
        matched_count: Number of documents that matched the filter
        modified_count: Number of documents actually modified (or deleted)
        inserted_id: ID of the inserted document (insert_one only)
    """
    matched_count: int
    modified_count: int
    inserted_id: Optional[str] = None


class TableRepositoryInterface(ABC):
    """
    Abstract interface for a single portal table.

    Only equality filters and simple ordering are used by the portal;
    there is no server-side search. All methods are fail-fast: backend
    errors propagate to the caller.
    """

    @abstractmethod
    def find_one(
        self, filter: Dict[str, Any], projection: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """Find a single document."""
        pass

    @abstractmethod
    def find(
        self,
        filter: Dict[str, Any],
        projection: Optional[Dict[str, Any]] = None,
        sort: Optional[List[tuple]] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> List[Dict[str, Any]]:
        """Find multiple documents."""
        pass

    @abstractmethod
    def count_documents(self, filter: Dict[str, Any]) -> int:
        """Count documents matching the filter."""
        pass

    @abstractmethod
    def insert_one(self, document: Dict[str, Any]) -> WriteResult:
        """Insert a single document."""
        pass

    @abstractmethod
    def update_one(self, filter: Dict[str, Any], update: Dict[str, Any]) -> WriteResult:
        """Update a single document."""
        pass

    @abstractmethod
    def delete_one(self, filter: Dict[str, Any]) -> WriteResult:
        """Delete a single document."""
        pass
