"""
Abstract Document Store Interface

DESIGN DECISION: We define an abstract interface for the document store.
This allows us to:
1. Swap Google Sheets for a hosted document database later
2. Use in-memory storage for testing
3. Keep store logic decoupled from any backend SDK

The interface is intentionally tiny - five operations over flat records
in named collections, filtered by field equality only. No transactions
span more than one record.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from expense_tracker.errors import CollaboratorError


# (field, value) pairs, all of which must match
Filters = list[tuple[str, Any]]


class DocumentStoreInterface(ABC):
    """
    Abstract interface for document store operations.

    Records are flat dicts. Records returned by `get` and `query`
    carry their id under the "id" key.
    """

    @abstractmethod
    async def create(
        self,
        collection: str,
        record: dict,
        record_id: Optional[str] = None,
    ) -> str:
        """
        Create a record.

        Args:
            collection: Logical collection name
            record: Field/value pairs (an "id" key is ignored)
            record_id: Deterministic id to write at. If None, the store
                      assigns a fresh opaque id. Writing at an existing
                      id overwrites that record.

        Returns:
            The record id

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def get(self, collection: str, record_id: str) -> Optional[dict]:
        """
        Read a record by id.

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, collection: str, record_id: str, partial: dict) -> None:
        """
        Merge fields into an existing record.

        Raises:
            NotFoundError: If the record doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, record_id: str) -> None:
        """
        Delete a record by id. Deleting a missing record is a no-op.
        """
        pass

    @abstractmethod
    async def query(self, collection: str, filters: Filters) -> list[dict]:
        """
        List records whose fields equal every (field, value) filter.

        Returns:
            Matching records in store order
        """
        pass


def matches(record: dict, filters: Filters) -> bool:
    """Equality filter shared by backends that filter in Python."""
    return all(
        field in record and record[field] == value
        for field, value in filters
    )


class StorageError(CollaboratorError):
    """Base exception for document store operations."""
    pass


class NotFoundError(StorageError):
    """Record not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
