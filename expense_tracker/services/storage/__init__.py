"""
Storage Services Package

Provides the abstract document store interface and its implementations.
Google Sheets is the hosted backend; the in-memory store backs tests and
unconfigured local runs.
"""

from expense_tracker.services.storage.interface import (
    ConnectionError,
    DocumentStoreInterface,
    Filters,
    NotFoundError,
    StorageError,
)
from expense_tracker.services.storage.memory import InMemoryDocumentStore
from expense_tracker.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
)

__all__ = [
    # Interfaces
    "DocumentStoreInterface",
    "Filters",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryDocumentStore",
    "GoogleSheetsClient",
    "GoogleSheetsDocumentStore",
]
