"""Services package."""

from expense_tracker.services.identity import (
    AuthUser,
    IdentityError,
    IdentityProviderInterface,
    LocalSessionProvider,
)
from expense_tracker.services.storage import (
    ConnectionError,
    DocumentStoreInterface,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
    InMemoryDocumentStore,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Identity services
    "AuthUser",
    "IdentityError",
    "IdentityProviderInterface",
    "LocalSessionProvider",
    # Storage services
    "ConnectionError",
    "DocumentStoreInterface",
    "GoogleSheetsClient",
    "GoogleSheetsDocumentStore",
    "InMemoryDocumentStore",
    "NotFoundError",
    "StorageError",
]
