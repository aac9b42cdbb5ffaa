"""
Storage Services Package

Provides the abstract remote store interface and concrete implementations.
Ships an in-memory backend and Google Sheets, designed to be swappable.
"""

from fintrack.services.storage.interface import (
    CollectionStore,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    RemoteStore,
    StorageError,
)
from fintrack.services.storage.memory import (
    InMemoryCollectionStore,
    create_memory_store,
)
from fintrack.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsCollectionStore,
    create_google_sheets_store,
)

__all__ = [
    # Interfaces
    "CollectionStore",
    "RemoteStore",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryCollectionStore",
    "create_memory_store",
    "GoogleSheetsClient",
    "GoogleSheetsCollectionStore",
    "create_google_sheets_store",
]
