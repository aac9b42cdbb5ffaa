"""Services package."""

from fintrack.services.auth import (
    AuthResult,
    AuthService,
    GoogleSheetsUserStore,
    InMemoryUserStore,
    PasswordAuthService,
    UserRecord,
    UserStore,
)
from fintrack.services.cache import LocalCache
from fintrack.services.storage import (
    CollectionStore,
    ConnectionError,
    DuplicateError,
    GoogleSheetsClient,
    GoogleSheetsCollectionStore,
    InMemoryCollectionStore,
    NotFoundError,
    RemoteStore,
    StorageError,
    create_google_sheets_store,
    create_memory_store,
)

__all__ = [
    # Auth
    "AuthResult",
    "AuthService",
    "GoogleSheetsUserStore",
    "InMemoryUserStore",
    "PasswordAuthService",
    "UserRecord",
    "UserStore",
    # Cache
    "LocalCache",
    # Storage
    "CollectionStore",
    "ConnectionError",
    "DuplicateError",
    "GoogleSheetsClient",
    "GoogleSheetsCollectionStore",
    "InMemoryCollectionStore",
    "NotFoundError",
    "RemoteStore",
    "StorageError",
    "create_google_sheets_store",
    "create_memory_store",
]
