"""
Abstract Remote Store Interface

DESIGN DECISION: We define an abstract interface for remote storage.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the sync controller decoupled from storage implementation

The remote store is a per-user key-value CRUD API, one collection per
entity kind. Field naming on the wire is the store's concern; callers
always hand over and receive entity models.
"""

from abc import ABC, abstractmethod
from typing import Generic, Iterable, Optional, TypeVar

from fintrack.audit import AuditLogger
from fintrack.models.entities import Account, Category, CreditCard, Transaction

T = TypeVar("T")


class CollectionStore(ABC, Generic[T]):
    """
    Abstract interface for one remote entity collection.

    Every operation is scoped to a user id.
    """

    name: str = "records"

    @abstractmethod
    async def fetch_all(self, user_id: str) -> list[T]:
        """
        Fetch every record the user owns in this collection.

        Raises:
            StorageError: If the fetch fails
        """
        pass

    @abstractmethod
    async def insert(self, user_id: str, record: T) -> T:
        """
        Insert a new record.

        Returns:
            The record as stored

        Raises:
            DuplicateError: If a record with the same id already exists
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def update(self, user_id: str, record_id: str, record: T) -> T:
        """
        Overwrite an existing record's fields.

        Raises:
            NotFoundError: If the record doesn't exist
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def delete(self, user_id: str, record_id: str) -> None:
        """
        Delete a record. Deleting a missing record is not an error.

        Raises:
            StorageError: If the delete fails
        """
        pass


class RemoteStore:
    """
    The four entity collections of one remote backend.

    Each collection is independent: there is no cross-collection
    transaction, and a failure in one never rolls back another.
    """

    def __init__(
        self,
        accounts: CollectionStore[Account],
        credit_cards: CollectionStore[CreditCard],
        transactions: CollectionStore[Transaction],
        categories: CollectionStore[Category],
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.accounts = accounts
        self.credit_cards = credit_cards
        self.transactions = transactions
        self.categories = categories
        self._audit_logger = audit_logger or AuditLogger()

    def collections(self) -> dict[str, CollectionStore]:
        """Collections by kind name, in reconciliation order."""
        return {
            "accounts": self.accounts,
            "credit_cards": self.credit_cards,
            "transactions": self.transactions,
            "categories": self.categories,
        }

    async def initialize_default_categories(
        self,
        user_id: str,
        defaults: Iterable[Category],
    ) -> int:
        """
        Seed the default category set for a user who has none.

        Each insert is attempted independently; failures are logged and
        the rest continue. Returns how many were inserted.
        """
        existing = await self.categories.fetch_all(user_id)
        if existing:
            return 0

        inserted = 0
        for category in defaults:
            try:
                await self.categories.insert(user_id, category)
                inserted += 1
            except StorageError as e:
                self._audit_logger.log_external_service_error(
                    service="remote_store",
                    operation=f"insert_default_category:{category.name}",
                    error_message=str(e),
                )
        return inserted


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
