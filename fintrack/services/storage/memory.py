"""
In-Memory Remote Store

A process-local implementation of the remote store interface. Used by
the test suite and for running without any backend configured.
Records are kept per user in insertion order.
"""

from typing import Optional, TypeVar

from fintrack.audit import AuditLogger
from fintrack.services.storage.interface import (
    CollectionStore,
    DuplicateError,
    NotFoundError,
    RemoteStore,
)

T = TypeVar("T")


class InMemoryCollectionStore(CollectionStore[T]):
    """Dict-backed collection: {user_id: {record_id: record}}."""

    def __init__(self, name: str):
        self.name = name
        self._records: dict[str, dict[str, T]] = {}

    def _user_records(self, user_id: str) -> dict[str, T]:
        return self._records.setdefault(user_id, {})

    async def fetch_all(self, user_id: str) -> list[T]:
        return list(self._user_records(user_id).values())

    async def insert(self, user_id: str, record: T) -> T:
        records = self._user_records(user_id)
        if record.id in records:
            raise DuplicateError(f"{self.name} record already exists: {record.id}")
        records[record.id] = record
        return record

    async def update(self, user_id: str, record_id: str, record: T) -> T:
        records = self._user_records(user_id)
        if record_id not in records:
            raise NotFoundError(f"{self.name} record not found: {record_id}")
        records[record_id] = record
        return record

    async def delete(self, user_id: str, record_id: str) -> None:
        self._user_records(user_id).pop(record_id, None)


def create_memory_store(audit_logger: Optional[AuditLogger] = None) -> RemoteStore:
    """Build a RemoteStore whose four collections live in memory."""
    return RemoteStore(
        accounts=InMemoryCollectionStore("accounts"),
        credit_cards=InMemoryCollectionStore("credit_cards"),
        transactions=InMemoryCollectionStore("transactions"),
        categories=InMemoryCollectionStore("categories"),
        audit_logger=audit_logger,
    )
