"""User stores: in-memory and a Google Sheets worksheet."""

import asyncio
from typing import Optional

from pydantic import ValidationError

from fintrack.audit import AuditLogger
from fintrack.services.auth.interface import UserRecord, UserStore
from fintrack.services.storage.google_sheets import GoogleSheetsClient
from fintrack.services.storage.interface import DuplicateError, StorageError


class InMemoryUserStore(UserStore):
    """Users keyed by email, for tests and the memory backend."""

    def __init__(self):
        self._by_email: dict[str, UserRecord] = {}

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return self._by_email.get(email)

    async def insert(self, record: UserRecord) -> UserRecord:
        if record.email in self._by_email:
            raise DuplicateError(f"User already exists: {record.email}")
        self._by_email[record.email] = record
        return record


class GoogleSheetsUserStore(UserStore):
    """
    Users stored as rows of [id, email, password_hash] in one worksheet.
    """

    COLUMNS = ["id", "email", "password_hash"]

    def __init__(
        self,
        client: GoogleSheetsClient,
        sheet_name: Optional[str] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._client = client
        self._sheet_name = sheet_name or client.settings.users_sheet_name
        self._audit_logger = audit_logger or AuditLogger()

    def _rows(self) -> list[list[str]]:
        sheet = self._client.get_worksheet(self._sheet_name, self.COLUMNS)
        return self._client.call(sheet.get_all_values)[1:]

    def _append(self, record: UserRecord) -> None:
        sheet = self._client.get_worksheet(self._sheet_name, self.COLUMNS)
        self._client.call(
            sheet.append_row,
            [record.id, record.email, record.password_hash],
            value_input_option="RAW",
        )

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        try:
            rows = await asyncio.to_thread(self._rows)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read users: {e}")

        for row in rows:
            if len(row) < 3 or row[1] != email:
                continue
            try:
                return UserRecord(id=row[0], email=row[1], password_hash=row[2])
            except ValidationError as e:
                self._audit_logger.log_external_service_error(
                    service="google_sheets",
                    operation="parse_user_row",
                    error_message=str(e),
                )
        return None

    async def insert(self, record: UserRecord) -> UserRecord:
        if await self.find_by_email(record.email) is not None:
            raise DuplicateError(f"User already exists: {record.email}")
        try:
            await asyncio.to_thread(self._append, record)
            return record
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to insert user: {e}")
