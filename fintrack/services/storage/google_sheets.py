"""
Google Sheets Remote Store

DESIGN DECISION: Google Sheets is used as the remote backend because:
1. Users can view and export their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (the sync controller reconciles each collection on its own)
- Limited query capabilities (we filter in Python)

One worksheet per entity collection. Each row is
[user_id, id, <remaining fields in snake_case>], so the camelCase names
used in local snapshots never reach the sheet.
"""

import asyncio
from typing import Any, Callable, Optional, TypeVar

import gspread
from google.oauth2.service_account import Credentials
from pydantic import BaseModel, ValidationError
from tenacity import Retrying, retry, stop_after_attempt, wait_exponential

from fintrack.audit import AuditLogger
from fintrack.config import GoogleSheetsSettings, get_settings
from fintrack.models.entities import Account, Category, CreditCard, Transaction
from fintrack.services.storage.interface import (
    CollectionStore,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    RemoteStore,
    StorageError,
)

M = TypeVar("M", bound=BaseModel)
R = TypeVar("R")

USER_COLUMN = "user_id"


def columns_for(model_type: type[BaseModel]) -> list[str]:
    """Sheet header for a model: user_id, then the model's fields in order."""
    return [USER_COLUMN] + list(model_type.model_fields)


def record_to_row(user_id: str, record: BaseModel) -> list[str]:
    """Convert an entity to a spreadsheet row."""
    data = record.model_dump(mode="json")
    row = [user_id]
    for field_name in type(record).model_fields:
        value = data.get(field_name)
        row.append("" if value is None else str(value))
    return row


def row_to_record(model_type: type[M], columns: list[str], row: list[str]) -> M:
    """
    Convert a spreadsheet row to an entity.

    Empty cells of optional fields fall back to the field default;
    required fields keep the empty string and let validation decide.
    """
    fields = model_type.model_fields
    data: dict[str, Any] = {}
    for index, column in enumerate(columns):
        if column not in fields:
            continue
        value = row[index] if index < len(row) else ""
        if value != "" or fields[column].is_required():
            data[column] = value
    return model_type.model_validate(data)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(
        self,
        settings: Optional[GoogleSheetsSettings] = None,
        retry_attempts: Optional[int] = None,
    ):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets
        self._retry_attempts = retry_attempts or get_settings().sync.retry_attempts

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        """Get or create a worksheet with the given header row."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def call(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        """Run one Sheets API call with exponential-backoff retries."""
        for attempt in Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            reraise=True,
        ):
            with attempt:
                return fn(*args, **kwargs)
        raise StorageError("Retry loop exited without a result")


class GoogleSheetsCollectionStore(CollectionStore[M]):
    """
    Google Sheets implementation of one entity collection.

    Records are stored as rows, one record per row, scoped by the
    user_id in the first column.
    """

    def __init__(
        self,
        client: GoogleSheetsClient,
        name: str,
        sheet_name: str,
        model_type: type[M],
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.name = name
        self._client = client
        self._sheet_name = sheet_name
        self._model_type = model_type
        self._columns = columns_for(model_type)
        self._audit_logger = audit_logger or AuditLogger()

    def _sheet(self) -> gspread.Worksheet:
        return self._client.get_worksheet(self._sheet_name, self._columns)

    def _find_row(self, rows: list[list[str]], user_id: str, record_id: str) -> Optional[int]:
        """1-based sheet row index of a record, header included."""
        for idx, row in enumerate(rows[1:], start=2):  # Row 1 is the header
            if len(row) > 1 and row[0] == user_id and row[1] == record_id:
                return idx
        return None

    # Blocking Sheets work. The async methods below run it in a worker thread.

    def _read_rows(self) -> list[list[str]]:
        sheet = self._sheet()
        return self._client.call(sheet.get_all_values)

    def _insert_row(self, user_id: str, record: M) -> None:
        sheet = self._sheet()
        all_rows = self._client.call(sheet.get_all_values)
        if self._find_row(all_rows, user_id, record.id) is not None:
            raise DuplicateError(f"{self.name} record already exists: {record.id}")
        self._client.call(
            sheet.append_row,
            record_to_row(user_id, record),
            value_input_option="RAW",
        )

    def _update_row(self, user_id: str, record_id: str, record: M) -> None:
        sheet = self._sheet()
        all_rows = self._client.call(sheet.get_all_values)
        idx = self._find_row(all_rows, user_id, record_id)
        if idx is None:
            raise NotFoundError(f"{self.name} record not found: {record_id}")
        self._client.call(
            sheet.update,
            range_name=f"A{idx}",
            values=[record_to_row(user_id, record)],
            value_input_option="RAW",
        )

    def _delete_row(self, user_id: str, record_id: str) -> None:
        sheet = self._sheet()
        all_rows = self._client.call(sheet.get_all_values)
        idx = self._find_row(all_rows, user_id, record_id)
        if idx is not None:
            self._client.call(sheet.delete_rows, idx)

    async def fetch_all(self, user_id: str) -> list[M]:
        try:
            all_rows = (await asyncio.to_thread(self._read_rows))[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to fetch {self.name}: {e}")

        records = []
        for row in all_rows:
            if not row or row[0] != user_id:
                continue
            try:
                records.append(row_to_record(self._model_type, self._columns, row))
            except ValidationError as e:
                self._audit_logger.log_external_service_error(
                    service="google_sheets",
                    operation=f"parse_{self.name}_row",
                    error_message=str(e),
                )
        return records

    async def insert(self, user_id: str, record: M) -> M:
        try:
            await asyncio.to_thread(self._insert_row, user_id, record)
            return record
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to insert into {self.name}: {e}")

    async def update(self, user_id: str, record_id: str, record: M) -> M:
        try:
            await asyncio.to_thread(self._update_row, user_id, record_id, record)
            return record
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {self.name}: {e}")

    async def delete(self, user_id: str, record_id: str) -> None:
        try:
            await asyncio.to_thread(self._delete_row, user_id, record_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete from {self.name}: {e}")


def create_google_sheets_store(
    client: Optional[GoogleSheetsClient] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> RemoteStore:
    """Build a RemoteStore backed by one worksheet per collection."""
    client = client or GoogleSheetsClient()
    settings = client.settings
    return RemoteStore(
        accounts=GoogleSheetsCollectionStore(
            client, "accounts", settings.accounts_sheet_name, Account, audit_logger
        ),
        credit_cards=GoogleSheetsCollectionStore(
            client, "credit_cards", settings.credit_cards_sheet_name, CreditCard, audit_logger
        ),
        transactions=GoogleSheetsCollectionStore(
            client, "transactions", settings.transactions_sheet_name, Transaction, audit_logger
        ),
        categories=GoogleSheetsCollectionStore(
            client, "categories", settings.categories_sheet_name, Category, audit_logger
        ),
        audit_logger=audit_logger,
    )
